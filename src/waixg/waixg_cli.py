"""
WAIXG CLI Entrypoint.

This module provides the command-line interface for running WAIXG programs.

Features:
    - Read source from `.wx` files or inline strings.
    - Lex, parse and evaluate the program, printing its final value.
    - Report parse diagnostics and evaluation errors on stderr with a non-zero exit status.
    - Launch an interactive REPL.

Example usage:
    waixg fib.wx
    waixg -s "let x = 2; x * 21"
    waixg fib.wx --max-depth 400 --dump-ast
    waixg --repl --verbose

Functions:
    run_waixg(source, is_string=False, settings=None, dump_ast=False) -> int:
        Executes the full WAIXG pipeline (lex → parse → evaluate) and returns an exit status.

    main(argv=None) -> int:
        Parses CLI arguments and invokes the appropriate action (REPL or run).
"""

import argparse
import sys

from waixg.waixg_config import ConfigError, Settings, load_settings
from waixg.waixg_eval import Evaluator
from waixg.waixg_lexer import CharacterStream, Lexer
from waixg.waixg_object import NULL, Environment, is_error
from waixg.waixg_parser import Parser

SOURCE_SUFFIX = ".wx"


def run_waixg(
    source: str,
    is_string: bool = False,
    settings: Settings | None = None,
    dump_ast: bool = False,
) -> int:
    """
    Run a WAIXG program: lex, parse, evaluate and print the result.

    Args:
        source (str): The WAIXG source code or path to a `.wx` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        settings (Settings | None): Interpreter settings; defaults if None.
        dump_ast (bool): If True, prints the parsed program before evaluating it.

    Returns:
        int: 0 on success, 1 on parse diagnostics or an evaluation error.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.wx'.
    """
    if not is_string and not source.endswith(SOURCE_SUFFIX):
        raise ValueError(f"Only {SOURCE_SUFFIX} files are supported.")
    settings = settings or Settings()

    # 1. Read source
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    # 2. Lexing + parsing
    parser = Parser(Lexer(CharacterStream(source)), trace=settings.trace)
    program = parser.parse()
    if parser.errors:
        for err in parser.errors:
            print(f"[parse error] >>> {err}", file=sys.stderr)
        return 1

    if dump_ast or settings.verbose:
        print(f"[ast] >>> {program}")

    # 3. Evaluation
    result = Evaluator(settings.max_depth).eval(program, Environment())
    if is_error(result):
        print(f"[error] >>> {result.inspect()}", file=sys.stderr)
        return 1

    # 4. Output result
    if result is not NULL:
        print(result.inspect())
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="waixg")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--repl", action="store_true", help="Launch the interactive REPL"
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Print the parsed AST before evaluating"
    )
    parser.add_argument(
        "--trace", action="store_true", help="Trace parse functions on stderr"
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        metavar="N",
        help="Maximum nesting of function calls",
    )
    parser.add_argument("--config", metavar="PATH", help="JSON settings file")
    parser.add_argument(
        "--dump-ast", action="store_true", help="Print the parsed program"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the WAIXG CLI.

    Launches the REPL if no source is given or `--repl` is specified, otherwise
    runs the program and returns its exit status.
    """
    args = build_arg_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
        overrides: dict[str, object] = {}
        if args.verbose:
            overrides["verbose"] = True
        if args.trace:
            overrides["trace"] = True
        if args.max_depth is not None:
            overrides["max_depth"] = args.max_depth
        settings = Settings.from_mapping(overrides, settings)
    except ConfigError as e:
        print(f"[config error] >>> {e}", file=sys.stderr)
        return 2

    if args.repl or args.source is None:
        from waixg.waixg_repl import start_repl

        start_repl(settings)
        return 0

    try:
        return run_waixg(
            source=args.source,
            is_string=args.string,
            settings=settings,
            dump_ast=args.dump_ast,
        )
    except (OSError, ValueError) as e:
        print(f"[error] >>> {e}", file=sys.stderr)
        return 2


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    sys.exit(main())
