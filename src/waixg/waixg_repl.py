import io
import traceback

from waixg.waixg_ast import LetStatement, Program
from waixg.waixg_config import Settings
from waixg.waixg_eval import Evaluator
from waixg.waixg_lexer import CharacterStream, Lexer
from waixg.waixg_object import NULL, Environment, Object, is_error
from waixg.waixg_parser import Parser

OPENERS = "{("
CLOSERS = "})"


def print_traceback() -> None:
    buf = io.StringIO()
    traceback.print_exc(file=buf)
    print("[error] >>>")
    print(buf.getvalue())


def open_delimiters(src: str) -> int:
    """Counts `{`/`(` left unclosed in `src`, ignoring string literals and comments."""
    depth = 0
    in_string = False
    escaped = False
    for line in src.split("\n"):
        in_comment = False
        for ch in line:
            if in_comment:
                break
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
            elif ch == "#":
                in_comment = True
            elif ch in OPENERS:
                depth += 1
            elif ch in CLOSERS:
                depth -= 1
    return depth


def read_input(settings: Settings) -> str | None:
    """Reads one (possibly multi-line) input; None means the user asked to leave."""
    src_lines: list[str] = []
    while True:
        prompt = settings.prompt if not src_lines else settings.continuation_prompt
        line = input(prompt)
        if line.strip() in ("exit", "quit") and not src_lines:
            return None
        src_lines.append(line)
        if open_delimiters("\n".join(src_lines)) <= 0:
            return "\n".join(src_lines).strip()


def should_print(program: Program, result: Object) -> bool:
    if result is NULL:
        return False
    if program.statements and isinstance(program.statements[-1], LetStatement):
        return is_error(result)
    return True


def eval_input(
    src: str, env: Environment, evaluator: Evaluator, settings: Settings, verbose: bool
) -> None:
    parser = Parser(Lexer(CharacterStream(src)), trace=settings.trace)
    program = parser.parse()
    if parser.errors:
        for err in parser.errors:
            print(f"[parse error] >>> {err}")
        return

    if verbose:
        print(f"[ast] >>> {program}")

    result = evaluator.eval(program, env)
    if is_error(result):
        print(f"[error] >>> {result.inspect()}")
    elif should_print(program, result):
        print(result.inspect())


def start_repl(settings: Settings | None = None, verbose: bool | None = None) -> None:
    """
    Runs the interactive WAIXG loop until `exit`, `quit`, EOF or Ctrl-C.

    All inputs share one global environment, so `let` bindings persist
    between them. Typing `verbose-mode` toggles printing of the parsed AST.
    """
    settings = settings or Settings()
    verbose = settings.verbose if verbose is None else verbose
    env = Environment()
    evaluator = Evaluator(settings.max_depth)

    print("WAIXG REPL. Type 'exit' or 'quit' to leave.")

    while True:
        try:
            src = read_input(settings)
            if src is None:
                print("Exiting WAIXG REPL.")
                return
            if not src:
                continue
            if src.lower() == "verbose-mode":
                verbose = not verbose
                print(f"[mode] >>> Verbose mode {'ON' if verbose else 'OFF'}")
                continue

            try:
                eval_input(src, env, evaluator, settings, verbose)
            except Exception:
                print_traceback()
                evaluator.depth = 0
                evaluator.nesting = 0

        except (KeyboardInterrupt, EOFError):
            print("\nExiting WAIXG REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
