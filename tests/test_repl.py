import builtins
from collections.abc import Iterator
from unittest.mock import patch

import pytest

from waixg.waixg_config import Settings
from waixg.waixg_lexer import Lexer
from waixg.waixg_repl import open_delimiters, print_traceback, read_input, start_repl


def feed(monkeypatch: pytest.MonkeyPatch, lines: list[str]) -> list[str]:
    """Feeds `lines` to `input()` and records the prompts shown."""
    prompts: list[str] = []
    inputs: Iterator[str] = iter(lines)

    def fake_input(prompt: str) -> str:
        prompts.append(prompt)
        return next(inputs)

    monkeypatch.setattr(builtins, "input", fake_input)
    return prompts


def run_session(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    lines: list[str],
    **kwargs: object,
) -> list[str]:
    feed(monkeypatch, [*lines, "quit"])
    start_repl(**kwargs)  # type: ignore[arg-type]
    return capsys.readouterr().out.splitlines()


def test_repl_quit(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(builtins, "input", lambda _: "quit")
    start_repl()
    out = capsys.readouterr().out
    assert "WAIXG REPL" in out
    assert "Exiting WAIXG REPL" in out


def test_repl_exit(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(builtins, "input", lambda _: "exit")
    start_repl()
    assert "Exiting WAIXG REPL" in capsys.readouterr().out


def test_repl_eof_exits(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def raise_eof(_: str) -> str:
        raise EOFError

    monkeypatch.setattr(builtins, "input", raise_eof)
    start_repl()
    assert "Exiting WAIXG REPL" in capsys.readouterr().out


def test_repl_keyboard_interrupt(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def raise_interrupt(_: str) -> str:
        raise KeyboardInterrupt

    monkeypatch.setattr(builtins, "input", raise_interrupt)
    start_repl()
    assert "Exiting WAIXG REPL" in capsys.readouterr().out


def test_repl_prints_expression_values(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    out = run_session(monkeypatch, capsys, ["1 + 2 * 3", '"a" + "b"', "true"])
    assert out[1:4] == ["7", "ab", "true"]


def test_repl_bindings_persist_between_inputs(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    out = run_session(
        monkeypatch, capsys, ["let x = 20;", "let f = fn(y) { x + y };", "f(22)"]
    )
    # let statements print nothing
    assert out[1] == "42"


def test_repl_skips_empty_input_and_null(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    out = run_session(monkeypatch, capsys, ["   ", "if (false) { 1 }", "puts(5)"])
    assert out[1:] == ["5", "Exiting WAIXG REPL."]


def test_repl_reports_parse_errors(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    out = run_session(monkeypatch, capsys, ["let = 5;", "1"])
    assert out[1].startswith("[parse error] >>> expected next token to be IDENT")
    assert out[-2] == "1"


def test_repl_reports_evaluation_errors(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    out = run_session(monkeypatch, capsys, ["1 + true", "let a = missing;"])
    assert out[1] == "[error] >>> ERROR: type mismatch: INTEGER + BOOLEAN"
    assert out[2] == "[error] >>> ERROR: identifier not found: missing"


def test_repl_multiline_input(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    prompts = feed(
        monkeypatch, ["let add = fn(a, b) {", "  a + b", "};", "add(1, 2)", "quit"]
    )
    start_repl()
    out = capsys.readouterr().out.splitlines()
    assert prompts == [">> ", ".. ", ".. ", ">> ", ">> "]
    assert out[1] == "3"


def test_repl_verbose_mode_toggle(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    out = run_session(
        monkeypatch, capsys, ["verbose-mode", "1 + 1", "verbose-mode", "2"]
    )
    assert out[1] == "[mode] >>> Verbose mode ON"
    assert out[2] == "[ast] >>> (1 + 1)"
    assert out[3] == "2"
    assert out[4] == "[mode] >>> Verbose mode OFF"
    assert out[5] == "2"


def test_repl_uses_settings(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    prompts = feed(monkeypatch, ["let f = fn(n) { f(n + 1) }; f(0)", "quit"])
    start_repl(Settings(max_depth=5, prompt="w> ", verbose=True))
    out = capsys.readouterr().out.splitlines()
    assert prompts == ["w> ", "w> "]
    assert out[1].startswith("[ast] >>> ")
    assert out[2] == "[error] >>> ERROR: stack depth exceeded: 5"


def test_repl_survives_internal_exception(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    class ExplodingParser:
        def __init__(self, tokens: Lexer, trace: bool = False) -> None:
            raise RuntimeError("parser exploded")

    monkeypatch.setattr("waixg.waixg_repl.Parser", ExplodingParser)
    out = run_session(monkeypatch, capsys, ["1"])
    joined = "\n".join(out)
    assert "[error] >>>" in joined
    assert "RuntimeError: parser exploded" in joined
    assert out[-1] == "Exiting WAIXG REPL."


def test_print_traceback_outputs_error() -> None:
    with patch("builtins.print") as mock_print:
        try:
            raise ValueError("intentional test error")
        except Exception:
            print_traceback()

    printed = [
        "".join(str(arg) for arg in call.args) for call in mock_print.call_args_list
    ]
    joined = "\n".join(printed).lower()

    assert "[error] >>>" in joined
    assert "valueerror" in joined
    assert "intentional test error" in joined


def test_read_input_exit_only_on_first_line(monkeypatch: pytest.MonkeyPatch) -> None:
    feed(monkeypatch, ["fn() {", "quit", "}"])
    assert read_input(Settings()) == "fn() {\nquit\n}"
    feed(monkeypatch, ["  exit  "])
    assert read_input(Settings()) is None


@pytest.mark.parametrize(
    "src,expected",
    [
        ("", 0),
        ("fn(x) {", 1),
        ("f((1)", 1),
        ("{ }", 0),
        ('"{("', 0),
        ('"\\"{"', 0),
        ("1 # {", 0),
        ("{ # }\n", 1),
        ("}", -1),
    ],
)
def test_open_delimiters(src: str, expected: int) -> None:
    assert open_delimiters(src) == expected
