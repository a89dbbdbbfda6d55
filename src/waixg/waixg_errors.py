"""
Structured parse diagnostics for the WAIXG parser.

The parser never lets these escape to its caller: each one is raised inside
the statement that failed, caught at the statement boundary and appended to
`Parser.errors`. Callers pattern-match on the class (or on its attributes)
instead of on message text.

Classes:
    ParseError: Base class, a `SyntaxError` carrying the source position.
    UnexpectedTokenError: A required token kind was not found.
    NoPrefixParserError: A token kind cannot start an expression.
    InvalidIntegerLiteralError: An integer literal does not fit a signed 64-bit integer.
    NestingTooDeepError: Expressions are nested deeper than the parser allows.

Functions:
    recursion_headroom(frames): Temporarily raises the host recursion limit.
"""

import sys
from collections.abc import Iterator
from contextlib import contextmanager


class ParseError(SyntaxError):
    """Base class for WAIXG parse diagnostics.

    Attributes:
        message (str): Human-readable description without position.
        line (int): Line of the offending token.
        col (int): Column of the offending token.
    """

    def __init__(self, message: str, line: int = 0, col: int = 0):
        super().__init__(message)
        self.message = message
        self.line = line
        self.col = col

    def __str__(self) -> str:
        if self.line:
            return f"{self.message} (line {self.line}, col {self.col})"
        return self.message


class UnexpectedTokenError(ParseError):
    """Raised when the next token is not of the kind the grammar requires.

    Attributes:
        expected (str): The required token type.
        actual (str): The token type that was found instead.
    """

    def __init__(self, expected: str, actual: str, line: int = 0, col: int = 0):
        super().__init__(
            f"expected next token to be {expected}, got {actual} instead", line, col
        )
        self.expected = expected
        self.actual = actual


class NoPrefixParserError(ParseError):
    """Raised when a token that cannot begin an expression appears where one must start."""

    def __init__(self, token_type: str, line: int = 0, col: int = 0):
        super().__init__(f"no prefix parse function for {token_type} found", line, col)
        self.token_type = token_type


class InvalidIntegerLiteralError(ParseError):
    """Raised when integer literal text fails conversion to a signed 64-bit value."""

    def __init__(self, literal: str, line: int = 0, col: int = 0):
        super().__init__(f"could not parse {literal!r} as integer", line, col)
        self.literal = literal


class NestingTooDeepError(ParseError):
    """Raised when expressions nest deeper than the parser's bound."""

    def __init__(self, limit: int, line: int = 0, col: int = 0):
        super().__init__(f"expression nested deeper than {limit} levels", line, col)
        self.limit = limit


@contextmanager
def recursion_headroom(frames: int) -> Iterator[None]:
    """Raises the recursion limit to at least `frames` inside the block.

    The previous limit is restored on exit.
    """
    previous = sys.getrecursionlimit()
    if previous < frames:
        sys.setrecursionlimit(frames)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


__all__ = [
    "InvalidIntegerLiteralError",
    "NestingTooDeepError",
    "NoPrefixParserError",
    "ParseError",
    "UnexpectedTokenError",
    "recursion_headroom",
]
