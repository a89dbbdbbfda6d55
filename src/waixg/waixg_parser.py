"""
WAIXG Language Parser

Parses a WAIXG token stream into an abstract syntax tree using Pratt
(operator-precedence) parsing.

Each token type that can begin an expression has a *prefix* parse function
registered for it, and each token type that can continue one (binary operators
and `(` for calls) has an *infix* parse function plus a binding power in
`waixg_constants.precedences`. `parse_expression(precedence)` parses a prefix
expression and then keeps folding infix operators into it for as long as the
next operator binds tighter than `precedence`.

Supported Constructs
--------------------
- Statements:
    * `let <ident> = <expr>;`
    * `return <expr>;`
    * expression statements, with an optional trailing `;`
- Expressions:
    * integer, string and boolean literals, identifiers
    * prefix `-x`, `!x`
    * infix `+ - * / ^ == != < > <= >=` (left-associative at every level)
    * grouping `( ... )`
    * `if (<cond>) { ... } else { ... }`
    * `fn(<params>) { ... }` and calls `f(a, b)`

Parser Behavior
---------------
Malformed input never raises. A failing statement records a structured
diagnostic (see `waixg_errors`) in `Parser.errors`, is dropped from the tree,
and parsing resumes after it, so one pass reports every independent error.

Entry Points
------------
- `parse()`: Parse a full program.
- `parse_statement()`: Parse a single statement at the current token.
- `parse_expression()`: Parse an expression at a given precedence.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager

from waixg import waixg_constants as tk
from waixg.waixg_ast import (
    BlockStatement,
    BooleanLiteral,
    CallExpression,
    Expression,
    ExpressionStatement,
    FunctionLiteral,
    Identifier,
    IfExpression,
    InfixExpression,
    IntegerLiteral,
    LetStatement,
    PrefixExpression,
    Program,
    ReturnStatement,
    Statement,
    StringLiteral,
)
from waixg.waixg_errors import (
    InvalidIntegerLiteralError,
    NestingTooDeepError,
    NoPrefixParserError,
    ParseError,
    UnexpectedTokenError,
    recursion_headroom,
)
from waixg.waixg_lexer import CharacterStream, Lexer, Token

INT64_MAX = 2**63 - 1

MAX_NESTING = 500

# Python frames used per nested expression (worst case: a block inside `fn`)
FRAMES_PER_NESTING = 8

PrefixParseFn = Callable[[], Expression]
InfixParseFn = Callable[[Expression], Expression]


class Parser:
    """
    WAIXG Parser Class

    Pulls tokens from any iterable of `Token` (a `Lexer` or a list) and builds a
    `Program`. Once the source runs dry the parser sees an endless `EOF`.

    Attributes
    ----------
    cur_token : Token
        The token under examination.
    peek_token : Token
        The token after `cur_token`.
    errors : list[ParseError]
        Diagnostics collected so far, in source order.
    prefix_parse_fns : dict[str, PrefixParseFn]
        Token type -> function parsing an expression that starts with it.
    infix_parse_fns : dict[str, InfixParseFn]
        Token type -> function extending a left expression with it.
    trace : bool
        When set, prints a BEGIN/END trace of the parse functions to stderr.
    max_nesting : int
        Deepest expression nesting accepted before `NestingTooDeepError`.
    """

    def __init__(
        self, tokens: Iterable[Token], trace: bool = False, max_nesting: int = MAX_NESTING
    ) -> None:
        self._tokens: Iterator[Token] = iter(tokens)
        self.errors: list[ParseError] = []
        self.trace = trace
        self.max_nesting = max_nesting
        self._trace_level = 0
        self._nesting = 0
        # `{` minus `}` seen up to and including cur_token
        self._brace_depth = 0

        self.prefix_parse_fns: dict[str, PrefixParseFn] = {}
        self.register_prefix(tk.IDENT, self.parse_identifier)
        self.register_prefix(tk.INT, self.parse_integer_literal)
        self.register_prefix(tk.STRING, self.parse_string_literal)
        self.register_prefix(tk.BANG, self.parse_prefix_expression)
        self.register_prefix(tk.MINUS, self.parse_prefix_expression)
        self.register_prefix(tk.TRUE, self.parse_boolean)
        self.register_prefix(tk.FALSE, self.parse_boolean)
        self.register_prefix(tk.LPAREN, self.parse_grouped_expression)
        self.register_prefix(tk.IF, self.parse_if_expression)
        self.register_prefix(tk.FUNCTION, self.parse_function_literal)

        self.infix_parse_fns: dict[str, InfixParseFn] = {}
        for op in tk.OPERATOR_TOKENS:
            self.register_infix(op, self.parse_infix_expression)
        self.register_infix(tk.LPAREN, self.parse_call_expression)

        self.cur_token = Token(tk.EOF, "")
        self.peek_token = Token(tk.EOF, "")
        # Fill both cur_token and peek_token
        self.next_token()
        self.next_token()

    def register_prefix(self, token_type: str, fn: PrefixParseFn) -> None:
        self.prefix_parse_fns[token_type] = fn

    def register_infix(self, token_type: str, fn: InfixParseFn) -> None:
        self.infix_parse_fns[token_type] = fn

    # Token navigation

    def next_token(self) -> None:
        self.cur_token = self.peek_token
        nxt = next(self._tokens, None)
        if nxt is None:
            nxt = Token(tk.EOF, "", self.cur_token.line, self.cur_token.col)
        self.peek_token = nxt
        if self.cur_token.type == tk.LBRACE:
            self._brace_depth += 1
        elif self.cur_token.type == tk.RBRACE:
            self._brace_depth -= 1

    def cur_token_is(self, token_type: str) -> bool:
        return self.cur_token.type == token_type

    def peek_token_is(self, token_type: str) -> bool:
        return self.peek_token.type == token_type

    def expect_peek(self, token_type: str) -> None:
        """Advances onto the next token if it has `token_type`, else raises."""
        if not self.peek_token_is(token_type):
            raise UnexpectedTokenError(
                token_type,
                self.peek_token.type,
                self.peek_token.line,
                self.peek_token.col,
            )
        self.next_token()

    def peek_precedence(self) -> int:
        return tk.precedences.get(self.peek_token.type, tk.LOWEST)

    def cur_precedence(self) -> int:
        return tk.precedences.get(self.cur_token.type, tk.LOWEST)

    @contextmanager
    def _traced(self, rule: str) -> Iterator[None]:
        if not self.trace:
            yield
            return
        pad = "\t" * self._trace_level
        print(f"{pad}BEGIN {rule}", file=sys.stderr)
        self._trace_level += 1
        try:
            yield
        finally:
            self._trace_level -= 1
            print(f"{pad}END {rule}", file=sys.stderr)

    # Statements

    def parse(self) -> Program:
        """Parse a full WAIXG program. Diagnostics are left in `self.errors`."""
        statements: list[Statement] = []
        with recursion_headroom(self.max_nesting * FRAMES_PER_NESTING + 1000):
            while not self.cur_token_is(tk.EOF):
                stmt = self.parse_statement()
                if stmt is not None:
                    statements.append(stmt)
                self.next_token()
        return Program(tuple(statements), line=1, col=1)

    def parse_statement(self) -> Statement | None:
        """
        Parse the statement starting at `cur_token`.

        On success `cur_token` is left on the statement's last token. On
        failure the diagnostic is recorded, the rest of the statement is
        skipped and None is returned.
        """
        depth = self._brace_depth
        try:
            if self.cur_token_is(tk.LET):
                return self.parse_let_statement()
            if self.cur_token_is(tk.RETURN):
                return self.parse_return_statement()
            return self.parse_expression_statement()
        except ParseError as e:
            self.errors.append(e)
            self.synchronize(depth)
            return None

    def synchronize(self, depth: int | None = None) -> None:
        """Skips ahead to the end of the failed statement.

        `depth` is the brace depth the statement started at. Braces opened
        inside the statement are skipped as a whole. Stops on a `;` at `depth`,
        just before the `}` of the enclosing block, on that `}` if the error
        was raised there, or at EOF.
        """
        if depth is None:
            depth = self._brace_depth
        while not (
            self.cur_token_is(tk.EOF)
            or self._brace_depth < depth
            or (
                self._brace_depth == depth
                and (self.cur_token_is(tk.SEMICOLON) or self.peek_token_is(tk.RBRACE))
            )
            or self.peek_token_is(tk.EOF)
        ):
            self.next_token()

    def parse_let_statement(self) -> LetStatement:
        with self._traced("parse_let_statement"):
            tok = self.cur_token
            self.expect_peek(tk.IDENT)
            name = Identifier(
                self.cur_token.value, line=self.cur_token.line, col=self.cur_token.col
            )
            self.expect_peek(tk.ASSIGN)
            self.next_token()
            value = self.parse_expression(tk.LOWEST)
            while self.peek_token_is(tk.SEMICOLON):
                self.next_token()
            return LetStatement(name, value, line=tok.line, col=tok.col)

    def parse_return_statement(self) -> ReturnStatement:
        with self._traced("parse_return_statement"):
            tok = self.cur_token
            self.next_token()
            value = self.parse_expression(tk.LOWEST)
            while self.peek_token_is(tk.SEMICOLON):
                self.next_token()
            return ReturnStatement(value, line=tok.line, col=tok.col)

    def parse_expression_statement(self) -> ExpressionStatement:
        with self._traced("parse_expression_statement"):
            tok = self.cur_token
            expr = self.parse_expression(tk.LOWEST)
            if self.peek_token_is(tk.SEMICOLON):
                self.next_token()
            return ExpressionStatement(expr, line=tok.line, col=tok.col)

    def parse_block_statement(self) -> BlockStatement:
        """Parse `{ ... }` with `cur_token` on the `{`; leaves `cur_token` on the `}`."""
        with self._traced("parse_block_statement"):
            tok = self.cur_token
            statements: list[Statement] = []
            depth = self._brace_depth
            self.next_token()
            while not self.cur_token_is(tk.RBRACE) and not self.cur_token_is(tk.EOF):
                stmt = self.parse_statement()
                if stmt is not None:
                    statements.append(stmt)
                elif self._brace_depth < depth:
                    # the failed statement ran into this block's closing brace
                    break
                self.next_token()
            return BlockStatement(tuple(statements), line=tok.line, col=tok.col)

    # Expressions

    def parse_expression(self, precedence: int = tk.LOWEST) -> Expression:
        """
        Parse an expression whose operators all bind tighter than `precedence`.

        Raises:
            NoPrefixParserError: If `cur_token` cannot start an expression.
            NestingTooDeepError: If expressions nest deeper than `max_nesting`.
        """
        if self._nesting >= self.max_nesting:
            raise NestingTooDeepError(
                self.max_nesting, self.cur_token.line, self.cur_token.col
            )
        self._nesting += 1
        try:
            return self._parse_expression(precedence)
        finally:
            self._nesting -= 1

    def _parse_expression(self, precedence: int) -> Expression:
        with self._traced("parse_expression"):
            prefix = self.prefix_parse_fns.get(self.cur_token.type)
            if prefix is None:
                raise NoPrefixParserError(
                    self.cur_token.type, self.cur_token.line, self.cur_token.col
                )
            left = prefix()

            while (
                not self.peek_token_is(tk.SEMICOLON)
                and precedence < self.peek_precedence()
            ):
                infix = self.infix_parse_fns.get(self.peek_token.type)
                if infix is None:
                    return left
                self.next_token()
                left = infix(left)

            return left

    def parse_identifier(self) -> Identifier:
        tok = self.cur_token
        return Identifier(tok.value, line=tok.line, col=tok.col)

    def parse_integer_literal(self) -> Expression:
        with self._traced("parse_integer_literal"):
            tok = self.cur_token
            try:
                value = int(tok.value, 10)
            except ValueError:
                raise InvalidIntegerLiteralError(tok.value, tok.line, tok.col) from None
            if value > INT64_MAX:
                raise InvalidIntegerLiteralError(tok.value, tok.line, tok.col)
            return IntegerLiteral(value, line=tok.line, col=tok.col)

    def parse_string_literal(self) -> Expression:
        tok = self.cur_token
        return StringLiteral(tok.value, line=tok.line, col=tok.col)

    def parse_boolean(self) -> Expression:
        tok = self.cur_token
        return BooleanLiteral(self.cur_token_is(tk.TRUE), line=tok.line, col=tok.col)

    def parse_prefix_expression(self) -> Expression:
        with self._traced("parse_prefix_expression"):
            tok = self.cur_token
            self.next_token()
            right = self.parse_expression(tk.PREFIX)
            return PrefixExpression(tok.value, right, line=tok.line, col=tok.col)

    def parse_infix_expression(self, left: Expression) -> Expression:
        with self._traced("parse_infix_expression"):
            tok = self.cur_token
            precedence = self.cur_precedence()
            self.next_token()
            # same precedence on the right: a - b - c is (a - b) - c
            right = self.parse_expression(precedence)
            return InfixExpression(left, tok.value, right, line=tok.line, col=tok.col)

    def parse_grouped_expression(self) -> Expression:
        self.next_token()
        expr = self.parse_expression(tk.LOWEST)
        self.expect_peek(tk.RPAREN)
        return expr

    def parse_if_expression(self) -> Expression:
        with self._traced("parse_if_expression"):
            tok = self.cur_token
            self.expect_peek(tk.LPAREN)
            self.next_token()
            condition = self.parse_expression(tk.LOWEST)
            self.expect_peek(tk.RPAREN)
            self.expect_peek(tk.LBRACE)
            consequence = self.parse_block_statement()

            alternative = None
            if self.peek_token_is(tk.ELSE):
                self.next_token()
                self.expect_peek(tk.LBRACE)
                alternative = self.parse_block_statement()

            return IfExpression(
                condition, consequence, alternative, line=tok.line, col=tok.col
            )

    def parse_function_literal(self) -> Expression:
        with self._traced("parse_function_literal"):
            tok = self.cur_token
            self.expect_peek(tk.LPAREN)
            parameters = self.parse_function_parameters()
            self.expect_peek(tk.LBRACE)
            body = self.parse_block_statement()
            return FunctionLiteral(parameters, body, line=tok.line, col=tok.col)

    def parse_function_parameters(self) -> tuple[Identifier, ...]:
        identifiers: list[Identifier] = []

        if self.peek_token_is(tk.RPAREN):
            self.next_token()
            return ()

        self.expect_peek(tk.IDENT)
        identifiers.append(self.parse_identifier())

        while self.peek_token_is(tk.COMMA):
            self.next_token()
            self.expect_peek(tk.IDENT)
            identifiers.append(self.parse_identifier())

        self.expect_peek(tk.RPAREN)
        return tuple(identifiers)

    def parse_call_expression(self, function: Expression) -> Expression:
        with self._traced("parse_call_expression"):
            tok = self.cur_token
            arguments = self.parse_call_arguments()
            return CallExpression(function, arguments, line=tok.line, col=tok.col)

    def parse_call_arguments(self) -> tuple[Expression, ...]:
        args: list[Expression] = []

        if self.peek_token_is(tk.RPAREN):
            self.next_token()
            return ()

        self.next_token()
        args.append(self.parse_expression(tk.LOWEST))

        while self.peek_token_is(tk.COMMA):
            self.next_token()
            self.next_token()
            args.append(self.parse_expression(tk.LOWEST))

        self.expect_peek(tk.RPAREN)
        return tuple(args)


def parse_source(source: str, trace: bool = False) -> tuple[Program, list[ParseError]]:
    """Lex and parse `source`, returning the program and its diagnostics."""
    parser = Parser(Lexer(CharacterStream(source)), trace=trace)
    program = parser.parse()
    return program, parser.errors


__all__ = ["Parser", "parse_source"]
