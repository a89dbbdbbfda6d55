"""
Tree-walking evaluator for WAIXG programs.

This module defines the `Evaluator` class, which walks a parsed `Program`
directly (there is no intermediate code) and produces a runtime `Object`.

Behavior:
    - Dispatches each AST node to an `eval_<kind>` method.
    - Errors are ordinary `Error` values. Every result that feeds into further
      computation is checked with `is_error()` and, if it is one, returned
      unchanged before any sibling is evaluated.
    - `return` produces a `ReturnValue` wrapper that blocks forward untouched;
      it is unwrapped only when a function call (or the whole program) finishes.
    - Function calls run in a new environment enclosed by the environment the
      function was *defined* in, which makes scoping lexical.
    - The number of nested function calls is bounded by `max_depth`, and the
      number of nested nodes under evaluation by `max_nesting`. Going deeper
      yields a "stack depth exceeded" error instead of crashing. The host
      recursion limit is raised only while evaluation is running.

Raises:
    - `NotImplementedError`: If a node kind has no `eval_<kind>` method.
    - `ValueError`: If `max_depth` is not between 1 and `MAX_DEPTH_LIMIT`.

Example:
    >>> program, errors = parse_source("let add = fn(a, b) { a + b }; add(1, 2)")
    >>> evaluate(program, Environment()).inspect()
    '3'
"""

from __future__ import annotations

import math

from waixg.waixg_ast import (
    ASTNode,
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
    StringLiteral,
)
from waixg.waixg_builtins import BUILTINS
from waixg.waixg_errors import recursion_headroom
from waixg.waixg_object import (
    BOOLEAN_OBJ,
    FALSE,
    INTEGER_OBJ,
    NULL,
    RETURN_VALUE_OBJ,
    STRING_OBJ,
    TRUE,
    Builtin,
    Environment,
    Error,
    Function,
    Integer,
    Object,
    ReturnValue,
    String,
    is_error,
    is_truthy,
    native_bool_to_boolean,
    wrap_int64,
)

DEFAULT_MAX_DEPTH = 200
MAX_DEPTH_LIMIT = 500

# Node nesting allowed per active call, plus a budget for the top level
NESTING_PER_CALL = 10
TOP_LEVEL_NESTING = 500

# Python frames used per nested `eval`, with headroom
FRAMES_PER_NESTING = 5

# Error kinds
IDENTIFIER_NOT_FOUND = "identifier-not-found"
TYPE_MISMATCH = "type-mismatch"
UNKNOWN_OPERATOR = "unknown-operator"
NOT_A_FUNCTION = "not-a-function"
WRONG_ARITY = "wrong-arity"
STACK_DEPTH_EXCEEDED = "stack-depth-exceeded"
DIVISION_BY_ZERO = "division-by-zero"
INTEGER_OVERFLOW = "integer-overflow"


def new_error(kind: str, message: str) -> Error:
    return Error(message, kind)


class Evaluator:
    """Evaluates WAIXG AST nodes against an `Environment`.

    Attributes:
        max_depth (int): Maximum number of nested function calls.
        depth (int): Number of function calls currently active.
        max_nesting (int): Maximum number of nodes under evaluation at once.
        nesting (int): Number of nodes currently under evaluation.

    Methods:
        eval(node, env): Evaluates any AST node.
        apply_function(fn, args): Calls a function or builtin value.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        if max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {max_depth}")
        if max_depth > MAX_DEPTH_LIMIT:
            raise ValueError(f"max_depth must be at most {MAX_DEPTH_LIMIT}, got {max_depth}")
        self.max_depth = max_depth
        self.depth = 0
        self.max_nesting = max_depth * NESTING_PER_CALL + TOP_LEVEL_NESTING
        self.nesting = 0

    def eval(self, node: ASTNode, env: Environment) -> Object:
        """
        Dispatches `node` to its `eval_<kind>` method.

        The outermost call raises the host recursion limit for the duration
        of the evaluation.

        Raises:
            NotImplementedError: If no evaluator exists for the node kind.
        """
        if self.nesting == 0:
            with recursion_headroom(self.max_nesting * FRAMES_PER_NESTING + 1000):
                return self._dispatch(node, env)
        return self._dispatch(node, env)

    def _dispatch(self, node: ASTNode, env: Environment) -> Object:
        if self.nesting >= self.max_nesting:
            return new_error(
                STACK_DEPTH_EXCEEDED, f"expression nested too deep: {self.max_nesting}"
            )
        meth = getattr(self, f"eval_{node.kind}", None)
        if meth is None:
            raise NotImplementedError(
                f"Evaluator: no evaluator for {node.kind} "
                f"(line {node.line}, col {node.col})"
            )
        self.nesting += 1
        try:
            result: Object = meth(node, env)
        finally:
            self.nesting -= 1
        return result

    # Statements

    def eval_program(self, node: Program, env: Environment) -> Object:
        result: Object = NULL
        for stmt in node.statements:
            result = self.eval(stmt, env)
            if isinstance(result, ReturnValue):
                return result.value
            if is_error(result):
                return result
        return result

    def eval_block(self, node: BlockStatement, env: Environment) -> Object:
        result: Object = NULL
        for stmt in node.statements:
            result = self.eval(stmt, env)
            # stop on return or error; the caller decides whether to unwrap
            if result.type() == RETURN_VALUE_OBJ or is_error(result):
                return result
        return result

    def eval_expression_statement(
        self, node: ExpressionStatement, env: Environment
    ) -> Object:
        return self.eval(node.expression, env)

    def eval_let(self, node: LetStatement, env: Environment) -> Object:
        val = self.eval(node.value, env)
        if is_error(val):
            return val
        return env.set(node.name.value, val)

    def eval_return(self, node: ReturnStatement, env: Environment) -> Object:
        val = self.eval(node.return_value, env)
        if is_error(val):
            return val
        return ReturnValue(val)

    # Literals

    def eval_integer(self, node: IntegerLiteral, env: Environment) -> Object:
        return Integer(node.value)

    def eval_boolean(self, node: BooleanLiteral, env: Environment) -> Object:
        return native_bool_to_boolean(node.value)

    def eval_string(self, node: StringLiteral, env: Environment) -> Object:
        return String(node.value)

    def eval_function(self, node: FunctionLiteral, env: Environment) -> Object:
        return Function(node.parameters, node.body, env)

    # Expressions

    def eval_identifier(self, node: Identifier, env: Environment) -> Object:
        val, ok = env.get(node.value)
        if ok and val is not None:
            return val
        builtin = BUILTINS.get(node.value)
        if builtin is not None:
            return builtin
        return new_error(IDENTIFIER_NOT_FOUND, f"identifier not found: {node.value}")

    def eval_prefix(self, node: PrefixExpression, env: Environment) -> Object:
        right = self.eval(node.right, env)
        if is_error(right):
            return right
        if node.operator == "!":
            return eval_bang_operator(right)
        if node.operator == "-":
            return eval_minus_prefix_operator(right)
        return new_error(UNKNOWN_OPERATOR, f"unknown operator: {node.operator}{right.type()}")

    def eval_infix(self, node: InfixExpression, env: Environment) -> Object:
        left = self.eval(node.left, env)
        if is_error(left):
            return left
        right = self.eval(node.right, env)
        if is_error(right):
            return right
        return eval_infix_expression(node.operator, left, right)

    def eval_if(self, node: IfExpression, env: Environment) -> Object:
        condition = self.eval(node.condition, env)
        if is_error(condition):
            return condition
        if is_truthy(condition):
            return self.eval(node.consequence, env)
        if node.alternative is not None:
            return self.eval(node.alternative, env)
        return NULL

    def eval_call(self, node: CallExpression, env: Environment) -> Object:
        function = self.eval(node.function, env)
        if is_error(function):
            return function
        args = self.eval_expressions(node.arguments, env)
        if isinstance(args, Error):
            return args
        return self.apply_function(function, args)

    def eval_expressions(
        self, exprs: tuple[Expression, ...], env: Environment
    ) -> list[Object] | Error:
        """Evaluates `exprs` left to right, stopping at the first error."""
        result: list[Object] = []
        for expr in exprs:
            evaluated = self.eval(expr, env)
            if isinstance(evaluated, Error):
                return evaluated
            result.append(evaluated)
        return result

    def apply_function(self, fn: Object, args: list[Object]) -> Object:
        if isinstance(fn, Builtin):
            return fn.fn(*args)
        if not isinstance(fn, Function):
            return new_error(NOT_A_FUNCTION, f"not a function: {fn.type()}")
        if len(args) != len(fn.parameters):
            return new_error(
                WRONG_ARITY,
                f"wrong number of arguments: want={len(fn.parameters)}, got={len(args)}",
            )
        if self.depth >= self.max_depth:
            return new_error(
                STACK_DEPTH_EXCEEDED, f"stack depth exceeded: {self.max_depth}"
            )

        extended_env = Environment.new_enclosed(fn.env)
        for param, arg in zip(fn.parameters, args):
            extended_env.set(param.value, arg)

        self.depth += 1
        try:
            evaluated = self.eval(fn.body, extended_env)
        finally:
            self.depth -= 1

        if isinstance(evaluated, ReturnValue):
            return evaluated.value
        return evaluated


def eval_bang_operator(right: Object) -> Object:
    if right is TRUE:
        return FALSE
    if right is FALSE or right is NULL:
        return TRUE
    return FALSE


def eval_minus_prefix_operator(right: Object) -> Object:
    if not isinstance(right, Integer):
        return new_error(UNKNOWN_OPERATOR, f"unknown operator: -{right.type()}")
    return Integer(wrap_int64(-right.value))


def eval_infix_expression(operator: str, left: Object, right: Object) -> Object:
    if left.type() == INTEGER_OBJ and right.type() == INTEGER_OBJ:
        return eval_integer_infix(operator, left, right)  # type: ignore[arg-type]
    if left.type() == BOOLEAN_OBJ and right.type() == BOOLEAN_OBJ:
        return eval_boolean_infix(operator, left, right)
    if left.type() == STRING_OBJ and right.type() == STRING_OBJ:
        return eval_string_infix(operator, left, right)  # type: ignore[arg-type]
    if left.type() != right.type():
        return new_error(
            TYPE_MISMATCH, f"type mismatch: {left.type()} {operator} {right.type()}"
        )
    return _unknown_infix(operator, left, right)


def _unknown_infix(operator: str, left: Object, right: Object) -> Error:
    return new_error(
        UNKNOWN_OPERATOR, f"unknown operator: {left.type()} {operator} {right.type()}"
    )


def eval_boolean_infix(operator: str, left: Object, right: Object) -> Object:
    # TRUE and FALSE are singletons, so identity is equality
    if operator == "==":
        return native_bool_to_boolean(left is right)
    if operator == "!=":
        return native_bool_to_boolean(left is not right)
    return _unknown_infix(operator, left, right)


def eval_string_infix(operator: str, left: String, right: String) -> Object:
    if operator == "+":
        return String(left.value + right.value)
    if operator == "==":
        return native_bool_to_boolean(left.value == right.value)
    if operator == "!=":
        return native_bool_to_boolean(left.value != right.value)
    return _unknown_infix(operator, left, right)


def eval_integer_infix(operator: str, left: Integer, right: Integer) -> Object:
    lval = left.value
    rval = right.value

    if operator == "+":
        return Integer(wrap_int64(lval + rval))
    if operator == "-":
        return Integer(wrap_int64(lval - rval))
    if operator == "*":
        return Integer(wrap_int64(lval * rval))
    if operator == "/":
        if rval == 0:
            return new_error(DIVISION_BY_ZERO, f"division by zero: {lval} / {rval}")
        return Integer(wrap_int64(truncated_div(lval, rval)))
    if operator == "^":
        return integer_power(lval, rval)

    if operator == "<":
        return native_bool_to_boolean(lval < rval)
    if operator == ">":
        return native_bool_to_boolean(lval > rval)
    if operator == "<=":
        return native_bool_to_boolean(lval <= rval)
    if operator == ">=":
        return native_bool_to_boolean(lval >= rval)
    if operator == "==":
        return native_bool_to_boolean(lval == rval)
    if operator == "!=":
        return native_bool_to_boolean(lval != rval)

    return _unknown_infix(operator, left, right)


def truncated_div(lval: int, rval: int) -> int:
    """Integer division rounding toward zero: -7 / 2 == -3."""
    quotient = abs(lval) // abs(rval)
    return -quotient if (lval < 0) != (rval < 0) else quotient


def integer_power(lval: int, rval: int) -> Object:
    """`lval ^ rval` via a floating-point power truncated back to an integer.

    Precision is lost for large results, matching a float64 power followed by
    an int64 conversion.
    """
    try:
        result = float(lval) ** float(rval)
    except ZeroDivisionError:
        return new_error(DIVISION_BY_ZERO, f"division by zero: {lval} ^ {rval}")
    except OverflowError:
        return new_error(INTEGER_OVERFLOW, f"integer overflow: {lval} ^ {rval}")
    if not math.isfinite(result):
        return new_error(INTEGER_OVERFLOW, f"integer overflow: {lval} ^ {rval}")
    return Integer(wrap_int64(int(result)))


def evaluate(node: ASTNode, env: Environment, max_depth: int | None = None) -> Object:
    """Evaluates `node` in `env` with a fresh `Evaluator`."""
    depth = DEFAULT_MAX_DEPTH if max_depth is None else max_depth
    return Evaluator(depth).eval(node, env)


__all__ = ["DEFAULT_MAX_DEPTH", "MAX_DEPTH_LIMIT", "Evaluator", "evaluate", "new_error"]
