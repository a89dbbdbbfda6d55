"""
Runtime values and lexical environments for the WAIXG evaluator.

Classes:
    Object: Base class of every runtime value (`type()` / `inspect()`).
    Integer, Boolean, Null, String: Plain data values.
    ReturnValue: Control-flow wrapper produced by `return`.
    Error: An evaluation failure carried as an ordinary value.
    Function: A closure over the environment it was defined in.
    Builtin: A native callable exposed to WAIXG programs.
    Environment: A scope mapping names to values, chained to its outer scope.

`TRUE`, `FALSE` and `NULL` are process-wide singletons; the evaluator never
builds another Boolean or Null, so identity comparison of booleans is sound.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from waixg.waixg_ast import BlockStatement, Identifier

INTEGER_OBJ = "INTEGER"
BOOLEAN_OBJ = "BOOLEAN"
NULL_OBJ = "NULL"
RETURN_VALUE_OBJ = "RETURN_VALUE"
ERROR_OBJ = "ERROR"
FUNCTION_OBJ = "FUNCTION"
STRING_OBJ = "STRING"
BUILTIN_OBJ = "BUILTIN"


class Object:
    """Base class for WAIXG runtime values."""

    def type(self) -> str:
        raise NotImplementedError

    def inspect(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.inspect()


@dataclass(frozen=True)
class Integer(Object):
    value: int

    def type(self) -> str:
        return INTEGER_OBJ

    def inspect(self) -> str:
        return str(self.value)


@dataclass(frozen=True, eq=False)
class Boolean(Object):
    value: bool

    def type(self) -> str:
        return BOOLEAN_OBJ

    def inspect(self) -> str:
        return "true" if self.value else "false"


class Null(Object):
    def type(self) -> str:
        return NULL_OBJ

    def inspect(self) -> str:
        return "null"

    def __repr__(self) -> str:
        return "NULL"


@dataclass(frozen=True)
class String(Object):
    value: str

    def type(self) -> str:
        return STRING_OBJ

    def inspect(self) -> str:
        return self.value


@dataclass(frozen=True)
class ReturnValue(Object):
    value: Object

    def type(self) -> str:
        return RETURN_VALUE_OBJ

    def inspect(self) -> str:
        return self.value.inspect()


@dataclass(frozen=True)
class Error(Object):
    """
    An evaluation error.

    Attributes:
        message (str): Human-readable description, e.g. "type mismatch: INTEGER + BOOLEAN".
        kind (str): Machine-readable category, e.g. "type-mismatch".
    """

    message: str
    kind: str = "error"

    def type(self) -> str:
        return ERROR_OBJ

    def inspect(self) -> str:
        return "ERROR: " + self.message


@dataclass(eq=False)
class Function(Object):
    """A user-defined function together with the environment it closes over."""

    parameters: tuple[Identifier, ...]
    body: BlockStatement
    env: Environment = field(repr=False)

    def type(self) -> str:
        return FUNCTION_OBJ

    def inspect(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"fn({params}) {{\n{self.body}\n}}"


BuiltinFunction = Callable[..., Object]


@dataclass(frozen=True, eq=False)
class Builtin(Object):
    fn: BuiltinFunction
    name: str = "builtin"

    def type(self) -> str:
        return BUILTIN_OBJ

    def inspect(self) -> str:
        return "builtin function"


TRUE = Boolean(True)
FALSE = Boolean(False)
NULL = Null()

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def wrap_int64(value: int) -> int:
    """Wraps `value` into the signed 64-bit range (two's complement)."""
    value &= 0xFFFFFFFFFFFFFFFF
    return value - (1 << 64) if value > INT64_MAX else value


def native_bool_to_boolean(value: bool) -> Boolean:
    return TRUE if value else FALSE


def is_error(obj: Object | None) -> bool:
    return obj is not None and obj.type() == ERROR_OBJ


def is_truthy(obj: Object) -> bool:
    """Only NULL and FALSE are falsy; every other value, 0 included, is truthy."""
    return obj is not NULL and obj is not FALSE


class Environment:
    """
    A lexical scope.

    Lookup walks outward through `outer`; `set` always writes to this scope and
    never touches an enclosing one. Closures keep their defining scope alive
    simply by holding a reference to it.

    Attributes:
        store (dict[str, Object]): Bindings made in this scope.
        outer (Environment | None): The enclosing scope, if any.
    """

    def __init__(self, outer: Environment | None = None) -> None:
        self.store: dict[str, Object] = {}
        self.outer = outer

    @classmethod
    def new_enclosed(cls, outer: Environment) -> Environment:
        return cls(outer)

    def get(self, name: str) -> tuple[Object | None, bool]:
        env: Environment | None = self
        while env is not None:
            if name in env.store:
                return env.store[name], True
            env = env.outer
        return None, False

    def set(self, name: str, val: Object) -> Object:
        self.store[name] = val
        return val

    def __contains__(self, name: str) -> bool:
        return self.get(name)[1]

    def __repr__(self) -> str:
        names = ", ".join(sorted(self.store))
        return f"Environment([{names}], outer={'yes' if self.outer else 'no'})"
