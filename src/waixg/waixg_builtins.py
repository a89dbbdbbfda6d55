"""
Native functions available to every WAIXG program.

Identifier lookup falls back to `BUILTINS` after the environment chain misses,
so a program may shadow a builtin with its own `let` binding.

    len(s)    -> length of a string
    puts(...) -> prints each argument on its own line, returns null
    type(x)   -> name of the value's type as a string
"""

from waixg.waixg_object import (
    NULL,
    STRING_OBJ,
    Builtin,
    Error,
    Integer,
    Object,
    String,
)

BUILTIN_ARGUMENT = "builtin-argument"


def _arity_error(got: int, want: int) -> Error:
    return Error(f"wrong number of arguments. got={got}, want={want}", BUILTIN_ARGUMENT)


def builtin_len(*args: Object) -> Object:
    if len(args) != 1:
        return _arity_error(len(args), 1)
    arg = args[0]
    if arg.type() == STRING_OBJ:
        return Integer(len(arg.value))  # type: ignore[attr-defined]
    return Error(f"argument to `len` not supported, got {arg.type()}", BUILTIN_ARGUMENT)


def builtin_puts(*args: Object) -> Object:
    for arg in args:
        print(arg.inspect())
    return NULL


def builtin_type(*args: Object) -> Object:
    if len(args) != 1:
        return _arity_error(len(args), 1)
    return String(args[0].type())


BUILTINS: dict[str, Builtin] = {
    "len": Builtin(builtin_len, "len"),
    "puts": Builtin(builtin_puts, "puts"),
    "type": Builtin(builtin_type, "type"),
}
