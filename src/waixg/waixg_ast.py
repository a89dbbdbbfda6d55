"""
Defines the abstract syntax tree (AST) for the WAIXG programming language.

The tree is a closed family of immutable node classes shared by the parser
(which builds it) and the evaluator (which walks it). Every node records the
line and column of the token that started it for diagnostics; positions do not
take part in equality, so two trees parsed from differently formatted source
compare equal when their structure matches.

Classes:
    ASTNode: Base class for every node; provides `kind`, `to_dict()` and position metadata.

    Statements:
        LetStatement, ReturnStatement, ExpressionStatement, BlockStatement

    Expressions:
        Identifier, IntegerLiteral, BooleanLiteral, StringLiteral,
        PrefixExpression, InfixExpression, IfExpression, FunctionLiteral,
        CallExpression

    Program: The parse root, an ordered sequence of statements.

`str(node)` renders a node back to a fully parenthesized source form, which is
how precedence and associativity are checked in tests:

    >>> str(parse("1 + 2 * 3"))
    '(1 + (2 * 3))'
"""

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Union


@dataclass(frozen=True)
class ASTNode:
    """
    Base class of all WAIXG AST nodes.

    Attributes:
        kind (ClassVar[str]): Tag naming the node variant; the evaluator dispatches on it.
        line (int): Source line number of the node's first token.
        col (int): Source column number of the node's first token.
    """

    kind: ClassVar[str] = "node"

    line: int = field(default=0, kw_only=True, compare=False)
    col: int = field(default=0, kw_only=True, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Converts the node (and all descendants) into plain nested dictionaries."""
        out: dict[str, Any] = {"kind": self.kind}
        for f in fields(self):
            out[f.name] = _to_plain(getattr(self, f.name))
        return out


def _to_plain(val: Any) -> Any:
    if isinstance(val, ASTNode):
        return val.to_dict()
    if isinstance(val, tuple):
        return [_to_plain(v) for v in val]
    return val


# Expressions


@dataclass(frozen=True)
class Identifier(ASTNode):
    kind: ClassVar[str] = "identifier"

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class IntegerLiteral(ASTNode):
    kind: ClassVar[str] = "integer"

    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class BooleanLiteral(ASTNode):
    kind: ClassVar[str] = "boolean"

    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class StringLiteral(ASTNode):
    kind: ClassVar[str] = "string"

    value: str

    def __str__(self) -> str:
        return '"' + self.value.replace("\\", "\\\\").replace('"', '\\"') + '"'


@dataclass(frozen=True)
class PrefixExpression(ASTNode):
    kind: ClassVar[str] = "prefix"

    operator: str
    right: "Expression"

    def __str__(self) -> str:
        return f"({self.operator}{self.right})"


@dataclass(frozen=True)
class InfixExpression(ASTNode):
    kind: ClassVar[str] = "infix"

    left: "Expression"
    operator: str
    right: "Expression"

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass(frozen=True)
class IfExpression(ASTNode):
    kind: ClassVar[str] = "if"

    condition: "Expression"
    consequence: "BlockStatement"
    alternative: Union["BlockStatement", None] = None

    def __str__(self) -> str:
        out = f"if {self.condition} {{ {self.consequence} }}"
        if self.alternative is not None:
            out += f" else {{ {self.alternative} }}"
        return out


@dataclass(frozen=True)
class FunctionLiteral(ASTNode):
    kind: ClassVar[str] = "function"

    parameters: tuple[Identifier, ...]
    body: "BlockStatement"

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"fn({params}) {{ {self.body} }}"


@dataclass(frozen=True)
class CallExpression(ASTNode):
    kind: ClassVar[str] = "call"

    function: "Expression"
    arguments: tuple["Expression", ...]

    def __str__(self) -> str:
        args = ", ".join(str(a) for a in self.arguments)
        return f"{self.function}({args})"


Expression = Union[
    Identifier,
    IntegerLiteral,
    BooleanLiteral,
    StringLiteral,
    PrefixExpression,
    InfixExpression,
    IfExpression,
    FunctionLiteral,
    CallExpression,
]


# Statements


@dataclass(frozen=True)
class LetStatement(ASTNode):
    kind: ClassVar[str] = "let"

    name: Identifier
    value: Expression

    def __str__(self) -> str:
        return f"let {self.name} = {self.value};"


@dataclass(frozen=True)
class ReturnStatement(ASTNode):
    kind: ClassVar[str] = "return"

    return_value: Expression

    def __str__(self) -> str:
        return f"return {self.return_value};"


@dataclass(frozen=True)
class ExpressionStatement(ASTNode):
    kind: ClassVar[str] = "expression_statement"

    expression: Expression

    def __str__(self) -> str:
        return str(self.expression)


@dataclass(frozen=True)
class BlockStatement(ASTNode):
    kind: ClassVar[str] = "block"

    statements: tuple["Statement", ...] = ()

    def __str__(self) -> str:
        return " ".join(str(s) for s in self.statements)


Statement = Union[LetStatement, ReturnStatement, ExpressionStatement, BlockStatement]


@dataclass(frozen=True)
class Program(ASTNode):
    kind: ClassVar[str] = "program"

    statements: tuple[Statement, ...] = ()

    def __str__(self) -> str:
        return " ".join(str(s) for s in self.statements)


NODE_TYPES: tuple[type[ASTNode], ...] = (
    Program,
    LetStatement,
    ReturnStatement,
    ExpressionStatement,
    BlockStatement,
    Identifier,
    IntegerLiteral,
    BooleanLiteral,
    StringLiteral,
    PrefixExpression,
    InfixExpression,
    IfExpression,
    FunctionLiteral,
    CallExpression,
)
"""Every concrete node class; the evaluator must handle each `kind` listed here."""
