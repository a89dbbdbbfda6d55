"""
Shared token and precedence tables for the WAIXG language.

Exports:
    token_hashmap: Maps operator/delimiter text to its token type.
    keywords: Maps lowercase keyword text to its token type.
    OPERATOR_TOKENS: Token types that may appear as binary operators.
    LOWEST ... CALL: Binding power levels used by the Pratt parser.
    precedences: Maps token types to their binding power.
"""

ILLEGAL = "ILLEGAL"
EOF = "EOF"

# Identifiers + literals
IDENT = "IDENT"
INT = "INT"
STRING = "STRING"

# Operators
ASSIGN = "ASSIGN"
PLUS = "PLUS"
MINUS = "MINUS"
ASTERISK = "ASTERISK"
SLASH = "SLASH"
HAT = "HAT"

BANG = "BANG"
EQ = "EQ"
NOT_EQ = "NOT_EQ"
LT = "LT"
GT = "GT"
LTEQ = "LTEQ"
GTEQ = "GTEQ"

# Delimiters
COMMA = "COMMA"
SEMICOLON = "SEMICOLON"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
LBRACE = "LBRACE"
RBRACE = "RBRACE"
LBRACKET = "LBRACKET"
RBRACKET = "RBRACKET"

# Keywords
FUNCTION = "FUNCTION"
LET = "LET"
TRUE = "TRUE"
FALSE = "FALSE"
IF = "IF"
ELSE = "ELSE"
RETURN = "RETURN"

token_hashmap: dict[str, str] = {
    "=": ASSIGN,
    "+": PLUS,
    "-": MINUS,
    "*": ASTERISK,
    "/": SLASH,
    "^": HAT,
    "!": BANG,
    "==": EQ,
    "!=": NOT_EQ,
    "<": LT,
    ">": GT,
    "<=": LTEQ,
    ">=": GTEQ,
    ",": COMMA,
    ";": SEMICOLON,
    "(": LPAREN,
    ")": RPAREN,
    "{": LBRACE,
    "}": RBRACE,
    "[": LBRACKET,
    "]": RBRACKET,
}

keywords: dict[str, str] = {
    "fn": FUNCTION,
    "let": LET,
    "true": TRUE,
    "false": FALSE,
    "if": IF,
    "else": ELSE,
    "return": RETURN,
}

OPERATOR_TOKENS: tuple[str, ...] = (
    PLUS,
    MINUS,
    ASTERISK,
    SLASH,
    HAT,
    EQ,
    NOT_EQ,
    LT,
    GT,
    LTEQ,
    GTEQ,
)

# Binding power, lowest first
LOWEST = 1
EQUALS = 2
LESSGREATER = 3
SUM = 4
PRODUCT = 5
EXPONENT = 6
PREFIX = 7
CALL = 8

precedences: dict[str, int] = {
    EQ: EQUALS,
    NOT_EQ: EQUALS,
    LT: LESSGREATER,
    GT: LESSGREATER,
    LTEQ: LESSGREATER,
    GTEQ: LESSGREATER,
    PLUS: SUM,
    MINUS: SUM,
    ASTERISK: PRODUCT,
    SLASH: PRODUCT,
    HAT: EXPONENT,
    LPAREN: CALL,
}


def lookup_ident(ident: str) -> str:
    """Returns the keyword token type for `ident` (case-insensitive), else IDENT."""
    return keywords.get(ident.lower(), IDENT)
