"""Token types for the vuepy expression lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    """Classification of expression tokens."""

    NAME = "name"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"

    # Punctuation
    DOT = "."
    COMMA = ","
    COLON = ":"
    QUESTION = "?"
    PIPE = "|"
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    LBRACE = "{"
    RBRACE = "}"

    # Operators
    NOT = "!"
    SUB = "-"
    AND = "&&"
    OR = "||"
    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="

    EOF = "eof"


@dataclass(frozen=True, slots=True)
class Token:
    """A lexed expression token.

    Attributes:
        type: Token classification
        value: Token text (unescaped for strings)
        lineno: 1-based line within the expression source
        col_offset: 0-based column within that line
    """

    type: TokenType
    value: str
    lineno: int
    col_offset: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.lineno}:{self.col_offset})"
