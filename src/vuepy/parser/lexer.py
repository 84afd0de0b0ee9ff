"""Expression lexer for vuepy.

Splits a single expression string (the content of ``{{ }}`` or a
directive attribute value) into a token stream. Whitespace separates
tokens and is otherwise ignored.

Thread-Safety:
    ``tokenize()`` is a pure function over its input. The compiled pattern
    is module-level and immutable.

"""

from __future__ import annotations

import re

from vuepy._types import Token, TokenType
from vuepy.parser.errors import ParseError

_TOKEN_RE = re.compile(
    r"""
      (?P<ws>\s+)
    | (?P<float>\d+\.\d+(?:[eE][+-]?\d+)?|\d+[eE][+-]?\d+)
    | (?P<integer>\d+)
    | (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
    | (?P<name>[A-Za-z_$][A-Za-z0-9_$]*)
    | (?P<op>===|!==|==|!=|<=|>=|&&|\|\||[.,:?|()\[\]{}!<>-])
    """,
    re.VERBOSE | re.DOTALL,
)

_OPERATORS: dict[str, TokenType] = {
    ".": TokenType.DOT,
    ",": TokenType.COMMA,
    ":": TokenType.COLON,
    "?": TokenType.QUESTION,
    "|": TokenType.PIPE,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "!": TokenType.NOT,
    "-": TokenType.SUB,
    "&&": TokenType.AND,
    "||": TokenType.OR,
    "==": TokenType.EQ,
    "===": TokenType.EQ,
    "!=": TokenType.NE,
    "!==": TokenType.NE,
    "<": TokenType.LT,
    "<=": TokenType.LE,
    ">": TokenType.GT,
    ">=": TokenType.GE,
}

_STRING_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    '"': '"',
    "'": "'",
}

_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


def _unescape(body: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _STRING_ESCAPES.get(m.group(1), m.group(0)), body)


def tokenize(source: str) -> list[Token]:
    """Tokenize an expression.

    The returned list always ends with an EOF token.

    Raises:
        ParseError: On a character that starts no valid token, such as an
            unterminated string literal.
    """
    tokens: list[Token] = []
    pos = 0
    lineno = 1
    line_start = 0
    length = len(source)

    while pos < length:
        match = _TOKEN_RE.match(source, pos)
        if match is None:
            char = source[pos]
            message = (
                "unterminated string literal"
                if char in "\"'"
                else f"unexpected character {char!r}"
            )
            raise ParseError(
                message,
                Token(TokenType.EOF, char, lineno, pos - line_start),
                source,
            )

        kind = match.lastgroup
        text = match.group()
        col = pos - line_start

        if kind == "ws":
            newlines = text.count("\n")
            if newlines:
                lineno += newlines
                line_start = pos + text.rindex("\n") + 1
        elif kind == "string":
            tokens.append(Token(TokenType.STRING, _unescape(text[1:-1]), lineno, col))
        elif kind == "name":
            tokens.append(Token(TokenType.NAME, text, lineno, col))
        elif kind == "integer":
            tokens.append(Token(TokenType.INTEGER, text, lineno, col))
        elif kind == "float":
            tokens.append(Token(TokenType.FLOAT, text, lineno, col))
        else:
            tokens.append(Token(_OPERATORS[text], text, lineno, col))

        pos = match.end()

    tokens.append(Token(TokenType.EOF, "", lineno, pos - line_start))
    return tokens
