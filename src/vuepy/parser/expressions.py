"""Expression parser for vuepy.

Recursive-descent parser producing the immutable AST in ``vuepy.nodes``.

Grammar (lowest precedence first):
    ```
    pipeline := ternary ( '|' NAME ( '(' [ ternary (',' ternary)* ] ')' )? )*
    ternary  := or ( '?' ternary ':' ternary )?
    or       := and ( '||' and )*
    and      := compare ( '&&' compare )*
    compare  := unary ( ('=='|'!='|'<'|'<='|'>'|'>=') unary )?
    unary    := ('!' | '-') unary | postfix
    postfix  := primary ( '.' NAME | '.' INTEGER | '[' pipeline ']' )*
    primary  := INTEGER | FLOAT | STRING | true | false | null
              | NAME | NAME '(' args ')' | '(' pipeline ')'
              | '[' items ']' | '{' key ':' ternary, ... '}'
    ```

Parsing is pure: the same source always yields an equal AST, independent
of any scope. Results are memoised per process.

"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import NoReturn

from vuepy._types import Token, TokenType
from vuepy.environment.exceptions import ErrorCode, TemplateSyntaxError
from vuepy.nodes import (
    BoolOp,
    Compare,
    CondExpr,
    Const,
    Dict,
    Expr,
    Filter,
    FuncCall,
    Getattr,
    Getitem,
    List,
    Name,
    UnaryOp,
)
from vuepy.parser.errors import ParseError
from vuepy.parser.lexer import tokenize

_KEYWORD_CONSTANTS: dict[str, bool | None] = {
    "true": True,
    "false": False,
    "null": None,
    "nil": None,
    "undefined": None,
}

_COMPARE_OPS: dict[TokenType, str] = {
    TokenType.EQ: "==",
    TokenType.NE: "!=",
    TokenType.LT: "<",
    TokenType.LE: "<=",
    TokenType.GT: ">",
    TokenType.GE: ">=",
}


class ExpressionParser:
    """Parse one expression source string into an ``Expr``."""

    __slots__ = ("_pos", "_source", "_tokens")

    def __init__(self, source: str):
        self._source = source
        self._tokens = tokenize(source)
        self._pos = 0

    # -- token helpers -----------------------------------------------------

    @property
    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        if token.type is not TokenType.EOF:
            self._pos += 1
        return token

    def _match(self, *types: TokenType) -> Token | None:
        if self._current.type in types:
            return self._advance()
        return None

    def _expect(self, type_: TokenType, what: str) -> Token:
        if self._current.type is not type_:
            self._fail(f"expected {what}")
        return self._advance()

    def _fail(self, message: str, token: Token | None = None) -> NoReturn:
        token = token or self._current
        if token.type is TokenType.EOF:
            message = f"{message}, got end of expression"
        else:
            message = f"{message}, got {token.value!r}"
        raise ParseError(message, token, self._source)

    # -- grammar -----------------------------------------------------------

    def parse(self) -> Expr:
        if self._current.type is TokenType.EOF:
            raise ParseError("empty expression", self._current, self._source)
        expr = self._parse_pipeline()
        if self._current.type is not TokenType.EOF:
            raise ParseError(
                f"unexpected token {self._current.value!r}",
                self._current,
                self._source,
            )
        return expr

    def _parse_pipeline(self) -> Expr:
        expr = self._parse_ternary()
        while self._match(TokenType.PIPE):
            name = self._expect(TokenType.NAME, "filter name after '|'")
            args: tuple[Expr, ...] = ()
            if self._match(TokenType.LPAREN):
                args = self._parse_args(TokenType.RPAREN)
            expr = Filter(name.lineno, name.col_offset, expr, name.value, args)
        return expr

    def _parse_args(self, closing: TokenType) -> tuple[Expr, ...]:
        """Parse comma-separated arguments up to ``closing`` (consumed)."""
        args: list[Expr] = []
        while self._current.type is not closing:
            args.append(self._parse_ternary())
            if not self._match(TokenType.COMMA):
                break
        self._expect(closing, f"',' or {closing.value!r}")
        return tuple(args)

    def _parse_ternary(self) -> Expr:
        test = self._parse_or()
        question = self._match(TokenType.QUESTION)
        if question is None:
            return test
        if_true = self._parse_ternary()
        self._expect(TokenType.COLON, "':' in conditional expression")
        if_false = self._parse_ternary()
        return CondExpr(test.lineno, test.col_offset, test, if_true, if_false)

    def _parse_or(self) -> Expr:
        first = self._parse_and()
        values = [first]
        while self._match(TokenType.OR):
            values.append(self._parse_and())
        if len(values) == 1:
            return first
        return BoolOp(first.lineno, first.col_offset, "||", tuple(values))

    def _parse_and(self) -> Expr:
        first = self._parse_compare()
        values = [first]
        while self._match(TokenType.AND):
            values.append(self._parse_compare())
        if len(values) == 1:
            return first
        return BoolOp(first.lineno, first.col_offset, "&&", tuple(values))

    def _parse_compare(self) -> Expr:
        left = self._parse_unary()
        op = _COMPARE_OPS.get(self._current.type)
        if op is None:
            return left
        self._advance()
        right = self._parse_unary()
        return Compare(left.lineno, left.col_offset, left, op, right)

    def _parse_unary(self) -> Expr:
        token = self._match(TokenType.NOT, TokenType.SUB)
        if token is None:
            return self._parse_postfix()
        operand = self._parse_unary()
        if token.type is TokenType.SUB:
            # Fold negative numeric literals
            if isinstance(operand, Const) and type(operand.value) in (int, float):
                return Const(token.lineno, token.col_offset, -operand.value)
            return UnaryOp(token.lineno, token.col_offset, "-", operand)
        return UnaryOp(token.lineno, token.col_offset, "!", operand)

    def _parse_postfix(self) -> Expr:
        expr = self._parse_primary()
        while True:
            if self._match(TokenType.DOT):
                token = self._advance()
                if token.type is TokenType.NAME:
                    expr = Getattr(expr.lineno, expr.col_offset, expr, token.value)
                elif token.type is TokenType.INTEGER:
                    key = Const(token.lineno, token.col_offset, int(token.value))
                    expr = Getitem(expr.lineno, expr.col_offset, expr, key)
                elif token.type is TokenType.FLOAT and re.fullmatch(r"\d+\.\d+", token.value):
                    # ``a.0.1`` lexes its indexes as one float literal
                    for part in token.value.split("."):
                        key = Const(token.lineno, token.col_offset, int(part))
                        expr = Getitem(expr.lineno, expr.col_offset, expr, key)
                else:
                    self._fail("expected property name after '.'", token)
            elif self._match(TokenType.LBRACKET):
                key = self._parse_pipeline()
                self._expect(TokenType.RBRACKET, "']'")
                expr = Getitem(expr.lineno, expr.col_offset, expr, key)
            else:
                return expr

    def _parse_primary(self) -> Expr:
        token = self._current
        kind = token.type

        if kind is TokenType.INTEGER:
            self._advance()
            return Const(token.lineno, token.col_offset, int(token.value))
        if kind is TokenType.FLOAT:
            self._advance()
            return Const(token.lineno, token.col_offset, float(token.value))
        if kind is TokenType.STRING:
            self._advance()
            return Const(token.lineno, token.col_offset, token.value)
        if kind is TokenType.NAME:
            self._advance()
            if token.value in _KEYWORD_CONSTANTS:
                return Const(token.lineno, token.col_offset, _KEYWORD_CONSTANTS[token.value])
            if self._match(TokenType.LPAREN):
                args = self._parse_args(TokenType.RPAREN)
                return FuncCall(token.lineno, token.col_offset, token.value, args)
            return Name(token.lineno, token.col_offset, token.value)
        if kind is TokenType.LPAREN:
            self._advance()
            expr = self._parse_pipeline()
            self._expect(TokenType.RPAREN, "')'")
            return expr
        if kind is TokenType.LBRACKET:
            self._advance()
            items = self._parse_args(TokenType.RBRACKET)
            return List(token.lineno, token.col_offset, items)
        if kind is TokenType.LBRACE:
            self._advance()
            return self._parse_dict(token)

        self._fail("expected a value")

    def _parse_dict(self, start: Token) -> Dict:
        keys: list[str] = []
        values: list[Expr] = []
        while self._current.type is not TokenType.RBRACE:
            key = self._advance()
            if key.type not in (TokenType.NAME, TokenType.STRING, TokenType.INTEGER):
                self._fail("expected object key", key)
            self._expect(TokenType.COLON, "':' after object key")
            keys.append(key.value)
            values.append(self._parse_ternary())
            if not self._match(TokenType.COMMA):
                break
        self._expect(TokenType.RBRACE, "',' or '}'")
        return Dict(start.lineno, start.col_offset, tuple(keys), tuple(values))


@lru_cache(maxsize=1024)
def parse_expression(source: str) -> Expr:
    """Parse an expression string.

    Example:
        >>> parse_expression("user.name | upper")
        Filter(lineno=1, col_offset=12, value=Getattr(...), name='upper', args=())

    Raises:
        ParseError: If the expression is malformed.
    """
    return ExpressionParser(source).parse()


# ---------------------------------------------------------------------------
# v-for
# ---------------------------------------------------------------------------

_LOOP_RE = re.compile(
    r"^\s*(?:\((?P<group>[^()]*)\)|(?P<plain>[^()]*?))\s+(?:in|of)\s+(?P<iterable>.+?)\s*$",
    re.DOTALL,
)
_IDENTIFIER_RE = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")


@dataclass(frozen=True, slots=True)
class LoopSpec:
    """Parsed ``v-for`` directive.

    Attributes:
        item: Name bound to each element (or each mapping value)
        index: Optional name bound to the index (or mapping key)
        position: Optional third name, bound to the position when iterating a mapping
        iterable: Collection expression
    """

    item: str
    index: str | None
    position: str | None
    iterable: Expr


@lru_cache(maxsize=512)
def parse_loop(source: str) -> LoopSpec:
    """Parse a ``v-for`` value such as ``(item, index) in items``.

    Raises:
        TemplateSyntaxError: If the loop header is malformed.
        ParseError: If the collection expression is malformed.
    """
    match = _LOOP_RE.match(source)
    if match is None:
        raise TemplateSyntaxError(
            "v-for expects 'item in collection'",
            expression=source,
            code=ErrorCode.INVALID_LOOP,
        )
    binding = match.group("group")
    if binding is None:
        binding = match.group("plain")
    names = [name.strip() for name in binding.split(",")]
    if not 1 <= len(names) <= 3 or not all(_IDENTIFIER_RE.fullmatch(n) for n in names):
        raise TemplateSyntaxError(
            f"invalid v-for binding {binding.strip()!r}",
            expression=source,
            code=ErrorCode.INVALID_LOOP,
        )
    names.extend([None] * (3 - len(names)))
    return LoopSpec(
        item=names[0],
        index=names[1],
        position=names[2],
        iterable=parse_expression(match.group("iterable")),
    )
