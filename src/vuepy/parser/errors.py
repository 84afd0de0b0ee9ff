"""Parser error handling for vuepy expressions.

Provides ParseError with the offending token and a caret pointer into the
expression source.
"""

from __future__ import annotations

from typing import Any

from vuepy._types import Token
from vuepy.environment.exceptions import ErrorCode, TemplateSyntaxError


class ParseError(TemplateSyntaxError):
    """Malformed expression syntax.

    Raised by ``parse_expression()`` before any evaluation takes place.
    The expression source doubles as the snippet source, so the caret
    points at the offending token inside the expression.

    Example:
        ```
        Syntax Error: unexpected token ')'
          Expression: user.name | upper)
           |
          1 | user.name | upper)
           |                   ^
        ```
    """

    code: ErrorCode | None = ErrorCode.UNEXPECTED_TOKEN

    def __init__(
        self,
        message: str,
        token: Token,
        source: str,
        **kwargs: Any,
    ):
        self.token = token
        kwargs.setdefault("expression", source)
        super().__init__(
            message,
            lineno=token.lineno,
            col_offset=token.col_offset,
            source=source,
            **kwargs,
        )

    @property
    def position(self) -> int:
        """0-based offset of the offending token within the source."""
        lines = self.source.splitlines(keepends=True) if self.source else []
        return sum(len(line) for line in lines[: self.token.lineno - 1]) + self.token.col_offset
