"""Expression nodes for the vuepy AST."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from vuepy.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Expr(Node):
    """Base class for expressions."""


@dataclass(frozen=True, slots=True)
class Const(Expr):
    """Constant value: string, number, boolean, null."""

    value: str | int | float | bool | None


@dataclass(frozen=True, slots=True)
class Name(Expr):
    """Variable reference: {{ user }}"""

    name: str


@dataclass(frozen=True, slots=True)
class List(Expr):
    """List literal: [a, b, c]"""

    items: Sequence[Expr]


@dataclass(frozen=True, slots=True)
class Dict(Expr):
    """Object literal: {active: isActive, 'text-danger': hasError}"""

    keys: Sequence[str]
    values: Sequence[Expr]


@dataclass(frozen=True, slots=True)
class Getattr(Expr):
    """Property access: obj.attr"""

    obj: Expr
    attr: str


@dataclass(frozen=True, slots=True)
class Getitem(Expr):
    """Subscript access: obj[key], obj.0"""

    obj: Expr
    key: Expr


@dataclass(frozen=True, slots=True)
class FuncCall(Expr):
    """Direct filter call without a piped value: len(items)"""

    name: str
    args: Sequence[Expr] = ()


@dataclass(frozen=True, slots=True)
class Filter(Expr):
    """Filter application: expr | filter(args)

    The piped value is passed as the filter's leading argument.
    """

    value: Expr
    name: str
    args: Sequence[Expr] = ()


@dataclass(frozen=True, slots=True)
class UnaryOp(Expr):
    """Unary operation: !operand, -operand"""

    op: Literal["!", "-"]
    operand: Expr


@dataclass(frozen=True, slots=True)
class Compare(Expr):
    """Comparison: left op right"""

    left: Expr
    op: Literal["==", "!=", "<", "<=", ">", ">="]
    right: Expr


@dataclass(frozen=True, slots=True)
class BoolOp(Expr):
    """Short-circuit boolean operation: a && b, a || b"""

    op: Literal["&&", "||"]
    values: Sequence[Expr]


@dataclass(frozen=True, slots=True)
class CondExpr(Expr):
    """Conditional expression: test ? if_true : if_false"""

    test: Expr
    if_true: Expr
    if_false: Expr


AnyExpr = (
    Const
    | Name
    | List
    | Dict
    | Getattr
    | Getitem
    | FuncCall
    | Filter
    | UnaryOp
    | Compare
    | BoolOp
    | CondExpr
)
