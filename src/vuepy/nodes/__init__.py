"""vuepy expression AST.

Immutable, slotted dataclass nodes produced by ``vuepy.parser`` and
consumed by ``vuepy.template.evaluator``.
"""

from vuepy.nodes.base import Node
from vuepy.nodes.expressions import (
    AnyExpr,
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

__all__ = [
    "AnyExpr",
    "BoolOp",
    "Compare",
    "CondExpr",
    "Const",
    "Dict",
    "Expr",
    "Filter",
    "FuncCall",
    "Getattr",
    "Getitem",
    "List",
    "Name",
    "Node",
    "UnaryOp",
]
