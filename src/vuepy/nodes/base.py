"""Base node class for the vuepy expression AST."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all expression nodes.

    Nodes track their position inside the expression source for error
    reporting. Nodes are immutable so parsed expressions can be cached and
    shared between concurrent renders.

    """

    lineno: int
    col_offset: int
