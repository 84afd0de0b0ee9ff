"""Document tree nodes.

The markup parser produces a tree of these nodes, and the directive
processor consumes one tree and produces a new one.

Ownership:
    Parsed trees are cached by the Environment and shared by every render
    of a template. They are treated as read-only: the renderer never edits
    an input node and always builds fresh output nodes. ``clone()`` gives
    callers a private, independently mutable deep copy.

"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class Node:
    """Base class for document nodes."""

    def clone(self) -> Node:
        """Return a deep copy of this node."""
        raise NotImplementedError


@dataclass(slots=True)
class Text(Node):
    """Character data, stored unescaped."""

    data: str

    def clone(self) -> Text:
        return Text(self.data)


@dataclass(slots=True)
class RawHTML(Node):
    """Trusted, already-escaped HTML emitted verbatim.

    Produced by interpolation and ``v-html``; never produced by the parser.
    """

    html: str

    def clone(self) -> RawHTML:
        return RawHTML(self.html)


@dataclass(slots=True)
class Comment(Node):
    """HTML comment: <!-- data -->"""

    data: str

    def clone(self) -> Comment:
        return Comment(self.data)


@dataclass(slots=True)
class Doctype(Node):
    """Markup declaration such as <!DOCTYPE html>."""

    data: str

    def clone(self) -> Doctype:
        return Doctype(self.data)


@dataclass(slots=True)
class Element(Node):
    """An element with ordered attributes and children.

    Attribute values are ``None`` for valueless attributes
    (``<input disabled>``). Attribute order is preserved.
    """

    tag: str
    attrs: list[tuple[str, str | None]] = field(default_factory=list)
    children: list[Node] = field(default_factory=list)
    self_closing: bool = False

    def clone(self) -> Element:
        return Element(
            self.tag,
            list(self.attrs),
            [child.clone() for child in self.children],
            self.self_closing,
        )

    def has_attr(self, name: str) -> bool:
        return any(key == name for key, _ in self.attrs)

    def get_attr(self, name: str, default: str | None = None) -> str | None:
        """Return the value of attribute ``name``.

        Valueless attributes return ``""``.
        """
        for key, value in self.attrs:
            if key == name:
                return "" if value is None else value
        return default

    def set_attr(self, name: str, value: str | None) -> None:
        """Set ``name``, replacing it in place or appending it."""
        for i, (key, _) in enumerate(self.attrs):
            if key == name:
                self.attrs[i] = (name, value)
                return
        self.attrs.append((name, value))

    def remove_attr(self, name: str) -> None:
        self.attrs = [(key, value) for key, value in self.attrs if key != name]


def clone_tree(nodes: list[Node]) -> list[Node]:
    """Deep-copy a list of sibling nodes."""
    return [node.clone() for node in nodes]
