"""Serialize document trees back to HTML."""

from __future__ import annotations

from collections.abc import Iterable

from vuepy.dom.nodes import Comment, Doctype, Element, Node, RawHTML, Text
from vuepy.utils.constants import RAW_TEXT_ELEMENTS, VOID_ELEMENTS
from vuepy.utils.html import escape_attribute, escape_text


def serialize(nodes: Iterable[Node]) -> str:
    """Render a node list to an HTML string.

    Example:
        >>> serialize([Element("p", [("class", "a")], [Text("1 < 2")])])
        '<p class="a">1 &lt; 2</p>'
    """
    buf: list[str] = []
    _write_nodes(buf.append, nodes, raw_text=False)
    return "".join(buf)


def _write_nodes(append, nodes: Iterable[Node], raw_text: bool) -> None:
    for node in nodes:
        if isinstance(node, Text):
            append(node.data if raw_text else escape_text(node.data))
        elif isinstance(node, RawHTML):
            append(node.html)
        elif isinstance(node, Element):
            _write_element(append, node)
        elif isinstance(node, Comment):
            append(f"<!--{node.data}-->")
        elif isinstance(node, Doctype):
            append(f"<!{node.data}>")
        else:
            raise TypeError(f"cannot serialize {type(node).__name__}")


def _write_element(append, element: Element) -> None:
    append(f"<{element.tag}")
    for name, value in element.attrs:
        if value is None:
            append(f" {name}")
        else:
            append(f' {name}="{escape_attribute(value)}"')

    if element.tag in VOID_ELEMENTS:
        append(">")
        return
    if element.self_closing and not element.children:
        append(" />")
        return

    append(">")
    _write_nodes(append, element.children, raw_text=element.tag in RAW_TEXT_ELEMENTS)
    append(f"</{element.tag}>")
