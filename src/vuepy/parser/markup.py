"""Markup parser: HTML source to a ``vuepy.dom`` tree.

Built on the standard library's ``html.parser.HTMLParser``. The parser is
lenient in the way browsers are: void elements never take children,
unmatched end tags are ignored and elements left open at end of input are
closed implicitly. Character references are decoded, so text and
attribute values in the tree are plain strings.

Note:
    ``HTMLParser`` lowercases tag and attribute names, so bound props such
    as ``:userName`` arrive as ``username``.
"""

from __future__ import annotations

from html.parser import HTMLParser

from vuepy.dom.nodes import Comment, Doctype, Element, Node, Text
from vuepy.utils.constants import VOID_ELEMENTS


class TreeBuilder(HTMLParser):
    """Collect parser events into a list of root nodes."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.roots: list[Node] = []
        self._stack: list[Element] = []

    def _append(self, node: Node) -> None:
        if self._stack:
            self._stack[-1].children.append(node)
        else:
            self.roots.append(node)

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        element = Element(tag, list(attrs))
        self._append(element)
        if tag not in VOID_ELEMENTS:
            self._stack.append(element)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._append(Element(tag, list(attrs), self_closing=tag not in VOID_ELEMENTS))

    def handle_endtag(self, tag: str) -> None:
        for i in range(len(self._stack) - 1, -1, -1):
            if self._stack[i].tag == tag:
                del self._stack[i:]
                return
        # Stray end tag: nothing to close

    def handle_data(self, data: str) -> None:
        if not data:
            return
        parent = self._stack[-1].children if self._stack else self.roots
        if parent and isinstance(parent[-1], Text):
            parent[-1] = Text(parent[-1].data + data)
        else:
            parent.append(Text(data))

    def handle_comment(self, data: str) -> None:
        self._append(Comment(data))

    def handle_decl(self, decl: str) -> None:
        self._append(Doctype(decl))


def parse_markup(source: str) -> list[Node]:
    """Parse an HTML document or fragment into a list of root nodes.

    Example:
        >>> parse_markup('<ul><li v-for="x in xs">{{ x }}</li></ul>')
        [Element(tag='ul', attrs=[], children=[Element(tag='li', ...)], ...)]
    """
    builder = TreeBuilder()
    builder.feed(source)
    builder.close()
    return builder.roots
