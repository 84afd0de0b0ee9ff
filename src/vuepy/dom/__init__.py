"""Document tree model and serializer."""

from vuepy.dom.nodes import Comment, Doctype, Element, Node, RawHTML, Text, clone_tree
from vuepy.dom.serialize import serialize

__all__ = [
    "Comment",
    "Doctype",
    "Element",
    "Node",
    "RawHTML",
    "Text",
    "clone_tree",
    "serialize",
]
