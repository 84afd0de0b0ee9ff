"""HTML escaping and trusted-markup helpers.

``html_escape`` is the single escaping primitive used by interpolation and
the serializer. ``Markup`` marks a string as already-safe HTML so that it is
emitted verbatim (layout ``content``, the ``escape`` filter, ``v-html``).

Complexity:
    ``html_escape()`` is O(n), single pass via ``str.translate()``.

"""

from __future__ import annotations

from typing import Any

_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&#34;",
        "'": "&#39;",
    }
)

# Attribute values are always serialized double-quoted.
_ATTR_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&#34;",
    }
)

# Static text from parsed templates keeps its quotes.
_TEXT_ESCAPE_TABLE = str.maketrans({"&": "&amp;", "<": "&lt;", ">": "&gt;"})


class Markup(str):
    """A string that is already safe to embed in HTML.

    Example:
        >>> html_escape(Markup("<b>bold</b>"))
        '<b>bold</b>'
        >>> html_escape("<b>bold</b>")
        '&lt;b&gt;bold&lt;/b&gt;'
    """

    __slots__ = ()

    def __html__(self) -> str:
        return str(self)

    def __repr__(self) -> str:
        return f"Markup({str.__repr__(self)})"


def html_escape(value: Any) -> str:
    """Escape a value for HTML text content.

    Objects exposing ``__html__`` (``Markup``) are returned unchanged.
    ``None`` becomes the empty string.
    """
    if value is None:
        return ""
    if hasattr(value, "__html__"):
        return value.__html__()
    return str(value).translate(_ESCAPE_TABLE)


def escape_attribute(value: str) -> str:
    """Escape a value for use inside a double-quoted attribute."""
    return value.translate(_ATTR_ESCAPE_TABLE)


def escape_text(value: str) -> str:
    """Escape parsed text content for re-serialization."""
    return value.translate(_TEXT_ESCAPE_TABLE)

