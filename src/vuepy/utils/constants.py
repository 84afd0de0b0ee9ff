"""Shared constants for vuepy.

HTML element classes used by the markup parser and serializer, plus the
directive attribute names recognised by the directive processor.
"""

from __future__ import annotations

# Elements that never have content or a closing tag
# Source: WHATWG HTML Living Standard, "void elements"
VOID_ELEMENTS: frozenset[str] = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Elements whose text content is emitted without escaping
RAW_TEXT_ELEMENTS: frozenset[str] = frozenset({"script", "style"})

# Directive attributes consumed during rendering (never serialized)
DIRECTIVE_ATTRS: frozenset[str] = frozenset(
    {
        "v-if",
        "v-else-if",
        "v-else",
        "v-for",
        "v-show",
        "v-html",
        "v-text",
        "v-pre",
        "v-once",
        "v-keep",
    }
)

# Tags that mark an include site
INCLUDE_TAGS: frozenset[str] = frozenset({"template", "vuego", "vuepy"})

# Tags that bind their attributes as variables when they include nothing
VARIABLE_TAGS: frozenset[str] = frozenset({"vuego", "vuepy"})

# Attributes on a component root that declare required props
REQUIRED_ATTRS: tuple[str, ...] = (":required", ":require")

# Variable the rendered page body is bound to when a layout wraps it
LAYOUT_CONTENT_VAR = "content"

# Front matter key naming the layout template
LAYOUT_KEY = "layout"
