"""Attribute binding, class/style merging and ``v-show``.

Binding Forms:
    ``:name="expr"`` / ``v-bind:name="expr"``  evaluated, stringified
    ``\\:name="text"`` / ``[name]="text"``       emitted verbatim as ``name``
    ``name="text {{ expr }}"``                  static, with interpolation

A bound value of ``False`` or ``None`` removes the attribute, including a
static attribute of the same name.

``class`` and ``style`` merge instead of replacing:

    <p class="card" :class="{active: isActive}">   →  class="card active"
    <p style="color: red" :style="{fontSize: size}">  →  style="color:red;font-size:12px;"

"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from vuepy.template.helpers import is_truthy, stringify
from vuepy.utils.constants import DIRECTIVE_ATTRS

if TYPE_CHECKING:
    from vuepy.dom.nodes import Element
    from vuepy.template.directives import DirectiveProcessor

_CAMEL_RE = re.compile(r"(?<!^)([A-Z])")

# Bindings that only carry meaning for client-side frameworks
_UNRENDERED_BINDINGS = frozenset({"key"})


def camel_to_kebab(name: str) -> str:
    """Convert ``fontSize`` to ``font-size``; hyphenated names pass through."""
    if "-" in name:
        return name
    return _CAMEL_RE.sub(r"-\1", name).lower()


def parse_style(style: str | None) -> dict[str, str]:
    """Parse ``"color: red; display: none"`` into an ordered dict."""
    result: dict[str, str] = {}
    if not style:
        return result
    for part in style.split(";"):
        prop, sep, value = part.partition(":")
        if not sep:
            continue
        prop = prop.strip()
        if prop:
            result[prop] = value.strip()
    return result


def format_style(declarations: Mapping[str, str]) -> str:
    return "".join(f"{prop}:{value};" for prop, value in declarations.items())


def merge_styles(base: str | None, override: str | None) -> str:
    """Merge two style strings; declarations in ``override`` win.

    Declaration order follows ``base``, with new properties appended.
    """
    merged = parse_style(base)
    merged.update(parse_style(override))
    return format_style(merged)


def class_string(value: Any) -> str:
    """Flatten a ``:class`` value.

    Strings are used as-is, lists are flattened recursively, and mappings
    contribute each key whose value is truthy.
    """
    if value is None or value is False:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, Mapping):
        return " ".join(str(key) for key, enabled in value.items() if is_truthy(enabled))
    if isinstance(value, (list, tuple)):
        return " ".join(part for part in (class_string(item) for item in value) if part)
    return stringify(value)


def style_string(value: Any) -> str:
    """Flatten a ``:style`` value.

    Mappings become declarations with camelCase keys converted to
    kebab-case; ``None``, ``False`` and empty values are skipped.
    """
    if value is None or value is False:
        return ""
    if isinstance(value, Mapping):
        declarations = {
            camel_to_kebab(str(prop)): stringify(val)
            for prop, val in value.items()
            if val is not None and val is not False and stringify(val) != ""
        }
        return format_style(declarations)
    if isinstance(value, (list, tuple)):
        merged = ""
        for item in value:
            merged = merge_styles(merged, style_string(item))
        return merged
    return stringify(value)


def _set(attrs: list[tuple[str, str | None]], name: str, value: str | None) -> None:
    for i, (key, _) in enumerate(attrs):
        if key == name:
            attrs[i] = (name, value)
            return
    attrs.append((name, value))


def _get(attrs: list[tuple[str, str | None]], name: str) -> str | None:
    for key, value in attrs:
        if key == name:
            return value
    return None


def render_attributes(
    processor: DirectiveProcessor, element: Element
) -> list[tuple[str, str | None]]:
    """Compute the output attributes of ``element``.

    Directive attributes are dropped, bound attributes are evaluated and
    merged, and ``v-show`` is applied last.
    """
    attrs: list[tuple[str, str | None]] = []
    bound: dict[str, Any] = {}

    for name, value in element.attrs:
        if name in DIRECTIVE_ATTRS:
            continue
        if name.startswith("\\:"):
            attrs.append((name[1:], value))
            continue
        if len(name) > 2 and name.startswith("[") and name.endswith("]"):
            attrs.append((name[1:-1], value))
            continue

        if name.startswith(":"):
            target = name[1:]
        elif name.startswith("v-bind:"):
            target = name[7:]
        else:
            if value is not None and "{{" in value:
                value = processor.interpolate(value, html=False)
            attrs.append((name, value))
            continue

        if target and target not in _UNRENDERED_BINDINGS:
            bound[target] = processor.evaluate(value or "", f'{name}="{value or ""}"')

    for name, value in bound.items():
        if name == "class":
            merged = " ".join(p for p in (_get(attrs, "class"), class_string(value)) if p)
            if merged:
                _set(attrs, "class", merged)
        elif name == "style":
            extra = style_string(value)
            if extra:
                _set(attrs, "style", merge_styles(_get(attrs, "style"), extra))
        elif value is None or value is False:
            attrs = [(key, val) for key, val in attrs if key != name]
        else:
            _set(attrs, name, stringify(value))

    show = element.get_attr("v-show")
    if show is not None and not is_truthy(processor.evaluate(show, f'v-show="{show}"')):
        _set(attrs, "style", merge_styles(_get(attrs, "style"), "display:none"))

    return attrs
