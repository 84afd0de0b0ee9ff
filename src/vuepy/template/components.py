"""Component includes, slots and layouts.

Include Sites:
    <template include="card.html" title="Hi" :item="item"></template>
    <vuepy include="card.html" :item="item"></vuepy>
    <card :item="item"></card>        (after env.register_component("card", "card.html"))

The included template renders in an isolated scope that holds only the
props given at the include site, plus the target's front-matter variables
(which win). Props named by a root ``<template :required="a, b">`` must
be present or the include fails with ``RequiredPropError`` before the
target is rendered.

Slots:
    Children of an include site fill the target's ``<slot>`` elements.
    ``<template #name>`` or ``<template v-slot:name>`` fill named slots; the
    attribute value names a variable that receives the slot's bound props:

        <template include="list.html" :items="items">
          <template #row="props">{{ props.item.title }}</template>
        </template>

    Slot content renders in the scope of the template that supplied it.

Layouts:
    After the outermost render, the front-matter ``layout`` key (or the
    environment's default layout, when the loader has it) wraps the output.
    The layout sees the page data plus ``content``, the rendered body.
    Layouts chain until one declares no layout.

"""

from __future__ import annotations

import json
import logging
import posixpath
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from vuepy.dom.nodes import Element, Node, Text
from vuepy.environment.exceptions import (
    ErrorCode,
    RequiredPropError,
    ResourceLimitError,
    TemplateRuntimeError,
)
from vuepy.utils.constants import DIRECTIVE_ATTRS, LAYOUT_CONTENT_VAR, REQUIRED_ATTRS
from vuepy.utils.html import Markup

if TYPE_CHECKING:
    from vuepy.environment.core import Environment
    from vuepy.render_context import RenderContext
    from vuepy.template.core import Template
    from vuepy.template.directives import DirectiveProcessor

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SlotContent:
    """Content supplied for one slot, with the scope it was written in.

    Attributes:
        nodes: Source nodes to render in place of the ``<slot>``
        variable: Name bound to the slot props (``#row="props"``), if any
        frames: Scope frames of the supplying template
        chain: Inclusion chain of the supplying template
        slots: Slots visible to the supplying template
    """

    nodes: list[Node]
    variable: str | None = None
    frames: list[dict[str, Any]] = field(default_factory=list)
    chain: list[str] = field(default_factory=list)
    slots: dict[str, SlotContent] = field(default_factory=dict)


def decode_static(value: str | None) -> Any:
    """Value of a static prop attribute.

    Values that look like JSON objects or arrays are decoded when valid.
    """
    if value is None:
        return ""
    text = value.strip()
    if text.startswith(("{", "[")):
        try:
            return json.loads(text)
        except ValueError:
            return value
    return value


def required_props(nodes: list[Node]) -> tuple[str, ...]:
    """Prop names declared by ``:required`` on root ``<template>`` elements."""
    names: list[str] = []
    for node in nodes:
        if not isinstance(node, Element) or node.tag != "template":
            continue
        for attr, value in node.attrs:
            if attr in REQUIRED_ATTRS and value:
                names.extend(part.strip() for part in value.split(",") if part.strip())
    return tuple(dict.fromkeys(names))


def slot_target(element: Element) -> tuple[str, str | None] | None:
    """Return ``(slot name, scoped variable)`` for a slot-defining ``<template>``."""
    if element.tag != "template":
        return None
    for name, value in element.attrs:
        if name.startswith("#") and len(name) > 1:
            return name[1:], value or None
        if name.startswith("v-slot:"):
            return name[7:] or "default", value or None
        if name == "v-slot":
            return "default", value or None
    return None


def collect_slots(
    nodes: list[Node],
    frames: list[dict[str, Any]],
    chain: list[str],
    visible: dict[str, SlotContent] | None = None,
    *,
    include_default: bool = True,
) -> dict[str, SlotContent]:
    """Split include-site children into named slot content.

    Children outside a slot-defining ``<template>`` form the default slot
    unless they are all whitespace. ``frames``, ``chain`` and ``visible``
    describe the supplying template.
    """
    visible = visible or {}
    slots: dict[str, SlotContent] = {}
    loose: list[Node] = []
    for node in nodes:
        target = slot_target(node) if isinstance(node, Element) else None
        if target is None:
            loose.append(node)
            continue
        name, variable = target
        slots[name] = SlotContent(list(node.children), variable, frames, list(chain), visible)
    if include_default and any(not (isinstance(n, Text) and not n.data.strip()) for n in loose):
        slots.setdefault("default", SlotContent(loose, None, frames, list(chain), visible))
    return slots


def collect_props(processor: DirectiveProcessor, element: Element) -> dict[str, Any]:
    """Evaluate the props passed at an include site in the caller's scope."""
    props: dict[str, Any] = {}
    for name, value in element.attrs:
        if name == "include" or name in DIRECTIVE_ATTRS:
            continue
        if name.startswith(":"):
            props[name[1:]] = processor.evaluate(value or "", f'{name}="{value}"')
        elif name.startswith("v-bind:"):
            props[name[7:]] = processor.evaluate(value or "", f'{name}="{value}"')
        else:
            if value is not None and "{{" in value:
                value = processor.interpolate(value, html=False)
            props[name] = decode_static(value)
    return props


def _describe_site(element: Element, target: str) -> str:
    if element.has_attr("include"):
        return f'<{element.tag} include="{target}">'
    return f"<{element.tag}>"


def render_include(processor: DirectiveProcessor, element: Element, target: str) -> list[Node]:
    """Render the template named ``target`` in place of ``element``.

    Raises:
        TemplateNotFoundError: If the loader has no such template
        RequiredPropError: If a required prop is missing
        ResourceLimitError: If the include depth limit is exceeded
    """
    ctx = processor.ctx
    with processor.annotating(_describe_site(element, target)):
        environment = ctx.environment
        if environment is None:
            raise TemplateRuntimeError(
                f"cannot include '{target}' without an Environment",
                suggestion="Render through Environment.get_template() or pass environment=",
            )

        props = collect_props(processor, element)
        template = environment.get_template(target)
        name = template.name or target
        for prop in template.required_props:
            if prop not in props:
                raise RequiredPropError(prop, name)

        slots = collect_slots(element.children, ctx.scope.frames(), ctx.chain, ctx.slots)
        scope = {**props, **template.variables}
        with ctx.included(name, slots), ctx.scope.isolate([scope]):
            return processor.render_nodes(template.tree)


@contextmanager
def _supplier_scope(ctx: RenderContext, content: SlotContent) -> Iterator[None]:
    """Switch to the scope, chain and slots of the template that supplied a slot."""
    saved_chain, saved_slots = ctx.chain, ctx.slots
    ctx.chain = list(content.chain)
    ctx.slots = content.slots
    try:
        with ctx.scope.isolate(content.frames):
            yield
    finally:
        ctx.chain = saved_chain
        ctx.slots = saved_slots


def render_slot(processor: DirectiveProcessor, element: Element) -> list[Node]:
    """Render ``<slot>``: supplied content if any, else the fallback children."""
    ctx = processor.ctx
    name = element.get_attr("name") or "default"
    content = ctx.slots.get(name)
    if content is None:
        return processor.render_nodes(element.children)

    props: dict[str, Any] = {}
    for attr, value in element.attrs:
        if attr.startswith(":"):
            props[attr[1:]] = processor.evaluate(value or "", f'{attr}="{value}"')
        elif attr.startswith("v-bind:"):
            props[attr[7:]] = processor.evaluate(value or "", f'{attr}="{value}"')

    bindings = {content.variable: props} if content.variable else props
    with _supplier_scope(ctx, content), ctx.scope.frame(bindings):
        return processor.render_nodes(content.nodes)


# =============================================================================
# Layouts
# =============================================================================


def resolve_layout_name(environment: Environment, layout: str, current: str | None) -> str:
    """Resolve a layout reference against the template that names it.

    Tries the current template's directory, then the loader root, then
    ``layouts/``. The template suffix is appended when missing.
    """
    suffix = environment.template_suffix
    name = layout if not suffix or layout.endswith(suffix) else layout + suffix
    directory = posixpath.dirname(current) if current else ""

    candidates = [posixpath.normpath(posixpath.join(directory, name))] if directory else []
    candidates.append(name)
    if not name.startswith("layouts/"):
        candidates.append(f"layouts/{name}")
    candidates = list(dict.fromkeys(candidates))

    for candidate in candidates:
        if environment.has_template(candidate):
            return candidate
    return candidates[-1]


def apply_layout(
    environment: Environment,
    page: Template,
    data: Mapping[str, Any],
    body: str,
) -> str:
    """Wrap ``body`` in the layout chain declared by ``page``.

    Raises:
        ResourceLimitError: If the chain is longer than max_layout_depth
        TemplateNotFoundError: If a named layout does not exist
    """
    layout = page.layout
    if not layout:
        default = environment.default_layout
        if not default:
            return body
        resolved = resolve_layout_name(environment, default, page.name)
        if resolved == page.name or not environment.has_template(resolved):
            return body
        layout = default

    page_data = {**page.variables, **data}
    chain = [page.name] if page.name else []
    slots = collect_slots(page.tree, [page_data], chain, include_default=False)

    current = page
    depth = 0
    while layout:
        depth += 1
        if depth > environment.max_layout_depth:
            raise ResourceLimitError(
                f"layout chain depth exceeded maximum of {environment.max_layout_depth}",
                template_name=current.name,
                suggestion="Check for circular layouts: A → B → A",
                code=ErrorCode.LAYOUT_DEPTH,
            )
        name = resolve_layout_name(environment, layout, current.name)
        logger.debug("Applying layout %s to %s", name, current.name or "<string>")
        template = environment.get_template(name)
        context = {**page_data, LAYOUT_CONTENT_VAR: Markup(body)}
        body = template.render_body(context, slots=slots)
        current = template
        layout = template.layout
    return body
