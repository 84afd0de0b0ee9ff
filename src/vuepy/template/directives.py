"""Directive processor: walks a parsed document tree and produces a new one.

Processing Order (per element):
1. ``v-pre``: subtree copied verbatim
2. ``v-for``: one instance per iteration, each in its own scope frame
   (``v-if`` on the same element is checked per iteration)
3. ``v-if`` / ``v-else-if`` / ``v-else``: first truthy branch survives
4. ``v-once``: element rendered at most once per render call
5. include sites, ``<vuepy>`` declarations, ``<slot>`` and ``<template>``
   wrappers (kept in the output with ``v-keep``)
6. attribute bindings and ``v-show`` (see ``vuepy.template.attributes``)
7. ``v-html`` / ``v-text`` / children, with ``{{ }}`` interpolation in text

Input nodes are never modified. Every output node is freshly built, so the
same parsed tree can be rendered by many threads at once.

Error Context:
Every ``TemplateError`` raised while evaluating a directive is annotated
with the directive source, the current template name and the inclusion
chain. Inner frames annotate first and outer frames never overwrite.

"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from vuepy.dom.nodes import Comment, Element, Node, RawHTML, Text, clone_tree
from vuepy.environment.exceptions import (
    ErrorCode,
    ScopeStackError,
    TemplateError,
    TemplateRuntimeError,
)
from vuepy.nodes import Expr
from vuepy.parser.expressions import LoopSpec, parse_expression, parse_loop
from vuepy.template import components
from vuepy.template.attributes import render_attributes
from vuepy.template.evaluator import Evaluator
from vuepy.template.helpers import is_truthy, stringify, type_name
from vuepy.utils.constants import (
    DIRECTIVE_ATTRS,
    INCLUDE_TAGS,
    RAW_TEXT_ELEMENTS,
    REQUIRED_ATTRS,
    VARIABLE_TAGS,
)
from vuepy.utils.html import escape_text, html_escape

if TYPE_CHECKING:
    from vuepy.environment.registry import FilterRegistry
    from vuepy.render_context import RenderContext

_INTERPOLATION_RE = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)


def _is_blank(node: Node) -> bool:
    """Whitespace-only text and comments may sit between chained siblings."""
    if isinstance(node, Comment):
        return True
    return isinstance(node, Text) and not node.data.strip()


def _describe(name: str, value: str | None) -> str:
    return name if value is None else f'{name}="{value}"'


def _static_attrs(element: Element) -> list[tuple[str, str | None]]:
    """Plain attributes of a wrapper kept with ``v-keep``."""
    return [
        (name, value)
        for name, value in element.attrs
        if name not in DIRECTIVE_ATTRS
        and name not in REQUIRED_ATTRS
        and not name.startswith((":", "v-bind:", "v-slot", "#"))
    ]


class DirectiveProcessor:
    """Render a document tree against one RenderContext.

    A processor is created per render call and must not be shared
    between threads.

    Example:
        >>> with render_context(env, {"items": [1, 2]}, "page.html") as ctx:
        ...     nodes = DirectiveProcessor(ctx).render_nodes(tree)
    """

    __slots__ = ("ctx", "evaluator", "registry", "scope")

    def __init__(self, ctx: RenderContext, registry: FilterRegistry | None = None):
        if registry is None:
            if ctx.environment is not None:
                registry = ctx.environment.filters
            else:
                from vuepy.environment.registry import default_registry

                registry = default_registry
        self.ctx = ctx
        self.scope = ctx.scope
        self.registry = registry
        self.evaluator = Evaluator(ctx.scope, registry)

    # =========================================================================
    # Evaluation
    # =========================================================================

    @contextmanager
    def annotating(self, expression: str | None) -> Iterator[None]:
        """Attach ``expression`` and the current template to escaping errors."""
        try:
            yield
        except TemplateError as exc:
            exc.annotate(
                expression=expression,
                template_name=self.ctx.template_name,
                chain=self.ctx.chain,
            )
            raise

    def evaluate(self, source: str, directive: str | None = None) -> Any:
        """Parse and evaluate ``source`` in the current scope.

        Args:
            source: Expression text
            directive: Directive text to report on failure (defaults to source)

        Raises:
            TemplateError: Annotated with the directive and template context
        """
        label = directive or source
        with self.annotating(label):
            return self.evaluate_expr(parse_expression(source), label)

    def evaluate_expr(self, expr: Expr, label: str) -> Any:
        """Evaluate a parsed expression; ``label`` is reported on failure."""
        with self.annotating(label):
            try:
                return self.evaluator.evaluate(expr)
            except (TemplateError, ScopeStackError):
                raise
            except Exception as e:
                raise TemplateRuntimeError(
                    f"{type(e).__name__}: {e}",
                    code=ErrorCode.RUNTIME_ERROR,
                ) from e

    def interpolate(self, text: str, *, html: bool = True) -> str:
        """Replace each ``{{ expr }}`` in ``text`` with its value.

        With ``html=True`` the literal text and the values are HTML-escaped
        (``Markup`` values are kept as-is) and the result is markup. With
        ``html=False`` the result is plain text, used for attribute values
        that the serializer escapes later.
        """
        parts: list[str] = []
        pos = 0
        for match in _INTERPOLATION_RE.finditer(text):
            literal = text[pos : match.start()]
            parts.append(escape_text(literal) if html else literal)
            value = self.evaluate(match.group(1).strip(), match.group(0))
            if not html:
                parts.append(stringify(value))
            elif hasattr(value, "__html__"):
                parts.append(value.__html__())
            else:
                parts.append(html_escape(stringify(value)))
            pos = match.end()
        tail = text[pos:]
        parts.append(escape_text(tail) if html else tail)
        return "".join(parts)

    # =========================================================================
    # Tree walk
    # =========================================================================

    def render_nodes(self, nodes: Sequence[Node]) -> list[Node]:
        """Render a list of sibling nodes."""
        out: list[Node] = []
        i = 0
        count = len(nodes)
        while i < count:
            node = nodes[i]
            i += 1

            if not isinstance(node, Element):
                out.append(self._render_leaf(node))
                continue

            if node.has_attr("v-pre"):
                verbatim = node.clone()
                verbatim.remove_attr("v-pre")
                out.append(verbatim)
            elif node.has_attr("v-for"):
                rendered = self._render_loop(node)
                fallback, i = self._loop_fallback(nodes, i)
                if fallback is not None and not rendered:
                    rendered = self._render_element(fallback)
                out.extend(rendered)
            elif node.has_attr("v-if"):
                branches, i = self._collect_chain(node, nodes, i)
                out.extend(self._render_chain(branches))
            elif node.has_attr("v-else") or node.has_attr("v-else-if"):
                # Orphaned chain member
                continue
            else:
                out.extend(self._render_element(node))
        return out

    def _render_leaf(self, node: Node) -> Node:
        if isinstance(node, Text) and "{{" in node.data:
            return RawHTML(self.interpolate(node.data))
        return node.clone()

    # =========================================================================
    # Conditionals
    # =========================================================================

    def _collect_chain(
        self, first: Element, nodes: Sequence[Node], i: int
    ) -> tuple[list[Element], int]:
        """Gather ``first`` and the ``v-else-if``/``v-else`` siblings after it.

        Returns the branches and the index just past the last one consumed.
        """
        branches = [first]
        j = i
        while j < len(nodes):
            node = nodes[j]
            if _is_blank(node):
                j += 1
                continue
            if not isinstance(node, Element):
                break
            if node.has_attr("v-else-if"):
                branches.append(node)
                j += 1
                i = j
                continue
            if node.has_attr("v-else"):
                branches.append(node)
                i = j + 1
            break
        return branches, i

    def _render_chain(self, branches: list[Element]) -> list[Node]:
        for branch in branches:
            for attr in ("v-if", "v-else-if"):
                condition = branch.get_attr(attr)
                if condition is not None:
                    break
            else:
                return self._render_element(branch)
            if is_truthy(self.evaluate(condition, _describe(attr, condition))):
                return self._render_element(branch)
        return []

    # =========================================================================
    # Loops
    # =========================================================================

    def _render_loop(self, element: Element) -> list[Node]:
        source = element.get_attr("v-for") or ""
        directive = _describe("v-for", source)
        condition = element.get_attr("v-if")

        out: list[Node] = []
        with self.annotating(directive):
            spec = parse_loop(source)
            iterable = self.evaluate_expr(spec.iterable, directive)
            for bindings in self._iterate(spec, iterable):
                self.ctx.count_iteration()
                with self.scope.frame(bindings):
                    if condition is not None and not is_truthy(
                        self.evaluate(condition, _describe("v-if", condition))
                    ):
                        continue
                    out.extend(self._render_element(element))
        return out

    def _loop_fallback(self, nodes: Sequence[Node], i: int) -> tuple[Element | None, int]:
        """Find a ``v-else`` sibling directly after a loop."""
        j = i
        while j < len(nodes) and _is_blank(nodes[j]):
            j += 1
        if j < len(nodes):
            node = nodes[j]
            if isinstance(node, Element) and node.has_attr("v-else"):
                return node, j + 1
        return None, i

    def _iterate(self, spec: LoopSpec, value: Any) -> Iterator[dict[str, Any]]:
        """Yield the scope bindings for each iteration.

        Sequences bind ``(item, index)``, mappings ``(value, key, index)`` in
        insertion order, and integers ``n`` count ``1..n``. Strings and
        booleans are rejected rather than iterated.
        """
        if value is None:
            return
        items: Iterable[tuple[Any, Any, int]]
        if isinstance(value, Mapping):
            items = ((item, key, pos) for pos, (key, item) in enumerate(value.items()))
        elif isinstance(value, (list, tuple)):
            items = ((item, pos, pos) for pos, item in enumerate(value))
        elif isinstance(value, int) and not isinstance(value, bool):
            items = ((n, n - 1, n - 1) for n in range(1, value + 1))
        elif isinstance(value, Iterable) and not isinstance(value, str):
            items = ((item, pos, pos) for pos, item in enumerate(list(value)))
        else:
            raise TemplateRuntimeError(
                f"v-for cannot iterate over {type_name(value)}",
                values={"collection": value},
                suggestion="Pass a list, tuple, mapping or integer",
            )

        for item, index, position in items:
            bindings = {spec.item: item}
            if spec.index:
                bindings[spec.index] = index
            if spec.position:
                bindings[spec.position] = position
            yield bindings

    # =========================================================================
    # Elements
    # =========================================================================

    def _render_element(self, element: Element) -> list[Node]:
        """Render one element whose structural directives are already handled."""
        if element.has_attr("v-once"):
            key = id(element)
            if key in self.ctx.rendered_once:
                return []
            self.ctx.rendered_once.add(key)

        tag = element.tag
        if tag in INCLUDE_TAGS and element.has_attr("include"):
            return components.render_include(self, element, element.get_attr("include") or "")
        if tag in VARIABLE_TAGS:
            return self._render_declaration(element)
        environment = self.ctx.environment
        if environment is not None:
            target = environment.components.get(tag)
            if target is not None:
                return components.render_include(self, element, target)
        if tag == "slot":
            return components.render_slot(self, element)
        if tag == "template":
            return self._render_template(element)

        attrs = render_attributes(self, element)
        return [Element(tag, attrs, self._render_content(element), element.self_closing)]

    def _render_content(self, element: Element) -> list[Node]:
        raw = element.get_attr("v-html")
        if raw is not None:
            return [RawHTML(stringify(self.evaluate(raw, _describe("v-html", raw))))]
        text = element.get_attr("v-text")
        if text is not None:
            return [Text(stringify(self.evaluate(text, _describe("v-text", text))))]
        if element.tag in RAW_TEXT_ELEMENTS:
            return clone_tree(element.children)
        return self.render_nodes(element.children)

    def _render_template(self, element: Element) -> list[Node]:
        """Unwrap a ``<template>``, rendering only its children.

        Bound attributes set variables for the body. Static attributes only
        provide defaults for names that are not bound yet.
        """
        if components.slot_target(element) is not None:
            # Slot definitions are consumed by include sites and layouts
            return []

        bindings: dict[str, Any] = {}
        for name, value in element.attrs:
            if name in DIRECTIVE_ATTRS or name in REQUIRED_ATTRS:
                continue
            if name.startswith(":"):
                bindings[name[1:]] = self.evaluate(value or "", _describe(name, value))
            elif name.startswith("v-bind:"):
                bindings[name[7:]] = self.evaluate(value or "", _describe(name, value))
            elif name not in self.scope:
                bindings[name] = components.decode_static(value)

        with self.scope.frame(bindings):
            children = self._render_content(element)
        if element.has_attr("v-keep"):
            return [Element(element.tag, _static_attrs(element), children)]
        return children

    def _render_declaration(self, element: Element) -> list[Node]:
        """Bind the attributes of ``<vuepy>`` / ``<vuego>`` in the current frame.

        Bound values are evaluated, static ones JSON-decoded when they look
        like an object or array. The tag itself is dropped unless it carries
        ``v-keep``.
        """
        self.scope.fill(components.collect_props(self, element))
        if element.has_attr("v-keep"):
            return [Element(element.tag, _static_attrs(element), [], element.self_closing)]
        return []
