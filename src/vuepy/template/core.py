"""vuepy Template: a parsed template ready for rendering.

The Template class wraps the parsed document tree and front matter of one
source and provides the ``render()`` API. Templates are immutable and
thread-safe for concurrent rendering.

Architecture:
    ```
    Template
    ├── _env_ref: WeakRef[Environment]  # Prevents circular refs
    ├── _tree: list[Node]               # Parsed body, never mutated
    ├── _front_matter: dict             # YAML metadata (layout, defaults)
    └── _name, _filename                # For error messages
    ```

Render Pipeline:
    data → RenderContext → DirectiveProcessor → new tree → serialize → layout

Memory Safety:
Uses ``weakref.ref(env)`` to break potential cycles:
``Template → (weak) → Environment → cache → Template``

Thread-Safety:
- Templates are immutable after construction
- Each render call builds its own RenderContext, scope stack and output tree
- Multiple threads can call ``render()`` concurrently

"""

from __future__ import annotations

import weakref
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from vuepy.dom.serialize import serialize
from vuepy.environment.exceptions import (
    ErrorCode,
    ScopeStackError,
    TemplateError,
    TemplateRuntimeError,
)
from vuepy.render_context import RenderContext, render_context
from vuepy.template.components import apply_layout, required_props
from vuepy.template.directives import DirectiveProcessor
from vuepy.utils.constants import LAYOUT_KEY

if TYPE_CHECKING:
    from vuepy.dom.nodes import Node
    from vuepy.environment.core import Environment
    from vuepy.template.components import SlotContent


def _enhance_error(error: Exception, render_ctx: RenderContext) -> TemplateRuntimeError:
    """Convert a generic exception into a TemplateRuntimeError with context."""
    error_str = str(error).strip() or f"{type(error).__name__} (no details available)"
    return TemplateRuntimeError(
        error_str,
        template_name=render_ctx.template_name,
        chain=render_ctx.chain,
        code=ErrorCode.RUNTIME_ERROR,
    )


def render(
    tree: Sequence[Node],
    data: Mapping[str, Any] | None = None,
    template_name: str | None = None,
    *,
    environment: Environment | None = None,
    slots: dict[str, SlotContent] | None = None,
) -> list[Node]:
    """Render a parsed document tree against a data context.

    The input tree is not modified; a new tree is returned. Without an
    ``environment`` the process-wide filter registry is used and include
    sites fail.

    Args:
        tree: Parsed nodes (see ``vuepy.parser.parse_markup``)
        data: Data context for the base scope frame
        template_name: Name reported in diagnostics
        environment: Source of included templates and filters
        slots: Slot content visible to ``<slot>`` elements at the top level

    Raises:
        TemplateError: The first error encountered, with template context

    Example:
        >>> from vuepy.parser import parse_markup
        >>> from vuepy.dom import serialize
        >>> tree = parse_markup('<p v-if="show">{{ name }}</p>')
        >>> serialize(render(tree, {"show": True, "name": "Ada"}, "inline"))
        '<p>Ada</p>'
    """
    with render_context(environment, dict(data) if data else None, template_name) as ctx:
        if slots:
            ctx.slots = slots
        try:
            return DirectiveProcessor(ctx).render_nodes(tree)
        except (TemplateError, ScopeStackError):
            raise
        except Exception as e:
            raise _enhance_error(e, ctx) from e


class Template:
    """Parsed template ready for rendering.

    Thread-Safety:
        - Template object is immutable after construction
        - The parsed tree is shared by every render and never modified
        - Multiple threads can render the same template simultaneously

    Memory Safety:
        Uses ``weakref.ref(env)`` to prevent circular reference leaks:
        ``Template → (weak) → Environment → _cache → Template``

    Attributes:
        name: Template identifier (for error messages and layout resolution)
        filename: Source file path (for error messages)
        front_matter: YAML metadata block, as parsed
        variables: Front-matter variables exposed to the template body
        layout: Layout named by the front matter, if any
        required_props: Props an include site must supply

    Example:
            >>> from vuepy import Environment
            >>> env = Environment()
            >>> t = env.from_string("<p>Hello, {{ name | upper }}!</p>")
            >>> t.render(name="World")
            '<p>Hello, WORLD!</p>'

            >>> t.render({"name": "World"})  # Dict context also works
            '<p>Hello, WORLD!</p>'

    """

    __slots__ = (
        "_env_ref",
        "_filename",
        "_front_matter",
        "_name",
        "_required",
        "_source",
        "_tree",
        "_variables",
    )

    def __init__(
        self,
        env: Environment,
        tree: list[Node],
        name: str | None,
        filename: str | None,
        front_matter: Mapping[str, Any] | None = None,
        source: str | None = None,
    ):
        # Use weakref to prevent circular reference: Template <-> Environment
        self._env_ref: weakref.ref[Environment] = weakref.ref(env)
        self._tree = tree
        self._name = name
        self._filename = filename
        self._source = source
        self._front_matter = dict(front_matter or {})
        self._variables = {k: v for k, v in self._front_matter.items() if k != LAYOUT_KEY}
        self._required = required_props(tree)

    @property
    def _env(self) -> Environment:
        """Get the Environment (dereferences weak reference)."""
        env = self._env_ref()
        if env is None:
            raise RuntimeError(
                f"Environment has been garbage collected (template: {self._name or 'unknown'})"
            )
        return env

    @property
    def name(self) -> str | None:
        """Template name."""
        return self._name

    @property
    def filename(self) -> str | None:
        """Source filename."""
        return self._filename

    @property
    def source(self) -> str | None:
        return self._source

    @property
    def tree(self) -> list[Node]:
        """Parsed body. Shared between renders: treat as read-only."""
        return self._tree

    @property
    def front_matter(self) -> dict[str, Any]:
        return dict(self._front_matter)

    @property
    def variables(self) -> dict[str, Any]:
        return self._variables

    @property
    def layout(self) -> str | None:
        value = self._front_matter.get(LAYOUT_KEY)
        if value is None or value is False or value == "":
            return None
        return str(value)

    @property
    def required_props(self) -> tuple[str, ...]:
        return self._required

    def _build_context(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> dict[str, Any]:
        ctx: dict[str, Any] = {}
        if args:
            if len(args) == 1 and isinstance(args[0], Mapping):
                ctx.update(args[0])
            else:
                raise TypeError(
                    f"render() takes at most 1 positional argument (a mapping), got {len(args)}"
                )
        ctx.update(kwargs)
        return ctx

    def render_tree(self, *args: Any, **kwargs: Any) -> list[Node]:
        """Render to a new document tree, without applying layouts.

        Front-matter variables act as defaults; the caller's data wins.
        """
        data = self._build_context(args, kwargs)
        return render(
            self._tree,
            {**self._variables, **data},
            self._name,
            environment=self._env,
        )

    def render_fragment(self, *args: Any, **kwargs: Any) -> str:
        """Render to HTML without applying layouts.

        Use this for partials and components rendered on their own.
        """
        return serialize(self.render_tree(*args, **kwargs))

    def render(self, *args: Any, **kwargs: Any) -> str:
        """Render template with given context, wrapped in its layout chain.

        Args:
            *args: Single mapping of context variables
            **kwargs: Context variables as keyword arguments

        Returns:
            Rendered HTML string

        Example:
            >>> t.render(title="Hello", items=[1, 2, 3])
            >>> t.render({"title": "Hello"})
        """
        data = self._build_context(args, kwargs)
        env = self._env
        body = serialize(
            render(self._tree, {**self._variables, **data}, self._name, environment=env)
        )
        return apply_layout(env, self, data, body)

    def render_body(
        self,
        data: Mapping[str, Any],
        *,
        slots: dict[str, SlotContent] | None = None,
    ) -> str:
        """Render as a layout: ``data`` already holds ``content``."""
        return serialize(
            render(
                self._tree,
                {**self._variables, **data},
                self._name,
                environment=self._env,
                slots=slots,
            )
        )

    def __repr__(self) -> str:
        return f"<Template {self._name or '(inline)'}>"
