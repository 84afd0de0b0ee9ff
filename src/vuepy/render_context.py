"""vuepy RenderContext: per-render state kept out of the user's data.

Each top-level render creates one RenderContext holding the scope stack,
the inclusion chain and the resource budgets. It is published through a
ContextVar so filters and helpers can find the current template without
any shared mutable state.

Thread Safety:
    Each thread has its own ContextVar value. Concurrent renders on separate
    threads each see their own RenderContext; nothing in it is shared.

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from vuepy.environment.exceptions import ErrorCode, ResourceLimitError
from vuepy.template.scope import ScopeStack

if TYPE_CHECKING:
    from vuepy.environment.core import Environment


@dataclass
class RenderContext:
    """Per-render state isolated from user context.

    Attributes:
        environment: Template source provider and filter registry owner
        scope: Variable bindings for the current walk position
        chain: Template names from the outermost render to the current one
        include_depth: Current include nesting depth
        max_include_depth: Maximum allowed include depth
        loop_iterations: Loop iterations performed so far in this render
        max_loop_iterations: Optional budget for loop iterations
        rendered_once: Source nodes already rendered under ``v-once``
        slots: Slot content supplied to the component being rendered
    """

    environment: Environment | None = None
    scope: ScopeStack = field(default_factory=ScopeStack)

    # Inclusion chain for diagnostics, outermost first
    chain: list[str] = field(default_factory=list)

    # Circular includes fail here rather than with RecursionError
    include_depth: int = 0
    max_include_depth: int = 50

    loop_iterations: int = 0
    max_loop_iterations: int | None = None

    rendered_once: set[int] = field(default_factory=set)

    # name -> SlotContent, for the component currently being rendered
    slots: dict[str, Any] = field(default_factory=dict)

    @property
    def template_name(self) -> str | None:
        """Name of the template currently being rendered."""
        return self.chain[-1] if self.chain else None

    def check_include_depth(self, template_name: str) -> None:
        """Check if the include depth limit is exceeded.

        Raises:
            ResourceLimitError: If depth >= max_include_depth
        """
        if self.include_depth >= self.max_include_depth:
            raise ResourceLimitError(
                f"maximum include depth exceeded ({self.max_include_depth}) "
                f"when including '{template_name}'",
                suggestion="Check for circular includes: A → B → A",
                code=ErrorCode.INCLUDE_DEPTH,
            )

    def count_iteration(self) -> None:
        """Count one loop iteration against the render's budget.

        Raises:
            ResourceLimitError: If max_loop_iterations is exceeded
        """
        self.loop_iterations += 1
        limit = self.max_loop_iterations
        if limit is not None and self.loop_iterations > limit:
            raise ResourceLimitError(
                f"maximum loop iterations exceeded ({limit})",
                suggestion="Paginate the collection or raise max_loop_iterations",
                code=ErrorCode.LOOP_LIMIT,
            )

    @contextmanager
    def included(self, template_name: str, slots: dict[str, Any] | None = None) -> Iterator[None]:
        """Enter an included template for the duration of a ``with`` block.

        Extends the inclusion chain, increments the include depth and swaps
        in the slot content supplied by the include site.
        """
        self.check_include_depth(template_name)
        saved_slots = self.slots
        self.chain.append(template_name)
        self.include_depth += 1
        self.slots = slots or {}
        try:
            yield
        finally:
            self.slots = saved_slots
            self.include_depth -= 1
            self.chain.pop()


# Module-level ContextVar
_render_context: ContextVar[RenderContext | None] = ContextVar(
    "render_context",
    default=None,
)


def get_render_context() -> RenderContext | None:
    """Get the current render context (None outside a render)."""
    return _render_context.get()


def get_render_context_required() -> RenderContext:
    """Get the current render context, raise if not in a render.

    Raises:
        RuntimeError: If not in a render context
    """
    ctx = _render_context.get()
    if ctx is None:
        raise RuntimeError("Not in a render context")
    return ctx


@contextmanager
def render_context(
    environment: Environment | None = None,
    data: dict[str, Any] | None = None,
    template_name: str | None = None,
) -> Iterator[RenderContext]:
    """Context manager for render-scoped state.

    Creates a new RenderContext and sets it as the current context for
    the duration of the with block, restoring the previous one on exit.

    Example:
        with render_context(env, {"user": user}, "page.html") as ctx:
            nodes = DirectiveProcessor(ctx).render_nodes(tree)
    """
    ctx = RenderContext(
        environment=environment,
        scope=ScopeStack(data),
        chain=[template_name] if template_name else [],
    )
    if environment is not None:
        ctx.max_include_depth = environment.max_include_depth
        ctx.max_loop_iterations = environment.max_loop_iterations
    token: Token[RenderContext | None] = _render_context.set(ctx)
    try:
        yield ctx
    finally:
        _render_context.reset(token)
