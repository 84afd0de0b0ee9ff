"""vuepy Environment: configuration, template cache and registries.

The Environment is the central object of an application. It owns the
loader, the filter registry, the component table and an LRU cache of
parsed templates.

Example:
    >>> from vuepy import DictLoader, Environment
    >>> env = Environment(loader=DictLoader({"hello.html": "<p>Hi {{ name }}</p>"}))
    >>> env.render("hello.html", name="Ada")
    '<p>Hi Ada</p>'

Thread-Safety:
- The template cache is guarded by a lock; a template parsed twice by
  racing threads yields equal results and one of them is kept
- Filter and component registration is copy-on-write
- Register filters and components before rendering starts

"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Callable, Mapping
from typing import Any

from vuepy.environment.exceptions import TemplateNotFoundError
from vuepy.environment.loaders import Loader, template_exists
from vuepy.environment.registry import FilterRegistry, default_registry
from vuepy.parser.frontmatter import split_front_matter
from vuepy.parser.markup import parse_markup
from vuepy.template.core import Template

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 400


class Environment:
    """Central configuration for loading and rendering templates.

    Attributes:
        loader: Template source provider (None for string-only use)
        filters: Filter registry; falls back to the process-wide registry
        components: Registered component tags (tag → template name)
        default_layout: Layout applied when a page names none (if it exists)
        template_suffix: Suffix appended to layout and include names that lack it
        max_include_depth: Maximum include nesting depth
        max_layout_depth: Maximum layout chain length
        max_loop_iterations: Optional per-render loop iteration budget

    Example:
        >>> env = Environment(loader=FileSystemLoader("templates/"))
        >>> env.register_component("card", "components/card.html")
        >>> @env.filter()
        ... def money(value: float) -> str:
        ...     return f"{value:.2f}"
        >>> env.get_template("index.html").render(products=products)
    """

    def __init__(
        self,
        loader: Loader | None = None,
        *,
        filters: Mapping[str, Callable[..., Any]] | None = None,
        default_layout: str | None = "layouts/base",
        template_suffix: str = ".html",
        max_include_depth: int = 50,
        max_layout_depth: int = 100,
        max_loop_iterations: int | None = None,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ):
        self.loader = loader
        self.filters = FilterRegistry(filters, parent=default_registry)
        self.default_layout = default_layout
        self.template_suffix = template_suffix
        self.max_include_depth = max_include_depth
        self.max_layout_depth = max_layout_depth
        self.max_loop_iterations = max_loop_iterations
        self._components: dict[str, str] = {}
        self._cache: OrderedDict[str, Template] = OrderedDict()
        self._cache_size = cache_size
        self._cache_lock = threading.Lock()
        self._missing: set[str] = set()
        self._hits = 0
        self._misses = 0

    # =========================================================================
    # Registration
    # =========================================================================

    def add_filter(self, name: str, func: Callable[..., Any]) -> None:
        """Register ``func`` as filter ``name`` for this environment."""
        self.filters[name] = func

    def filter(self, name: str | None = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator to register a filter function.

        Example:
            >>> @env.filter()
            ... def double(value: int) -> int:
            ...     return value * 2
        """

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.add_filter(name or func.__name__, func)
            return func

        return decorator

    @property
    def components(self) -> Mapping[str, str]:
        return self._components

    def register_component(self, tag: str, template_name: str) -> None:
        """Render every ``<tag>`` element as an include of ``template_name``.

        Tag names are matched case-insensitively, as HTML parsing lowercases them.
        """
        new = self._components.copy()
        new[tag.lower()] = template_name
        self._components = new

    # =========================================================================
    # Loading
    # =========================================================================

    def get_template(self, name: str) -> Template:
        """Load a template by name, using the cache.

        A name without the template suffix is retried with it appended.

        Raises:
            TemplateNotFoundError: If the loader has no such template
            TemplateSyntaxError: If the front matter is malformed
        """
        with self._cache_lock:
            cached = self._cache.get(name)
            if cached is not None:
                self._cache.move_to_end(name)
                self._hits += 1
                return cached
            self._misses += 1

        logger.debug("Template cache miss: %s", name)
        template = self._load(name)

        with self._cache_lock:
            self._cache[name] = template
            self._cache.move_to_end(name)
            while len(self._cache) > self._cache_size:
                evicted, _ = self._cache.popitem(last=False)
                logger.debug("Evicted template from cache: %s", evicted)
        return template

    def _load(self, name: str) -> Template:
        if self.loader is None:
            raise TemplateNotFoundError(
                f"Template '{name}' not found: no loader configured",
                suggestion="Pass loader=FileSystemLoader(...) or use from_string()",
            )
        try:
            source, filename = self.loader.get_source(name)
        except TemplateNotFoundError:
            suffix = self.template_suffix
            if not suffix or name.endswith(suffix):
                raise
            try:
                source, filename = self.loader.get_source(name + suffix)
            except TemplateNotFoundError:
                pass
            else:
                return self._parse(source, name + suffix, filename)
            raise
        return self._parse(source, name, filename)

    def _parse(self, source: str, name: str | None, filename: str | None) -> Template:
        front_matter, body = split_front_matter(source, name)
        tree = parse_markup(body)
        return Template(self, tree, name, filename, front_matter, source)

    def from_string(self, source: str, name: str | None = None) -> Template:
        """Parse a template from a string. Not cached.

        Example:
            >>> env.from_string("<b>{{ x }}</b>").render(x=1)
            '<b>1</b>'
        """
        return self._parse(source, name, None)

    def has_template(self, name: str) -> bool:
        """Whether ``name`` can be loaded (exact name, no suffix retry).

        Misses are remembered until ``clear_cache()``.
        """
        with self._cache_lock:
            if name in self._cache:
                return True
            if name in self._missing:
                return False
        if self.loader is None:
            return False
        if template_exists(self.loader, name):
            return True
        with self._cache_lock:
            self._missing.add(name)
        logger.debug("Template not found, remembered: %s", name)
        return False

    def list_templates(self) -> list[str]:
        if self.loader is None or not hasattr(self.loader, "list_templates"):
            return []
        return self.loader.list_templates()

    def render(self, name: str, *args: Any, **kwargs: Any) -> str:
        """Load ``name`` and render it with its layout chain."""
        return self.get_template(name).render(*args, **kwargs)

    # =========================================================================
    # Cache management
    # =========================================================================

    def clear_cache(self) -> None:
        """Drop every cached template."""
        with self._cache_lock:
            self._cache.clear()
            self._missing.clear()
            self._hits = 0
            self._misses = 0

    def cache_info(self) -> dict[str, int]:
        """Cache statistics: size, max_size, hits and misses."""
        with self._cache_lock:
            return {
                "size": len(self._cache),
                "max_size": self._cache_size,
                "hits": self._hits,
                "misses": self._misses,
            }

    def __repr__(self) -> str:
        return f"<Environment loader={type(self.loader).__name__ if self.loader else None}>"
