"""Where template source comes from.

The Environment asks its loader for ``(source, filename)`` by template
name. ``filename`` is used only in error messages and may be None for
templates that do not live on disk.

Names are ``/``-separated paths relative to the loader root, on every
platform. Includes and layouts refer to other templates by these names:

    templates/
        layouts/base.html     → "layouts/base.html"
        components/card.html  → "components/card.html"

Any object with a ``get_source(name)`` method can be a loader. Two methods
are optional: ``exists(name)`` answers layout and include probes without
building a not-found error, and ``list_templates()`` feeds
``Environment.list_templates`` and "did you mean" suggestions.

"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Mapping, Sequence
from difflib import get_close_matches
from pathlib import Path
from typing import Protocol, runtime_checkable

from vuepy.environment.exceptions import TemplateNotFoundError

logger = logging.getLogger(__name__)

_MAX_LISTED = 10


@runtime_checkable
class Loader(Protocol):
    """Anything that can provide template source by name."""

    def get_source(self, name: str) -> tuple[str, str | None]: ...


def template_exists(loader: Loader, name: str) -> bool:
    """Whether ``loader`` has ``name``, without building a not-found error.

    Uses the loader's ``exists()`` when it has one.
    """
    exists = getattr(loader, "exists", None)
    if exists is not None:
        return bool(exists(name))
    try:
        loader.get_source(name)
    except TemplateNotFoundError:
        return False
    return True


def _suggest(name: str, available: Sequence[str]) -> str | None:
    """Close match for a missing name, or a short list of what exists."""
    matches = get_close_matches(name, available, n=1, cutoff=0.6)
    if matches:
        return f"Did you mean '{matches[0]}'?"
    if not available:
        return None
    listed = ", ".join(available[:_MAX_LISTED])
    if len(available) > _MAX_LISTED:
        return f"Available: {listed} ... ({len(available)} total)"
    return f"Available: {listed}"


def _split_name(name: str) -> list[str] | None:
    """Path segments of a template name, or None if it leaves the root."""
    normalized = posixpath.normpath(name.replace("\\", "/").lstrip("/"))
    if normalized == ".." or normalized.startswith("../"):
        return None
    return [part for part in normalized.split("/") if part not in ("", ".")]


class FileSystemLoader:
    """Load templates from one or more directories, first match wins.

    Several roots give theme-style overrides:

        >>> loader = FileSystemLoader(["site/templates", "theme/templates"])
        >>> loader.get_source("layouts/base.html")  # site copy if present

    Names that climb out of a root (``../secret.html``), directly or through
    a symlink, are treated as missing.
    """

    __slots__ = ("_encoding", "_roots", "_suffixes")

    def __init__(
        self,
        paths: str | Path | Sequence[str | Path],
        encoding: str = "utf-8",
        suffixes: tuple[str, ...] = (".html", ".vue"),
    ):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self._roots = [Path(p) for p in paths]
        self._encoding = encoding
        self._suffixes = suffixes

    @property
    def roots(self) -> list[Path]:
        return list(self._roots)

    def _locate(self, root: Path, parts: list[str]) -> Path | None:
        path = root.joinpath(*parts)
        if not path.is_file():
            return None
        if not path.resolve().is_relative_to(root.resolve()):
            logger.debug("Refusing template outside %s: %s", root, path)
            return None
        return path

    def exists(self, name: str) -> bool:
        parts = _split_name(name)
        return bool(parts) and any(self._locate(root, parts) is not None for root in self._roots)

    def get_source(self, name: str) -> tuple[str, str]:
        parts = _split_name(name)
        if parts:
            for root in self._roots:
                path = self._locate(root, parts)
                if path is not None:
                    return path.read_text(self._encoding), str(path)

        searched = ", ".join(str(root) for root in self._roots)
        raise TemplateNotFoundError(
            f"Template '{name}' not found in: {searched}",
            suggestion=_suggest(name, self.list_templates()),
        )

    def list_templates(self) -> list[str]:
        """Template names under every root, filtered by suffix."""
        found: set[str] = set()
        for root in self._roots:
            if not root.is_dir():
                continue
            found.update(
                path.relative_to(root).as_posix()
                for path in root.rglob("*")
                if path.suffix in self._suffixes and path.is_file()
            )
        return sorted(found)


class DictLoader:
    """Serve templates from a mapping of name to source.

    Handy for tests and for small sites that keep templates in code:

        >>> env = Environment(loader=DictLoader({
        ...     "layouts/base.html": "<main>{{ content }}</main>",
        ...     "page.html": "<p>Hi</p>",
        ... }))
        >>> env.render("page.html")
        '<main><p>Hi</p></main>'

    The mapping is read, never copied, so later additions are visible once
    the Environment cache is cleared.
    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: Mapping[str, str]):
        self._mapping = mapping

    def exists(self, name: str) -> bool:
        return name in self._mapping

    def get_source(self, name: str) -> tuple[str, None]:
        try:
            return self._mapping[name], None
        except KeyError:
            raise TemplateNotFoundError(
                f"Template '{name}' not found",
                suggestion=_suggest(name, self.list_templates()),
            ) from None

    def list_templates(self) -> list[str]:
        return sorted(self._mapping)


class ChoiceLoader:
    """Ask each loader in turn; the first that has the name wins.

    >>> env = Environment(loader=ChoiceLoader([
    ...     DictLoader({"nav.html": "<nav>Custom</nav>"}),
    ...     FileSystemLoader("theme/templates"),
    ... ]))
    """

    __slots__ = ("_loaders",)

    def __init__(self, loaders: Sequence[Loader]):
        self._loaders = list(loaders)

    def exists(self, name: str) -> bool:
        return any(template_exists(loader, name) for loader in self._loaders)

    def get_source(self, name: str) -> tuple[str, str | None]:
        for loader in self._loaders:
            try:
                return loader.get_source(name)
            except TemplateNotFoundError:
                continue
        raise TemplateNotFoundError(
            f"Template '{name}' not found in any of {len(self._loaders)} loaders",
            suggestion=_suggest(name, self.list_templates()),
        )

    def list_templates(self) -> list[str]:
        names: set[str] = set()
        for loader in self._loaders:
            lister = getattr(loader, "list_templates", None)
            if lister is not None:
                names.update(lister())
        return sorted(names)
