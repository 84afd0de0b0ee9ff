"""Scope stack for variable resolution during rendering.

An ordered list of frames (plain dicts). Lookup searches from the
innermost frame outwards and the first match wins, so inner bindings
shadow outer ones. The base frame holds the caller's data context and
is never popped.

Usage:
    Frames pushed for a loop iteration or a component boundary are managed
    with ``frame()`` so they are popped on every exit path:

        >>> scope = ScopeStack({"user": "ada"})
        >>> with scope.frame({"item": 1}):
        ...     scope.lookup("item")
        1
        >>> scope.resolve("item")
        (None, False)

Thread-Safety:
    None. A ScopeStack belongs to exactly one render call.

"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from vuepy.environment.exceptions import ScopeStackError


class ScopeStack:
    """Hierarchical variable bindings with shadowing."""

    __slots__ = ("_frames",)

    def __init__(self, data: Mapping[str, Any] | None = None):
        self._frames: list[dict[str, Any]] = [dict(data) if data else {}]

    def __len__(self) -> int:
        return len(self._frames)

    @property
    def depth(self) -> int:
        """Number of frames, including the base frame."""
        return len(self._frames)

    def push(self, frame: Mapping[str, Any] | None = None) -> None:
        """Push a new frame (empty, or a copy of ``frame``)."""
        self._frames.append(dict(frame) if frame else {})

    def pop(self) -> dict[str, Any]:
        """Discard and return the top frame.

        Raises:
            ScopeStackError: If only the base frame is left.
        """
        if len(self._frames) <= 1:
            raise ScopeStackError("cannot pop the base scope frame")
        return self._frames.pop()

    def set(self, name: str, value: Any) -> None:
        """Bind ``name`` in the top frame."""
        self._frames[-1][name] = value

    def fill(self, mapping: Mapping[str, Any]) -> None:
        """Bind every entry of ``mapping`` in the top frame."""
        self._frames[-1].update(mapping)

    def resolve(self, name: str) -> tuple[Any, bool]:
        """Look ``name`` up from the innermost frame outwards.

        Returns:
            ``(value, True)`` for the first frame binding ``name``,
            ``(None, False)`` when no frame binds it.
        """
        for frame in reversed(self._frames):
            if name in frame:
                return frame[name], True
        return None, False

    def lookup(self, name: str, default: Any = None) -> Any:
        value, found = self.resolve(name)
        return value if found else default

    def __contains__(self, name: object) -> bool:
        return any(name in frame for frame in self._frames)

    def env_snapshot(self) -> dict[str, Any]:
        """Flatten all frames into one dict, innermost binding winning."""
        merged: dict[str, Any] = {}
        for frame in self._frames:
            merged.update(frame)
        return merged

    env_map = env_snapshot

    def frames(self) -> list[dict[str, Any]]:
        """Return a shallow copy of the frame list (outermost first)."""
        return list(self._frames)

    @contextmanager
    def frame(self, mapping: Mapping[str, Any] | None = None) -> Iterator[dict[str, Any]]:
        """Push a frame for the duration of a ``with`` block."""
        self.push(mapping)
        try:
            yield self._frames[-1]
        finally:
            self.pop()

    @contextmanager
    def isolate(self, frames: list[dict[str, Any]]) -> Iterator[None]:
        """Temporarily replace every frame with ``frames``.

        Used for component isolation (a fresh base of props) and for
        rendering slot content in the scope of the template that supplied it.
        """
        if not frames:
            frames = [{}]
        saved = self._frames
        self._frames = list(frames)
        try:
            yield
        finally:
            self._frames = saved

    def __repr__(self) -> str:
        return f"<ScopeStack depth={len(self._frames)}>"
