"""ANSI styling for ``TemplateError.format_compact()``.

Only the compact diagnostic is styled; ``str(exc)`` is always plain text.
Styling is on when stderr is a TTY, off when ``NO_COLOR`` is set, and
forced on by ``FORCE_COLOR``.
"""

from __future__ import annotations

import os
import re
import sys
from typing import Literal

Role = Literal["code", "location", "hint", "muted", "link"]

_RESET = "\033[0m"

# SGR sequences per diagnostic role
_ROLES: dict[str, str] = {
    "code": "\033[91m\033[1m",
    "location": "\033[36m",
    "hint": "\033[32m",
    "muted": "\033[2m",
    "link": "\033[94m",
}

_ANSI_RE = re.compile(r"\x1B\[[0-?]*[ -/]*[@-~]")


def _detect() -> bool:
    if os.environ.get("FORCE_COLOR"):
        return True
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(sys.stderr, "isatty", None)
    return bool(isatty and isatty())


_enabled = _detect()


def color_enabled() -> bool:
    return _enabled


def set_color_enabled(enabled: bool | None) -> None:
    """Force styling on or off; ``None`` detects from the environment again."""
    global _enabled
    _enabled = _detect() if enabled is None else enabled


def paint(role: Role, text: str) -> str:
    """Wrap ``text`` in the escape sequence for ``role`` when styling is on.

    >>> set_color_enabled(False)
    >>> paint("hint", "Hint:")
    'Hint:'
    """
    if not _enabled:
        return text
    return f"{_ROLES[role]}{text}{_RESET}"


def strip_colors(text: str) -> str:
    return _ANSI_RE.sub("", text)


def format_error_header(code: str | None, message: str) -> str:
    """``CODE: message``, or just the message for errors without a code."""
    if code:
        return f"{paint('code', code)}: {message}"
    return message
