"""Built-in filters.

Every filter takes the piped value first. Annotated parameters are coerced
by the registry before the call (see ``vuepy.environment.registry``);
``Any`` parameters receive the raw value.

String filters return non-string input unchanged, so ``{{ missing | upper }}``
renders empty rather than failing.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from datetime import date, datetime, timezone
from typing import Any

from vuepy.template.helpers import stringify
from vuepy.utils.html import Markup, html_escape

DEFAULT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _filter_upper(value: Any) -> Any:
    if isinstance(value, str):
        return value.upper()
    return value


def _filter_lower(value: Any) -> Any:
    if isinstance(value, str):
        return value.lower()
    return value


def _filter_title(value: Any) -> Any:
    """Capitalize each whitespace-separated word."""
    if isinstance(value, str):
        return " ".join(word[:1].upper() + word[1:].lower() for word in value.split())
    return value


def _filter_capitalize(value: Any) -> Any:
    if isinstance(value, str):
        return value[:1].upper() + value[1:].lower()
    return value


def _filter_trim(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip()
    return value


def _filter_default(value: Any, fallback: Any = "") -> Any:
    """Return ``fallback`` when value is None or the empty string."""
    if value is None or value == "":
        return fallback
    return value


def _filter_len(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, (str, list, tuple, Mapping)):
        return len(value)
    raise TypeError(f"object of type {type(value).__name__} has no length")


def _filter_escape(value: Any) -> Markup:
    """HTML-escape ``value`` once; the result is not escaped again on output."""
    return Markup(html_escape(stringify(value)))


def _filter_safe(value: Any) -> Markup:
    """Mark ``value`` as trusted HTML."""
    return Markup(stringify(value))


def _filter_int(value: int) -> int:
    return value


def _filter_float(value: float) -> float:
    return value


def _filter_string(value: Any) -> str:
    return stringify(value)


def _filter_json(value: Any) -> str:
    return json.dumps(value, default=str, ensure_ascii=False)


def _filter_join(value: list, separator: str = "") -> str:
    return separator.join(stringify(item) for item in value)


def _filter_first(value: Any) -> Any:
    if isinstance(value, (str, list, tuple)) and value:
        return value[0]
    return None


def _filter_last(value: Any) -> Any:
    if isinstance(value, (str, list, tuple)) and value:
        return value[-1]
    return None


def _filter_replace(value: str, old: str, new: str) -> str:
    return value.replace(old, new)


def _filter_truncate(value: str, length: int = 255, end: str = "...") -> str:
    if len(value) <= length:
        return value
    return value[: max(length - len(end), 0)] + end


def _parse_time(value: Any) -> datetime | date | None:
    if isinstance(value, (datetime, date)):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def _filter_format_time(value: Any, layout: str | None = None) -> Any:
    """Format a datetime, ISO-8601 string or Unix timestamp with ``strftime``.

    Values that are not recognisable times are returned unchanged.
    """
    parsed = _parse_time(value)
    if parsed is None:
        return value
    return parsed.strftime(layout or DEFAULT_TIME_FORMAT)


DEFAULT_FILTERS: dict[str, Callable[..., Any]] = {
    "capitalize": _filter_capitalize,
    "default": _filter_default,
    "escape": _filter_escape,
    "first": _filter_first,
    "float": _filter_float,
    "formatTime": _filter_format_time,
    "format_time": _filter_format_time,
    "int": _filter_int,
    "join": _filter_join,
    "json": _filter_json,
    "last": _filter_last,
    "len": _filter_len,
    "lower": _filter_lower,
    "replace": _filter_replace,
    "safe": _filter_safe,
    "string": _filter_string,
    "title": _filter_title,
    "trim": _filter_trim,
    "truncate": _filter_truncate,
    "upper": _filter_upper,
}
