"""Pure value helpers shared by the evaluator, registry and renderer.

None of these functions touch render state; they are safe for concurrent use.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from vuepy.utils.html import Markup


def is_truthy(value: Any) -> bool:
    """Coerce a template value to a boolean.

    ``None``, ``False``, numeric zero, ``""`` and empty sequences are falsey.
    Everything else is truthy, including ``"0"``, ``"false"`` and every
    mapping (empty or not).

    Example:
        >>> [is_truthy(v) for v in (0, "", None, False, [], "0", [0], {})]
        [False, False, False, False, False, True, True, True]
    """
    if value is None or value is False:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return True


def stringify(value: Any) -> str:
    """Convert a value to its template text form.

    ``None`` renders as ``""``, booleans as ``true``/``false``, integral
    floats without a trailing ``.0``, and lists/mappings as JSON.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e16:
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, tuple, Mapping)):
        return json.dumps(value, default=str, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def type_name(value: Any) -> str:
    """Short type name of a value for diagnostics."""
    if value is None:
        return "None"
    if isinstance(value, Markup):
        return "str"
    return type(value).__name__


def get_property(obj: Any, key: Any) -> Any:
    """Traverse one step of a property path.

    Missing keys, out-of-range indexes and traversal through ``None`` or a
    non-indexable value all resolve to ``None``.

    Resolution order:
    - Mappings: subscript only, so keys like ``items`` resolve to user data
    - Sequences: integer (or integer string) index; negative indexes count
      from the end; ``length`` gives the size (strings too)
    - Other objects: public attribute, never names starting with ``_``
    """
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        if key in obj:
            return obj[key]
        if not isinstance(key, str):
            return obj.get(str(key))
        return None
    if isinstance(obj, (list, tuple)):
        if key == "length":
            return len(obj)
        index = _as_index(key)
        if index is None or not -len(obj) <= index < len(obj):
            return None
        return obj[index]
    if isinstance(obj, str):
        if key == "length":
            return len(obj)
        return None
    if isinstance(key, str) and key and not key.startswith("_"):
        return getattr(obj, key, None)
    return None


def _as_index(key: Any) -> int | None:
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key
    if isinstance(key, float) and key.is_integer():
        return int(key)
    if isinstance(key, str):
        try:
            return int(key)
        except ValueError:
            return None
    return None
