"""Filter registry and typed argument coercion.

Filters are plain callables. The piped value is passed as the first
positional argument, followed by the explicit arguments from the template:

    {{ price | currency("EUR") }}   →   currency(price, "EUR")

Argument Coercion:
Parameter annotations drive coercion of template values before the call.
Unannotated and ``Any`` parameters receive values unchanged.

    ==============  ==================================================
    Annotation      Accepts
    ==============  ==================================================
    ``int``         int; float (truncated); str parsed with ``int()``
    ``float``       int, float; str parsed with ``float()``
    ``str``         str; int, float and bool are stringified
    ``bool``        bool; ints 0 and 1; "1", "t", "true", "0", "f",
                    "false" (any case)
    ``list``        list, tuple
    ``dict``        any mapping
    ``X | None``    None, or anything ``X`` accepts
    other classes   instances of that class
    ==============  ==================================================

A value that cannot be converted raises ``FilterArgumentError`` naming the
filter, the argument index (the piped value is argument 0), the source
type and the expected type. Nothing is silently replaced by a zero value.

Thread-Safety:
All registry mutations are copy-on-write: readers always see a complete
dict. Register filters before rendering starts.

"""

from __future__ import annotations

import inspect
import types
import typing
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from vuepy.environment.exceptions import (
    ErrorCode,
    FilterArgumentCountError,
    FilterArgumentError,
    TemplateError,
    TemplateRuntimeError,
    UnknownFilterError,
)
from vuepy.template.helpers import stringify, type_name

_NoneType = type(None)

_TRUE_STRINGS = frozenset({"1", "t", "true"})
_FALSE_STRINGS = frozenset({"0", "f", "false"})


class _CoercionFailed(Exception):
    pass


@dataclass(frozen=True, slots=True)
class FilterSpec:
    """A registered filter plus its introspected signature.

    ``signature`` is ``None`` for callables that cannot be introspected
    (some builtins); those are called without arity checks or coercion.
    """

    name: str
    func: Callable[..., Any]
    signature: inspect.Signature | None
    positional: tuple[inspect.Parameter, ...]
    var_positional: inspect.Parameter | None
    hints: Mapping[str, Any]

    @classmethod
    def from_callable(cls, name: str, func: Callable[..., Any]) -> FilterSpec:
        if not callable(func):
            raise TypeError(f"filter '{name}' must be callable, got {type(func).__name__}")
        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError):
            return cls(name, func, None, (), None, {})

        positional = tuple(
            p
            for p in signature.parameters.values()
            if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
        )
        var_positional = next(
            (p for p in signature.parameters.values() if p.kind is p.VAR_POSITIONAL),
            None,
        )
        return cls(name, func, signature, positional, var_positional, _resolve_hints(func))

    def describe_arity(self) -> str:
        required = sum(1 for p in self.positional if p.default is p.empty)
        if self.var_positional is not None:
            return f"at least {required}"
        if required == len(self.positional):
            return str(required)
        return f"{required} to {len(self.positional)}"

    def call(self, args: Sequence[Any]) -> Any:
        """Check arity, coerce ``args`` and invoke the filter."""
        if self.signature is not None:
            try:
                self.signature.bind(*args)
            except TypeError:
                raise FilterArgumentCountError(
                    self.name,
                    f"expects {self.describe_arity()} arguments, got {len(args)}",
                ) from None
            args = [self._coerce(index, value) for index, value in enumerate(args)]

        try:
            return self.func(*args)
        except TemplateError:
            raise
        except Exception as e:
            raise TemplateRuntimeError(
                f"{self.name}(): {e}",
                code=ErrorCode.FILTER_ERROR,
            ) from e

    def _coerce(self, index: int, value: Any) -> Any:
        if index < len(self.positional):
            param = self.positional[index]
        elif self.var_positional is not None:
            param = self.var_positional
        else:
            return value
        hint = self.hints.get(param.name, Any)
        return coerce_argument(value, hint, filter_name=self.name, index=index)


def _resolve_hints(func: Callable[..., Any]) -> dict[str, Any]:
    """Evaluated parameter annotations; unresolvable ones are dropped."""
    try:
        hints = typing.get_type_hints(func)
    except Exception:
        target = func if inspect.isfunction(func) or inspect.ismethod(func) else type(func).__call__
        raw = getattr(target, "__annotations__", {})
        hints = {k: v for k, v in raw.items() if not isinstance(v, str)}
    hints.pop("return", None)
    return hints


def coerce_argument(value: Any, hint: Any, *, filter_name: str, index: int) -> Any:
    """Convert ``value`` to the type described by ``hint``.

    Raises:
        FilterArgumentError: If no conversion applies.
    """
    if hint is Any or hint is object or hint is inspect.Parameter.empty:
        return value

    origin = typing.get_origin(hint)
    if origin is typing.Union or origin is types.UnionType:
        members = typing.get_args(hint)
        if value is None and _NoneType in members:
            return None
        candidates = [m for m in members if m is not _NoneType]
        # Prefer a member the value already is over converting it
        for member in candidates:
            if _is_instance(value, member):
                return value
        for member in candidates:
            try:
                return _coerce(value, member)
            except _CoercionFailed:
                continue
        raise FilterArgumentError(filter_name, index, type_name(value), _hint_name(hint))

    try:
        return _coerce(value, hint)
    except _CoercionFailed:
        raise FilterArgumentError(filter_name, index, type_name(value), _hint_name(hint)) from None


def _is_instance(value: Any, hint: Any) -> bool:
    target = typing.get_origin(hint) or hint
    if target is Any:
        return True
    if not isinstance(target, type):
        return False
    if target is int and isinstance(value, bool):
        return False
    return isinstance(value, target)


def _coerce(value: Any, hint: Any) -> Any:
    target = typing.get_origin(hint) or hint
    if target is Any or not isinstance(target, type):
        return value

    if target is bool:
        if isinstance(value, bool):
            return value
        if type(value) is int and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        raise _CoercionFailed

    if target is int:
        if isinstance(value, bool):
            raise _CoercionFailed
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                raise _CoercionFailed from None
        raise _CoercionFailed

    if target is float:
        if isinstance(value, bool):
            raise _CoercionFailed
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                raise _CoercionFailed from None
        raise _CoercionFailed

    if target is str:
        if isinstance(value, str):
            return value
        if isinstance(value, (bool, int, float)):
            return stringify(value)
        raise _CoercionFailed

    if target in (list, tuple, Sequence):
        if isinstance(value, (list, tuple)):
            if target is list:
                return list(value)
            if target is tuple:
                return tuple(value)
            return value
        raise _CoercionFailed

    if target in (dict, Mapping):
        if isinstance(value, Mapping):
            return value
        raise _CoercionFailed

    if isinstance(value, target):
        return value
    raise _CoercionFailed


def _hint_name(hint: Any) -> str:
    origin = typing.get_origin(hint)
    if origin is typing.Union or origin is types.UnionType:
        return " | ".join(_hint_name(m) for m in typing.get_args(hint))
    if hint is _NoneType:
        return "None"
    target = origin or hint
    if isinstance(target, type):
        return target.__name__
    return str(hint).replace("typing.", "")


class FilterRegistry:
    """Dict-like registry of filters.

    Supports:
        - registry['name'] = func
        - registry.update({'name': func})
        - func = registry['name']
        - 'name' in registry

    A registry may have a ``parent`` it falls back to for names it does not
    define itself. Each Environment owns a registry whose parent is the
    process-wide ``default_registry``.

    All mutations use copy-on-write for thread-safety.
    """

    __slots__ = ("_parent", "_specs")

    def __init__(
        self,
        filters: Mapping[str, Callable[..., Any]] | None = None,
        parent: FilterRegistry | None = None,
    ):
        self._parent = parent
        self._specs: dict[str, FilterSpec] = {
            name: FilterSpec.from_callable(name, func) for name, func in (filters or {}).items()
        }

    def spec(self, name: str) -> FilterSpec | None:
        spec = self._specs.get(name)
        if spec is None and self._parent is not None:
            return self._parent.spec(name)
        return spec

    def __getitem__(self, name: str) -> Callable[..., Any]:
        spec = self.spec(name)
        if spec is None:
            raise KeyError(name)
        return spec.func

    def __setitem__(self, name: str, func: Callable[..., Any]) -> None:
        new = self._specs.copy()
        new[name] = FilterSpec.from_callable(name, func)
        self._specs = new

    def __delitem__(self, name: str) -> None:
        new = self._specs.copy()
        del new[name]
        self._specs = new

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.spec(name) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.keys())

    def get(
        self, name: str, default: Callable[..., Any] | None = None
    ) -> Callable[..., Any] | None:
        spec = self.spec(name)
        return spec.func if spec is not None else default

    def update(self, mapping: Mapping[str, Callable[..., Any]]) -> None:
        """Batch update filters."""
        new = self._specs.copy()
        for name, func in mapping.items():
            new[name] = FilterSpec.from_callable(name, func)
        self._specs = new

    def copy(self) -> dict[str, Callable[..., Any]]:
        """Return a plain dict of every visible filter."""
        return {name: self[name] for name in self.keys()}

    def keys(self) -> list[str]:
        names = dict.fromkeys(self._parent.keys()) if self._parent is not None else {}
        names.update(dict.fromkeys(self._specs))
        return sorted(names)

    def call(self, name: str, args: Sequence[Any]) -> Any:
        """Invoke filter ``name`` with ``args`` (piped value first).

        Raises:
            UnknownFilterError: If no filter named ``name`` is registered.
            FilterArgumentCountError: If ``args`` does not fit the signature.
            FilterArgumentError: If an argument cannot be coerced.
            TemplateRuntimeError: If the filter itself raises.
        """
        spec = self.spec(name)
        if spec is None:
            raise UnknownFilterError(name, available=self.keys())
        return spec.call(args)

    def __repr__(self) -> str:
        return f"<FilterRegistry {len(self._specs)} own filters>"


def _build_default_registry() -> FilterRegistry:
    from vuepy.environment.filters import DEFAULT_FILTERS

    return FilterRegistry(DEFAULT_FILTERS)


# Process-wide registry: built-ins plus anything added via register_filter()
default_registry = _build_default_registry()


def register_filter(name: str, func: Callable[..., Any]) -> None:
    """Register ``func`` as filter ``name`` for every Environment.

    Call during start-up, before renders begin.
    """
    default_registry[name] = func
