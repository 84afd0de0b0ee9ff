"""Unit tests for FilterRegistry and argument coercion."""

from typing import Any

import pytest

from vuepy import (
    FilterArgumentCountError,
    FilterArgumentError,
    FilterRegistry,
    TemplateRuntimeError,
    UnknownFilterError,
)
from vuepy.environment import coerce_argument, default_registry
from vuepy.environment.exceptions import ErrorCode


def double(value: int) -> int:
    return value * 2


def repeat(value: str, times: int = 2) -> str:
    return value * times


def maybe(value: int | None) -> str:
    return "none" if value is None else f"int {value}"


def flag(value: bool) -> bool:
    return value


def total(*values: float) -> float:
    return sum(values)


def raw(value: Any) -> Any:
    return value


class TestRegistryMapping:
    """Dict-like behaviour and copy-on-write."""

    def test_set_and_get(self):
        registry = FilterRegistry()
        registry["double"] = double
        assert registry["double"] is double
        assert "double" in registry
        assert registry.get("missing") is None

    def test_missing_raises_key_error(self):
        with pytest.raises(KeyError):
            FilterRegistry()["nope"]

    def test_parent_fallback(self):
        parent = FilterRegistry({"double": double})
        child = FilterRegistry(parent=parent)
        assert child["double"] is double
        assert "double" in child.keys()

    def test_child_overrides_parent(self):
        parent = FilterRegistry({"f": double})
        child = FilterRegistry({"f": raw}, parent=parent)
        assert child["f"] is raw
        assert parent["f"] is double

    def test_copy_on_write(self):
        registry = FilterRegistry({"a": raw})
        before = registry._specs
        registry["b"] = raw
        assert "b" not in before
        assert registry._specs is not before

    def test_update_and_delete(self):
        registry = FilterRegistry()
        registry.update({"a": raw, "b": double})
        del registry["a"]
        assert list(registry) == ["b"]
        assert len(registry) == 1

    def test_non_callable_rejected(self):
        with pytest.raises(TypeError):
            FilterRegistry()["bad"] = 42

    def test_default_registry_has_builtins(self):
        for name in ("upper", "lower", "default", "len", "join", "truncate", "formatTime"):
            assert name in default_registry


class TestCall:
    """Invocation, arity and error reporting."""

    def test_piped_value_is_first_argument(self):
        registry = FilterRegistry({"repeat": repeat})
        assert registry.call("repeat", ["ab", 3]) == "ababab"

    def test_default_parameter(self):
        registry = FilterRegistry({"repeat": repeat})
        assert registry.call("repeat", ["ab"]) == "abab"

    def test_unknown_filter(self):
        registry = FilterRegistry({"double": double})
        with pytest.raises(UnknownFilterError) as exc_info:
            registry.call("doubel", [1])
        assert exc_info.value.message == "filter 'doubel' not found"
        assert exc_info.value.suggestion == "Did you mean 'double'?"
        assert exc_info.value.code == ErrorCode.UNKNOWN_FILTER

    def test_too_many_arguments(self):
        registry = FilterRegistry({"double": double})
        with pytest.raises(FilterArgumentCountError, match="expects 1 arguments, got 2"):
            registry.call("double", [1, 2])

    def test_too_few_arguments(self):
        registry = FilterRegistry({"repeat": repeat})
        with pytest.raises(FilterArgumentCountError, match="1 to 2"):
            registry.call("repeat", [])

    def test_variadic(self):
        registry = FilterRegistry({"total": total})
        assert registry.call("total", [1, "2", 3.5]) == 6.5

    def test_filter_exception_wrapped(self):
        def boom(value):
            raise ValueError("bad value")

        registry = FilterRegistry({"boom": boom})
        with pytest.raises(TemplateRuntimeError) as exc_info:
            registry.call("boom", [1])
        assert exc_info.value.code == ErrorCode.FILTER_ERROR
        assert "boom(): bad value" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_builtin_without_signature(self):
        registry = FilterRegistry({"abs": abs})
        assert registry.call("abs", [-3]) == 3


class TestCoercion:
    """Typed coercion of filter arguments."""

    def test_int_from_string(self):
        assert FilterRegistry({"double": double}).call("double", ["21"]) == 42

    def test_int_from_float_truncates(self):
        assert FilterRegistry({"double": double}).call("double", [2.9]) == 4

    def test_int_rejects_list(self):
        registry = FilterRegistry({"double": double})
        with pytest.raises(FilterArgumentError) as exc_info:
            registry.call("double", [[1, 2]])
        error = exc_info.value
        assert error.message == "double(): cannot convert argument 0 from list to int"
        assert (error.index, error.source_type, error.expected_type) == (0, "list", "int")

    def test_int_rejects_bool(self):
        with pytest.raises(FilterArgumentError):
            FilterRegistry({"double": double}).call("double", [True])

    def test_int_rejects_non_numeric_string(self):
        with pytest.raises(FilterArgumentError, match="from str to int"):
            FilterRegistry({"double": double}).call("double", ["abc"])

    def test_argument_index_counts_piped_value(self):
        registry = FilterRegistry({"repeat": repeat})
        with pytest.raises(FilterArgumentError) as exc_info:
            registry.call("repeat", ["x", "many"])
        assert exc_info.value.index == 1

    def test_str_from_number(self):
        assert FilterRegistry({"repeat": repeat}).call("repeat", [7, 2]) == "77"

    def test_optional(self):
        registry = FilterRegistry({"maybe": maybe})
        assert registry.call("maybe", [None]) == "none"
        assert registry.call("maybe", ["5"]) == "int 5"

    def test_optional_error_names_union(self):
        with pytest.raises(FilterArgumentError, match=r"to int \| None"):
            FilterRegistry({"maybe": maybe}).call("maybe", [[1]])

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("true", True), ("F", False), ("1", True), (False, False), (1, True), (0, False)],
    )
    def test_bool(self, value, expected):
        assert FilterRegistry({"flag": flag}).call("flag", [value]) is expected

    def test_bool_rejects_other_strings(self):
        with pytest.raises(FilterArgumentError):
            FilterRegistry({"flag": flag}).call("flag", ["yes"])

    @pytest.mark.parametrize("value", [2, -1, 1.0])
    def test_bool_rejects_other_numbers(self, value):
        with pytest.raises(FilterArgumentError):
            FilterRegistry({"flag": flag}).call("flag", [value])

    def test_any_passes_through(self):
        marker = object()
        assert FilterRegistry({"raw": raw}).call("raw", [marker]) is marker

    def test_coerce_argument_list(self):
        assert coerce_argument((1, 2), list, filter_name="f", index=0) == [1, 2]
        with pytest.raises(FilterArgumentError):
            coerce_argument("ab", list, filter_name="f", index=0)

    def test_coerce_argument_dict(self):
        assert coerce_argument({"a": 1}, dict, filter_name="f", index=0) == {"a": 1}


class TestBuiltinFilters:
    """Behaviour of the bundled filters through the registry."""

    @pytest.mark.parametrize(
        ("name", "args", "expected"),
        [
            ("upper", ["ab"], "AB"),
            ("upper", [None], None),
            ("lower", ["AB"], "ab"),
            ("title", ["hello wORLD"], "Hello World"),
            ("capitalize", ["hELLO"], "Hello"),
            ("trim", ["  x "], "x"),
            ("default", [None, "d"], "d"),
            ("default", ["", "d"], "d"),
            ("default", [0, "d"], 0),
            ("len", [[1, 2]], 2),
            ("len", [None], 0),
            ("join", [["a", 1], "-"], "a-1"),
            ("first", [[3, 4]], 3),
            ("last", ["xyz"], "z"),
            ("first", [[]], None),
            ("replace", ["a-b", "-", "+"], "a+b"),
            ("truncate", ["abcdefgh", 5], "ab..."),
            ("truncate", ["abc", 5], "abc"),
            ("int", ["12"], 12),
            ("float", ["1.5"], 1.5),
            ("string", [True], "true"),
            ("json", [{"a": [1]}], '{"a": [1]}'),
        ],
    )
    def test_builtin(self, name, args, expected):
        assert default_registry.call(name, args) == expected

    def test_escape_returns_markup(self):
        result = default_registry.call("escape", ["<b>"])
        assert result == "&lt;b&gt;"
        assert hasattr(result, "__html__")

    def test_safe(self):
        assert default_registry.call("safe", ["<b>"]).__html__() == "<b>"

    def test_format_time(self):
        assert default_registry.call("formatTime", ["2024-03-01T10:20:30Z", "%Y/%m/%d"]) == (
            "2024/03/01"
        )

    def test_format_time_unrecognised_value_unchanged(self):
        assert default_registry.call("formatTime", ["soon"]) == "soon"

    def test_len_of_number_fails(self):
        with pytest.raises(TemplateRuntimeError) as exc_info:
            default_registry.call("len", [5])
        assert exc_info.value.code == ErrorCode.FILTER_ERROR
