"""Unit tests for the expression lexer and parser."""

import pytest

from vuepy import ParseError, TemplateSyntaxError, parse_expression, parse_loop
from vuepy._types import TokenType
from vuepy.environment.exceptions import ErrorCode
from vuepy.nodes import (
    BoolOp,
    Compare,
    CondExpr,
    Const,
    Dict,
    Filter,
    FuncCall,
    Getattr,
    Getitem,
    List,
    Name,
    UnaryOp,
)
from vuepy.parser import tokenize


class TestLexer:
    """Token stream shape."""

    def test_ends_with_eof(self):
        tokens = tokenize("a")
        assert tokens[-1].type == TokenType.EOF

    def test_empty_source(self):
        tokens = tokenize("")
        assert [t.type for t in tokens] == [TokenType.EOF]

    def test_whitespace_is_skipped(self):
        types = [t.type for t in tokenize("  a   |  upper ")]
        assert types == [TokenType.NAME, TokenType.PIPE, TokenType.NAME, TokenType.EOF]

    def test_numbers(self):
        tokens = tokenize("42 3.5 1e3")
        assert [t.type for t in tokens[:-1]] == [
            TokenType.INTEGER,
            TokenType.FLOAT,
            TokenType.FLOAT,
        ]

    def test_string_escapes(self):
        (token, _eof) = tokenize(r"'it\'s\n'")
        assert token.type == TokenType.STRING
        assert token.value == "it's\n"

    def test_double_quoted_string(self):
        assert tokenize('"a b"')[0].value == "a b"

    def test_strict_equality_maps_to_eq(self):
        assert tokenize("a === b")[1].type == TokenType.EQ
        assert tokenize("a !== b")[1].type == TokenType.NE

    def test_column_offsets(self):
        tokens = tokenize("ab | c")
        assert [t.col_offset for t in tokens[:-1]] == [0, 3, 5]

    def test_unterminated_string(self):
        with pytest.raises(ParseError, match="unterminated string literal"):
            tokenize("'oops")

    def test_unexpected_character(self):
        with pytest.raises(ParseError, match="unexpected character"):
            tokenize("a # b")


class TestLiterals:
    """Constants and container literals."""

    @pytest.mark.parametrize(
        ("source", "value"),
        [
            ("1", 1),
            ("2.5", 2.5),
            ("'x'", "x"),
            ("true", True),
            ("false", False),
            ("null", None),
            ("nil", None),
            ("undefined", None),
            ("-3", -3),
        ],
    )
    def test_constants(self, source, value):
        expr = parse_expression(source)
        assert isinstance(expr, Const)
        assert expr.value == value

    def test_list(self):
        expr = parse_expression("[1, 'a', x]")
        assert isinstance(expr, List)
        assert len(expr.items) == 3
        assert isinstance(expr.items[2], Name)

    def test_empty_list(self):
        expr = parse_expression("[]")
        assert isinstance(expr, List)
        assert expr.items == ()

    def test_object_literal(self):
        expr = parse_expression("{active: isActive, 'text-danger': hasError}")
        assert isinstance(expr, Dict)
        assert expr.keys == ("active", "text-danger")

    def test_trailing_comma(self):
        assert len(parse_expression("[1, 2,]").items) == 2


class TestAccess:
    """Property and index access."""

    def test_dotted_path(self):
        expr = parse_expression("user.address.city")
        assert isinstance(expr, Getattr)
        assert expr.attr == "city"
        assert isinstance(expr.obj, Getattr)

    def test_numeric_segment(self):
        expr = parse_expression("items.0")
        assert isinstance(expr, Getitem)
        assert expr.key == Const(1, 6, 0)

    def test_nested_numeric_segments(self):
        expr = parse_expression("grid.0.1")
        assert isinstance(expr, Getitem)
        assert expr.key.value == 1
        assert isinstance(expr.obj, Getitem)
        assert expr.obj.key.value == 0

    def test_bracket_access(self):
        expr = parse_expression("row[key]")
        assert isinstance(expr, Getitem)
        assert isinstance(expr.key, Name)

    def test_function_call(self):
        expr = parse_expression("len(items)")
        assert isinstance(expr, FuncCall)
        assert expr.name == "len"
        assert len(expr.args) == 1


class TestOperators:
    """Precedence and associativity."""

    def test_pipe_binds_loosest(self):
        expr = parse_expression("a || b | upper")
        assert isinstance(expr, Filter)
        assert isinstance(expr.value, BoolOp)

    def test_chained_filters(self):
        expr = parse_expression("name | lower | truncate(3)")
        assert isinstance(expr, Filter)
        assert expr.name == "truncate"
        assert expr.value.name == "lower"
        assert expr.args == (Const(1, 24, 3),)

    def test_and_binds_tighter_than_or(self):
        expr = parse_expression("a || b && c")
        assert isinstance(expr, BoolOp)
        assert expr.op == "||"
        assert isinstance(expr.values[1], BoolOp)
        assert expr.values[1].op == "&&"

    def test_comparison(self):
        expr = parse_expression("count >= 10")
        assert isinstance(expr, Compare)
        assert expr.op == ">="

    def test_ternary(self):
        expr = parse_expression("ok ? 'yes' : 'no'")
        assert isinstance(expr, CondExpr)
        assert expr.if_false.value == "no"

    def test_negation(self):
        expr = parse_expression("!done")
        assert isinstance(expr, UnaryOp)
        assert expr.op == "!"

    def test_unary_minus_on_name(self):
        expr = parse_expression("-x")
        assert isinstance(expr, UnaryOp)
        assert expr.op == "-"

    def test_parentheses(self):
        expr = parse_expression("(a || b) && c")
        assert expr.op == "&&"
        assert expr.values[0].op == "||"


class TestParseErrors:
    """Malformed expressions fail before evaluation."""

    @pytest.mark.parametrize(
        "source",
        ["", "a |", "a b", "(a", "[1, 2", "{a 1}", "a ? b", "a.", "| upper", "f(1,,2)"],
    )
    def test_malformed(self, source):
        with pytest.raises(ParseError):
            parse_expression(source)

    def test_error_carries_expression(self):
        with pytest.raises(ParseError) as exc_info:
            parse_expression("user.name | upper)")
        assert exc_info.value.expression == "user.name | upper)"
        assert exc_info.value.code == ErrorCode.UNEXPECTED_TOKEN
        assert exc_info.value.position == 17

    def test_parse_error_is_syntax_error(self):
        with pytest.raises(TemplateSyntaxError):
            parse_expression("a |")

    def test_parsing_is_memoised(self):
        assert parse_expression("a.b | upper") is parse_expression("a.b | upper")


class TestParseLoop:
    """v-for header forms."""

    def test_item_only(self):
        spec = parse_loop("item in items")
        assert spec.item == "item"
        assert spec.index is None
        assert spec.position is None
        assert spec.iterable == Name(1, 0, "items")

    def test_item_and_index(self):
        spec = parse_loop("(item, i) in items")
        assert (spec.item, spec.index) == ("item", "i")

    def test_unparenthesised_pair(self):
        spec = parse_loop("item, i in items")
        assert (spec.item, spec.index) == ("item", "i")

    def test_three_names(self):
        spec = parse_loop("(value, key, n) in object")
        assert (spec.item, spec.index, spec.position) == ("value", "key", "n")

    def test_of_keyword(self):
        assert parse_loop("x of xs").item == "x"

    def test_iterable_expression_with_filter(self):
        spec = parse_loop("x in items | sort")
        assert isinstance(spec.iterable, Filter)

    @pytest.mark.parametrize(
        "source",
        ["items", "in items", "(a, b, c, d) in items", "1x in items", "(a b) in items"],
    )
    def test_malformed_header(self, source):
        with pytest.raises(TemplateSyntaxError) as exc_info:
            parse_loop(source)
        assert exc_info.value.code in (ErrorCode.INVALID_LOOP, ErrorCode.UNEXPECTED_TOKEN)

    def test_malformed_collection(self):
        with pytest.raises(ParseError):
            parse_loop("x in items |")
