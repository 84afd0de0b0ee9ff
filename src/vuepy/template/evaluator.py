"""Expression evaluation against a scope stack.

Walks the AST produced by ``vuepy.parser.parse_expression``. Evaluation
never mutates the AST or the scope.

Undefined Values:
Unbound variables, missing keys, out-of-range indexes and traversal
through ``None`` or a non-indexable value all evaluate to ``None``.
Optional data is common in templates, so these are not errors.

Errors:
Unknown filters, argument count mismatches, failed argument coercion and
incomparable operands raise ``TemplateRuntimeError`` subclasses. They carry
no template context yet; the directive processor annotates them.

"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from vuepy.environment.exceptions import TemplateRuntimeError
from vuepy.nodes import (
    BoolOp,
    Compare,
    CondExpr,
    Const,
    Dict,
    Expr,
    Filter,
    FuncCall,
    Getattr,
    Getitem,
    List,
    Name,
    UnaryOp,
)
from vuepy.template.helpers import get_property, is_truthy, type_name

if TYPE_CHECKING:
    from vuepy.environment.registry import FilterRegistry
    from vuepy.template.scope import ScopeStack


def _compare(op: str, left: Any, right: Any) -> bool:
    if op == "==":
        return _loose_equal(left, right)
    if op == "!=":
        return not _loose_equal(left, right)
    try:
        if op == "<":
            return left < right
        if op == "<=":
            return left <= right
        if op == ">":
            return left > right
        return left >= right
    except TypeError:
        raise TemplateRuntimeError(
            f"comparison '{op}' between {type_name(left)} and {type_name(right)} is not supported",
            values={"left": left, "right": right},
        ) from None


def _loose_equal(left: Any, right: Any) -> bool:
    # true == 1 is false in templates, unlike Python
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return bool(left == right)


class Evaluator:
    """Evaluate expressions with one scope and filter registry.

    Example:
        >>> from vuepy.environment.registry import default_registry
        >>> scope = ScopeStack({"user": {"name": "ada"}})
        >>> Evaluator(scope, default_registry).evaluate(parse_expression("user.name | upper"))
        'ADA'
    """

    __slots__ = ("_dispatch", "registry", "scope")

    def __init__(self, scope: ScopeStack, registry: FilterRegistry):
        self.scope = scope
        self.registry = registry
        self._dispatch = {
            Const: self._eval_const,
            Name: self._eval_name,
            Getattr: self._eval_getattr,
            Getitem: self._eval_getitem,
            Filter: self._eval_filter,
            FuncCall: self._eval_funccall,
            List: self._eval_list,
            Dict: self._eval_dict,
            UnaryOp: self._eval_unaryop,
            Compare: self._eval_compare,
            BoolOp: self._eval_boolop,
            CondExpr: self._eval_condexpr,
        }

    def evaluate(self, expr: Expr) -> Any:
        handler = self._dispatch.get(type(expr))
        if handler is None:
            raise TypeError(f"cannot evaluate {type(expr).__name__}")
        return handler(expr)

    def _eval_const(self, expr: Const) -> Any:
        return expr.value

    def _eval_name(self, expr: Name) -> Any:
        value, _found = self.scope.resolve(expr.name)
        return value

    def _eval_getattr(self, expr: Getattr) -> Any:
        return get_property(self.evaluate(expr.obj), expr.attr)

    def _eval_getitem(self, expr: Getitem) -> Any:
        obj = self.evaluate(expr.obj)
        key = self.evaluate(expr.key)
        if isinstance(key, (list, Mapping)):
            return None
        return get_property(obj, key)

    def _eval_filter(self, expr: Filter) -> Any:
        value = self.evaluate(expr.value)
        args = [value, *(self.evaluate(arg) for arg in expr.args)]
        return self.registry.call(expr.name, args)

    def _eval_funccall(self, expr: FuncCall) -> Any:
        return self.registry.call(expr.name, [self.evaluate(arg) for arg in expr.args])

    def _eval_list(self, expr: List) -> list[Any]:
        return [self.evaluate(item) for item in expr.items]

    def _eval_dict(self, expr: Dict) -> dict[str, Any]:
        return {key: self.evaluate(value) for key, value in zip(expr.keys, expr.values, strict=True)}

    def _eval_unaryop(self, expr: UnaryOp) -> Any:
        operand = self.evaluate(expr.operand)
        if expr.op == "!":
            return not is_truthy(operand)
        if isinstance(operand, bool) or not isinstance(operand, (int, float)):
            raise TemplateRuntimeError(
                f"unary '-' expects a number, got {type_name(operand)}",
                values={"operand": operand},
            )
        return -operand

    def _eval_compare(self, expr: Compare) -> bool:
        return _compare(expr.op, self.evaluate(expr.left), self.evaluate(expr.right))

    def _eval_boolop(self, expr: BoolOp) -> Any:
        # JavaScript semantics: return the deciding operand, not a bool
        value: Any = None
        for operand in expr.values:
            value = self.evaluate(operand)
            if expr.op == "&&" and not is_truthy(value):
                return value
            if expr.op == "||" and is_truthy(value):
                return value
        return value

    def _eval_condexpr(self, expr: CondExpr) -> Any:
        if is_truthy(self.evaluate(expr.test)):
            return self.evaluate(expr.if_true)
        return self.evaluate(expr.if_false)


def evaluate(expr: Expr, scope: ScopeStack, registry: FilterRegistry | None = None) -> Any:
    """Evaluate ``expr`` against ``scope``.

    Uses the process-wide default registry when ``registry`` is omitted.
    """
    if registry is None:
        from vuepy.environment.registry import default_registry

        registry = default_registry
    return Evaluator(scope, registry).evaluate(expr)
