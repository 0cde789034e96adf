"""
Expression evaluator for template expressions.

Evaluates expression AST nodes against a parameter namespace (dict of
parameter values). Pure evaluation: no I/O, no side effects, no access to
anything but the namespace. Does NOT use Python's eval().

Values follow JavaScript semantics (see :mod:`sectionkit.core.jsvalues`)
because component templates are written for a browser runtime.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from sectionkit.core.expression_lang.parser import ExpressionParseError, parse_expr
from sectionkit.core.ir.expressions import (
    BinaryExpr,
    BinaryOp,
    ConditionalExpr,
    Expr,
    FieldRef,
    FuncCall,
    Literal,
    MemberExpr,
    UnaryExpr,
    UnaryOp,
    UndefinedLiteral,
)
from sectionkit.core.jsvalues import (
    UNDEFINED,
    is_nullish,
    is_number,
    is_truthy,
    to_js_string,
    to_number,
)


class ExpressionEvalError(Exception):
    """Error during expression evaluation."""


def evaluate(expr: Expr, namespace: Mapping[str, Any]) -> Any:
    """Evaluate an expression against a parameter namespace.

    This is a safe tree-walking interpreter. Only the closed set of AST node
    types are handled and member access only walks mappings, lists and
    strings.

    Args:
        expr: Parsed expression AST.
        namespace: Parameter name -> value. Nested mappings for dotted paths.

    Returns:
        The computed value. Unknown identifiers evaluate to ``UNDEFINED``.

    Raises:
        ExpressionEvalError: If evaluation fails.
    """
    return _interpret(expr, namespace)


def evaluate_source(source: str, namespace: Mapping[str, Any]) -> Any:
    """Parse and evaluate, containing every failure.

    Any tokenize, parse or evaluation error yields ``UNDEFINED``. This is the
    entry point used by the directive processor.
    """
    try:
        return evaluate(parse_expr(source.strip()), namespace)
    except (
        ExpressionParseError,
        ExpressionEvalError,
        ArithmeticError,
        RecursionError,
        TypeError,
        ValueError,
    ):
        return UNDEFINED


def evaluate_truthy(source: str, namespace: Mapping[str, Any]) -> bool:
    """Evaluate in a boolean context; failures are ``False``."""
    return is_truthy(evaluate_source(source, namespace))


def _interpret(expr: Expr, ns: Mapping[str, Any]) -> Any:
    """Dispatch evaluation to the appropriate handler."""
    if isinstance(expr, Literal):
        return expr.value

    if isinstance(expr, UndefinedLiteral):
        return UNDEFINED

    if isinstance(expr, FieldRef):
        return _interpret_field_ref(expr, ns)

    if isinstance(expr, MemberExpr):
        target = _interpret(expr.target, ns)
        return get_member(target, _interpret(expr.key, ns))

    if isinstance(expr, BinaryExpr):
        return _interpret_binary(expr, ns)

    if isinstance(expr, UnaryExpr):
        return _interpret_unary(expr, ns)

    if isinstance(expr, ConditionalExpr):
        if is_truthy(_interpret(expr.test, ns)):
            return _interpret(expr.consequent, ns)
        return _interpret(expr.alternate, ns)

    if isinstance(expr, FuncCall):
        return _interpret_func_call(expr, ns)

    raise ExpressionEvalError(f"Unknown expression type: {type(expr).__name__}")


def _interpret_field_ref(expr: FieldRef, ns: Mapping[str, Any]) -> Any:
    """Resolve a parameter path; a missing root identifier is ``UNDEFINED``."""
    head, *rest = expr.path
    current = ns.get(head, UNDEFINED)
    for segment in rest:
        current = get_member(current, segment)
    return current


def get_member(target: Any, key: Any) -> Any:
    """Property access with JavaScript rules, restricted to data values."""
    if is_nullish(target):
        raise ExpressionEvalError(
            f"Cannot read properties of {to_js_string(target)} (reading {to_js_string(key)!r})"
        )
    name = to_js_string(key)

    if isinstance(target, Mapping):
        return target.get(name, UNDEFINED)

    if isinstance(target, (str, list, tuple)):
        if name == "length":
            return len(target)
        index = _array_index(name)
        if index is not None and index < len(target):
            return target[index]
        return UNDEFINED

    return UNDEFINED


def _array_index(name: str) -> int | None:
    if name.isdigit() and (name == "0" or not name.startswith("0")):
        return int(name)
    return None


def _interpret_binary(expr: BinaryExpr, ns: Mapping[str, Any]) -> Any:
    """Evaluate a binary expression."""
    # Short-circuit; JavaScript returns the deciding operand, not a bool
    if expr.op == BinaryOp.AND:
        left = _interpret(expr.left, ns)
        if not is_truthy(left):
            return left
        return _interpret(expr.right, ns)

    if expr.op == BinaryOp.OR:
        left = _interpret(expr.left, ns)
        if is_truthy(left):
            return left
        return _interpret(expr.right, ns)

    left = _interpret(expr.left, ns)
    right = _interpret(expr.right, ns)

    if expr.op == BinaryOp.EQ:
        return loose_equals(left, right)
    if expr.op == BinaryOp.NE:
        return not loose_equals(left, right)
    if expr.op == BinaryOp.STRICT_EQ:
        return strict_equals(left, right)
    if expr.op == BinaryOp.STRICT_NE:
        return not strict_equals(left, right)

    if expr.op == BinaryOp.ADD:
        return _add(left, right)

    if expr.op in (BinaryOp.LT, BinaryOp.GT, BinaryOp.LE, BinaryOp.GE):
        return _compare(expr.op, left, right)

    a = to_number(left)
    b = to_number(right)

    if expr.op == BinaryOp.SUB:
        return a - b
    if expr.op == BinaryOp.MUL:
        return a * b
    if expr.op == BinaryOp.DIV:
        if b == 0:
            raise ExpressionEvalError("Division by zero")
        return a / b
    if expr.op == BinaryOp.MOD:
        if b == 0:
            raise ExpressionEvalError("Modulo by zero")
        if math.isinf(a):
            return math.nan
        if math.isinf(b):
            return a
        # JavaScript remainder keeps the sign of the dividend
        result = math.fmod(a, b)
        if isinstance(a, int) and isinstance(b, int):
            return int(result)
        return result

    raise ExpressionEvalError(f"Unknown binary op: {expr.op}")


def _category(value: Any) -> str:
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    return "object"


def strict_equals(left: Any, right: Any) -> bool:
    """JavaScript ``===``."""
    kind = _category(left)
    if kind != _category(right):
        return False
    if kind == "object":
        return left is right
    return bool(left == right)


def loose_equals(left: Any, right: Any) -> bool:
    """JavaScript ``==`` for the value types parameters can hold."""
    lk, rk = _category(left), _category(right)
    if lk == rk:
        return strict_equals(left, right)
    if is_nullish(left) or is_nullish(right):
        return is_nullish(left) and is_nullish(right)
    if lk == "boolean":
        return loose_equals(int(left), right)
    if rk == "boolean":
        return loose_equals(left, int(right))
    if {lk, rk} == {"number", "string"}:
        return bool(to_number(left) == to_number(right))
    if lk == "object":
        return loose_equals(to_js_string(left), right)
    if rk == "object":
        return loose_equals(left, to_js_string(right))
    return False


def _add(left: Any, right: Any) -> Any:
    """``+``: string concatenation when either side is a string or object."""
    if _category(left) in ("string", "object") or _category(right) in ("string", "object"):
        return to_js_string(left) + to_js_string(right)
    return to_number(left) + to_number(right)


def _compare(op: BinaryOp, left: Any, right: Any) -> bool:
    if isinstance(left, str) and isinstance(right, str):
        a: Any = left
        b: Any = right
    else:
        a = to_number(left)
        b = to_number(right)
        if math.isnan(a) or math.isnan(b):
            return False
    if op == BinaryOp.LT:
        return bool(a < b)
    if op == BinaryOp.GT:
        return bool(a > b)
    if op == BinaryOp.LE:
        return bool(a <= b)
    return bool(a >= b)


def _interpret_unary(expr: UnaryExpr, ns: Mapping[str, Any]) -> Any:
    """Evaluate a unary expression."""
    val = _interpret(expr.operand, ns)
    if expr.op == UnaryOp.NOT:
        return not is_truthy(val)
    if expr.op == UnaryOp.NEG:
        return -to_number(val)
    if expr.op == UnaryOp.POS:
        return to_number(val)
    raise ExpressionEvalError(f"Unknown unary op: {expr.op}")


def _interpret_func_call(expr: FuncCall, ns: Mapping[str, Any]) -> Any:
    """Evaluate a built-in function call (closed set, no user-defined functions)."""
    name = expr.name
    args = [_interpret(a, ns) for a in expr.args]

    if name in ("min", "max"):
        numbers = [to_number(a) for a in args]
        if not numbers:
            return math.inf if name == "min" else -math.inf
        if any(math.isnan(n) for n in numbers):
            return math.nan
        return min(numbers) if name == "min" else max(numbers)

    if name == "abs":
        if len(args) != 1:
            raise ExpressionEvalError("abs() takes exactly 1 argument")
        return abs(to_number(args[0]))

    if name == "round":
        if len(args) != 1:
            raise ExpressionEvalError("round() takes exactly 1 argument")
        number = to_number(args[0])
        if isinstance(number, float) and not math.isfinite(number):
            return number
        # Math.round rounds halves towards +Infinity
        return math.floor(number + 0.5)

    raise ExpressionEvalError(f"Unknown function: {name}()")
