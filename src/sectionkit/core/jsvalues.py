"""
JavaScript value semantics for component templates.

Component templates were authored against a browser runtime, so expression
results are coerced the way JavaScript coerces them: ``undefined`` is distinct
from ``null``, ``"0"`` is truthy, ``10.0`` prints as ``10``.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Any


class _Undefined:
    """The JavaScript ``undefined`` value (singleton)."""

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Undefined:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _Undefined:
        return self


UNDEFINED = _Undefined()


def is_nullish(value: Any) -> bool:
    """True for ``null`` and ``undefined``."""
    return value is None or value is UNDEFINED


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_truthy(value: Any) -> bool:
    """JavaScript truthiness."""
    if is_nullish(value):
        return False
    if isinstance(value, bool):
        return value
    if is_number(value):
        return value != 0 and not math.isnan(value)
    if isinstance(value, str):
        return value != ""
    # Objects and arrays are always truthy, even when empty
    return True


_DECIMAL_RE = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_RADIX_RE = re.compile(r"0(?:([xX])[0-9a-fA-F]+|([oO])[0-7]+|([bB])[01]+)")
_RADIX_BASE = {"x": 16, "o": 8, "b": 2}


def _string_to_number(text: str) -> int | float:
    text = text.strip()
    if text == "":
        return 0
    if _RADIX_RE.fullmatch(text):
        return int(text[2:], _RADIX_BASE[text[1].lower()])
    if not _DECIMAL_RE.fullmatch(text):
        return math.nan
    number = float(text)
    if number.is_integer() and "e" not in text.lower() and "." not in text:
        return int(text)
    return number


def to_number(value: Any) -> int | float:
    """JavaScript ``Number(value)``; integral results come back as ``int``.

    Strings must be JavaScript numeric literals: ``"inf"``, ``"nan"`` and
    ``"1_000"`` are ``NaN`` even though Python's ``float()`` accepts them.
    """
    if value is UNDEFINED:
        return math.nan
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if is_number(value):
        return value
    if isinstance(value, str):
        return _string_to_number(value)
    return math.nan


def _format_float(value: float) -> str:
    # Shortest round-trip digits, laid out by the Number::toString rules
    mantissa, _, exponent = repr(abs(value)).partition("e")
    whole, _, fraction = mantissa.partition(".")
    combined = whole + fraction
    digits = combined.lstrip("0")
    point = len(whole) + int(exponent or 0) - (len(combined) - len(digits))
    digits = digits.rstrip("0")
    k = len(digits)
    sign = "-" if value < 0 else ""

    if k <= point <= 21:
        return sign + digits + "0" * (point - k)
    if 0 < point <= 21:
        return f"{sign}{digits[:point]}.{digits[point:]}"
    if -6 < point <= 0:
        return f"{sign}0.{'0' * -point}{digits}"
    exp = point - 1
    exp_text = f"e+{exp}" if exp >= 0 else f"e-{-exp}"
    if k == 1:
        return sign + digits + exp_text
    return f"{sign}{digits[0]}.{digits[1:]}{exp_text}"


def format_number(value: int | float) -> str:
    if isinstance(value, int):
        if abs(value) < 10**21:
            return str(value)
        value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"
    return _format_float(value)


def to_js_string(value: Any) -> str:
    """JavaScript ``String(value)``."""
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        return format_number(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ",".join("" if is_nullish(v) else to_js_string(v) for v in value)
    if isinstance(value, Mapping):
        return "[object Object]"
    return str(value)


def to_display_string(value: Any) -> str:
    """String form used for ``{{expr}}`` substitution: nullish becomes empty."""
    if is_nullish(value):
        return ""
    return to_js_string(value)
