"""Tests for JavaScript value coercions."""

from __future__ import annotations

import copy
import math

from sectionkit.core.jsvalues import (
    UNDEFINED,
    format_number,
    is_truthy,
    to_display_string,
    to_js_string,
    to_number,
)


class TestTruthiness:
    def test_falsy_values(self) -> None:
        for value in (UNDEFINED, None, False, 0, 0.0, math.nan, ""):
            assert is_truthy(value) is False, value

    def test_truthy_values(self) -> None:
        for value in (True, 1, -1, "0", "false", [], {}):
            assert is_truthy(value) is True, value


class TestToNumber:
    def test_integral_text_is_int(self) -> None:
        assert to_number("10") == 10
        assert isinstance(to_number("10"), int)

    def test_decimal_text_is_float(self) -> None:
        assert to_number("1.5") == 1.5
        assert isinstance(to_number("1.0"), float)

    def test_blank_is_zero(self) -> None:
        assert to_number("  ") == 0

    def test_bad_text_is_nan(self) -> None:
        assert math.isnan(to_number("6rem"))

    def test_null_and_undefined(self) -> None:
        assert to_number(None) == 0
        assert math.isnan(to_number(UNDEFINED))

    def test_bool(self) -> None:
        assert to_number(True) == 1


class TestStrings:
    def test_integral_float_prints_as_int(self) -> None:
        assert format_number(10.0) == "10"

    def test_special_numbers(self) -> None:
        assert format_number(math.nan) == "NaN"
        assert format_number(-math.inf) == "-Infinity"

    def test_js_string(self) -> None:
        assert to_js_string(None) == "null"
        assert to_js_string(UNDEFINED) == "undefined"
        assert to_js_string(False) == "false"
        assert to_js_string([1, None, "a"]) == "1,,a"
        assert to_js_string({"a": 1}) == "[object Object]"

    def test_display_string_blanks_nullish(self) -> None:
        assert to_display_string(None) == ""
        assert to_display_string(UNDEFINED) == ""
        assert to_display_string(0) == "0"


class TestUndefined:
    def test_survives_deepcopy(self) -> None:
        assert copy.deepcopy({"x": UNDEFINED})["x"] is UNDEFINED


class TestNumericLiterals:
    def test_python_only_spellings_are_nan(self) -> None:
        for text in ("inf", "infinity", "nan", "NaN", "1_000", "-inf"):
            assert math.isnan(to_number(text)), text

    def test_javascript_infinity(self) -> None:
        assert to_number("Infinity") == math.inf
        assert to_number(" -Infinity ") == -math.inf

    def test_radix_prefixes(self) -> None:
        assert to_number("0x1F") == 31
        assert to_number("0o17") == 15
        assert to_number("0b101") == 5
        assert math.isnan(to_number("-0x10"))

    def test_decimal_forms(self) -> None:
        assert to_number("+10") == 10
        assert to_number(".5") == 0.5
        assert to_number("5.") == 5
        assert to_number("1e3") == 1000
        assert math.isnan(to_number("1e"))
        assert math.isnan(to_number("."))


class TestNumberFormatting:
    def test_large_numbers_use_exponent(self) -> None:
        assert format_number(1e21) == "1e+21"
        assert format_number(10**21) == "1e+21"
        assert format_number(1.5e22) == "1.5e+22"

    def test_below_exponent_threshold(self) -> None:
        assert format_number(1e20) == "100000000000000000000"
        assert format_number(1e16) == "10000000000000000"

    def test_small_numbers(self) -> None:
        assert format_number(0.000001) == "0.000001"
        assert format_number(1e-7) == "1e-7"
        assert format_number(-1.25e-8) == "-1.25e-8"

    def test_fractions(self) -> None:
        assert format_number(0.1 + 0.2) == "0.30000000000000004"
        assert format_number(-123.456) == "-123.456"
        assert format_number(-0.0) == "0"
