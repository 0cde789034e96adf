"""
Scoped style compilation.

A component's StyleSpec is a nested property tree::

    {"h1": {"color": "@tColor"}, "@media (max-width: 767px)": {"h1": {"font-size": "2rem"}}}

It is serialised to LESS source, wrapped in ``.cid-<scope id> { ... }``,
prefixed with variables flattened from the parameters and compiled with
lesscpy. A compile failure never breaks a render: it is logged and the CSS
comes back empty.
"""

from __future__ import annotations

import io
import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

import lesscpy

from sectionkit.core.ir import PATH_PLACEHOLDER, StyleSpec
from sectionkit.core.jsvalues import format_number, to_js_string

logger = logging.getLogger(__name__)

_NUMERIC_RE = re.compile(r"^-?\d+(\.\d+)?$")
_HEX_COLOR_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_RGB_RE = re.compile(r"^\s*rgba?\(", re.IGNORECASE)
_WORD_RE = re.compile(r"^[a-zA-Z]+$")
_LESS_IDENT_RE = re.compile(r"^-?[a-zA-Z_][a-zA-Z0-9_-]*$")
_NUMERIC_LITERAL_RE = re.compile(r"^(-?(?:\d*\.\d+|\d+))([a-zA-Z%]*)$")
_ARITH_GROUP_RE = re.compile(r"(?<![\w-])\(([^()]*)\)")
_ARITH_TOKEN_RE = re.compile(
    r"\s*(?:(@[a-zA-Z_][\w-]*)|(-?(?:\d*\.\d+|\d+))([a-zA-Z%]*)|([-+*/]))"
)

BG_VALUE = "bg-value"


def serialize_style_tree(tree: Mapping[str, Any]) -> str:
    """Serialise a nested property tree to LESS source.

    Blocks are closed by depth difference: after writing a key, a ``}`` is
    emitted at that key's indentation when its depth is lower than the depth
    processed just before it, or when its value is an empty mapping. Every
    nested block after the first output line is preceded by a blank line.
    """
    out: list[str] = []
    prev_depth = 0

    def walk(obj: Mapping[str, Any], depth: int) -> None:
        nonlocal prev_depth
        for key, value in obj.items():
            spaces = " " * (depth * 2)
            if isinstance(value, Mapping):
                if out:
                    out.append("\n")
                out.append(f"{spaces}{key} {{\n")
                walk(value, depth + 1)
            else:
                out.append(f"{spaces}{key}: {to_js_string(value)};\n")

            if depth < prev_depth or (isinstance(value, Mapping) and not value):
                out.append(f"{spaces}}}\n")
            prev_depth = depth

    walk(tree, 0)
    return "".join(out).strip()


def _with_background_vars(params: Mapping[str, Any]) -> dict[str, Any]:
    """Expose ``bg.type``/``bg.value`` as ``bg-type``/``bg-value``."""
    source = dict(params)
    bg = source.get("bg")
    if isinstance(bg, Mapping):
        bg_type = bg.get("type") or ""
        value = bg.get("value")
        source["bg-type"] = bg_type
        if value is None:
            source[BG_VALUE] = ""
        else:
            source[BG_VALUE] = value if bg_type == "color" else to_js_string(value)
    return source


def _less_literal(name: str, value: Any, color_variables: Iterable[str]) -> str:
    if not isinstance(value, str):
        return to_js_string(value)

    text = value.replace(PATH_PLACEHOLDER, "")
    if name in color_variables:
        return text
    if name == BG_VALUE:
        stripped = text.strip()
        if _HEX_COLOR_RE.match(stripped) or _RGB_RE.match(text) or _WORD_RE.match(stripped):
            return text
        return f'"{text}"'
    if _NUMERIC_RE.match(text):
        return text
    return f'"{text}"'


def flatten_variables(
    params: Mapping[str, Any], color_variables: Iterable[str]
) -> dict[str, str]:
    """Flatten parameters into LESS variable name -> literal source.

    Nested mappings join their keys with ``-``; lists and scalars are leaves.
    When a flattened name also exists as a top-level parameter, that value
    wins.
    """
    colors = set(color_variables)
    source = _with_background_vars(params)
    variables: dict[str, str] = {}

    def walk(obj: Mapping[str, Any], prefix: str) -> None:
        for key, value in obj.items():
            name = f"{prefix}-{key}" if prefix else str(key)
            if isinstance(value, Mapping):
                walk(value, name)
                continue
            if name in source:
                value = source[name]
            variables[name] = _less_literal(name, value, colors)

    walk(source, "")
    return variables


def _fold_group(body: str, variables: Mapping[str, str]) -> str | None:
    """Evaluate ``a op b ...`` over numbers and numeric variables, or None."""
    values: list[float] = []
    ops: list[str] = []
    unit = ""
    pos = 0
    body = body.rstrip()
    while pos < len(body):
        match = _ARITH_TOKEN_RE.match(body, pos)
        if match is None:
            return None
        ref, number, number_unit, op = match.groups()
        expecting_operand = len(values) == len(ops)
        if op is not None:
            if expecting_operand:
                return None
            ops.append(op)
        else:
            if not expecting_operand:
                return None
            if ref is not None:
                literal = _NUMERIC_LITERAL_RE.match(variables.get(ref[1:], ""))
                if literal is None:
                    return None
                number, number_unit = literal.groups()
            values.append(float(number))
            unit = unit or number_unit
        pos = match.end()

    if not ops or len(values) != len(ops) + 1:
        return None

    # Multiplicative operators bind tighter
    terms = [values[0]]
    additive: list[str] = []
    for op, value in zip(ops, values[1:]):
        if op == "*":
            terms[-1] *= value
        elif op == "/":
            if value == 0:
                return None
            terms[-1] /= value
        else:
            additive.append(op)
            terms.append(value)
    result = terms[0]
    for op, value in zip(additive, terms[1:]):
        result = result + value if op == "+" else result - value
    return f"{format_number(round(result, 8))}{unit}"


def fold_unit_arithmetic(value: Any, variables: Mapping[str, str]) -> Any:
    """Pre-compute parenthesised arithmetic such as ``(@paddingTop * 1rem)``.

    lesscpy does not lex ``rem``, ``vw``, ``vh`` and other newer units, so
    arithmetic on them is a syntax error. Groups made only of numbers (with
    units) and numeric variables are replaced by their result, taking the
    first unit seen. Function calls such as ``url(...)`` and anything
    non-numeric are left for the compiler.
    """
    if not isinstance(value, str) or "(" not in value:
        return value
    while True:
        folded = _ARITH_GROUP_RE.sub(
            lambda m: _fold_group(m.group(1), variables) or m.group(0), value
        )
        if folded == value:
            return folded
        value = folded


def _fold_tree(tree: Mapping[str, Any], variables: Mapping[str, str]) -> dict[str, Any]:
    return {
        key: (
            _fold_tree(value, variables)
            if isinstance(value, Mapping)
            else fold_unit_arithmetic(value, variables)
        )
        for key, value in tree.items()
    }


def build_less_source(
    styles: StyleSpec,
    params: Mapping[str, Any],
    cid: str,
    color_variables: Iterable[str],
) -> str:
    """Variables followed by the scoped block, ready for the compiler."""
    lines = []
    variables = {}
    for name, literal in flatten_variables(params, color_variables).items():
        if not _LESS_IDENT_RE.match(name):
            logger.debug("Skipping parameter %r: not a valid LESS variable name", name)
            continue
        variables[name] = literal
        lines.append(f"@{name}: {literal};")
    tree = _fold_tree(styles, variables)
    lines.append(f".cid-{cid} {{ {serialize_style_tree(tree)} }}")
    return "\n".join(lines)


def compile_styles(
    styles: StyleSpec | None,
    params: Mapping[str, Any],
    cid: str | None,
    color_variables: Iterable[str],
) -> str:
    """Compile scoped CSS; empty when styles or scope id are missing or on failure."""
    if not styles or not cid:
        return ""

    source = build_less_source(styles, params, cid, color_variables)
    try:
        return lesscpy.compile(io.StringIO(source), minify=False)
    except Exception:
        logger.warning("LESS compile failed for cid-%s", cid, exc_info=True)
        logger.debug("LESS source:\n%s", source)
        return ""
