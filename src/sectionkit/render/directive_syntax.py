"""
Parsing of directive bodies.

``mbr-class`` and ``mbr-style`` carry object-literal-like bodies::

    mbr-class="{'mbr-fullscreen': fullScreen, 'display-7': size(1, 2) > 0}"
    mbr-style="{'height': 'height + \"vh\"'}"

Malformed bodies degrade to an empty result instead of raising.
"""

from __future__ import annotations

import json
import re
from typing import Any

_OPENERS = "([{"
_CLOSERS = ")]}"
_QUOTES = "\"'"


def split_top_level(text: str, sep: str) -> list[str]:
    """Split ``text`` on ``sep`` outside quotes and nested brackets."""
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    quote: str | None = None
    for ch in text:
        if quote:
            current.append(ch)
            if ch == quote:
                quote = None
            continue
        if ch in _QUOTES:
            quote = ch
        elif ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
        elif ch == sep and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    if "".join(current).strip():
        parts.append("".join(current))
    return parts


def find_top_level(text: str, target: str) -> int:
    """Index of the first ``target`` outside quotes and brackets, else -1."""
    depth = 0
    quote: str | None = None
    for i, ch in enumerate(text):
        if quote:
            if ch == quote:
                quote = None
            continue
        if ch in _QUOTES:
            quote = ch
        elif ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
        elif ch == target and depth == 0:
            return i
    return -1


def _unquote(key: str) -> str:
    if len(key) >= 2 and key[0] == key[-1] and key[0] in _QUOTES:
        return key[1:-1]
    return key


def parse_class_pairs(body: str | None) -> list[tuple[str, str]]:
    """Parse an ``mbr-class`` body into ordered ``(class, condition)`` pairs.

    Commas and colons only split at the top level, so conditions may contain
    calls, literals and nested brackets. Entries without a top-level colon
    are dropped.
    """
    if not body or not isinstance(body, str):
        return []

    text = body.strip()
    if text.startswith("{") and text.endswith("}"):
        text = text[1:-1]

    pairs: list[tuple[str, str]] = []
    for entry in split_top_level(text, ","):
        idx = find_top_level(entry, ":")
        if idx == -1:
            continue
        key = _unquote(entry[:idx].strip())
        pairs.append((key, entry[idx + 1 :].strip()))
    return pairs


_BARE_KEY_RE = re.compile(r"([a-zA-Z0-9_-]+)\s*:")


def parse_style_map(body: str | None) -> dict[str, Any]:
    """Parse an ``mbr-style`` body into a property map.

    The body is normalised towards JSON (bare keys quoted, single quotes made
    double) and then parsed; anything that still is not a JSON object gives
    an empty map.
    """
    if not body:
        return {}
    jsonish = _BARE_KEY_RE.sub(r'"\1":', body).replace("'", '"')
    try:
        parsed = json.loads(jsonish)
    except json.JSONDecodeError:
        return {}
    if not isinstance(parsed, dict):
        return {}
    return parsed
