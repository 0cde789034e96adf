"""
Directive processor.

Rewrites a parsed component template against a ParameterSet. The pipeline is
a fixed sequence of steps; each step takes a tree and returns a new tree, so
steps can be exercised on their own and composed with :func:`run_pipeline`.
Order matters: later steps see the substitutions made by earlier ones.

    1. strip_declaration      remove <mbr-parameters>
    2. rewrite_asset_paths    @PROJECT_PATH@/ in src/href/data-* attributes
    3. substitute_tokens      {{expr}} in attribute values and text
    4. apply_if               mbr-if
    5. apply_class            mbr-class
    6. apply_style            mbr-style
    7. apply_theme_style      mbr-theme-style
    8. apply_scope            cid-<id> class and anchor id on a root <section>
    9. apply_overlay          .mbr-overlay opacity/bg-color attributes (opt-in)

Every step is best-effort: an expression that fails evaluates to
``undefined`` and takes the falsy/empty branch.
"""

from __future__ import annotations

import copy
import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import reduce
from typing import Any

from bs4 import BeautifulSoup, Tag
from bs4.element import CData, Comment, Declaration, Doctype, ProcessingInstruction

from sectionkit.core.expression_lang import evaluate_source, evaluate_truthy
from sectionkit.core.ir import PATH_PLACEHOLDER, RenderOptions
from sectionkit.core.jsvalues import UNDEFINED, is_nullish, to_display_string
from sectionkit.core.schema_parser import DECLARATION_TAG, parse_markup
from sectionkit.render.directive_syntax import parse_class_pairs, parse_style_map

logger = logging.getLogger(__name__)

# Attributes whose values may carry the asset-root placeholder
PATH_ATTRS = ("src", "href", "data-src", "data-bg", "data-poster")

TOKEN_RE = re.compile(r"\{\{([^}]+)\}\}")

_NON_TEXT_STRINGS = (Comment, Declaration, Doctype, CData, ProcessingInstruction)


@dataclass(frozen=True)
class RenderContext:
    """What a pipeline step may read: the parameters and the options."""

    params: Mapping[str, Any]
    options: RenderOptions


Step = Callable[[BeautifulSoup, RenderContext], BeautifulSoup]


# ---------------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------------


def _clone(tree: BeautifulSoup) -> BeautifulSoup:
    """Copy the top-level nodes into a fresh tree without re-parsing."""
    clone = parse_markup("")
    for child in tree.contents:
        clone.append(copy.copy(child))
    return clone


def root_element(tree: BeautifulSoup) -> Tag | None:
    """The first top-level element; components are single-rooted."""
    for child in tree.children:
        if isinstance(child, Tag):
            return child
    return None


def _live_tags(tree: BeautifulSoup, attr: str) -> list[Tag]:
    return tree.find_all(attrs={attr: True})


def get_classes(tag: Tag) -> list[str]:
    return (tag.get("class") or "").split()


def _set_classes(tag: Tag, classes: list[str]) -> None:
    if classes or "class" in tag.attrs:
        tag["class"] = " ".join(classes)


def add_class(tag: Tag, names: str) -> None:
    classes = get_classes(tag)
    for name in names.split():
        if name not in classes:
            classes.append(name)
    _set_classes(tag, classes)


def remove_class(tag: Tag, names: str) -> None:
    drop = set(names.split())
    if "class" in tag.attrs:
        _set_classes(tag, [c for c in get_classes(tag) if c not in drop])


def append_style(tag: Tag, declarations: list[str], terminate: bool = False) -> None:
    existing = tag.get("style")
    style = (f"{existing}; " if existing else "") + "; ".join(declarations)
    tag["style"] = style + ";" if terminate else style


def substitute(text: str, params: Mapping[str, Any]) -> str:
    """Replace every ``{{expr}}`` in ``text`` with its evaluated string form."""
    return TOKEN_RE.sub(lambda m: to_display_string(evaluate_source(m.group(1), params)), text)


# ---------------------------------------------------------------------------
# Pipeline steps
# ---------------------------------------------------------------------------


def strip_declaration(tree: BeautifulSoup, ctx: RenderContext) -> BeautifulSoup:
    tree = _clone(tree)
    for block in tree.find_all(DECLARATION_TAG):
        block.decompose()
    return tree


def rewrite_asset_paths(tree: BeautifulSoup, ctx: RenderContext) -> BeautifulSoup:
    tree = _clone(tree)
    prefix = ctx.options.project_path
    if prefix and not prefix.endswith("/"):
        prefix += "/"
    for tag in tree.find_all(True):
        for name in PATH_ATTRS:
            value = tag.get(name)
            if isinstance(value, str) and value.startswith(PATH_PLACEHOLDER):
                tag[name] = value.replace(PATH_PLACEHOLDER, prefix)
    return tree


def substitute_tokens(tree: BeautifulSoup, ctx: RenderContext) -> BeautifulSoup:
    tree = _clone(tree)
    for tag in tree.find_all(True):
        for name, value in list(tag.attrs.items()):
            if isinstance(value, str) and "{{" in value:
                tag[name] = substitute(value, ctx.params)
    for node in tree.find_all(string=TOKEN_RE):
        if isinstance(node, _NON_TEXT_STRINGS):
            continue
        node.replace_with(type(node)(substitute(str(node), ctx.params)))
    return tree


def apply_if(tree: BeautifulSoup, ctx: RenderContext) -> BeautifulSoup:
    tree = _clone(tree)
    for tag in _live_tags(tree, "mbr-if"):
        if tag.decomposed:
            continue
        if evaluate_truthy(tag["mbr-if"], ctx.params):
            del tag["mbr-if"]
        else:
            tag.decompose()
    return tree


def apply_class(tree: BeautifulSoup, ctx: RenderContext) -> BeautifulSoup:
    tree = _clone(tree)
    for tag in _live_tags(tree, "mbr-class"):
        body = tag["mbr-class"]
        pairs = parse_class_pairs(body)
        if not pairs and body.strip():
            logger.debug("mbr-class body %r has no class:condition pairs", body)
        for cls, condition in pairs:
            if evaluate_truthy(condition, ctx.params):
                add_class(tag, cls)
            else:
                remove_class(tag, cls)
        del tag["mbr-class"]
    return tree


def apply_style(tree: BeautifulSoup, ctx: RenderContext) -> BeautifulSoup:
    tree = _clone(tree)
    for tag in _live_tags(tree, "mbr-style"):
        declarations: list[str] = []
        for prop, raw in parse_style_map(tag["mbr-style"]).items():
            value = evaluate_source(raw, ctx.params) if isinstance(raw, str) else raw
            if value is UNDEFINED or is_nullish(value) or value == "":
                continue
            declarations.append(f"{prop}: {to_display_string(value)}")
        if declarations:
            append_style(tag, declarations)
        del tag["mbr-style"]
    return tree


def apply_theme_style(tree: BeautifulSoup, ctx: RenderContext) -> BeautifulSoup:
    tree = _clone(tree)
    for tag in _live_tags(tree, "mbr-theme-style"):
        class_name = tag["mbr-theme-style"]
        if class_name:
            add_class(tag, class_name)
        del tag["mbr-theme-style"]
    return tree


def apply_scope(tree: BeautifulSoup, ctx: RenderContext) -> BeautifulSoup:
    if not ctx.options.cid:
        return tree
    tree = _clone(tree)
    root = root_element(tree)
    if root is not None and root.name == "section":
        add_class(root, f"cid-{ctx.options.cid}")
        if ctx.options.anchor:
            root["id"] = ctx.options.anchor
    return tree


def apply_overlay(tree: BeautifulSoup, ctx: RenderContext) -> BeautifulSoup:
    if not ctx.options.overlay_patch:
        return tree
    tree = _clone(tree)
    for tag in tree.find_all(True):
        if "mbr-overlay" not in get_classes(tag):
            continue
        opacity = tag.get("opacity")
        color = tag.get("bg-color")
        if not opacity and not color:
            continue
        parts: list[str] = []
        if opacity:
            parts.append(f"opacity: {opacity}")
        if color:
            parts.append(f"background-color: {hex_to_rgb(color)}")
        append_style(tag, parts, terminate=True)
        tag.attrs.pop("opacity", None)
        tag.attrs.pop("bg-color", None)
    return tree


_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def hex_to_rgb(color: str) -> str:
    """``#rrggbb`` / ``#rgb`` to ``rgb(r, g, b)``; anything else unchanged."""
    m = _HEX_RE.match(color.strip())
    if not m:
        return color
    digits = m.group(1)
    if len(digits) == 3:
        digits = "".join(d * 2 for d in digits)
    value = int(digits, 16)
    return f"rgb({(value >> 16) & 255}, {(value >> 8) & 255}, {value & 255})"


PIPELINE: tuple[Step, ...] = (
    strip_declaration,
    rewrite_asset_paths,
    substitute_tokens,
    apply_if,
    apply_class,
    apply_style,
    apply_theme_style,
    apply_scope,
    apply_overlay,
)


def run_pipeline(
    tree: BeautifulSoup, ctx: RenderContext, steps: tuple[Step, ...] = PIPELINE
) -> BeautifulSoup:
    """Compose ``steps`` over ``tree``; the input tree is left untouched."""
    return reduce(lambda acc, step: step(acc, ctx), steps, tree)
