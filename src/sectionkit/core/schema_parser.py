"""
Parameter schema parser.

Extracts the ordered list of declared controls from a template's
``<mbr-parameters>`` block. The schema is derived fresh from the raw template
on every call; nothing is cached across edits.

Entry points:
    ``parse_parameters(template) -> ParameterSchema``
    ``update_declaration(template, name, value, kind) -> str``
"""

from __future__ import annotations

import logging
from typing import Any

from bs4 import BeautifulSoup, Tag
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

from sectionkit.core.ir import Control, ControlAttrs, ParameterSchema, SelectOption
from sectionkit.core.jsvalues import to_display_string

logger = logging.getLogger(__name__)

DECLARATION_TAG = "mbr-parameters"

_TRUE_VALUES = ("", "true", "checked")
_FALSE_VALUES = ("false",)


def parse_markup(markup: str) -> BeautifulSoup:
    """Parse a template fragment.

    Every attribute is kept as a plain string (``class`` included) so that
    substitution and serialization see exactly what the author wrote.
    """
    return BeautifulSoup(markup, "html.parser", multi_valued_attributes=None)


def parse_declaration_markup(markup: str) -> BeautifulSoup:
    """Parse for schema extraction, applying HTML's implied end tags.

    ``html.parser`` nests an unclosed ``<option>`` inside the previous one;
    libxml2 closes it, so ``<option>X<option selected>Y`` yields two options.
    """
    return BeautifulSoup(markup, "lxml", multi_valued_attributes=None)


def _substitute_minimal(text: str) -> str:
    return EntitySubstitution.substitute_xml(text).replace("\xa0", "&nbsp;")


class AuthoredMarkupFormatter(HTMLFormatter):
    """Serialise the way templates are written.

    Attributes keep their source order, void elements are not self-closed and
    non-breaking spaces stay ``&nbsp;``.
    """

    def __init__(self) -> None:
        super().__init__(entity_substitution=_substitute_minimal, void_element_close_prefix=None)

    def attributes(self, tag: Tag) -> list[tuple[str, Any]]:
        if tag.attrs is None:
            return []
        return list(tag.attrs.items())


MARKUP_FORMATTER = AuthoredMarkupFormatter()


def serialize_markup(node: Tag) -> str:
    return node.decode(formatter=MARKUP_FORMATTER)


def attr_bool(value: Any) -> bool:
    """Boolean attribute semantics used by declaration blocks.

    Present-but-empty, ``true`` and ``checked`` are true; absent and
    ``false`` are false; any other non-empty value is true.
    """
    if value is True or value in _TRUE_VALUES:
        return True
    if value is None or value in _FALSE_VALUES:
        return False
    return bool(value)


def _attr_str(el: Tag, name: str) -> str | None:
    """String attribute; empty normalises to ``None``."""
    value = el.get(name)
    return value or None


def _input_kind(el: Tag) -> str:
    return (el.get("type") or "text").lower()


def find_declaration(soup: BeautifulSoup) -> Tag | None:
    return soup.find(DECLARATION_TAG)


def parse_parameters(template: str) -> ParameterSchema:
    """Parse the declaration block of ``template`` into a schema.

    A template without a declaration block yields an empty schema with
    ``found=False``.
    """
    block = find_declaration(parse_declaration_markup(template))
    if block is None:
        return ParameterSchema(controls=[], found=False)

    controls: list[Control] = []
    seen: set[str] = set()
    for el in block.find_all(recursive=False):
        control = _parse_control(el)
        if control is None:
            continue
        if control.name:
            if control.name in seen:
                logger.warning("Duplicate parameter %r ignored; first declaration wins", control.name)
                continue
            seen.add(control.name)
        controls.append(control)

    return ParameterSchema(controls=controls, found=True)


def _parse_control(el: Tag) -> Control | None:
    tag = el.name.lower()
    if tag == "header":
        return Control(
            kind="header",
            title=el.get_text().strip(),
            attrs=ControlAttrs(condition=_attr_str(el, "condition")),
        )
    if tag == "input":
        return _parse_input(el)
    if tag == "select":
        return _parse_select(el)
    if tag == "fieldset":
        return _parse_fieldset(el)
    return None


def _parse_input(el: Tag) -> Control:
    return Control(
        kind=_input_kind(el),
        name=_attr_str(el, "name"),
        title=_attr_str(el, "title"),
        value=el.get("value"),
        attrs=ControlAttrs(
            condition=_attr_str(el, "condition"),
            min=_attr_str(el, "min"),
            max=_attr_str(el, "max"),
            step=_attr_str(el, "step"),
            inline=attr_bool(el.get("inline")),
            selected=attr_bool(el.get("selected")),
            checked=attr_bool(el.get("checked")),
        ),
    )


def _parse_select(el: Tag) -> Control:
    options: list[SelectOption | Control] = []
    for opt in el.find_all("option", recursive=False):
        label = opt.get_text().strip()
        value = opt.get("value")
        options.append(
            SelectOption(
                label=label,
                value=label if value is None else value,
                selected=attr_bool(opt.get("selected")),
            )
        )
    control = Control(
        kind="select",
        name=_attr_str(el, "name"),
        title=_attr_str(el, "title"),
        options=options,
    )
    chosen = control.selected_option()
    if isinstance(chosen, SelectOption):
        control = control.model_copy(update={"value": chosen.value})
    return control


def _parse_fieldset(el: Tag) -> Control:
    name = _attr_str(el, "name")
    children: list[SelectOption | Control] = []
    for child in el.find_all("input", recursive=False):
        children.append(
            Control(
                kind=_input_kind(child),
                name=_attr_str(child, "name"),
                title=_attr_str(child, "title"),
                value=child.get("value"),
                attrs=ControlAttrs(
                    selected=attr_bool(child.get("selected")),
                    condition=_attr_str(child, "condition"),
                ),
            )
        )
    return Control(
        kind=(el.get("type") or "").lower() or "fieldset",
        name=name,
        title=name,
        attrs=ControlAttrs(parallax=attr_bool(el.get("parallax"))),
        options=children,
    )


# ---------------------------------------------------------------------------
# Declaration write-back
# ---------------------------------------------------------------------------


def update_declaration(template: str, name: str, value: Any, kind: str | None = None) -> str:
    """Record an edited parameter value in the template's declaration block.

    ``kind`` is the control kind the value came from: checkboxes toggle the
    ``checked`` attribute, colours set both ``value`` and ``color``, anything
    else sets ``value``. Background sub-values are addressed as ``bg.type``
    (stored on the ``bg`` fieldset) and ``bg.<key>``.

    Returns the template unchanged when no declaration matches ``name``.
    """
    soup = parse_markup(template)
    block = find_declaration(soup)
    if block is None:
        return template

    head, _, key = name.partition(".")
    if key == "type":
        target = block.find(attrs={"name": head})
        if target is None:
            return template
        target["value"] = _declared_value(value)
        return serialize_markup(soup)

    if key:
        target = block.find(attrs={"name": name})
        if target is None:
            fieldset = block.find(attrs={"name": head})
            if fieldset is not None:
                target = fieldset.find("input", attrs={"type": key})
        if target is None:
            target = block.find("input", attrs={"type": key})
    else:
        target = block.find(attrs={"name": name})

    if target is None:
        return template

    if kind == "checkbox":
        if value:
            target["checked"] = "checked"
        elif "checked" in target.attrs:
            del target["checked"]
    elif kind == "color":
        target["value"] = _declared_value(value)
        target["color"] = _declared_value(value)
    else:
        target["value"] = _declared_value(value)
    return serialize_markup(soup)


def _declared_value(value: Any) -> str:
    return to_display_string(value)
