"""
Default parameter values.

Derives the initial ParameterSet for a template from its declaration block,
and merges stored overrides on top of it.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

from sectionkit.core.ir import Control, ParameterSchema
from sectionkit.core.jsvalues import to_number
from sectionkit.core.schema_parser import parse_parameters

logger = logging.getLogger(__name__)


def extract_defaults(template: str) -> dict[str, Any]:
    """Build the default ParameterSet declared by ``template``."""
    return defaults_from_schema(parse_parameters(template))


def defaults_from_schema(schema: ParameterSchema) -> dict[str, Any]:
    """Default value per named control; unrecognized kinds are skipped."""
    params: dict[str, Any] = {}
    for control in schema.controls:
        if not control.name:
            continue
        handler = _DEFAULTS.get(control.kind)
        if handler is None:
            continue
        value = handler(control)
        if value is _SKIP:
            continue
        params[control.name] = value
    return params


_SKIP = object()


def _checkbox(control: Control) -> Any:
    return control.attrs.checked or False


def _range(control: Control) -> Any:
    return to_number(control.value or control.attrs.min or 0)


def _color(control: Control) -> Any:
    return control.value


def _media(control: Control) -> Any:
    return control.value or ""


def _background(control: Control) -> Any:
    selected = control.selected_option()
    if not isinstance(selected, Control):
        logger.warning("Background parameter %r declares no options", control.name)
        return _SKIP
    return {
        "type": selected.kind,
        "value": selected.value,
        "parallax": control.attrs.parallax or False,
    }


def _select(control: Control) -> Any:
    selected = control.selected_option()
    return selected.value if selected is not None else None


_DEFAULTS = {
    "checkbox": _checkbox,
    "range": _range,
    "color": _color,
    "image": _media,
    "video": _media,
    "background": _background,
    "select": _select,
}


def merge_parameters(
    defaults: Mapping[str, Any], overrides: Mapping[str, Any] | None = None
) -> dict[str, Any]:
    """Merge stored overrides onto defaults, returning a new ParameterSet.

    Mappings merge recursively, so an override of ``{"bg": {"value": ...}}``
    keeps the default ``bg.type``. Any other override value replaces the
    default outright.
    """
    merged = copy.deepcopy(dict(defaults))
    for key, value in (overrides or {}).items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_parameters(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def build_parameters(template: str, overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Defaults declared by ``template`` merged with stored ``overrides``."""
    return merge_parameters(extract_defaults(template), overrides)


def set_path(params: dict[str, Any], path: str, value: Any) -> None:
    """Assign ``value`` at a dotted path, creating intermediate objects."""
    *parents, leaf = path.split(".")
    current = params
    for key in parents:
        child = current.get(key)
        if not isinstance(child, dict):
            child = {}
            current[key] = child
        current = child
    current[leaf] = value


def delete_path(params: dict[str, Any], path: str) -> bool:
    """Remove the value at a dotted path; returns whether anything was removed."""
    *parents, leaf = path.split(".")
    current: Any = params
    for key in parents:
        current = current.get(key) if isinstance(current, dict) else None
        if current is None:
            return False
    if isinstance(current, dict) and leaf in current:
        del current[leaf]
        return True
    return False
