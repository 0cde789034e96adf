"""
Loading component sources from disk.

A component arrives either as raw template markup (``.html``) or as a stored
component document, the JSON object page builders persist::

    {"_customHTML": "<section>...</section>", "_styles": {...}, "_cid": "tRZ7Bh1kqP"}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from sectionkit.core.errors import ComponentLoadError, ErrorContext
from sectionkit.core.ir import ComponentSource

logger = logging.getLogger(__name__)


def load_component(path: Path) -> ComponentSource:
    """Load a component from a markup file or a stored component document."""
    if not path.exists():
        raise ComponentLoadError("Component file not found", ErrorContext(path))

    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() != ".json":
        return ComponentSource(custom_html=text)

    data = _load_json(path, text)
    if not isinstance(data, dict):
        raise ComponentLoadError("Component document must be a JSON object", ErrorContext(path))
    try:
        component = ComponentSource.model_validate(data)
    except ValidationError as e:
        raise ComponentLoadError(f"Invalid component document: {e}", ErrorContext(path)) from e
    logger.debug("Loaded component %s (cid=%s)", component.name or path.name, component.cid)
    return component


def load_json_file(path: Path, what: str) -> Any:
    """Read a JSON side file (parameters, styles)."""
    if not path.exists():
        raise ComponentLoadError(f"{what} file not found", ErrorContext(path))
    return _load_json(path, path.read_text(encoding="utf-8"))


def _load_json(path: Path, text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ComponentLoadError(f"Invalid JSON: {e}", ErrorContext(path, f"line {e.lineno}")) from e
