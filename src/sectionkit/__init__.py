"""
sectionkit - parameterised HTML section components.

Parses a component's declared parameters, derives their defaults, and renders
the template's directives and scoped LESS styles against a parameter set.
"""

from __future__ import annotations

from ._version import get_version
from .core import ir
from .core.errors import ComponentLoadError, ConfigError, MalformedTemplateError, SectionkitError
from .render import ReactiveRenderer, render_component, render_source

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "ComponentLoadError",
    "ConfigError",
    "MalformedTemplateError",
    "ReactiveRenderer",
    "SectionkitError",
    "render_component",
    "render_source",
]
