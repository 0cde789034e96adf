"""
sectionkit core: parameter schema, defaults, expressions and configuration.
"""

from sectionkit.core.defaults import build_parameters, extract_defaults, merge_parameters
from sectionkit.core.errors import (
    ComponentLoadError,
    ConfigError,
    MalformedTemplateError,
    SectionkitError,
)
from sectionkit.core.schema_parser import parse_parameters, update_declaration

__all__ = [
    "ComponentLoadError",
    "ConfigError",
    "MalformedTemplateError",
    "SectionkitError",
    "build_parameters",
    "extract_defaults",
    "merge_parameters",
    "parse_parameters",
    "update_declaration",
]
