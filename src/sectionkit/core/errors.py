"""
Error types for sectionkit.

Directive and expression failures never surface as exceptions from a render;
they degrade to the falsy/empty branch. The types here cover the conditions a
caller must be able to tell apart from degraded-but-successful output.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class SectionkitError(Exception):
    """Base exception for all sectionkit errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class MalformedTemplateError(SectionkitError):
    """
    Raised when a template has no top-level element to render.

    Examples:
    - Empty template
    - Template consisting only of text or comments
    - Template consisting only of a declaration block
    """

    pass


class ComponentLoadError(SectionkitError):
    """
    Raised when a stored component document cannot be loaded.

    Examples:
    - File does not exist
    - Invalid JSON
    - Missing ``_customHTML``
    """

    pass


class ConfigError(SectionkitError):
    """
    Raised when ``sectionkit.toml`` or an environment override is invalid.
    """

    pass


@dataclass
class ErrorContext:
    """
    Where an error came from.

    Attributes:
        file: Path to the template, component or config file
        detail: Optional extra location detail (a key, a control name)
    """

    file: Path
    detail: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "component.json (_styles)"
        """
        if self.detail:
            return f"{self.file} ({self.detail})"
        return str(self.file)
