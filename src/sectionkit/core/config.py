"""
Project configuration.

Settings live in ``sectionkit.toml``; every section is optional::

    [render]
    project_path = "assets-root"   # prefix substituted for @PROJECT_PATH@/
    overlay_patch = false

    [reactive]
    debounce_ms = 100

    [styles]
    color_variables = ["hamburgerColor", "menuBgColor", "overlayColor"]

Environment variables override the file: ``SECTIONKIT_PROJECT_PATH`` and
``SECTIONKIT_DEBOUNCE_MS``.
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from sectionkit.core.errors import ConfigError, ErrorContext

CONFIG_FILENAME = "sectionkit.toml"

# Flattened variable names whose string values are colour tokens, never quoted
DEFAULT_COLOR_VARIABLES = (
    "hamburgerColor",
    "menuBgColor",
    "overlayColor",
    "cardColor",
    "tColor",
    "bgColor",
)


@dataclass
class RenderConfig:
    """Defaults for render passes."""

    project_path: str = ""
    overlay_patch: bool = False


@dataclass
class ReactiveConfig:
    """Reactive preview settings."""

    debounce_ms: int = 100

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000


@dataclass
class StylesConfig:
    """Style compiler settings."""

    color_variables: list[str] = field(default_factory=lambda: list(DEFAULT_COLOR_VARIABLES))


@dataclass
class SectionkitConfig:
    """Complete project configuration."""

    render: RenderConfig = field(default_factory=RenderConfig)
    reactive: ReactiveConfig = field(default_factory=ReactiveConfig)
    styles: StylesConfig = field(default_factory=StylesConfig)
    source: Path | None = None


def load_config(path: Path | None = None) -> SectionkitConfig:
    """Load configuration from ``path`` (or ``./sectionkit.toml`` if present).

    A missing default file is not an error; a missing explicit path is.
    """
    if path is None:
        candidate = Path.cwd() / CONFIG_FILENAME
        data = _read_toml(candidate) if candidate.exists() else {}
        source = candidate if candidate.exists() else None
    else:
        if not path.exists():
            raise ConfigError("Config file not found", ErrorContext(path))
        data = _read_toml(path)
        source = path

    render_data = data.get("render", {})
    reactive_data = data.get("reactive", {})
    styles_data = data.get("styles", {})

    config = SectionkitConfig(
        render=RenderConfig(
            project_path=str(render_data.get("project_path", "")),
            overlay_patch=bool(render_data.get("overlay_patch", False)),
        ),
        reactive=ReactiveConfig(
            debounce_ms=_as_int(reactive_data.get("debounce_ms", 100), "reactive.debounce_ms", source),
        ),
        styles=StylesConfig(
            color_variables=list(styles_data.get("color_variables", DEFAULT_COLOR_VARIABLES)),
        ),
        source=source,
    )
    return _apply_env(config)


def _read_toml(path: Path) -> dict:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML: {e}", ErrorContext(path)) from e


def _as_int(value: object, key: str, source: Path | None) -> int:
    try:
        number = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError) as e:
        context = ErrorContext(source, key) if source else None
        raise ConfigError(f"{key} must be an integer, got {value!r}", context) from e
    if number < 0:
        context = ErrorContext(source, key) if source else None
        raise ConfigError(f"{key} must not be negative", context)
    return number


def _apply_env(config: SectionkitConfig) -> SectionkitConfig:
    project_path = os.environ.get("SECTIONKIT_PROJECT_PATH")
    if project_path is not None:
        config.render.project_path = project_path

    debounce = os.environ.get("SECTIONKIT_DEBOUNCE_MS")
    if debounce is not None:
        config.reactive.debounce_ms = _as_int(debounce, "SECTIONKIT_DEBOUNCE_MS", None)
    return config
