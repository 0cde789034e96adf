"""
Render inputs and outputs.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Nested property tree: selector/property name -> value or nested tree
StyleSpec = dict[str, Any]

# Placeholder that stored templates use for the project asset root
PATH_PLACEHOLDER = "@PROJECT_PATH@/"


def _scope_id(value: Any) -> Any:
    """Scope ids are stored as numbers or strings; normalise to str."""
    if value is None or value == "":
        return None
    return str(value)


class RenderOptions(BaseModel):
    """Options for a single render pass."""

    project_path: str = Field(default="", description="Prefix substituted for @PROJECT_PATH@/")
    styles: StyleSpec | None = Field(default=None, description="Nested LESS property tree")
    cid: str | None = Field(default=None, description="Scope id for cid-<id> class and CSS")
    anchor: str | None = Field(default=None, description="id set on the root section")
    overlay_patch: bool = Field(
        default=False, description="Fold .mbr-overlay opacity/bg-color attributes into style"
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("cid", mode="before")
    @classmethod
    def _coerce_cid(cls, value: Any) -> Any:
        return _scope_id(value)


class RenderedOutput(BaseModel):
    """Final markup plus scoped CSS."""

    html: str
    css: str = ""

    model_config = ConfigDict(frozen=True)

    def to_document(self) -> str:
        """Markup with the CSS inlined in a leading <style> element."""
        if not self.css:
            return self.html
        return f"<style>{self.css}</style>\n{self.html}"


class ComponentSource(BaseModel):
    """A stored component document (``_customHTML``/``_styles``/``_cid``)."""

    custom_html: str = Field(alias="_customHTML")
    styles: StyleSpec | None = Field(default=None, alias="_styles")
    cid: str | None = Field(default=None, alias="_cid")
    name: str | None = Field(default=None, alias="_name")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @field_validator("cid", mode="before")
    @classmethod
    def _coerce_cid(cls, value: Any) -> Any:
        return _scope_id(value)
