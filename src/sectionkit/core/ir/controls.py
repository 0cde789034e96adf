"""
Parameter schema types.

A component template embeds an ``<mbr-parameters>`` declaration block that
lists the user-editable controls of the component::

    <mbr-parameters>
        <header>Size</header>
        <input type="checkbox" title="Full Screen" name="fullScreen">
        <input type="range" inline title="Top" name="paddingTop" min="0" max="8" step="1" value="6">
        <select title="Align" name="align">
            <option value="left" selected>Left</option>
            <option value="center">Center</option>
        </select>
        <fieldset type="background" name="bg" parallax>
            <input type="image" title="Image" value="@PROJECT_PATH@/assets/bg.jpg" selected>
            <input type="color" title="Color" value="#ffffff">
        </fieldset>
    </mbr-parameters>

The schema parser turns that block into an ordered list of :class:`Control`.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ControlAttrs(BaseModel):
    """Secondary attributes of a control. Unset fields stay ``None``."""

    condition: str | None = None
    min: str | None = None
    max: str | None = None
    step: str | None = None
    inline: bool | None = None
    selected: bool | None = None
    checked: bool | None = None
    parallax: bool | None = None

    model_config = ConfigDict(frozen=True)


class SelectOption(BaseModel):
    """One ``<option>`` of a select control."""

    label: str
    value: str
    selected: bool = False

    model_config = ConfigDict(frozen=True)


class Control(BaseModel):
    """
    One declared control.

    ``kind`` is ``header``, the ``type`` of an ``<input>``, ``select``, or the
    ``type`` of a ``<fieldset>`` (``background`` in practice). ``options``
    holds :class:`SelectOption` for selects and child input controls for
    fieldsets.
    """

    kind: str
    name: str | None = None
    title: str | None = None
    value: str | None = None
    attrs: ControlAttrs = Field(default_factory=ControlAttrs)
    options: list[SelectOption | Control] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def selected_option(self) -> SelectOption | Control | None:
        """The first selected option, else the first option, else ``None``."""
        for option in self.options:
            if isinstance(option, SelectOption) and option.selected:
                return option
            if isinstance(option, Control) and option.attrs.selected:
                return option
        return self.options[0] if self.options else None


class ParameterSchema(BaseModel):
    """Result of parsing a template's declaration block."""

    controls: list[Control] = Field(default_factory=list)
    found: bool = False

    model_config = ConfigDict(frozen=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def count(self) -> int:
        return len(self.controls)

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.controls if c.name]

    def get(self, name: str) -> Control | None:
        for control in self.controls:
            if control.name == name:
                return control
        return None


Control.model_rebuild()
