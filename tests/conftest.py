"""Shared pytest fixtures for sectionkit tests."""

from pathlib import Path

import pytest

HERO_TEMPLATE = """<mbr-parameters>
    <header>Size</header>
    <input type="checkbox" title="Full Screen" name="fullScreen">
    <input type="range" inline title="Top" name="paddingTop" min="0" max="8" step="1" value="6">
    <input type="range" title="Bottom" name="paddingBottom" min="10" max="20">
    <select title="Align" name="align">
        <option value="left">Left</option>
        <option value="center" selected>Center</option>
    </select>
    <input type="color" title="Text" name="tColor" value="#333333">
    <fieldset type="background" name="bg" parallax>
        <input type="image" title="Image" value="@PROJECT_PATH@/assets/bg.jpg">
        <input type="color" title="Color" value="#ffffff" selected>
    </fieldset>
    <input type="checkbox" title="Show Title" name="showTitle" checked>
</mbr-parameters>
<section class="header1" mbr-class="{'mbr-fullscreen': fullScreen}">
<div class="mbr-overlay" mbr-if="bg.type == 'image'" opacity="0.5" bg-color="#000000"></div>
<h1 class="display-1" mbr-if="showTitle" mbr-style="{height: 'paddingTop'}">{{title}}</h1>
<img src="@PROJECT_PATH@/assets/logo.png" data-caption="@PROJECT_PATH@/assets/logo.png">
</section>
"""


@pytest.fixture
def hero_template() -> str:
    """A small section template with a declaration block and every directive."""
    return HERO_TEMPLATE


@pytest.fixture
def hero_file(tmp_path: Path, hero_template: str) -> Path:
    """The hero template written to disk."""
    path = tmp_path / "hero.html"
    path.write_text(hero_template, encoding="utf-8")
    return path
