"""
Rendering: directive pipeline, scoped style compilation and reactive preview.
"""

from sectionkit.render.reactive import ObservableParams, ReactiveRenderer
from sectionkit.render.renderer import render_component, render_source
from sectionkit.render.style_compiler import compile_styles, serialize_style_tree

__all__ = [
    "ObservableParams",
    "ReactiveRenderer",
    "compile_styles",
    "render_component",
    "render_source",
    "serialize_style_tree",
]
