"""
Component renderer.

Entry point combining the directive pipeline and the style compiler::

    from sectionkit.render import render_component
    from sectionkit.core.ir import RenderOptions

    out = render_component(template, params, RenderOptions(cid="42", styles=styles))
    out.html, out.css

Rendering is deterministic: the same template, parameters and options give
byte-identical output. The caller's parameters are never mutated.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from sectionkit.core.config import DEFAULT_COLOR_VARIABLES
from sectionkit.core.defaults import build_parameters
from sectionkit.core.errors import MalformedTemplateError
from sectionkit.core.ir import ComponentSource, RenderedOutput, RenderOptions
from sectionkit.core.schema_parser import parse_markup, serialize_markup
from sectionkit.render.directives import (
    PIPELINE,
    RenderContext,
    root_element,
    run_pipeline,
    strip_declaration,
)
from sectionkit.render.style_compiler import compile_styles

logger = logging.getLogger(__name__)


def render_component(
    template: str,
    params: Mapping[str, Any],
    options: RenderOptions | None = None,
    color_variables: Iterable[str] = DEFAULT_COLOR_VARIABLES,
) -> RenderedOutput:
    """Render ``template`` against ``params``.

    Args:
        template: Raw component markup, optionally with a declaration block
        params: ParameterSet; read from a deep snapshot
        options: Path prefix, StyleSpec, scope id, anchor, overlay patch
        color_variables: Flattened names emitted as bare colour tokens

    Returns:
        RenderedOutput with the root element's markup and the scoped CSS

    Raises:
        MalformedTemplateError: If the template has no top-level element
    """
    options = options or RenderOptions()
    snapshot = copy.deepcopy(dict(params))
    ctx = RenderContext(params=snapshot, options=options)

    tree = strip_declaration(parse_markup(template), ctx)
    if root_element(tree) is None:
        raise MalformedTemplateError("Template has no top-level element")

    tree = run_pipeline(tree, ctx, steps=PIPELINE[1:])
    root = root_element(tree)
    if root is None:
        logger.debug("Root element removed by mbr-if; rendering empty markup")
    html = serialize_markup(root) if root is not None else ""

    css = compile_styles(options.styles, snapshot, options.cid, color_variables)
    return RenderedOutput(html=html, css=css)


def render_source(
    component: ComponentSource,
    overrides: Mapping[str, Any] | None = None,
    options: RenderOptions | None = None,
    color_variables: Iterable[str] = DEFAULT_COLOR_VARIABLES,
) -> RenderedOutput:
    """Render a stored component with its declared defaults under ``overrides``.

    The component's own ``_styles`` and ``_cid`` fill in options the caller
    left unset.
    """
    options = options or RenderOptions()
    update: dict[str, Any] = {}
    if options.styles is None and component.styles is not None:
        update["styles"] = component.styles
    if options.cid is None and component.cid is not None:
        update["cid"] = component.cid
    if update:
        options = options.model_copy(update=update)

    params = build_parameters(component.custom_html, overrides)
    return render_component(component.custom_html, params, options, color_variables)
