"""End-to-end render tests."""

from __future__ import annotations

import copy

import pytest

from sectionkit.core.defaults import build_parameters
from sectionkit.core.errors import MalformedTemplateError
from sectionkit.core.ir import ComponentSource, RenderedOutput, RenderOptions
from sectionkit.core.schema_parser import parse_markup
from sectionkit.render import render_component, render_source


class TestRenderComponent:
    def test_hero_with_defaults(self, hero_template: str) -> None:
        params = build_parameters(hero_template, {"title": "Welcome"})
        out = render_component(hero_template, params, RenderOptions(project_path="site", cid=7))
        root = parse_markup(out.html).find("section")

        assert "mbr-parameters" not in out.html
        assert root["class"] == "header1 cid-7"
        assert root.find("div") is None  # overlay only for image backgrounds
        h1 = root.find("h1")
        assert h1.get_text() == "Welcome"
        assert h1["style"] == "height: 6"
        img = root.find("img")
        assert img["src"] == "site/assets/logo.png"
        assert img["data-caption"] == "@PROJECT_PATH@/assets/logo.png"
        assert out.css == ""

    def test_directive_attributes_removed(self, hero_template: str) -> None:
        out = render_component(hero_template, build_parameters(hero_template))
        for attr in ("mbr-if", "mbr-class", "mbr-style", "mbr-theme-style"):
            assert attr not in out.html

    def test_fullscreen_class(self, hero_template: str) -> None:
        params = build_parameters(hero_template, {"fullScreen": True})
        out = render_component(hero_template, params)
        assert "mbr-fullscreen" in parse_markup(out.html).find("section")["class"]

    def test_overlay_patch(self, hero_template: str) -> None:
        params = build_parameters(hero_template, {"bg": {"type": "image"}})
        out = render_component(hero_template, params, RenderOptions(overlay_patch=True))
        overlay = parse_markup(out.html).find("div", class_="mbr-overlay")
        assert overlay["style"] == "opacity: 0.5; background-color: rgb(0, 0, 0);"

    def test_idempotent(self, hero_template: str) -> None:
        params = build_parameters(hero_template, {"title": "Same"})
        options = RenderOptions(cid="abc", styles={"h1": {"color": "@tColor"}})
        first = render_component(hero_template, params, options)
        second = render_component(hero_template, params, options)
        assert first == second
        assert first.css

    def test_params_not_mutated(self, hero_template: str) -> None:
        params = build_parameters(hero_template)
        before = copy.deepcopy(params)
        render_component(hero_template, params, RenderOptions(cid="a", styles={"h1": {"x": 1}}))
        assert params == before

    def test_undefined_parameters(self) -> None:
        template = '<section><p mbr-if="missing">x</p><h2>{{missing}}</h2></section>'
        out = render_component(template, {})
        assert out.html == "<section><h2></h2></section>"

    def test_root_removed_by_if(self) -> None:
        out = render_component('<section mbr-if="show"></section>', {"show": False})
        assert out == RenderedOutput(html="", css="")

    def test_only_first_top_level_element_rendered(self) -> None:
        out = render_component("<section>a</section><section>b</section>", {})
        assert out.html == "<section>a</section>"

    def test_authored_markup_kept(self) -> None:
        template = '<section><img src="a.png" data-caption="c" alt="">&nbsp;x</section>'
        assert render_component(template, {}).html == template

    def test_non_finite_parameters_render(self) -> None:
        out = render_component("<section>{{x % 2}}</section>", {"x": "1e999"})
        assert out.html == "<section>NaN</section>"

    def test_numbers_follow_javascript(self) -> None:
        template = "<section>{{x * 1}}|{{y * 1}}|{{z + 0}}</section>"
        out = render_component(template, {"x": "inf", "y": "1_000", "z": 1e21})
        assert out.html == "<section>NaN|NaN|1e+21</section>"

    @pytest.mark.parametrize(
        "template",
        ["", "   ", "just text", "<!-- comment -->", "<mbr-parameters></mbr-parameters>"],
    )
    def test_malformed_root(self, template: str) -> None:
        with pytest.raises(MalformedTemplateError):
            render_component(template, {})

    def test_css_document(self) -> None:
        out = RenderedOutput(html="<section></section>", css=".a{}")
        assert out.to_document() == "<style>.a{}</style>\n<section></section>"
        assert RenderedOutput(html="<p></p>").to_document() == "<p></p>"


class TestRenderSource:
    def test_component_styles_and_cid(self) -> None:
        component = ComponentSource.model_validate(
            {
                "_customHTML": "<section><h1>{{title}}</h1></section>",
                "_styles": {"h1": {"color": "red"}},
                "_cid": 12345,
            }
        )
        out = render_source(component, {"title": "Stored"})
        assert out.html == '<section class="cid-12345"><h1>Stored</h1></section>'
        assert ".cid-12345 h1" in out.css

    def test_options_override_component(self) -> None:
        component = ComponentSource(custom_html="<section></section>", cid="stored")
        out = render_source(component, options=RenderOptions(cid="explicit"))
        assert out.html == '<section class="cid-explicit"></section>'
