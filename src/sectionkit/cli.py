"""
sectionkit command line.

    sectionkit schema hero.html
    sectionkit defaults component.json
    sectionkit render hero.html --params params.json --cid 42 --styles styles.json
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer

from sectionkit._version import get_version
from sectionkit.core.component_loader import load_component, load_json_file
from sectionkit.core.config import SectionkitConfig, load_config
from sectionkit.core.defaults import extract_defaults
from sectionkit.core.errors import ComponentLoadError, ErrorContext, SectionkitError
from sectionkit.core.ir import ComponentSource, RenderOptions
from sectionkit.core.schema_parser import parse_parameters
from sectionkit.render.renderer import render_source

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="""sectionkit – render parameterised HTML section components

Commands:
  • schema    list the controls a template declares
  • defaults  print the default parameter set
  • render    render markup and scoped CSS
""",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"sectionkit {get_version()}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to sectionkit.toml")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging")] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version", callback=version_callback, is_eager=True, help="Show version"
        ),
    ] = None,
) -> None:
    """Global options."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        ctx.obj = load_config(config)
    except SectionkitError as e:
        _fail(e)


def _fail(error: SectionkitError) -> NoReturn:
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(code=1)


def _load(path: Path) -> ComponentSource:
    try:
        return load_component(path)
    except SectionkitError as e:
        _fail(e)


def _load_object(path: Path, what: str) -> dict[str, Any]:
    data = load_json_file(path, what)
    if not isinstance(data, dict):
        raise ComponentLoadError(f"{what} file must contain a JSON object", ErrorContext(path))
    return data


TemplateArg = Annotated[
    Path, typer.Argument(help="Template markup (.html) or stored component document (.json)")
]


@app.command()
def schema(template: TemplateArg) -> None:
    """Print the controls declared by TEMPLATE as JSON."""
    component = _load(template)
    parsed = parse_parameters(component.custom_html)
    typer.echo(parsed.model_dump_json(indent=2, exclude_none=True))


@app.command()
def defaults(template: TemplateArg) -> None:
    """Print the default parameter set of TEMPLATE as JSON."""
    component = _load(template)
    typer.echo(json.dumps(extract_defaults(component.custom_html), indent=2))


@app.command()
def render(
    ctx: typer.Context,
    template: TemplateArg,
    params: Annotated[
        Path | None, typer.Option("--params", "-p", help="JSON parameter overrides")
    ] = None,
    styles: Annotated[
        Path | None, typer.Option("--styles", "-s", help="JSON style tree (overrides _styles)")
    ] = None,
    cid: Annotated[str | None, typer.Option("--cid", help="Scope id (overrides _cid)")] = None,
    anchor: Annotated[str | None, typer.Option("--anchor", help="id for the root section")] = None,
    project_path: Annotated[
        str | None, typer.Option("--project-path", help="Prefix for @PROJECT_PATH@/")
    ] = None,
    overlay: Annotated[
        bool | None,
        typer.Option("--overlay/--no-overlay", help="Fold overlay attributes into style"),
    ] = None,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Write to file")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Output {html, css} as JSON")] = False,
) -> None:
    """Render TEMPLATE to markup with its scoped CSS."""
    config: SectionkitConfig = ctx.obj or SectionkitConfig()
    component = _load(template)

    try:
        overrides = _load_object(params, "Parameters") if params else None
        style_tree = _load_object(styles, "Styles") if styles else None
        options = RenderOptions(
            project_path=config.render.project_path if project_path is None else project_path,
            styles=style_tree,
            cid=cid,
            anchor=anchor,
            overlay_patch=config.render.overlay_patch if overlay is None else overlay,
        )
        result = render_source(component, overrides, options, config.styles.color_variables)
    except SectionkitError as e:
        _fail(e)

    text = result.model_dump_json(indent=2) if as_json else result.to_document()
    if output:
        output.write_text(text + "\n", encoding="utf-8")
        logger.info("Wrote %s", output)
    else:
        typer.echo(text)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
