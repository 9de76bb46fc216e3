"""Typer-based CLI for apidoc."""

from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config_manager import load_config
from .error_table import extract_errors
from .errors import ExtractionError
from .exports import extract_exports
from .parser import JavaScriptParser
from .pipeline import DocsPipeline
from .render import render_markdown
from .routes import extract_route_module

logger = logging.getLogger(__name__)

console = Console(stderr=True)

app = typer.Typer(
    help="📚 apidoc: API reference generator for JavaScript route modules.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"apidoc v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output."),
):
    """apidoc: document routes, validators and errors without running them."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _fail(error: ExtractionError) -> None:
    console.print(str(error), style="red", markup=False, highlight=False)
    raise typer.Exit(code=1)


def _echo_json(value: Any) -> None:
    typer.echo(json.dumps(value, indent=2))


@app.command("generate")
def generate(
    source_root: Path = typer.Argument(..., exists=True, file_okay=False, help="Project root to document."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Markdown file to write."),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="TOML config file."),
):
    """Extract every target and write the Markdown API reference."""
    try:
        config = load_config(config_file)
        logger.debug("Config: %s", config)
        document = DocsPipeline(source_root, config).run()
    except ExtractionError as exc:
        _fail(exc)

    # rendered in full before anything touches the disk
    markdown = render_markdown(document)
    target = output or source_root / config.output_file
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(markdown, encoding="utf-8")
    typer.echo(f"Wrote {target}")
    typer.echo(
        f"Modules: {len(document.modules)} | Routes: {document.route_count()} "
        f"| Errors: {len(document.errors)}"
    )


@app.command("routes")
def routes(
    file_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Route module to read."),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="TOML config file."),
):
    """Print the routes of one module as JSON."""
    try:
        config = load_config(config_file)
        program = JavaScriptParser().parse_file(file_path)
        module = extract_route_module(program, str(file_path), config)
    except ExtractionError as exc:
        _fail(exc)
    _echo_json(dataclasses.asdict(module))


@app.command("errors")
def errors(
    file_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Error module to read."),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="TOML config file."),
):
    """Print the error table of one module as JSON."""
    try:
        config = load_config(config_file)
        program = JavaScriptParser().parse_file(file_path)
        table = extract_errors(program, str(file_path), config)
    except ExtractionError as exc:
        _fail(exc)
    _echo_json(dataclasses.asdict(table))


@app.command("exports")
def exports(
    file_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Module to read."),
):
    """Print the evaluated exports of one module as JSON."""
    try:
        program = JavaScriptParser().parse_file(file_path)
        entries = extract_exports(program, str(file_path))
    except ExtractionError as exc:
        _fail(exc)
    _echo_json([dataclasses.asdict(entry) for entry in entries])


if __name__ == "__main__":
    app()
