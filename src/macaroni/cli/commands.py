"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from macaroni.config import Settings, load_config
from macaroni.core.export import block_range, format_range, to_json
from macaroni.core.models import Document
from macaroni.core.parse import parse_document, parse_file
from macaroni.core.pipeline import run_export


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling, then apply its log level.

    basicConfig is a no-op once `--verbose` has configured logging.
    """
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    return settings


def _read_document(path: str) -> Document:
    """Parse a file, or stdin when path is `-`."""
    if path == "-":
        try:
            source = typer.get_text_stream("stdin").read()
        except (OSError, UnicodeDecodeError) as e:
            _fail("Could not read stdin", e)
        return parse_document(source)
    p = Path(path)
    if not p.is_file():
        _fail(f"Not a file: {path}")
    try:
        return parse_file(p)
    except (OSError, UnicodeDecodeError) as e:
        _fail(f"Could not read {path}", e)


def parse_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file to parse, or - for stdin")],
    indent: Annotated[Optional[int], typer.Option("--indent", help="JSON indent width; 0 = compact")] = None,
    blocks_only: Annotated[bool, typer.Option("--blocks-only", help="Omit inline elements")] = False,
    ):
    """Print the parsed document as JSON."""
    settings = _settings(overrides={"json_indent": indent, "blocks_only": blocks_only or None})
    doc = _read_document(path)
    typer.echo(to_json(doc, settings.json_indent, settings.blocks_only))


def outline_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file to outline, or - for stdin")],
    ):
    """List block elements in source order with their ranges."""
    _settings()
    doc = _read_document(path)
    for i, block in enumerate(doc.block_elements):
        typer.echo(f"{i:>4}  {block.type:<18} {format_range(block_range(block))}")


def export_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to parse")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    indent: Annotated[Optional[int], typer.Option("--indent", help="JSON indent width; 0 = compact")] = None,
    blocks_only: Annotated[bool, typer.Option("--blocks-only", help="Omit inline elements")] = False,
    ):
    """Recursively parse markdown files and write one JSON document per file."""
    settings = _settings(overrides={
        "output_dir": out, "json_indent": indent, "blocks_only": blocks_only or None,
    })
    output_dir = Path(settings.output_dir)
    try:
        results = run_export(path, output_dir, settings.json_indent, settings.blocks_only)
    except RuntimeError as e:
        _fail(str(e))
    if not results:
        typer.echo(f"No markdown files found at {path}.")
        raise typer.Exit(1)
    for src, out_file in results:
        typer.echo(f"  {src} -> {out_file}")
    typer.echo(f"Exported {len(results)} document(s) to {output_dir}/")
