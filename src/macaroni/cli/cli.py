"""CLI entrypoint: Typer app definition and command registration"""

import logging
from typing import Annotated

import typer

from macaroni.cli.commands import LOG_FORMAT, export_cmd, outline_cmd, parse_cmd


app = typer.Typer(name="macaroni", no_args_is_help=True, help="Position-annotated markdown block parser")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose (DEBUG) logging")] = False,
    ):
    """Parse markdown into block elements with line/character/byte ranges."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT)


app.command(name="parse")(parse_cmd)
app.command(name="outline")(outline_cmd)
app.command(name="export")(export_cmd)
