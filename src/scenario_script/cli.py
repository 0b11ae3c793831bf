"""CLI entry point for scenario-script."""

from __future__ import annotations

import logging
import sys

import click

from scenario_script.export import ExportError, document_to_dict, validate_document_dict, write_json
from scenario_script.lexer import ScriptSyntaxError
from scenario_script.parser import parse_file
from scenario_script.scene import Document

_LOG_FORMAT = "%(levelname)s  %(name)s  %(message)s"


def _load(script_path: str) -> Document:
    try:
        return parse_file(script_path)
    except ScriptSyntaxError as exc:
        sep = ":" if exc.line is not None else ": "
        click.echo(f"ERROR: {script_path}{sep}{exc}", err=True)
        sys.exit(1)
    except UnicodeDecodeError as exc:
        click.echo(f"ERROR: {script_path} is not valid UTF-8: {exc}", err=True)
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def main(verbose: bool) -> None:
    """scenario-script — parser for scene/author/branch scenario scripts."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=_LOG_FORMAT,
    )


@main.command("parse")
@click.option(
    "--script",
    "script_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to the scenario script",
)
@click.option(
    "--out",
    "out_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Write the parsed document as JSON to this path",
)
def parse(script_path: str, out_path: str | None) -> None:
    """Parse a scenario script.

    Without --out, prints one summary line per scene.  With --out, the
    document is validated against the Document.v1.json contract and written
    as byte-stable JSON; nothing is written if parsing or validation fails.
    """
    document = _load(script_path)

    if out_path is None:
        for scene in document:
            authors = ",".join(a.id for a in scene.authors)
            branches = ",".join(scene.branches)
            click.echo(f"scene {scene.id}: authors={authors} branches={branches}")
        sys.exit(0)

    data = document_to_dict(document)
    try:
        validate_document_dict(data)
    except ExportError as exc:
        click.echo(f"ERROR: {exc}", err=True)
        sys.exit(1)

    write_json(data, out_path)
    sys.exit(0)


@main.command("check")
@click.option(
    "--script",
    "script_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to the scenario script",
)
def check(script_path: str) -> None:
    """Check that a scenario script parses."""
    document = _load(script_path)
    click.echo(f"OK: {len(document)} scene(s)")
    sys.exit(0)
