"""
Schema inspection commands: parse a file or print completions at a position.
"""

import json
from pathlib import Path

import typer
from lsprotocol.types import Position
from pygls.workspace import TextDocument

from prisma_lsp.core.config import find_settings, load_settings
from prisma_lsp.core.errors import ParseError, PrismaLspError
from prisma_lsp.core.parser import parse_schema
from prisma_lsp.lsp.blocks import ParsedBlock
from prisma_lsp.lsp.completions import get_completions


def _read_schema(file: Path) -> str:
    try:
        return file.read_text(encoding="utf-8")
    except OSError as e:
        typer.echo(f"Error: cannot read {file}: {e}", err=True)
        raise typer.Exit(code=1)


def complete_command(
    file: Path = typer.Argument(..., help="Schema file"),
    line: int = typer.Option(..., "--line", "-l", help="Cursor line (0-indexed)"),
    character: int = typer.Option(..., "--character", "-c", help="Cursor column (0-indexed)"),
    config: Path | None = typer.Option(
        None, "--config", help="Path to prisma-lsp.toml (default: next to the schema)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print completions as JSON"),
) -> None:
    """
    Print the completions offered at a position in a schema file.

    Works on files that do not parse; completions then come from line scanning.
    """
    text = _read_schema(file)
    document = TextDocument(file.resolve().as_uri(), source=text)

    try:
        settings = load_settings(config) if config else find_settings(file.resolve().parent)
    except PrismaLspError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        schema = parse_schema(text, file)
    except ParseError as e:
        typer.echo(f"Note: schema does not parse, scanning lines instead ({e.message})", err=True)
        schema = None

    result = get_completions(
        document, Position(line=line, character=character), schema, settings.completion
    )

    if as_json:
        payload = [
            {
                "label": item.label,
                "kind": item.kind.name if item.kind else None,
                "detail": item.detail,
                "insert_text": item.insert_text,
            }
            for item in result.items
        ]
        typer.echo(json.dumps(payload, indent=2))
        return

    for item in result.items:
        kind = item.kind.name if item.kind else ""
        typer.echo(f"{item.label}\t{kind}")


def parse_command(
    file: Path = typer.Argument(..., help="Schema file"),
) -> None:
    """
    Parse a schema file and list its blocks and declared members.
    """
    text = _read_schema(file)
    try:
        schema = parse_schema(text, file)
    except ParseError as e:
        typer.echo(f"Parse error: {e}", err=True)
        raise typer.Exit(code=1)

    for block in schema.blocks:
        members = ParsedBlock.from_parse(block).declared_member_names()
        typer.echo(
            f"{block.kind.value} {block.name} "
            f"(lines {block.start_line + 1}-{block.end_line + 1}): {', '.join(members)}"
        )
