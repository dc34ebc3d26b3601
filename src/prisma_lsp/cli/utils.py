"""
CLI utilities shared across command modules.
"""

import platform

import typer

from prisma_lsp._version import get_version


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"prisma-lsp {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()
