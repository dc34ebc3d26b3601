"""
LSP (Language Server Protocol) CLI commands.

Commands for running the Prisma language server and checking its
dependencies.
"""

import typer

lsp_app = typer.Typer(
    help="Language Server Protocol (LSP) commands.",
    no_args_is_help=True,
)


@lsp_app.command("run")
def lsp_run(
    tcp: bool = typer.Option(
        False,
        "--tcp",
        help="Use TCP transport (for debugging) instead of stdio",
    ),
    host: str = typer.Option(
        "127.0.0.1",
        "--host",
        help="TCP host (only used with --tcp)",
    ),
    port: int = typer.Option(
        2087,
        "--port",
        help="TCP port (only used with --tcp)",
    ),
) -> None:
    """
    Start the Prisma language server.

    By default uses stdio transport for editor integration.
    Use --tcp --port for debugging with a TCP connection.
    """
    try:
        from prisma_lsp.lsp.server import server, start_server
    except ImportError as e:
        typer.echo(f"Error: LSP dependencies not installed: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        if tcp:
            typer.echo(f"Starting Prisma LSP server on TCP {host}:{port}...", err=True)
            server.start_tcp(host, port)
        else:
            start_server()
    except KeyboardInterrupt:
        typer.echo("\nLSP server stopped.", err=True)
    except Exception as e:
        typer.echo(f"Error starting LSP server: {e}", err=True)
        raise typer.Exit(code=1)


@lsp_app.command("check")
def lsp_check() -> None:
    """
    Verify LSP dependencies are installed and show version info.
    """
    from importlib.metadata import PackageNotFoundError, version

    errors = []
    for package in ("pygls", "lsprotocol"):
        try:
            typer.echo(f"{package + ':':<14}{version(package)}")
        except PackageNotFoundError:
            errors.append(package)

    if errors:
        typer.echo(f"\nMissing dependencies: {', '.join(errors)}", err=True)
        raise typer.Exit(code=1)

    typer.echo("\nAll LSP dependencies installed.")
