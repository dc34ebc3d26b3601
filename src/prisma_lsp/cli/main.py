import sys

import typer

from prisma_lsp.cli.lsp import lsp_app
from prisma_lsp.cli.schema import complete_command, parse_command
from prisma_lsp.cli.utils import version_callback

app = typer.Typer(
    help="""prisma-lsp – completion engine and language server for Prisma schemas

Commands:
  • lsp run / lsp check
    → Start the language server, or verify its dependencies

  • complete, parse
    → Inspect completions or the parsed structure of a schema file
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
) -> None:
    """prisma-lsp CLI main callback for global options."""
    pass


app.command(name="complete")(complete_command)
app.command(name="parse")(parse_command)
app.add_typer(lsp_app, name="lsp")


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


if __name__ == "__main__":
    main(sys.argv[1:])
