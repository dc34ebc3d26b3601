"""
prisma-lsp CLI Package.

- main.py: Typer application and entry point
- lsp.py: Language server commands
- schema.py: Commands that parse or complete a schema file
- utils.py: Shared utilities
"""

from prisma_lsp.cli.lsp import lsp_app
from prisma_lsp.cli.main import app, main
from prisma_lsp.cli.utils import version_callback

__all__ = [
    "app",
    "main",
    "lsp_app",
    "version_callback",
]
