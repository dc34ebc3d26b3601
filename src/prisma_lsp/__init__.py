"""
prisma-lsp - completion engine and language server for Prisma schema files.

Resolves context-aware completion suggestions for schema documents, falling
back to line scanning whenever the document does not currently parse.
"""

from __future__ import annotations

from ._version import get_version
from .core import ir
from .core.errors import ConfigError, ParseError, PrismaLspError

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "PrismaLspError",
    "ParseError",
    "ConfigError",
]
