"""
Entry point for the Prisma LSP server.

Usage:
    python -m prisma_lsp.lsp
"""

from .server import start_server

if __name__ == "__main__":
    start_server()
