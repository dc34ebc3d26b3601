"""
Prisma schema Language Server Protocol implementation.

Provides context-aware completion for schema files:
- Block keywords at the top level
- Datasource/generator keys and provider values
- Field types, including models and enums declared in the document
- Field and block attributes and their arguments
"""

from .completions import get_completions
from .server import start_server

__all__ = ["get_completions", "start_server"]
