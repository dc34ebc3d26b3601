"""
Prisma schema language server implementation using pygls.

Keeps a parse of every open document and answers completion requests from
it, falling back to line scanning while a document does not parse.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from lsprotocol.types import (
    INITIALIZE,
    TEXT_DOCUMENT_COMPLETION,
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_CLOSE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_DID_SAVE,
    CompletionList,
    CompletionOptions,
    CompletionParams,
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    DidSaveTextDocumentParams,
    InitializeParams,
)
from pygls.lsp.server import LanguageServer
from pygls.uris import to_fs_path
from pygls.workspace import TextDocument

from prisma_lsp._version import get_version
from prisma_lsp.core import ir
from prisma_lsp.core.config import ServerSettings, find_settings, settings_from_dict
from prisma_lsp.core.errors import ConfigError, ParseError
from prisma_lsp.core.parser import DEFAULT_SCHEMA_PATH, parse_schema
from prisma_lsp.lsp.completions import get_completions

logger = logging.getLogger(__name__)

TRIGGER_CHARACTERS = ["@", '"']


class PrismaLanguageServer(LanguageServer):
    """Language server holding per-document parse results and settings."""

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.workspace_root: Optional[Path] = None
        self.settings = ServerSettings()
        self.schemas: dict[str, ir.Schema | None] = {}

    def refresh_schema(self, uri: str) -> ir.Schema | None:
        """Re-parse a document and cache the result (None if it does not parse)."""
        document = self.workspace.get_text_document(uri)
        schema = _parse_document(document)
        self.schemas[uri] = schema
        return schema

    def schema_for(self, uri: str) -> ir.Schema | None:
        if uri not in self.schemas:
            return self.refresh_schema(uri)
        return self.schemas[uri]


# Create server instance
server = PrismaLanguageServer("prisma-lsp", f"v{get_version()}")


@server.feature(INITIALIZE)
def initialize(ls: PrismaLanguageServer, params: InitializeParams):
    """Initialize the language server."""
    root = params.root_uri and to_fs_path(params.root_uri)
    if root:
        ls.workspace_root = Path(root)
        logger.info(f"Workspace root: {ls.workspace_root}")

    try:
        ls.settings = _load_settings(ls.workspace_root, params.initialization_options)
    except ConfigError as e:
        logger.error(f"Invalid settings, using defaults: {e}")
        ls.settings = ServerSettings()

    logging.getLogger("prisma_lsp").setLevel(ls.settings.logging_level)


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: PrismaLanguageServer, params: DidOpenTextDocumentParams):
    """Handle document open."""
    logger.info(f"Opened: {params.text_document.uri}")
    ls.refresh_schema(params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: PrismaLanguageServer, params: DidChangeTextDocumentParams):
    """Handle document change."""
    ls.refresh_schema(params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_SAVE)
def did_save(ls: PrismaLanguageServer, params: DidSaveTextDocumentParams):
    """Handle document save."""
    logger.info(f"Saved: {params.text_document.uri}")
    ls.refresh_schema(params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CLOSE)
def did_close(ls: PrismaLanguageServer, params: DidCloseTextDocumentParams):
    """Handle document close."""
    logger.info(f"Closed: {params.text_document.uri}")
    ls.schemas.pop(params.text_document.uri, None)


@server.feature(
    TEXT_DOCUMENT_COMPLETION,
    CompletionOptions(trigger_characters=TRIGGER_CHARACTERS),
)
def completion(ls: PrismaLanguageServer, params: CompletionParams) -> CompletionList:
    """Provide completion suggestions."""
    uri = params.text_document.uri
    try:
        document = ls.workspace.get_text_document(uri)
        schema = ls.schema_for(uri)
        return get_completions(document, params.position, schema, ls.settings.completion)
    except Exception as e:
        logger.error(f"Error resolving completions for {uri}: {e}")
        return CompletionList(is_incomplete=False, items=[])


# Helper functions


def _parse_document(document: TextDocument) -> ir.Schema | None:
    """Parse a document, returning None when it does not currently parse."""
    path = Path(document.path) if document.path else DEFAULT_SCHEMA_PATH
    try:
        return parse_schema(document.source, path)
    except ParseError as e:
        logger.debug(f"{document.uri} does not parse, completions will scan: {e}")
        return None


def _load_settings(root: Path | None, options: Any = None) -> ServerSettings:
    """Settings from prisma-lsp.toml, overridden by initializationOptions."""
    settings = find_settings(root)
    if isinstance(options, dict):
        settings = settings_from_dict(options, settings)
    return settings


def start_server():
    """Start the Prisma language server over stdio."""
    logging.basicConfig(level=logging.INFO)
    logger.info("Starting Prisma Language Server...")
    server.start_io()


if __name__ == "__main__":
    start_server()
