"""Shared pytest fixtures for prisma-lsp tests."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import pytest
from lsprotocol.types import CompletionList, Position
from pygls.workspace import TextDocument

from prisma_lsp.core import ir
from prisma_lsp.core.config import CompletionSettings
from prisma_lsp.core.parser import parse_schema
from prisma_lsp.lsp.completions import get_completions

CURSOR = "|"
DOCUMENT_URI = "file:///workspace/schema.prisma"

SAMPLE_SCHEMA = """\
datasource db {
  provider = "postgresql"
  url      = env("DATABASE_URL")
}

generator client {
  provider = "prisma-client-js"
}

model User {
  id        Int      @id @default(autoincrement())
  email     String   @unique
  name      String?
  role      Role     @default(USER)
  posts     Post[]
  createdAt DateTime @default(now())
}

model Post {
  id       Int    @id @default(autoincrement())
  title    String
  authorId Int
  author   User   @relation(fields: [authorId], references: [id])

  @@unique([title, authorId])
}

enum Role {
  USER
  ADMIN
}
"""


def make_document(text: str, uri: str = DOCUMENT_URI) -> TextDocument:
    return TextDocument(uri, source=text)


@dataclass
class Cursor:
    """A document together with a cursor position marked in its source."""

    text: str
    document: TextDocument
    position: Position

    def last_good_parse(self) -> ir.Schema:
        """Parse of the document with the line being edited blanked out."""
        lines = self.text.split("\n")
        lines[self.position.line] = ""
        return parse_schema("\n".join(lines))


def cursor_document(marked: str) -> Cursor:
    """Build a Cursor from text where ``|`` marks the cursor."""
    index = marked.index(CURSOR)
    before = marked[:index]
    text = before + marked[index + 1 :]
    line = before.count("\n")
    character = len(before) - (before.rfind("\n") + 1)
    return Cursor(text, make_document(text), Position(line=line, character=character))


@pytest.fixture
def sample_schema_text() -> str:
    """Return a valid schema exercising every block kind but type_alias."""
    return SAMPLE_SCHEMA


@pytest.fixture
def sample_document(sample_schema_text: str) -> TextDocument:
    return make_document(sample_schema_text)


@pytest.fixture
def sample_schema(sample_schema_text: str) -> ir.Schema:
    return parse_schema(sample_schema_text)


@pytest.fixture
def new_document() -> Callable[[str], TextDocument]:
    return make_document


@pytest.fixture
def at_cursor() -> Callable[[str], Cursor]:
    return cursor_document


@pytest.fixture(params=["parsed", "scanned"])
def block_source(request: pytest.FixtureRequest) -> str:
    """Run a test once against the parsed tree and once against line scanning."""
    return request.param


@pytest.fixture
def complete(block_source: str) -> Callable[..., CompletionList]:
    """
    Resolve completions at the ``|`` marker.

    With the "parsed" source the schema is the last good parse (the edited
    line blanked); with "scanned" no schema is passed at all.
    """

    def _complete(marked: str, settings: CompletionSettings | None = None) -> CompletionList:
        cursor = cursor_document(marked)
        schema = cursor.last_good_parse() if block_source == "parsed" else None
        return get_completions(cursor.document, cursor.position, schema, settings)

    return _complete
