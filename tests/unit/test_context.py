"""Tests for completion context classification."""

from __future__ import annotations

import pytest
from lsprotocol.types import Position

from prisma_lsp.core import ir
from prisma_lsp.lsp.blocks import ScannedBlock, find_block
from prisma_lsp.lsp.context import (
    AttributePosition,
    CompletionContext,
    attribute_position,
    classify_completion_context,
    is_argument_continuation,
    is_first_in_block,
    is_inside_argument,
    is_type_position,
    open_attribute_call,
    symbol_before_position,
)


class TestClassifyCompletionContext:
    """classify_completion_context maps the cursor to a grammar production."""

    @pytest.mark.parametrize(
        ("marked", "expected"),
        [
            ("|", CompletionContext.BLOCK_KIND),
            ("mo|", CompletionContext.BLOCK_KIND),
            ("model User {\n  id Int\n}\nfoo bar|", CompletionContext.NONE),
            ("model User {\n  |\n}", CompletionContext.FIRST_MEMBER),
            ("model User {\n  na|\n}", CompletionContext.FIRST_MEMBER),
            ("model User {\n  name |\n}", CompletionContext.TYPE),
            ("model User {\n  name Str|\n}", CompletionContext.TYPE),
            ("model User {\n  name String |\n}", CompletionContext.ATTRIBUTE),
            ("model User {\n  name String @|\n}", CompletionContext.ATTRIBUTE),
            ("model User {\n  name String @uni|\n}", CompletionContext.ATTRIBUTE),
            ("model User {\n  @@|\n}", CompletionContext.ATTRIBUTE),
            ("model User {\n  id Int @default(|)\n}", CompletionContext.ATTRIBUTE_ARGUMENT),
            ("model User {\n  a Int\n  @@unique([|])\n}", CompletionContext.ATTRIBUTE_ARGUMENT),
            ("model User {\n  name String @map(|)\n}", CompletionContext.NONE),
            ("model User {\n  // name |\n}", CompletionContext.NONE),
            ("type_alias Base {\n  createdAt |\n}", CompletionContext.TYPE),
            ('datasource db {\n  provider = |\n}', CompletionContext.FIELD_VALUE),
            ('datasource db {\n  provider |\n}', CompletionContext.NONE),
            ("datasource db {\n  |\n}", CompletionContext.FIRST_MEMBER),
            ("enum Role {\n  USER |\n}", CompletionContext.NONE),
            ("model Post {\n  author User @relation(\n    fields: [|\n  )\n}", CompletionContext.NONE),
            ("model Post {\n  author User @relation(\n    references: |\n  )\n}", CompletionContext.NONE),
            ("model Post {\n  author User @relation(\n    [a, |\n  )\n}", CompletionContext.NONE),
        ],
    )
    def test_contexts(self, at_cursor, marked: str, expected: CompletionContext) -> None:
        cursor = at_cursor(marked)
        block = find_block(cursor.document, cursor.position.line)
        assert classify_completion_context(cursor.document, cursor.position, block) == expected

    def test_inconsistent_block(self, at_cursor) -> None:
        cursor = at_cursor("model User {\n  name |\n}")
        block = ScannedBlock(ir.BlockKind.MODEL, "User", 2, 0, [])
        assert (
            classify_completion_context(cursor.document, cursor.position, block)
            == CompletionContext.NONE
        )


class TestAttributePosition:
    @pytest.mark.parametrize(
        ("marked", "expected"),
        [
            ("  @@|", AttributePosition.BLOCK_ATTRIBUTE_START),
            ("  id Int @|", AttributePosition.FIELD_ATTRIBUTE_START),
            ("  id Int @i|", AttributePosition.PLAIN_BODY),
            ("  id Int |", AttributePosition.PLAIN_BODY),
            ("@|", AttributePosition.PLAIN_BODY),
            ("  name String\t@|", AttributePosition.PLAIN_BODY),
        ],
    )
    def test_positions(self, at_cursor, marked: str, expected: AttributePosition) -> None:
        cursor = at_cursor(marked)
        assert attribute_position(cursor.document, cursor.position) == expected

    def test_typed_prefix(self) -> None:
        assert AttributePosition.BLOCK_ATTRIBUTE_START.typed_prefix == "@@"
        assert AttributePosition.FIELD_ATTRIBUTE_START.typed_prefix == "@"
        assert AttributePosition.PLAIN_BODY.typed_prefix == ""

    def test_symbol_before_line_start(self, new_document) -> None:
        document = new_document("@id")
        assert symbol_before_position(document, Position(line=0, character=1)) == "@"
        assert symbol_before_position(document, Position(line=0, character=0)) == ""
        assert symbol_before_position(document, Position(line=5, character=3)) == ""


class TestOpenAttributeCall:
    def test_empty_arguments(self) -> None:
        assert open_attribute_call("  id Int @default(") == ("@default", "")

    def test_partial_arguments(self) -> None:
        prefix = "  author User @relation(fields: [a], references: ["
        assert open_attribute_call(prefix) == ("@relation", "fields: [a], references: [")

    def test_nested_call_closed(self) -> None:
        assert open_attribute_call("  at DateTime @default(now()") == ("@default", "now()")

    def test_inside_function_call(self) -> None:
        assert open_attribute_call("  url String @default(env(") is None

    def test_no_open_call(self) -> None:
        assert open_attribute_call("  id Int @default(uuid())") is None
        assert open_attribute_call("  id Int") is None

    def test_block_attribute(self) -> None:
        assert open_attribute_call("  @@index([a, ") == ("@@index", "[a, ")


class TestArgumentHelpers:
    def test_inside_named_argument(self) -> None:
        assert is_inside_argument("fields: [", "fields")
        assert is_inside_argument("fields: [a, ", "fields")
        assert not is_inside_argument("fields: [a], ", "fields")
        assert is_inside_argument("fields: [a], references: [", "references")
        assert not is_inside_argument("fields: [a], references: [", "fields")
        assert not is_inside_argument("", "fields")

    @pytest.mark.parametrize(
        ("prefix", "expected"),
        [("", True), ("  ", True), ("  na", True), ("  name ", False), ("  @", False)],
    )
    def test_first_in_block(self, prefix: str, expected: bool) -> None:
        assert is_first_in_block(prefix) is expected

    @pytest.mark.parametrize(
        ("prefix", "expected"),
        [
            ("  name ", True),
            ("  name Str", True),
            ("  name", False),
            ("  name String ", False),
            ("  name @", False),
            ("  @@unique ", False),
            ("    fields: ", False),
            ("    fields: [", False),
            ("  name String[] ", False),
            ("  [a, ", False),
        ],
    )
    def test_type_position(self, prefix: str, expected: bool) -> None:
        assert is_type_position(prefix) is expected

    @pytest.mark.parametrize(
        ("prefix", "expected"),
        [
            ("    fields: [authorId],", True),
            ("    references:[id]", True),
            ("  )", True),
            ("  ], ", True),
            ("  author User @relation(fields: [authorId])", False),
            ("  name ", False),
            ("", False),
        ],
    )
    def test_argument_continuation(self, prefix: str, expected: bool) -> None:
        assert is_argument_continuation(prefix) is expected
