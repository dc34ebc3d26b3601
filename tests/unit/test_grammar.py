"""Tests for the static grammar tables and lookups."""

from __future__ import annotations

import pytest
from lsprotocol.types import CompletionItemKind
from pydantic import ValidationError

from prisma_lsp.core.ir import BlockKind
from prisma_lsp.lsp import grammar
from prisma_lsp.lsp.grammar import AttributeTarget


def _labels(items) -> list[str]:
    return [item.label for item in items]


class TestTables:
    """Tables are immutable and lookups hand out copies."""

    def test_tables_are_tuples(self) -> None:
        for table in (
            grammar.SCALAR_TYPES,
            grammar.BLOCK_KINDS,
            grammar.BLOCK_ATTRIBUTES,
            grammar.FIELD_ATTRIBUTES,
            grammar.DATASOURCE_FIELDS,
            grammar.GENERATOR_FIELDS,
        ):
            assert isinstance(table, tuple)

    def test_entries_are_frozen(self) -> None:
        entry = grammar.BLOCK_KINDS[0]
        with pytest.raises(ValidationError):
            entry.label = "changed"

    def test_lookup_returns_a_copy(self) -> None:
        kinds = grammar.block_kinds()
        kinds.clear()
        assert len(grammar.block_kinds()) == 5

        functions = grammar.default_functions("  id Int @id")
        functions.append("bogus()")
        assert "bogus()" not in grammar.default_functions("  id Int @id")

    def test_scalar_types(self) -> None:
        assert _labels(grammar.scalar_types()) == ["String", "Boolean", "Int", "Float", "DateTime"]
        assert all(e.kind == CompletionItemKind.TypeParameter for e in grammar.scalar_types())

    def test_block_kinds(self) -> None:
        assert _labels(grammar.block_kinds()) == [
            "datasource",
            "generator",
            "model",
            "type_alias",
            "enum",
        ]
        assert all(e.documentation for e in grammar.block_kinds())


class TestAttributes:
    def test_block_attributes_only_in_models(self) -> None:
        assert _labels(grammar.block_attributes(BlockKind.MODEL)) == [
            "map([])",
            "id([])",
            "unique([])",
            "index([])",
        ]
        assert grammar.block_attributes("model") == grammar.block_attributes(BlockKind.MODEL)
        assert grammar.block_attributes(BlockKind.TYPE_ALIAS) == []
        assert grammar.block_attributes("enum") == []
        assert grammar.block_attributes(None) == []

    def test_field_attributes_with_int(self) -> None:
        assert _labels(grammar.field_attributes("model", "  id Int ")) == [
            "id",
            "unique",
            "map()",
            "default()",
            "relation()",
        ]

    @pytest.mark.parametrize("line", ["  name String ", "  count Integer ", "  "])
    def test_field_attributes_without_int(self, line: str) -> None:
        assert "id" not in _labels(grammar.field_attributes(BlockKind.MODEL, line))

    def test_field_attributes_in_type_alias(self) -> None:
        assert "unique" in _labels(grammar.field_attributes(BlockKind.TYPE_ALIAS, "  a String"))

    @pytest.mark.parametrize("kind", ["datasource", "generator", "enum", "view"])
    def test_no_field_attributes_elsewhere(self, kind: str) -> None:
        assert grammar.field_attributes(kind, "  id Int ") == []

    def test_target_prefix(self) -> None:
        assert AttributeTarget.FIELD.prefix == "@"
        assert AttributeTarget.BLOCK.prefix == "@@"


class TestBlockFields:
    def test_datasource(self) -> None:
        assert _labels(grammar.block_fields("datasource")) == ["provider", "url"]

    def test_generator(self) -> None:
        assert _labels(grammar.block_fields(BlockKind.GENERATOR)) == [
            "provider",
            "output",
            "platforms",
            "pinnedPlatform",
        ]

    def test_other_blocks(self) -> None:
        assert grammar.block_fields("model") == []

    def test_provider_values(self) -> None:
        assert grammar.provider_values("datasource") == ["postgresql", "mysql", "sqlite"]
        assert grammar.provider_values("generator") == ["prisma-client-js"]
        assert grammar.provider_values("generator", ("prisma-client-go",)) == ["prisma-client-go"]
        assert grammar.provider_values("model") == []


class TestDefaultFunctions:
    def test_always_available(self) -> None:
        assert grammar.default_functions("  token String @default(") == ["uuid()", "cuid()"]

    def test_autoincrement_needs_int_id(self) -> None:
        assert "autoincrement()" in grammar.default_functions("  id Int @id @default(")
        assert "autoincrement()" not in grammar.default_functions("  count Int @default(")
        assert "autoincrement()" not in grammar.default_functions("  id String @id @default(")

    def test_now_for_datetime(self) -> None:
        assert grammar.default_functions("  createdAt DateTime @default(") == [
            "uuid()",
            "cuid()",
            "now()",
        ]

    def test_relation_shapes(self) -> None:
        assert grammar.relation_argument_shapes() == ["references: []", "fields: []", '""']
