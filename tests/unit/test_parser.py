"""Tests for the schema parser and the parsed-tree model."""

from __future__ import annotations

import pytest

from prisma_lsp.core import ir
from prisma_lsp.core.errors import ParseError
from prisma_lsp.core.parser import parse_schema, try_parse_schema


class TestParseSchema:
    """parse_schema builds blocks with 0-indexed line ranges."""

    def test_block_ranges(self, sample_schema: ir.Schema) -> None:
        summary = [
            (block.kind, block.name, block.start_line, block.end_line)
            for block in sample_schema.blocks
        ]
        assert summary == [
            (ir.BlockKind.DATASOURCE, "db", 0, 3),
            (ir.BlockKind.GENERATOR, "client", 5, 7),
            (ir.BlockKind.MODEL, "User", 9, 16),
            (ir.BlockKind.MODEL, "Post", 18, 25),
            (ir.BlockKind.ENUM, "Role", 27, 30),
        ]

    def test_assignments(self, sample_schema: ir.Schema) -> None:
        datasource = sample_schema.blocks[0]
        provider = datasource.assignment("provider")
        assert provider is not None
        assert provider.value == ir.Value(kind=ir.ValueKind.STRING, raw="postgresql")
        assert provider.line == 1

        url = datasource.assignment("url")
        assert url is not None
        assert url.value.kind == ir.ValueKind.FUNCTION
        assert url.value.raw == "env"
        assert url.value.items[0].raw == "DATABASE_URL"

    def test_fields(self, sample_schema: ir.Schema) -> None:
        user = sample_schema.blocks[2]
        assert [field.name for field in user.fields] == [
            "id",
            "email",
            "name",
            "role",
            "posts",
            "createdAt",
        ]
        by_name = {field.name: field for field in user.fields}
        assert by_name["name"].type.is_optional
        assert by_name["posts"].type == ir.FieldType(name="Post", is_list=True)
        assert by_name["id"].has_attribute("id")
        assert by_name["id"].has_attribute("default")
        assert by_name["role"].type.name == "Role"

    def test_relation_arguments(self, sample_schema: ir.Schema) -> None:
        post = sample_schema.blocks[3]
        author = next(field for field in post.fields if field.name == "author")
        relation = author.attributes[0]
        assert relation.label == "@relation"
        fields = relation.argument("fields")
        references = relation.argument("references")
        assert fields is not None and fields.value.identifiers() == ["authorId"]
        assert references is not None and references.value.identifiers() == ["id"]

    def test_block_attributes(self, sample_schema: ir.Schema) -> None:
        post = sample_schema.blocks[3]
        assert len(post.attributes) == 1
        unique = post.attributes[0]
        assert unique.label == "@@unique"
        assert unique.line == 24
        assert unique.arguments[0].name is None
        assert unique.arguments[0].value.identifiers() == ["title", "authorId"]

    def test_enum_values(self, sample_schema: ir.Schema) -> None:
        role = sample_schema.blocks[4]
        assert [(value.name, value.line) for value in role.values] == [
            ("USER", 28),
            ("ADMIN", 29),
        ]

    def test_enum_attributes(self) -> None:
        schema = parse_schema('enum Role {\n  USER @map("user")\n  ADMIN\n\n  @@map("roles")\n}')
        role = schema.blocks[0]
        assert [value.name for value in role.values] == ["USER", "ADMIN"]
        assert role.values[0].attributes[0].label == "@map"
        assert role.values[1].attributes == []
        assert [(attr.label, attr.line) for attr in role.attributes] == [("@@map", 4)]

    def test_single_line_block(self) -> None:
        schema = parse_schema('datasource db { provider = "sqlite" }')
        block = schema.blocks[0]
        assert (block.start_line, block.end_line) == (0, 0)
        assert block.assignment("provider") is not None

    def test_type_alias_block(self) -> None:
        schema = parse_schema("type_alias Timestamps {\n  createdAt DateTime\n}")
        block = schema.blocks[0]
        assert block.kind == ir.BlockKind.TYPE_ALIAS
        assert [field.name for field in block.fields] == ["createdAt"]

    def test_comments_and_blank_lines(self) -> None:
        text = "// Users\n\nmodel User {\n  // key\n  id Int // trailing\n\n}\n"
        schema = parse_schema(text)
        assert [field.name for field in schema.blocks[0].fields] == ["id"]
        assert schema.blocks[0].start_line == 2

    def test_multiline_attribute_arguments(self) -> None:
        text = "model User {\n  a Int\n  b Int\n  @@index([\n    a,\n    b\n  ])\n}"
        block = parse_schema(text).blocks[0]
        assert block.attributes[0].arguments[0].value.identifiers() == ["a", "b"]
        assert block.end_line == 7

    def test_namespaced_attribute(self) -> None:
        block = parse_schema("model User {\n  name String @db.VarChar(255)\n}").blocks[0]
        attribute = block.fields[0].attributes[0]
        assert attribute.name == "db.VarChar"
        assert attribute.arguments[0].value.raw == "255"

    def test_empty_document(self) -> None:
        assert parse_schema("").blocks == []


class TestBlockAtLine:
    def test_body_line(self, sample_schema: ir.Schema) -> None:
        block = sample_schema.block_at_line(10)
        assert block is not None and block.name == "User"

    @pytest.mark.parametrize("line", [9, 16, 17, 100])
    def test_outside_body(self, sample_schema: ir.Schema, line: int) -> None:
        assert sample_schema.block_at_line(line) is None

    def test_blocks_of_kind(self, sample_schema: ir.Schema) -> None:
        names = [b.name for b in sample_schema.blocks_of_kind(ir.BlockKind.MODEL, ir.BlockKind.ENUM)]
        assert names == ["User", "Post", "Role"]


class TestParseErrors:
    """Invalid documents raise ParseError with a located context."""

    def test_unterminated_block(self) -> None:
        with pytest.raises(ParseError, match="Unterminated model block 'User'"):
            parse_schema("model User {\n  id Int\n")

    def test_missing_field_type(self) -> None:
        with pytest.raises(ParseError, match="Expected identifier, got end of line") as exc_info:
            parse_schema("model User {\n  id\n}")
        context = exc_info.value.context
        assert context is not None
        assert (context.line, context.column) == (2, 5)
        assert "schema.prisma:2:5" in str(exc_info.value)
        assert "^^^" in str(exc_info.value)

    def test_unknown_block_keyword(self) -> None:
        with pytest.raises(ParseError, match="Expected a block keyword, got 'view'"):
            parse_schema("view Users {\n}")

    def test_try_parse_returns_none(self) -> None:
        assert try_parse_schema("model User {\n  author \n}") is None

    def test_try_parse_valid(self, sample_schema_text: str) -> None:
        schema = try_parse_schema(sample_schema_text)
        assert schema is not None
        assert len(schema.blocks) == 5
