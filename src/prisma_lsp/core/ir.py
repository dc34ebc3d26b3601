"""
Parsed-tree model for Prisma schema documents.

These models are produced by ``prisma_lsp.core.parser`` when a document is
syntactically valid. All line numbers are 0-indexed so they line up with LSP
positions; the lexer and error contexts keep the 1-indexed convention.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field as PydanticField


class BlockKind(str, Enum):
    """Top-level block keywords."""

    DATASOURCE = "datasource"
    GENERATOR = "generator"
    MODEL = "model"
    ENUM = "enum"
    TYPE_ALIAS = "type_alias"

    @classmethod
    def from_keyword(cls, keyword: str | None) -> BlockKind | None:
        """Return the block kind for a keyword, or None if it is not one."""
        try:
            return cls(keyword)
        except ValueError:
            return None


# Blocks whose bodies are `key = value` assignments.
ASSIGNMENT_BLOCKS = frozenset({BlockKind.DATASOURCE, BlockKind.GENERATOR})

# Blocks whose bodies are field declarations and attributes.
FIELD_BLOCKS = frozenset({BlockKind.MODEL, BlockKind.TYPE_ALIAS})


class ValueKind(str, Enum):
    """Kinds of literal or expression values."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    IDENTIFIER = "identifier"
    FUNCTION = "function"
    ARRAY = "array"


class Value(BaseModel):
    """
    A value on the right-hand side of an assignment or inside an argument.

    Examples:
        - "sqlite": Value(kind=STRING, raw="sqlite")
        - env("DATABASE_URL"): Value(kind=FUNCTION, raw="env", items=[Value(STRING, ...)])
        - [a, b]: Value(kind=ARRAY, raw="", items=[Value(IDENTIFIER, "a"), ...])
    """

    kind: ValueKind
    raw: str = ""
    items: list[Value] = PydanticField(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def identifiers(self) -> list[str]:
        """Return identifier names held by an array value."""
        return [item.raw for item in self.items if item.kind == ValueKind.IDENTIFIER]


class Argument(BaseModel):
    """An attribute argument, positional (name is None) or named."""

    name: str | None = None
    value: Value

    model_config = ConfigDict(frozen=True)


class Attribute(BaseModel):
    """A field attribute (`@id`) or block attribute (`@@unique([a, b])`)."""

    name: str
    is_block: bool = False
    arguments: list[Argument] = PydanticField(default_factory=list)
    line: int

    model_config = ConfigDict(frozen=True)

    @property
    def label(self) -> str:
        """Attribute name as written, including its at-signs."""
        return ("@@" if self.is_block else "@") + self.name

    def argument(self, name: str) -> Argument | None:
        """Return the named argument, if present."""
        for arg in self.arguments:
            if arg.name == name:
                return arg
        return None


class FieldType(BaseModel):
    """A field's declared type, e.g. `Post[]` or `Role?`."""

    name: str
    is_list: bool = False
    is_optional: bool = False

    model_config = ConfigDict(frozen=True)


class Field(BaseModel):
    """A field declaration inside a model or type_alias block."""

    name: str
    type: FieldType
    attributes: list[Attribute] = PydanticField(default_factory=list)
    line: int

    model_config = ConfigDict(frozen=True)

    def has_attribute(self, name: str) -> bool:
        return any(attr.name == name for attr in self.attributes)


class Assignment(BaseModel):
    """A `key = value` pair inside a datasource or generator block."""

    key: str
    value: Value
    line: int

    model_config = ConfigDict(frozen=True)


class EnumValue(BaseModel):
    """A single member of an enum block."""

    name: str
    attributes: list[Attribute] = PydanticField(default_factory=list)
    line: int

    model_config = ConfigDict(frozen=True)


class Block(BaseModel):
    """
    A named, braced top-level declaration.

    Only the member list matching ``kind`` is populated: ``assignments`` for
    datasource/generator, ``fields`` for model/type_alias, ``values`` for
    enum. ``attributes`` holds the ``@@`` attributes of models, type aliases
    and enums.
    """

    kind: BlockKind
    name: str
    start_line: int
    end_line: int
    assignments: list[Assignment] = PydanticField(default_factory=list)
    fields: list[Field] = PydanticField(default_factory=list)
    attributes: list[Attribute] = PydanticField(default_factory=list)
    values: list[EnumValue] = PydanticField(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def assignment(self, key: str) -> Assignment | None:
        for assignment in self.assignments:
            if assignment.key == key:
                return assignment
        return None


class Schema(BaseModel):
    """A fully parsed schema document."""

    blocks: list[Block] = PydanticField(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def blocks_of_kind(self, *kinds: BlockKind) -> list[Block]:
        return [block for block in self.blocks if block.kind in kinds]

    def block_at_line(self, line: int) -> Block | None:
        """Return the block whose body (between its braces) contains ``line``."""
        for block in self.blocks:
            if block.start_line < line < block.end_line:
                return block
        return None
