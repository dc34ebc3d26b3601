"""
Static grammar knowledge for completion.

Everything here is immutable: tables are tuples of frozen models, and every
lookup function returns a new list so callers can filter or decorate the
result without touching the tables.
"""

from __future__ import annotations

import re
from enum import Enum

from lsprotocol.types import CompletionItemKind
from pydantic import BaseModel, ConfigDict

from ..core.ir import BlockKind, FIELD_BLOCKS


class GrammarEntry(BaseModel):
    """A named grammar element offered as a completion."""

    label: str
    kind: CompletionItemKind
    detail: str | None = None
    documentation: str | None = None

    model_config = ConfigDict(frozen=True)


class AttributeTarget(str, Enum):
    FIELD = "field"
    BLOCK = "block"

    @property
    def prefix(self) -> str:
        return "@" if self == AttributeTarget.FIELD else "@@"


class AttributeSpec(BaseModel):
    """
    An attribute together with its argument schema.

    ``call_suffix`` is appended to the name in suggestion labels, e.g.
    ``unique([])`` for the block attribute or ``default()`` for the field one.
    """

    name: str
    target: AttributeTarget
    call_suffix: str = ""
    arguments: tuple[str, ...] = ()
    detail: str | None = None
    documentation: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def label(self) -> str:
        return self.name + self.call_suffix


SCALAR_TYPES: tuple[GrammarEntry, ...] = (
    GrammarEntry(
        label="String",
        kind=CompletionItemKind.TypeParameter,
        documentation="Variable length text",
    ),
    GrammarEntry(
        label="Boolean",
        kind=CompletionItemKind.TypeParameter,
        documentation="True or false value",
    ),
    GrammarEntry(
        label="Int",
        kind=CompletionItemKind.TypeParameter,
        documentation="Integer value",
    ),
    GrammarEntry(
        label="Float",
        kind=CompletionItemKind.TypeParameter,
        documentation="Floating point number",
    ),
    GrammarEntry(
        label="DateTime",
        kind=CompletionItemKind.TypeParameter,
        documentation="Timestamp",
    ),
)

BLOCK_KINDS: tuple[GrammarEntry, ...] = (
    GrammarEntry(
        label=BlockKind.DATASOURCE.value,
        kind=CompletionItemKind.Class,
        documentation="The datasource block tells the schema where the models are backed.",
    ),
    GrammarEntry(
        label=BlockKind.GENERATOR.value,
        kind=CompletionItemKind.Class,
        documentation=(
            "Generator blocks configure which clients are generated and how they're "
            "generated. Language preferences and binary configuration will go in here."
        ),
    ),
    GrammarEntry(
        label=BlockKind.MODEL.value,
        kind=CompletionItemKind.Class,
        documentation=(
            "Models represent the entities of your application domain. "
            "They are defined using model blocks in the data model."
        ),
    ),
    GrammarEntry(
        label=BlockKind.TYPE_ALIAS.value,
        kind=CompletionItemKind.Class,
        documentation="Type aliases group reusable field declarations and attributes.",
    ),
    GrammarEntry(
        label=BlockKind.ENUM.value,
        kind=CompletionItemKind.Class,
        documentation=(
            "Enums are defined via the enum block. You can define enums in your data model "
            "if they're supported by the data source you use:\n"
            "• PostgreSQL: Supported\n• MySQL: Supported\n• SQLite: Not supported"
        ),
    ),
)

BLOCK_ATTRIBUTES: tuple[AttributeSpec, ...] = (
    AttributeSpec(
        name="map",
        target=AttributeTarget.BLOCK,
        call_suffix="([])",
        arguments=("name",),
        detail="@@map(_ name: String)",
        documentation="Defines the name of the underlying table or collection name.",
    ),
    AttributeSpec(
        name="id",
        target=AttributeTarget.BLOCK,
        call_suffix="([])",
        arguments=("fields",),
        detail="@@id(_ fields: Identifier[])",
        documentation="Defines a composite primary key across fields.",
    ),
    AttributeSpec(
        name="unique",
        target=AttributeTarget.BLOCK,
        call_suffix="([])",
        arguments=("fields", "name"),
        detail="@@unique(_ fields: Identifier[], name: String?)",
        documentation="Defines a composite unique constraint across fields.",
    ),
    AttributeSpec(
        name="index",
        target=AttributeTarget.BLOCK,
        call_suffix="([])",
        arguments=("fields", "name"),
        detail="@@index(_ fields: Identifier[], name: String?)",
        documentation="Defines an index for multiple fields",
    ),
)

FIELD_ATTRIBUTES: tuple[AttributeSpec, ...] = (
    AttributeSpec(
        name="id",
        target=AttributeTarget.FIELD,
        detail="@id",
        documentation="Defines the primary key. There must be exactly one field @id or block @id",
    ),
    AttributeSpec(
        name="unique",
        target=AttributeTarget.FIELD,
        detail="@unique",
        documentation="Defines the unique constraint.",
    ),
    AttributeSpec(
        name="map",
        target=AttributeTarget.FIELD,
        call_suffix="()",
        arguments=("name",),
        detail="@map(_ name: String)",
        documentation="Defines the raw column name the field is mapped to.",
    ),
    AttributeSpec(
        name="default",
        target=AttributeTarget.FIELD,
        call_suffix="()",
        arguments=("expr",),
        detail="@default(_ expr: Expr)",
        documentation="Specifies a default value if null is provided.",
    ),
    AttributeSpec(
        name="relation",
        target=AttributeTarget.FIELD,
        call_suffix="()",
        arguments=("name", "fields", "references"),
        detail=(
            "@relation(_ name?: String, fields?: Identifier[], references?: Identifier[])\n"
            "Arguments:\n"
            "•name: (optional, except when required for disambiguation) defines the name of "
            "the relationship.\n"
            "•fields: (optional) list of fields of the current model\n"
            "•references: (optional) list of field names to reference"
        ),
        documentation=(
            "Specifies and disambiguates relationships when needed. Where possible on "
            "relational databases, the @relation annotation will translate to a foreign key "
            "constraint, but not an index."
        ),
    ),
)

DATASOURCE_FIELDS: tuple[GrammarEntry, ...] = (
    GrammarEntry(
        label="provider",
        kind=CompletionItemKind.Field,
        documentation=(
            "Can be one of the following built in datasource providers:\n"
            "•`postgresql`\n•`mysql`\n•`sqlite`"
        ),
    ),
    GrammarEntry(
        label="url",
        kind=CompletionItemKind.Field,
        documentation=(
            "Connection URL including authentication info. Each datasource provider "
            "documents the URL syntax. Most providers use the syntax provided by the database."
        ),
    ),
)

GENERATOR_FIELDS: tuple[GrammarEntry, ...] = (
    GrammarEntry(
        label="provider",
        kind=CompletionItemKind.Field,
        documentation=(
            "Can be a path or one of the following built in generator providers:\n"
            "•`prisma-client-js`"
        ),
    ),
    GrammarEntry(
        label="output",
        kind=CompletionItemKind.Field,
        documentation="Path for the generated client.",
    ),
    GrammarEntry(
        label="platforms",
        kind=CompletionItemKind.Field,
        detail="Declarative way to download the required binaries.",
        documentation=(
            "(optional) An array of binaries that are required by the application, "
            "string for known platforms and path for custom binaries."
        ),
    ),
    GrammarEntry(
        label="pinnedPlatform",
        kind=CompletionItemKind.Field,
        detail="Declarative way to choose the runtime binary.",
        documentation=(
            "(optional) A string that points to the name of an object in the platforms "
            "field, usually an environment variable.\n"
            "When a custom binary is provided the pinnedPlatform is required."
        ),
    ),
)

DATASOURCE_PROVIDERS: tuple[str, ...] = ("postgresql", "mysql", "sqlite")

ALWAYS_DEFAULT_FUNCTIONS: tuple[str, ...] = ("uuid()", "cuid()")

RELATION_ARGUMENT_SHAPES: tuple[str, ...] = ("references: []", "fields: []", '""')

_INT_TOKEN = re.compile(r"\bInt\b")
_DATETIME_TOKEN = re.compile(r"\bDateTime\b")
_ID_DESIGNATION = re.compile(r"@id\b")


def line_declares_int(line: str) -> bool:
    return _INT_TOKEN.search(line) is not None


def scalar_types() -> list[GrammarEntry]:
    return list(SCALAR_TYPES)


def block_kinds() -> list[GrammarEntry]:
    return list(BLOCK_KINDS)


def block_attributes(block_kind: BlockKind | str | None) -> list[AttributeSpec]:
    """Block-level attributes valid in ``block_kind`` (only models have any)."""
    if BlockKind.from_keyword(block_kind) != BlockKind.MODEL:
        return []
    return list(BLOCK_ATTRIBUTES)


def field_attributes(block_kind: BlockKind | str | None, line: str) -> list[AttributeSpec]:
    """
    Field-level attributes valid in ``block_kind`` for the given line.

    ``@id`` is only offered when the declaration on ``line`` is of type Int.
    """
    if BlockKind.from_keyword(block_kind) not in FIELD_BLOCKS:
        return []
    allow_id = line_declares_int(line)
    return [spec for spec in FIELD_ATTRIBUTES if allow_id or spec.name != "id"]


def block_fields(block_kind: BlockKind | str | None) -> list[GrammarEntry]:
    """Assignable keys of a datasource or generator block."""
    block_kind = BlockKind.from_keyword(block_kind)
    if block_kind == BlockKind.DATASOURCE:
        return list(DATASOURCE_FIELDS)
    if block_kind == BlockKind.GENERATOR:
        return list(GENERATOR_FIELDS)
    return []


def provider_values(
    block_kind: BlockKind | str | None,
    generator_providers: tuple[str, ...] = ("prisma-client-js",),
) -> list[str]:
    """Enumerated values for a block's `provider` assignment."""
    block_kind = BlockKind.from_keyword(block_kind)
    if block_kind == BlockKind.DATASOURCE:
        return list(DATASOURCE_PROVIDERS)
    if block_kind == BlockKind.GENERATOR:
        return list(generator_providers)
    return []


def default_functions(line: str) -> list[str]:
    """Functions valid inside `@default(...)` for the field declared on ``line``."""
    functions = list(ALWAYS_DEFAULT_FUNCTIONS)
    if line_declares_int(line) and _ID_DESIGNATION.search(line):
        functions.append("autoincrement()")
    if _DATETIME_TOKEN.search(line):
        functions.append("now()")
    return functions


def relation_argument_shapes() -> list[str]:
    return list(RELATION_ARGUMENT_SHAPES)
