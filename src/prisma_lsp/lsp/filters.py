"""
Candidate filtering.

Every function returns a new list; the grammar tables and the inputs are
never modified.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from pygls.workspace import TextDocument

from ..core import ir
from . import grammar, scanner
from .blocks import SchemaBlock
from .grammar import GrammarEntry

RELATION_LIST_ARGUMENTS = ("fields", "references")


def remove_declared(entries: list[GrammarEntry], declared: Iterable[str]) -> list[GrammarEntry]:
    """Drop entries whose label is already declared."""
    taken = set(declared)
    return [entry for entry in entries if entry.label not in taken]


def unused_block_fields(
    block_kind: ir.BlockKind | str,
    block: SchemaBlock | None,
    exclude_line: int | None = None,
) -> list[GrammarEntry]:
    """
    Datasource/generator keys that are not assigned yet.

    Each key may be assigned once per block; the line being edited does not
    count as an assignment.
    """
    fields = grammar.block_fields(block_kind)
    if block is None:
        return fields
    return remove_declared(fields, block.declared_member_names(exclude_line))


def bracket_identifiers(line: str, argument: str) -> set[str]:
    """Identifiers listed in ``argument: [...]`` on ``line``."""
    match = re.search(rf"\b{re.escape(argument)}\s*:\s*\[([^\]]*)", line)
    if match is None:
        return set()
    return {name.strip() for name in match.group(1).split(",") if name.strip()}


def other_argument_identifiers(line: str, argument: str | None) -> set[str]:
    """
    Identifiers used by the opposite relation list on the same line.

    Only applies when the line holds both a ``fields`` and a ``references``
    argument.
    """
    if argument not in RELATION_LIST_ARGUMENTS:
        return set()
    if not all(name in line for name in RELATION_LIST_ARGUMENTS):
        return set()
    other = "fields" if argument == "references" else "references"
    return bracket_identifiers(line, other)


def argument_field_candidates(
    block: SchemaBlock,
    line: str,
    cursor_line: int,
    argument: str | None = None,
) -> list[str]:
    """Field names of ``block`` usable inside an attribute's argument list."""
    excluded = other_argument_identifiers(line, argument)
    return [name for name in block.declared_field_names(cursor_line) if name not in excluded]


def remaining_relation_shapes(argument_text: str) -> list[str]:
    """Opening shapes for `@relation(...)` not yet present in its arguments."""
    shapes = grammar.relation_argument_shapes()
    if not argument_text.strip():
        return shapes
    remaining = []
    for shape in shapes:
        if shape == '""':
            present = '"' in argument_text
        else:
            present = re.search(rf"\b{shape.split(':')[0]}\s*:", argument_text) is not None
        if not present:
            remaining.append(shape)
    return remaining


def schema_uses_provider(schema: ir.Schema, providers: Iterable[str]) -> bool:
    """True if a parsed datasource block assigns one of ``providers``."""
    wanted = set(providers)
    for block in schema.blocks_of_kind(ir.BlockKind.DATASOURCE):
        assignment = block.assignment("provider")
        if (
            assignment is not None
            and assignment.value.kind == ir.ValueKind.STRING
            and assignment.value.raw in wanted
        ):
            return True
    return False


def enum_supported(
    schema: ir.Schema | None,
    document: TextDocument | None,
    unsupported_providers: Iterable[str] = ("sqlite",),
) -> bool:
    """
    Whether the active datasource can back enum blocks.

    Uses the parsed tree when available, otherwise scans the document text.
    """
    providers = tuple(unsupported_providers)
    if schema is not None:
        return not schema_uses_provider(schema, providers)
    if document is not None:
        return not scanner.scan_uses_provider(document, providers)
    return True


def without_block_kind(entries: list[GrammarEntry], kind: ir.BlockKind) -> list[GrammarEntry]:
    return [entry for entry in entries if entry.label != kind.value]
