"""
Completion entry points.

Each ``resolve_*`` function handles one grammatical position and always
returns a complete ``CompletionList`` (possibly empty). ``get_completions``
locates the block under the cursor, classifies the position and dispatches
to the matching resolver.
"""

from __future__ import annotations

import logging

from lsprotocol.types import CompletionItem, CompletionItemKind, CompletionList, Position
from pygls.workspace import TextDocument

from ..core import ir
from ..core.config import CompletionSettings
from . import filters, grammar
from .blocks import SchemaBlock, find_block
from .context import (
    AttributePosition,
    CompletionContext,
    attribute_position,
    classify_completion_context,
    is_inside_argument,
    open_attribute_call,
)
from .grammar import AttributeSpec, GrammarEntry
from .scanner import get_current_line, scan_type_names

logger = logging.getLogger(__name__)

FIELD_ARGUMENT_ATTRIBUTES = ("@@unique", "@@id", "@@index")


# =============================================================================
# Assembly
# =============================================================================


def _completion_list(items: list[CompletionItem]) -> CompletionList:
    return CompletionList(is_incomplete=False, items=items)


def _entry_item(entry: GrammarEntry) -> CompletionItem:
    return CompletionItem(
        label=entry.label,
        kind=entry.kind,
        detail=entry.detail,
        documentation=entry.documentation,
    )


def _attribute_item(spec: AttributeSpec, typed_prefix: str = "") -> CompletionItem:
    """
    Build an attribute suggestion, prefixing only the at-signs not yet typed.

    With ``@`` typed, a field attribute gets no prefix and a block attribute
    gets one more ``@``.
    """
    prefix = spec.target.prefix[len(typed_prefix) :]
    return CompletionItem(
        label=prefix + spec.label,
        kind=CompletionItemKind.Property,
        detail=spec.detail,
        documentation=spec.documentation,
        data={"target": spec.target.value},
    )


def _plain_items(labels: list[str], kind: CompletionItemKind) -> list[CompletionItem]:
    return [CompletionItem(label=label, kind=kind) for label in labels]


def _inside_string(text: str) -> bool:
    return text.count('"') % 2 == 1


# =============================================================================
# Resolvers
# =============================================================================


def resolve_attribute_suggestions(
    block_kind: ir.BlockKind | str,
    position: Position,
    document: TextDocument,
) -> CompletionList:
    """Field and block attributes for an attribute position inside a block."""
    line = get_current_line(document, position.line)
    where = attribute_position(document, position)
    typed = where.typed_prefix

    block_specs = grammar.block_attributes(block_kind)
    if where == AttributePosition.BLOCK_ATTRIBUTE_START:
        specs = block_specs
    else:
        specs = grammar.field_attributes(block_kind, line) + block_specs

    return _completion_list([_attribute_item(spec, typed) for spec in specs])


def resolve_type_suggestions(
    current_block: SchemaBlock | None,
    document: TextDocument,
    schema: ir.Schema | None = None,
) -> CompletionList:
    """
    Scalar types plus every other model and enum declared in the document.

    Names come from the parsed tree when there is one, otherwise from a
    line scan that skips the enclosing block's own header.
    """
    if current_block is not None and not current_block.is_well_formed:
        return _completion_list([])

    own_name = current_block.name if current_block else None
    if schema is not None:
        names = [
            block.name
            for block in schema.blocks_of_kind(ir.BlockKind.MODEL, ir.BlockKind.ENUM)
            if block.name != own_name
        ]
    else:
        own_line = current_block.start_line if current_block else None
        names = scan_type_names(document, exclude_line=own_line)

    items = [_entry_item(entry) for entry in grammar.scalar_types()]
    items += _plain_items(names, CompletionItemKind.TypeParameter)
    return _completion_list(items)


def resolve_first_member_suggestions(
    block_kind: ir.BlockKind | str,
    document: TextDocument,
    position: Position,
    schema: ir.Schema | None = None,
    block: SchemaBlock | None = None,
) -> CompletionList:
    """
    Suggestions for the start of a line inside a block.

    Datasource and generator blocks get their unassigned keys; models get
    ``@@`` block attributes.
    """
    if block is not None and not block.is_well_formed:
        return _completion_list([])

    kind = ir.BlockKind.from_keyword(block_kind)
    items: list[CompletionItem] = []

    if kind in ir.ASSIGNMENT_BLOCKS:
        if block is None:
            block = find_block(document, position.line, schema)
        entries = filters.unused_block_fields(kind, block, exclude_line=position.line)
        items = [_entry_item(entry) for entry in entries]
    elif kind in ir.FIELD_BLOCKS:
        items = [_attribute_item(spec) for spec in grammar.block_attributes(kind)]

    return _completion_list(items)


def resolve_block_kind_suggestions(
    schema: ir.Schema | None = None,
    document: TextDocument | None = None,
    settings: CompletionSettings | None = None,
) -> CompletionList:
    """Top-level block keywords; ``enum`` only if the datasource supports enums."""
    settings = settings or CompletionSettings()
    entries = grammar.block_kinds()
    if not filters.enum_supported(schema, document, settings.enum_unsupported_providers):
        entries = filters.without_block_kind(entries, ir.BlockKind.ENUM)
    return _completion_list([_entry_item(entry) for entry in entries])


def resolve_enumerated_field_value_suggestions(
    block_kind: ir.BlockKind | str,
    document: TextDocument,
    position: Position,
    settings: CompletionSettings | None = None,
) -> CompletionList:
    """Known values for a `provider = ...` assignment."""
    settings = settings or CompletionSettings()
    line = get_current_line(document, position.line)
    if not line.strip().startswith("provider"):
        return _completion_list([])

    values = grammar.provider_values(block_kind, settings.generator_providers)
    quoted = _inside_string(line[: max(position.character, 0)])
    items = [
        CompletionItem(
            label=value,
            kind=CompletionItemKind.Field,
            insert_text=value if quoted else f'"{value}"',
        )
        for value in values
    ]
    return _completion_list(items)


def resolve_attribute_argument_suggestions(
    document: TextDocument,
    position: Position,
    current_block: SchemaBlock | None,
) -> CompletionList:
    """Suggestions inside `@default(...)`, `@relation(...)`, `@@unique(...)` and friends."""
    if current_block is None or not current_block.is_well_formed:
        return _completion_list([])

    line = get_current_line(document, position.line)
    call = open_attribute_call(line[: max(position.character, 0)])
    if call is None:
        return _completion_list([])
    attribute, arguments = call
    if _inside_string(arguments):
        return _completion_list([])

    labels: list[str] = []
    kind = CompletionItemKind.Field
    if attribute == "@default":
        labels = grammar.default_functions(line)
        kind = CompletionItemKind.Function
    elif attribute == "@relation":
        for argument in filters.RELATION_LIST_ARGUMENTS:
            if is_inside_argument(arguments, argument):
                labels = filters.argument_field_candidates(
                    current_block, line, position.line, argument
                )
                break
        else:
            if arguments.count("[") <= arguments.count("]"):
                labels = filters.remaining_relation_shapes(arguments)
                kind = CompletionItemKind.Property
    elif attribute in FIELD_ARGUMENT_ATTRIBUTES:
        labels = filters.argument_field_candidates(current_block, line, position.line)

    return _completion_list(_plain_items(labels, kind))


# =============================================================================
# Dispatch
# =============================================================================


def get_completions(
    document: TextDocument,
    position: Position,
    schema: ir.Schema | None = None,
    settings: CompletionSettings | None = None,
) -> CompletionList:
    """
    Resolve completions for ``position``.

    Args:
        document: Document being edited
        position: Cursor position
        schema: Parsed tree, or None when the document does not parse
        settings: Completion settings (defaults when omitted)

    Returns:
        A complete completion list; empty when nothing applies
    """
    settings = settings or CompletionSettings()
    if position.line < 0 or position.character < 0 or position.line > len(document.lines):
        return _completion_list([])

    block = find_block(document, position.line, schema)
    context = classify_completion_context(document, position, block)
    logger.debug(
        f"Completion at {position.line}:{position.character} -> {context.value} "
        f"(block={block!r}, parsed={schema is not None})"
    )

    if context == CompletionContext.BLOCK_KIND:
        return resolve_block_kind_suggestions(schema, document, settings)
    if block is None or context == CompletionContext.NONE:
        return _completion_list([])

    if context == CompletionContext.FIRST_MEMBER:
        return resolve_first_member_suggestions(block.kind, document, position, schema, block)
    if context == CompletionContext.ATTRIBUTE:
        return resolve_attribute_suggestions(block.kind, position, document)
    if context == CompletionContext.ATTRIBUTE_ARGUMENT:
        return resolve_attribute_argument_suggestions(document, position, block)
    if context == CompletionContext.TYPE:
        return resolve_type_suggestions(block, document, schema)
    if context == CompletionContext.FIELD_VALUE:
        return resolve_enumerated_field_value_suggestions(block.kind, document, position, settings)
    return _completion_list([])
