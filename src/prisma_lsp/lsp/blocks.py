"""
One view of "the block under the cursor", whatever produced it.

A ``ParsedBlock`` wraps a block from the parsed tree; a ``ScannedBlock`` is
reconstructed from raw lines when the document does not parse. Completion
logic is written once against ``SchemaBlock``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from pygls.workspace import TextDocument

from ..core import ir
from . import scanner

logger = logging.getLogger(__name__)


class SchemaBlock(ABC):
    """Capabilities shared by parsed and scanned blocks."""

    @property
    @abstractmethod
    def kind(self) -> ir.BlockKind: ...

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def start_line(self) -> int: ...

    @property
    @abstractmethod
    def end_line(self) -> int: ...

    @abstractmethod
    def declared_member_names(self, exclude_line: int | None = None) -> list[str]:
        """
        Names of the members declared in the block.

        Assignment keys for datasource/generator, field names and
        ``@@attribute`` names for model/type_alias, value names for enum.
        Members on ``exclude_line`` (the line being edited) are left out.
        """

    @property
    def is_well_formed(self) -> bool:
        return self.start_line <= self.end_line

    def contains_line(self, line: int) -> bool:
        return self.start_line < line < self.end_line

    def declared_field_names(self, exclude_line: int | None = None) -> list[str]:
        """Member names that are fields or assignments, not block attributes."""
        return [
            name for name in self.declared_member_names(exclude_line) if not name.startswith("@")
        ]

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.kind.value} {self.name!r}, "
            f"lines {self.start_line}-{self.end_line})"
        )


class ParsedBlock(SchemaBlock):
    """A block taken from the parsed tree."""

    def __init__(self, block: ir.Block):
        self.block = block

    @classmethod
    def from_parse(cls, block: ir.Block) -> ParsedBlock:
        return cls(block)

    @property
    def kind(self) -> ir.BlockKind:
        return self.block.kind

    @property
    def name(self) -> str:
        return self.block.name

    @property
    def start_line(self) -> int:
        return self.block.start_line

    @property
    def end_line(self) -> int:
        return self.block.end_line

    def declared_member_names(self, exclude_line: int | None = None) -> list[str]:
        block = self.block
        if block.kind in ir.ASSIGNMENT_BLOCKS:
            return [a.key for a in block.assignments if a.line != exclude_line]
        if block.kind == ir.BlockKind.ENUM:
            members = [(v.line, v.name) for v in block.values]
        else:
            members = [(f.line, f.name) for f in block.fields]
        members += [(attr.line, attr.label) for attr in block.attributes]
        return [name for line, name in sorted(members) if line != exclude_line]


class ScannedBlock(SchemaBlock):
    """A block reconstructed from document lines."""

    def __init__(
        self,
        kind: ir.BlockKind,
        name: str,
        start_line: int,
        end_line: int,
        lines: list[str],
    ):
        self._kind = kind
        self._name = name
        self._start_line = start_line
        self._end_line = end_line
        self._lines = lines

    @classmethod
    def from_scan(
        cls, document: TextDocument, start_line: int, end_line: int
    ) -> ScannedBlock | None:
        """Build a block from a line range; None if ``start_line`` is not a known header."""
        lines = scanner.document_lines(document)
        header = scanner.scan_header(scanner.get_current_line(document, start_line))
        if header is None:
            return None
        keyword, name = header
        kind = ir.BlockKind.from_keyword(keyword)
        if kind is None:
            return None
        return cls(kind, name, start_line, end_line, lines)

    @classmethod
    def at_position(cls, document: TextDocument, line: int) -> ScannedBlock | None:
        """The block whose body contains ``line``, found by scanning."""
        found = scanner.scan_block_range(scanner.document_lines(document), line)
        if found is None:
            return None
        return cls.from_scan(document, *found)

    @property
    def kind(self) -> ir.BlockKind:
        return self._kind

    @property
    def name(self) -> str:
        return self._name

    @property
    def start_line(self) -> int:
        return self._start_line

    @property
    def end_line(self) -> int:
        return self._end_line

    def declared_member_names(self, exclude_line: int | None = None) -> list[str]:
        return scanner.scan_member_names(self._lines, self._start_line, self._end_line, exclude_line)


def find_block(
    document: TextDocument,
    line: int,
    schema: ir.Schema | None = None,
) -> SchemaBlock | None:
    """
    Locate the block under ``line``.

    Uses the parsed tree when there is one and falls back to scanning.
    """
    if schema is not None:
        block = schema.block_at_line(line)
        return ParsedBlock.from_parse(block) if block else None

    logger.debug(f"No parsed schema, scanning for block at line {line}")
    return ScannedBlock.at_position(document, line)
