"""
Classification of the grammatical position under the cursor.

Works purely on the current line text plus the enclosing block, so it gives
the same answer whether the block came from the parsed tree or from line
scanning.
"""

from __future__ import annotations

import logging
import re
from enum import Enum

from lsprotocol.types import Position
from pygls.workspace import TextDocument

from ..core.ir import ASSIGNMENT_BLOCKS, FIELD_BLOCKS
from .blocks import SchemaBlock
from .scanner import get_current_line

logger = logging.getLogger(__name__)

# Attributes whose argument lists get their own suggestions
ARGUMENT_ATTRIBUTES = ("@default", "@relation", "@@unique", "@@id", "@@index")

_ATTRIBUTE_BEFORE_PAREN = re.compile(r"(@@?[\w.]+)\s*$")
_PARTIAL_WORD = re.compile(r"\w*")


class CompletionContext(str, Enum):
    """Which grammar production the cursor sits in."""

    BLOCK_KIND = "block_kind"  # top level, outside any block
    FIRST_MEMBER = "first_member"  # start of a line inside a block
    ATTRIBUTE = "attribute"  # where an @ or @@ attribute may go
    ATTRIBUTE_ARGUMENT = "attribute_argument"  # inside @attr( ... )
    TYPE = "type"  # after a field name, before/at its type
    FIELD_VALUE = "field_value"  # right-hand side of a datasource/generator assignment
    NONE = "none"


class AttributePosition(str, Enum):
    """What the two characters before the cursor say about an attribute."""

    BLOCK_ATTRIBUTE_START = "block_attribute_start"  # "@@"
    FIELD_ATTRIBUTE_START = "field_attribute_start"  # " @"
    PLAIN_BODY = "plain_body"

    @property
    def typed_prefix(self) -> str:
        """At-signs the user has already typed."""
        if self == AttributePosition.BLOCK_ATTRIBUTE_START:
            return "@@"
        if self == AttributePosition.FIELD_ATTRIBUTE_START:
            return "@"
        return ""


def symbol_before_position(document: TextDocument, position: Position, length: int = 2) -> str:
    """The ``length`` characters immediately before the cursor (fewer at line start)."""
    line = get_current_line(document, position.line)
    end = min(position.character, len(line))
    return line[max(end - length, 0) : end]


def attribute_position(document: TextDocument, position: Position) -> AttributePosition:
    symbol = symbol_before_position(document, position)
    if symbol == "@@":
        return AttributePosition.BLOCK_ATTRIBUTE_START
    if symbol == " @":
        return AttributePosition.FIELD_ATTRIBUTE_START
    return AttributePosition.PLAIN_BODY


def open_attribute_call(prefix: str) -> tuple[str, str] | None:
    """
    Find the attribute whose argument list is still open at the end of ``prefix``.

    Returns (attribute, text after its opening parenthesis), e.g.
    ``("@relation", "fields: [a, ")``. None if the innermost unclosed
    parenthesis does not belong to an attribute.
    """
    depth = 0
    for index in range(len(prefix) - 1, -1, -1):
        char = prefix[index]
        if char == ")":
            depth += 1
        elif char == "(":
            if depth == 0:
                match = _ATTRIBUTE_BEFORE_PAREN.search(prefix[:index])
                if match is None:
                    return None
                return match.group(1), prefix[index + 1 :]
            depth -= 1
    return None


def _names_argument(word: str, argument: str) -> bool:
    return ":" in word and word.partition(":")[0].strip("(,") == argument


def is_inside_argument(argument_text: str, argument: str) -> bool:
    """
    True if the cursor is inside the bracket list of a named argument.

    Scans words backward from the cursor; reaching a closing bracket first
    means the list is already closed.
    """
    for word in reversed(argument_text.split()):
        if _names_argument(word, argument):
            return "]" not in word
        if "]" in word:
            return False
    return False


def is_first_in_block(prefix: str) -> bool:
    """Nothing but indentation and (part of) a single word precedes the cursor."""
    return _PARTIAL_WORD.fullmatch(prefix.lstrip()) is not None


def is_argument_continuation(prefix: str) -> bool:
    """
    The line continues an argument list opened on an earlier line.

    Such lines start with a named argument (``fields: [``) or a bracket.
    """
    words = prefix.split()
    if not words:
        return False
    return ":" in words[0] or words[0].startswith(("(", ")", "[", "]"))


def is_type_position(prefix: str) -> bool:
    """The field name is complete and the type is not yet."""
    words = prefix.split()
    if not words or words[0].startswith(("@", "//")):
        return False
    if is_argument_continuation(prefix) or any(word.startswith("[") for word in words):
        return False
    if prefix[-1:].isspace():
        return len(words) == 1
    return len(words) == 2 and not words[1].startswith("@")


def classify_completion_context(
    document: TextDocument,
    position: Position,
    block: SchemaBlock | None,
) -> CompletionContext:
    """
    Decide which kind of suggestions apply at ``position``.

    Args:
        document: Document being edited
        position: Cursor position
        block: Block enclosing the cursor, if any

    Returns:
        The completion context; ``NONE`` when nothing applies
    """
    prefix = get_current_line(document, position.line)[: max(position.character, 0)]

    if block is None:
        if is_first_in_block(prefix):
            return CompletionContext.BLOCK_KIND
        return CompletionContext.NONE

    if not block.is_well_formed:
        logger.debug(f"Ignoring inconsistent block {block!r}")
        return CompletionContext.NONE

    if prefix.lstrip().startswith("//"):
        return CompletionContext.NONE

    if block.kind in FIELD_BLOCKS:
        call = open_attribute_call(prefix)
        if call is not None:
            if call[0] in ARGUMENT_ATTRIBUTES:
                return CompletionContext.ATTRIBUTE_ARGUMENT
            return CompletionContext.NONE
        if is_argument_continuation(prefix):
            return CompletionContext.NONE
        last_word = prefix.split()[-1] if prefix.split() else ""
        if prefix.endswith("@") or last_word.startswith("@"):
            return CompletionContext.ATTRIBUTE

    if is_first_in_block(prefix):
        return CompletionContext.FIRST_MEMBER

    if block.kind in ASSIGNMENT_BLOCKS:
        return CompletionContext.FIELD_VALUE if "=" in prefix else CompletionContext.NONE

    if block.kind in FIELD_BLOCKS:
        if is_type_position(prefix):
            return CompletionContext.TYPE
        return CompletionContext.ATTRIBUTE

    return CompletionContext.NONE
