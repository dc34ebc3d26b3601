"""
Text-only block and member discovery.

Used whenever the document does not parse. The policies here mirror what the
parsed tree reports for a valid document:

- A block starts at a header line ``<keyword> <Name> {`` and ends at the next
  line whose first non-blank character is ``}``. An unterminated block ends
  at the next header line, or runs to the end of the document.
- A header line that also closes its brace (``datasource db { ... }``) is a
  block with no body lines.
- The cursor is inside a block only on lines strictly between the header and
  the closing line.
- A member is the leading name of a non-blank, non-comment body line
  (``id`` in ``id Int @id``, ``provider`` in ``provider = "x"``,
  ``@@unique`` in ``@@unique([a, b])``).
- Reads past the last line yield an empty string; iteration stops at the
  document end.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from pygls.workspace import TextDocument

BLOCK_HEADER = re.compile(r"^\s*(datasource|generator|model|enum|type_alias)\s+(\w+)\s*\{")
TYPE_DECLARATION = re.compile(r"^\s*(model|enum)\s+(\w+)\s*\{")
MEMBER_NAME = re.compile(r"^@{0,2}[\w.]+")
PROVIDER_ASSIGNMENT = re.compile(r'\bprovider\s*=\s*"([^"]*)"')


def document_lines(document: TextDocument) -> list[str]:
    """Document lines without their line endings."""
    return [line.rstrip("\r\n") for line in document.lines]


def get_current_line(document: TextDocument, line: int) -> str:
    """Return the text of ``line``, or an empty string when it is out of range."""
    lines = document.lines
    if line < 0 or line >= len(lines):
        return ""
    return lines[line].rstrip("\r\n")


def text_before(document: TextDocument, line: int, character: int) -> str:
    """Text on ``line`` before ``character`` (clamped to the line)."""
    return get_current_line(document, line)[: max(character, 0)]


def _closes_on_header(text: str) -> bool:
    brace = text.find("{")
    return brace != -1 and "}" in text[brace:]


def scan_block_range(lines: list[str], line: int) -> tuple[int, int] | None:
    """
    Find the (start, end) line range of the block enclosing ``line``.

    ``start`` is the header line and ``end`` the closing line (or the
    boundary of an unterminated block). Returns None when ``line`` is not
    inside a block body.
    """
    if line < 0 or not lines:
        return None

    start = None
    for i in range(min(line, len(lines) - 1), -1, -1):
        text = lines[i]
        if BLOCK_HEADER.match(text):
            if i == line or _closes_on_header(text):
                return None
            start = i
            break
        if i < line and text.strip().startswith("}"):
            return None
    if start is None:
        return None

    end = max(len(lines), line + 1)
    for j in range(start + 1, len(lines)):
        text = lines[j]
        if text.strip().startswith("}") or BLOCK_HEADER.match(text):
            end = j
            break

    if not start < line < end:
        return None
    return start, end


def scan_header(text: str) -> tuple[str, str] | None:
    """Return (keyword, name) for a block header line."""
    match = BLOCK_HEADER.match(text)
    if not match:
        return None
    return match.group(1), match.group(2)


def scan_member_names(
    lines: list[str],
    start_line: int,
    end_line: int,
    exclude_line: int | None = None,
) -> list[str]:
    """Leading member names of the body lines between ``start_line`` and ``end_line``."""
    names: list[str] = []
    for i in range(start_line + 1, min(end_line, len(lines))):
        if i == exclude_line:
            continue
        stripped = lines[i].strip()
        if not stripped or stripped.startswith("//") or stripped.startswith("}"):
            continue
        match = MEMBER_NAME.match(stripped)
        if match:
            names.append(match.group(0))
    return names


def scan_type_names(document: TextDocument, exclude_line: int | None = None) -> list[str]:
    """Names of every model and enum declared in the document, skipping ``exclude_line``."""
    names: list[str] = []
    for i, text in enumerate(document_lines(document)):
        if i == exclude_line:
            continue
        match = TYPE_DECLARATION.match(text)
        if match:
            names.append(match.group(2))
    return names


def scan_datasource_providers(document: TextDocument) -> list[str]:
    """
    Provider values assigned inside datasource blocks.

    Scans forward from every line mentioning ``datasource`` until the
    block's closing brace. The provider is checked before the brace so
    single-line blocks are handled.
    """
    lines = document_lines(document)
    providers: list[str] = []
    for i, text in enumerate(lines):
        if "datasource" not in text:
            continue
        for candidate in lines[i:]:
            match = PROVIDER_ASSIGNMENT.search(candidate)
            if match:
                providers.append(match.group(1))
                break
            if "}" in candidate:
                break
    return providers


def scan_uses_provider(document: TextDocument, providers: Iterable[str]) -> bool:
    """True if any datasource block assigns one of ``providers``."""
    wanted = set(providers)
    return any(provider in wanted for provider in scan_datasource_providers(document))
