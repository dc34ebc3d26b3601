"""
Error types for schema parsing and server configuration.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class PrismaLspError(Exception):
    """Base exception for all prisma-lsp errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ParseError(PrismaLspError):
    """
    Raised when schema syntax cannot be parsed.

    Examples:
    - Unterminated blocks or strings
    - Unknown block keywords
    - Unexpected tokens inside a block body

    The completion engine treats this as "no parsed tree available" and
    switches to line scanning.
    """

    pass


class ConfigError(PrismaLspError):
    """
    Raised when server settings are malformed.

    Examples:
    - Invalid TOML in prisma-lsp.toml
    - A list setting given as a plain string
    - Unknown log level
    """

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error, including source location.

    Attributes:
        file: Path to the source file where error occurred
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional code snippet showing the error location
    """

    file: Path
    line: int
    column: int
    snippet: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "schema.prisma:10:5"
        """
        location = f"{self.file}:{self.line}:{self.column}"
        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format code snippet with line numbers and error marker."""
        if not self.snippet:
            return ""

        lines = self.snippet.split("\n")
        formatted = []

        # Snippet shows up to 2 lines before the error line
        start_line = max(1, self.line - 2)

        for i, line in enumerate(lines):
            line_num = start_line + i
            prefix = f"{line_num:4d} | "
            formatted.append(prefix + line)

            if line_num == self.line:
                marker_pos = len(prefix) + self.column - 1
                formatted.append(" " * marker_pos + "^^^")

        return "\n".join(formatted)


def make_parse_error(
    message: str,
    file: Path,
    line: int,
    column: int,
    snippet: str | None = None,
) -> ParseError:
    """
    Helper to create a ParseError with context.

    Args:
        message: Error description
        file: Source file path
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional code snippet

    Returns:
        ParseError with context attached
    """
    context = ErrorContext(file=file, line=line, column=column, snippet=snippet)
    return ParseError(message, context)


def snippet_for(text: str, line: int) -> str:
    """Return the source lines around a 1-indexed line for error snippets."""
    lines = text.split("\n")
    start = max(1, line - 2)
    return "\n".join(lines[start - 1 : line])
