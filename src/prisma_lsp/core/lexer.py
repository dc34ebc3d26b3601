"""
Lexer/Tokenizer for Prisma schema files.

Converts raw schema text into a stream of tokens with source location
tracking. Newlines are significant at the top level of a block body (they
separate assignments and fields) but are dropped inside parentheses and
brackets so argument lists may span several lines.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .errors import make_parse_error, snippet_for


class TokenType(Enum):
    """Token types in the schema language."""

    # Literals
    IDENTIFIER = "IDENTIFIER"
    STRING = "STRING"
    NUMBER = "NUMBER"

    # Block keywords
    DATASOURCE = "datasource"
    GENERATOR = "generator"
    MODEL = "model"
    ENUM = "enum"
    TYPE_ALIAS = "type_alias"

    # Punctuation
    LBRACE = "{"
    RBRACE = "}"
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    EQUALS = "="
    COLON = ":"
    COMMA = ","
    DOT = "."
    QUESTION = "?"
    AT = "@"
    DOUBLE_AT = "@@"

    # Structure
    NEWLINE = "NEWLINE"
    EOF = "EOF"


KEYWORDS = {
    "datasource": TokenType.DATASOURCE,
    "generator": TokenType.GENERATOR,
    "model": TokenType.MODEL,
    "enum": TokenType.ENUM,
    "type_alias": TokenType.TYPE_ALIAS,
}

BLOCK_KEYWORD_TYPES = frozenset(KEYWORDS.values())

_SINGLE_CHAR_TOKENS = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "=": TokenType.EQUALS,
    ":": TokenType.COLON,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    "?": TokenType.QUESTION,
}


@dataclass
class Token:
    """
    A single token in the schema.

    Attributes:
        type: Type of token
        value: String value of the token
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """

    type: TokenType
    value: str
    line: int
    column: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


class Lexer:
    """
    Lexer for Prisma schema text.

    Tracks parenthesis/bracket depth so NEWLINE tokens are only produced
    where they terminate a statement.
    """

    def __init__(self, text: str, file: Path):
        """
        Initialize lexer.

        Args:
            text: Source text to tokenize
            file: Source file path (for error reporting)
        """
        self.text = text
        self.file = file
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []
        self.depth = 0  # Nesting of ( and [

    def current_char(self) -> str | None:
        """Get current character or None if at end."""
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def peek_char(self, offset: int = 1) -> str | None:
        """Peek ahead at character."""
        pos = self.pos + offset
        if pos >= len(self.text):
            return None
        return self.text[pos]

    def advance(self) -> None:
        """Move to next character, updating line/column."""
        if self.pos < len(self.text):
            if self.text[self.pos] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def skip_whitespace(self) -> None:
        """Skip whitespace other than newlines."""
        while self.current_char() in (" ", "\t", "\r"):
            self.advance()

    def skip_comment(self) -> None:
        """Skip comment (from // to end of line)."""
        while self.current_char() and self.current_char() != "\n":
            self.advance()

    def error(self, message: str, line: int | None = None, column: int | None = None):
        line = line or self.line
        return make_parse_error(
            message,
            self.file,
            line,
            column or self.column,
            snippet_for(self.text, line),
        )

    def read_string(self) -> str:
        """Read a double-quoted string."""
        start_line = self.line
        start_col = self.column
        self.advance()  # skip opening quote

        chars = []
        while True:
            current = self.current_char()
            if current is None or current == "\n":
                raise self.error("Unterminated string", start_line, start_col)
            if current == '"':
                break

            if current == "\\":
                self.advance()
                escape_char = self.current_char()
                if escape_char == "n":
                    chars.append("\n")
                elif escape_char == "t":
                    chars.append("\t")
                elif escape_char is None:
                    raise self.error("Unterminated string", start_line, start_col)
                else:
                    chars.append(escape_char)
                self.advance()
                continue

            chars.append(current)
            self.advance()

        self.advance()  # skip closing quote
        return "".join(chars)

    def read_number(self) -> str:
        """Read an integer or decimal literal, with optional leading minus."""
        chars = []
        if self.current_char() == "-":
            chars.append("-")
            self.advance()
        while (ch := self.current_char()) is not None and (ch.isdigit() or ch == "."):
            chars.append(ch)
            self.advance()
        return "".join(chars)

    def read_identifier(self) -> str:
        """Read an identifier or keyword."""
        chars = []
        while (ch := self.current_char()) is not None and (ch.isalnum() or ch == "_"):
            chars.append(ch)
            self.advance()
        return "".join(chars)

    def add_token(self, token_type: TokenType, value: str, line: int, column: int) -> None:
        self.tokens.append(Token(token_type, value, line, column))

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire input.

        Returns:
            List of tokens, always terminated by an EOF token

        Raises:
            ParseError: On unterminated strings or unexpected characters
        """
        while (ch := self.current_char()) is not None:
            line, column = self.line, self.column

            if ch in (" ", "\t", "\r"):
                self.skip_whitespace()
            elif ch == "/" and self.peek_char() == "/":
                self.skip_comment()
            elif ch == "\n":
                self.advance()
                if self.depth == 0:
                    self.add_token(TokenType.NEWLINE, "\n", line, column)
            elif ch == '"':
                self.add_token(TokenType.STRING, self.read_string(), line, column)
            elif ch.isdigit() or (ch == "-" and (self.peek_char() or "").isdigit()):
                self.add_token(TokenType.NUMBER, self.read_number(), line, column)
            elif ch.isalpha() or ch == "_":
                word = self.read_identifier()
                self.add_token(KEYWORDS.get(word, TokenType.IDENTIFIER), word, line, column)
            elif ch == "@":
                if self.peek_char() == "@":
                    self.advance()
                    self.advance()
                    self.add_token(TokenType.DOUBLE_AT, "@@", line, column)
                else:
                    self.advance()
                    self.add_token(TokenType.AT, "@", line, column)
            elif ch in _SINGLE_CHAR_TOKENS:
                token_type = _SINGLE_CHAR_TOKENS[ch]
                if token_type in (TokenType.LPAREN, TokenType.LBRACKET):
                    self.depth += 1
                elif token_type in (TokenType.RPAREN, TokenType.RBRACKET):
                    self.depth = max(0, self.depth - 1)
                self.advance()
                self.add_token(token_type, ch, line, column)
            else:
                raise self.error(f"Unexpected character {ch!r}")

        self.add_token(TokenType.EOF, "", self.line, self.column)
        return self.tokens


def tokenize(text: str, file: Path) -> list[Token]:
    """
    Convenience function to tokenize schema text.

    Args:
        text: Source text
        file: Source file path

    Returns:
        List of tokens
    """
    lexer = Lexer(text, file)
    return lexer.tokenize()
