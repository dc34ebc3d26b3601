"""
Recursive descent parser for Prisma schema files.

Produces an ``ir.Schema`` for syntactically valid documents and raises
``ParseError`` otherwise. The completion engine only needs block ranges and
member names, so the grammar accepted here is the structural subset:

    schema      := (NEWLINE | block)*
    block       := KEYWORD IDENT '{' body '}'
    assignments := (IDENT '=' value NEWLINE)*            datasource, generator
    fields      := (field | '@@' attribute NEWLINE)*     model, type_alias
    field       := IDENT IDENT ('[' ']')? '?'? ('@' attribute)*
    values      := (IDENT ('@' attribute)* NEWLINE | '@@' attribute NEWLINE)*   enum
    attribute   := IDENT ('.' IDENT)? ('(' arguments? ')')?
    argument    := (IDENT ':')? value
    value       := STRING | NUMBER | IDENT ('(' arguments? ')')? | '[' values? ']'
"""

from pathlib import Path

from . import ir
from .errors import ParseError, make_parse_error, snippet_for
from .lexer import BLOCK_KEYWORD_TYPES, Token, TokenType, tokenize

DEFAULT_SCHEMA_PATH = Path("schema.prisma")


class BaseParser:
    """
    Base parser class with token manipulation utilities.
    """

    def __init__(self, tokens: list[Token], file: Path, text: str = ""):
        """
        Initialize parser.

        Args:
            tokens: List of tokens from lexer
            file: Source file path (for error reporting)
            text: Source text (for error snippets)
        """
        self.tokens = tokens
        self.file = file
        self.text = text
        self.pos = 0

    def current_token(self) -> Token:
        """Get current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # Return EOF
        return self.tokens[self.pos]

    def peek_token(self, offset: int = 1) -> Token:
        """Peek ahead at token."""
        pos = self.pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[pos]

    def advance(self) -> Token:
        """Consume and return current token."""
        token = self.current_token()
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    def match(self, *token_types: TokenType) -> bool:
        """Check if current token matches any of the given types."""
        return self.current_token().type in token_types

    def expect(self, token_type: TokenType) -> Token:
        """
        Expect a specific token type and consume it.

        Raises:
            ParseError: If token doesn't match
        """
        token = self.current_token()
        if token.type != token_type:
            raise self.error_at(token, f"Expected {token_type.value}, got {_describe(token)}")
        return self.advance()

    def expect_name(self) -> Token:
        """Expect an identifier; block keywords are accepted as names too."""
        token = self.current_token()
        if token.type == TokenType.IDENTIFIER or token.type in BLOCK_KEYWORD_TYPES:
            return self.advance()
        raise self.error_at(token, f"Expected identifier, got {_describe(token)}")

    def skip_newlines(self) -> None:
        while self.match(TokenType.NEWLINE):
            self.advance()

    def end_statement(self) -> None:
        """A statement ends at a newline or right before the closing brace."""
        if self.match(TokenType.NEWLINE):
            self.skip_newlines()
        elif not self.match(TokenType.RBRACE):
            token = self.current_token()
            raise self.error_at(token, f"Unexpected {_describe(token)}")

    def error_at(self, token: Token, message: str):
        return make_parse_error(
            message,
            self.file,
            token.line,
            token.column,
            snippet_for(self.text, token.line) if self.text else None,
        )


class SchemaParser(BaseParser):
    """Parser for complete schema documents."""

    def parse(self) -> ir.Schema:
        blocks: list[ir.Block] = []
        self.skip_newlines()
        while not self.match(TokenType.EOF):
            blocks.append(self.parse_block())
            self.skip_newlines()
        return ir.Schema(blocks=blocks)

    def parse_block(self) -> ir.Block:
        keyword = self.current_token()
        if keyword.type not in BLOCK_KEYWORD_TYPES:
            raise self.error_at(keyword, f"Expected a block keyword, got {_describe(keyword)}")
        self.advance()
        kind = ir.BlockKind(keyword.value)

        name = self.expect_name().value
        self.expect(TokenType.LBRACE)
        self.skip_newlines()

        assignments: list[ir.Assignment] = []
        fields: list[ir.Field] = []
        attributes: list[ir.Attribute] = []
        values: list[ir.EnumValue] = []

        while not self.match(TokenType.RBRACE):
            if self.match(TokenType.EOF):
                raise self.error_at(keyword, f"Unterminated {kind.value} block '{name}'")

            if kind in ir.ASSIGNMENT_BLOCKS:
                assignments.append(self.parse_assignment())
            elif self.match(TokenType.DOUBLE_AT):
                attributes.append(self.parse_attribute(is_block=True))
            elif kind == ir.BlockKind.ENUM:
                values.append(self.parse_enum_value())
            else:
                fields.append(self.parse_field())
            self.end_statement()

        closing = self.expect(TokenType.RBRACE)
        return ir.Block(
            kind=kind,
            name=name,
            start_line=keyword.line - 1,
            end_line=closing.line - 1,
            assignments=assignments,
            fields=fields,
            attributes=attributes,
            values=values,
        )

    def parse_assignment(self) -> ir.Assignment:
        key = self.expect_name()
        self.expect(TokenType.EQUALS)
        value = self.parse_value()
        return ir.Assignment(key=key.value, value=value, line=key.line - 1)

    def parse_field(self) -> ir.Field:
        name = self.expect_name()
        type_name = self.expect_name().value
        is_list = False
        is_optional = False
        if self.match(TokenType.LBRACKET):
            self.advance()
            self.expect(TokenType.RBRACKET)
            is_list = True
        if self.match(TokenType.QUESTION):
            self.advance()
            is_optional = True

        attributes: list[ir.Attribute] = []
        while self.match(TokenType.AT):
            attributes.append(self.parse_attribute(is_block=False))

        return ir.Field(
            name=name.value,
            type=ir.FieldType(name=type_name, is_list=is_list, is_optional=is_optional),
            attributes=attributes,
            line=name.line - 1,
        )

    def parse_enum_value(self) -> ir.EnumValue:
        name = self.expect_name()
        attributes: list[ir.Attribute] = []
        while self.match(TokenType.AT):
            attributes.append(self.parse_attribute(is_block=False))
        return ir.EnumValue(name=name.value, attributes=attributes, line=name.line - 1)

    def parse_attribute(self, is_block: bool) -> ir.Attribute:
        marker = self.advance()  # @ or @@
        name = self.expect_name().value
        # Namespaced attributes such as @db.VarChar
        while self.match(TokenType.DOT):
            self.advance()
            name = f"{name}.{self.expect_name().value}"

        arguments: list[ir.Argument] = []
        if self.match(TokenType.LPAREN):
            arguments = self.parse_arguments()

        return ir.Attribute(
            name=name,
            is_block=is_block,
            arguments=arguments,
            line=marker.line - 1,
        )

    def parse_arguments(self) -> list[ir.Argument]:
        self.expect(TokenType.LPAREN)
        arguments: list[ir.Argument] = []
        while not self.match(TokenType.RPAREN):
            arg_name = None
            if self.match(TokenType.IDENTIFIER) and self.peek_token().type == TokenType.COLON:
                arg_name = self.advance().value
                self.advance()
            arguments.append(ir.Argument(name=arg_name, value=self.parse_value()))
            if not self.match(TokenType.COMMA):
                break
            self.advance()
        self.expect(TokenType.RPAREN)
        return arguments

    def parse_value(self) -> ir.Value:
        token = self.current_token()

        if token.type == TokenType.STRING:
            self.advance()
            return ir.Value(kind=ir.ValueKind.STRING, raw=token.value)

        if token.type == TokenType.NUMBER:
            self.advance()
            return ir.Value(kind=ir.ValueKind.NUMBER, raw=token.value)

        if token.type == TokenType.LBRACKET:
            self.advance()
            items: list[ir.Value] = []
            while not self.match(TokenType.RBRACKET):
                items.append(self.parse_value())
                if not self.match(TokenType.COMMA):
                    break
                self.advance()
            self.expect(TokenType.RBRACKET)
            return ir.Value(kind=ir.ValueKind.ARRAY, items=items)

        if token.type == TokenType.IDENTIFIER or token.type in BLOCK_KEYWORD_TYPES:
            self.advance()
            if token.value in ("true", "false"):
                return ir.Value(kind=ir.ValueKind.BOOLEAN, raw=token.value)
            if self.match(TokenType.LPAREN):
                args = self.parse_arguments()
                return ir.Value(
                    kind=ir.ValueKind.FUNCTION,
                    raw=token.value,
                    items=[arg.value for arg in args],
                )
            return ir.Value(kind=ir.ValueKind.IDENTIFIER, raw=token.value)

        raise self.error_at(token, f"Expected a value, got {_describe(token)}")


def _describe(token: Token) -> str:
    if token.type == TokenType.EOF:
        return "end of file"
    if token.type == TokenType.NEWLINE:
        return "end of line"
    return repr(token.value)


def parse_schema(text: str, file: Path = DEFAULT_SCHEMA_PATH) -> ir.Schema:
    """
    Parse schema text into an ``ir.Schema``.

    Args:
        text: Schema source
        file: Source path used in error contexts

    Returns:
        Parsed schema

    Raises:
        ParseError: If the text is not a valid schema
    """
    tokens = tokenize(text, file)
    return SchemaParser(tokens, file, text).parse()


def try_parse_schema(text: str, file: Path = DEFAULT_SCHEMA_PATH) -> ir.Schema | None:
    """Parse schema text, returning None when it does not parse."""
    try:
        return parse_schema(text, file)
    except ParseError:
        return None
