"""
Lexical analyzer for the CIAMS language.

This module converts raw source text into a flat, position-annotated token list:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: Immutable token with kind, lexeme, and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Functions:
    tokenize: Lex a whole source string into a parser-ready token list.

Features:
    - Skips whitespace between tokens
    - Emits `#` line comments and `** ... **` block comments as comment tokens,
      which `tokenize` drops before returning
    - Greedy two-character operators (`->`, `~>`, `<~`, `<-`, `<<`, `>>`, `==`,
      `!=`, `<=`, `>=`) with single-character fallback
    - Integer literals, double-quoted strings, identifiers and keywords

Lexing is total: unrecognized characters and unterminated strings become
`UNKNOWN` tokens instead of raising, and the parser decides what to do with them.

Example:
    >>> [tok.kind.name for tok in tokenize("a + b")]
    ['IDENTIFIER', 'PLUS', 'IDENTIFIER', 'END_OF_STREAM']

Exports:
    - CharacterStream
    - Token
    - Lexer
    - tokenize
"""

import logging
from collections.abc import Mapping
from typing import Any

from ciams.ciams_constants import (
    DISCARDED_KINDS,
    KEYWORDS,
    OPERATOR_CHARS,
    SINGLE_CHAR_TOKENS,
    TWO_CHAR_OPERATORS,
    TokenKind,
)

logger = logging.getLogger(__name__)


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Every consumed character advances the column; a newline advances the line and
    resets the column, wherever it occurs (code, strings or comments).

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Returns:
            str: The next character.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"CharacterStreamError: Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """
        Returns the character at the given offset from the current position without advancing.

        Args:
            offset (int, optional): Number of characters to look ahead. Defaults to 0.

        Returns:
            str: The character at the offset, or an empty string if out of bounds.
        """
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        """Checks if the stream has consumed all characters."""
        return self.position >= len(self.source)

    def text_since(self, start: int) -> str:
        """Returns the source text consumed since index `start`."""
        return self.source[start : self.position]


class Token:
    """Represents a single lexical token in the CIAMS language.

    Tokens are immutable once produced; assigning to an attribute raises
    `AttributeError`.

    Attributes:
        kind (TokenKind): The token category.
        lexeme (str): The exact source text of the token (empty for END_OF_STREAM).
        line (int): The 1-based line number where the token starts.
        column (int): The 1-based column number where the token starts.
    """

    __slots__ = ("kind", "lexeme", "line", "column")

    def __init__(self, kind: TokenKind, lexeme: str, line: int = 1, column: int = 1):
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "lexeme", lexeme)
        object.__setattr__(self, "line", line)
        object.__setattr__(self, "column", column)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Token is immutable; cannot set {name!r}")

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.lexeme!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.kind == other.kind
            and self.lexeme == other.lexeme
            and self.line == other.line
            and self.column == other.column
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.lexeme, self.line, self.column))

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.name,
            "lexeme": self.lexeme,
            "line": self.line,
            "column": self.column,
        }


def _is_digit(ch: str) -> bool:
    return ch.isascii() and ch.isdigit()


def _is_alpha(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


def _is_alnum(ch: str) -> bool:
    return ch.isascii() and ch.isalnum()


class Lexer:
    """Lexical analyzer for the CIAMS language.

    The Lexer takes a CharacterStream and converts it into a stream of Token objects.
    Each instance owns its stream, so independent sources can be lexed concurrently
    with separate Lexer instances.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
        keywords (Mapping[str, TokenKind]): Reserved spellings recognized as keywords.
    """

    def __init__(
        self,
        stream: CharacterStream,
        keywords: Mapping[str, TokenKind] | None = None,
    ) -> None:
        self.stream = stream
        self.keywords: Mapping[str, TokenKind] = (
            KEYWORDS if keywords is None else keywords
        )

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        """Skips spaces, tabs, carriage returns and newlines."""
        while not self.stream.end_of_file() and self.peek() in " \t\r\n":
            self.advance()

    def make_token(self, kind: TokenKind, start: int, line: int, col: int) -> Token:
        return Token(kind, self.stream.text_since(start), line, col)

    def read_line_comment(self, start: int, line: int, col: int) -> Token:
        """Consumes a `#` comment through the end of the line (newline excluded)."""
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()
        return self.make_token(TokenKind.COMMENT, start, line, col)

    def read_block_comment(self, start: int, line: int, col: int) -> Token:
        """Consumes a `** ... **` comment; an unterminated one runs to end of input."""
        self.advance()
        self.advance()
        while not self.stream.end_of_file():
            if self.peek() == "*" and self.peek(1) == "*":
                self.advance()
                self.advance()
                break
            self.advance()
        return self.make_token(TokenKind.MULTILINE_COMMENT, start, line, col)

    def match_operator(self, start: int, line: int, col: int) -> Token:
        """Resolves an operator character, preferring the two-character form."""
        pair = self.peek() + self.peek(1)
        if pair in TWO_CHAR_OPERATORS:
            self.advance()
            self.advance()
            return self.make_token(TWO_CHAR_OPERATORS[pair], start, line, col)

        kind = OPERATOR_CHARS[self.advance()]
        return self.make_token(kind or TokenKind.UNKNOWN, start, line, col)

    def read_string(self, start: int, line: int, col: int) -> Token:
        """Consumes a double-quoted string; no escape sequences are processed."""
        self.advance()
        while not self.stream.end_of_file() and self.peek() != '"':
            self.advance()
        if self.stream.end_of_file():
            logger.debug("Unterminated string literal at line %d, col %d", line, col)
            return self.make_token(TokenKind.UNKNOWN, start, line, col)
        self.advance()
        return self.make_token(TokenKind.STRING_LITERAL, start, line, col)

    def read_number(self, start: int, line: int, col: int) -> Token:
        while _is_digit(self.peek()):
            self.advance()
        return self.make_token(TokenKind.NUMBER, start, line, col)

    def read_word(self, start: int, line: int, col: int) -> Token:
        while _is_alnum(self.peek()):
            self.advance()
        text = self.stream.text_since(start)
        return Token(self.keywords.get(text, TokenKind.IDENTIFIER), text, line, col)

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream, comments included.

        Returns:
            Token: The next token; END_OF_STREAM once the input is exhausted.
        """
        self.skip_whitespace()

        start = self.stream.position
        line, col = self.stream.line, self.stream.column

        if self.stream.end_of_file():
            return Token(TokenKind.END_OF_STREAM, "", line, col)

        ch = self.peek()

        # 1. Structural punctuation and unambiguous single-character operators
        if ch in SINGLE_CHAR_TOKENS:
            self.advance()
            return self.make_token(SINGLE_CHAR_TOKENS[ch], start, line, col)

        # 2. Comments
        if ch == "#":
            return self.read_line_comment(start, line, col)
        if ch == "*":
            if self.peek(1) == "*":
                return self.read_block_comment(start, line, col)
            self.advance()
            return self.make_token(TokenKind.MUL, start, line, col)

        # 3. Operators that need one character of lookahead
        if ch in OPERATOR_CHARS:
            return self.match_operator(start, line, col)

        # 4. Literals, identifiers and keywords
        if ch == '"':
            return self.read_string(start, line, col)
        if _is_digit(ch):
            return self.read_number(start, line, col)
        if _is_alpha(ch):
            return self.read_word(start, line, col)

        # 5. Anything else
        self.advance()
        return self.make_token(TokenKind.UNKNOWN, start, line, col)

    def tokenize(self) -> list[Token]:
        """Lexes the remaining input, dropping comments.

        Returns:
            list[Token]: Tokens in source order, ending with exactly one END_OF_STREAM.
        """
        tokens: list[Token] = []
        while True:
            tok = self.next_token()
            if tok.kind in DISCARDED_KINDS:
                continue
            tokens.append(tok)
            if tok.kind == TokenKind.END_OF_STREAM:
                break
        logger.debug("Lexed %d tokens", len(tokens))
        return tokens


def tokenize(source: str, keywords: Mapping[str, TokenKind] | None = None) -> list[Token]:
    """Lex `source` into a parser-ready token list (comments removed)."""
    return Lexer(CharacterStream(source), keywords).tokenize()


__all__ = ["CharacterStream", "Lexer", "Token", "tokenize"]
