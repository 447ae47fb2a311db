# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for HTTP path templates (AIP-127).

Converts a template such as ``/v1/{parent=projects/*}/foos:bulkCreate`` into a
sequence of tokens for the path template parser.
"""

import enum
from dataclasses import dataclass

# ###############
# Public Interface
# ###############


class TokenType(enum.Enum):
    """All token types produced by the path template lexer."""

    # Symbols
    SLASH = "/"
    LBRACE = "{"
    RBRACE = "}"
    EQUALS = "="
    COLON = ":"

    # Wildcards
    STAR = "*"
    DOUBLE_STAR = "**"

    # Literal text: path segments, field names and verbs
    LITERAL = "LITERAL"

    # End of input
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A lexical token with its position in the template.

    Attributes:
        type: The kind of token.
        value: The raw text of the token.
        column: 1-based column where the token starts.
    """

    type: TokenType
    value: str
    column: int


class LexerError(Exception):
    """Raised when a template contains a character outside the allowed set.

    Attributes:
        message: Description of the problem without position information.
        column: 1-based column of the offending character.
    """

    def __init__(self, message: str, column: int) -> None:
        super().__init__(f"Column {column}: {message}")
        self.message = message
        self.column = column


def tokenize(template: str) -> list[Token]:
    """Tokenize a path template.

    Args:
        template: The raw path template.

    Returns:
        A list of Token objects ending with a single EOF token.

    Raises:
        LexerError: On characters that may not appear in a path template.
    """
    return _Lexer(template).tokenize()


# ################
# Implementation
# ################

_SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "/": TokenType.SLASH,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "=": TokenType.EQUALS,
    ":": TokenType.COLON,
}

# RFC 3986 unreserved characters plus sub-delimiters and percent escapes that
# may appear unquoted inside a path segment.
_LITERAL_PUNCTUATION = frozenset("-._~%!$&'()+,;@")


def _is_literal_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch in _LITERAL_PUNCTUATION)


class _Lexer:
    """Internal scanner state machine."""

    def __init__(self, template: str) -> None:
        self._template = template
        self._pos = 0
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Run the scanner and return all tokens including the terminal EOF."""
        while self._pos < len(self._template):
            self._scan_token()
        self._tokens.append(Token(TokenType.EOF, "", self._pos + 1))
        return self._tokens

    def _current(self) -> str:
        if self._pos < len(self._template):
            return self._template[self._pos]
        return ""

    def _scan_token(self) -> None:
        """Dispatch to the appropriate handler based on the current character."""
        ch = self._current()
        col = self._pos + 1

        if ch in _SINGLE_CHAR_TOKENS:
            self._pos += 1
            self._tokens.append(Token(_SINGLE_CHAR_TOKENS[ch], ch, col))
        elif ch == "*":
            self._scan_wildcard(col)
        elif _is_literal_char(ch):
            self._scan_literal(col)
        else:
            raise LexerError(f"Unexpected character {ch!r} in path template", col)

    def _scan_wildcard(self, col: int) -> None:
        """Scan ``*`` or ``**``; three or more stars are rejected."""
        start = self._pos
        while self._current() == "*":
            self._pos += 1
        stars = self._template[start : self._pos]
        if len(stars) == 1:
            self._tokens.append(Token(TokenType.STAR, stars, col))
        elif len(stars) == 2:
            self._tokens.append(Token(TokenType.DOUBLE_STAR, stars, col))
        else:
            raise LexerError(f"Invalid wildcard '{stars}'", col)
        if _is_literal_char(self._current()):
            raise LexerError("A wildcard must span a whole segment", col)

    def _scan_literal(self, col: int) -> None:
        start = self._pos
        while _is_literal_char(self._current()):
            self._pos += 1
        self._tokens.append(Token(TokenType.LITERAL, self._template[start : self._pos], col))
