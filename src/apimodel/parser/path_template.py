# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Recursive-descent parser for HTTP path templates (AIP-127).

Grammar::

    Template  = "/" Segments [ Verb ] ;
    Segments  = Segment { "/" Segment } ;
    Segment   = LITERAL | Variable ;
    Variable  = "{" FieldPath [ "=" Pattern ] "}" ;
    Pattern   = PatSeg { "/" PatSeg } ;
    PatSeg    = "*" | "**" | LITERAL ;
    FieldPath = IDENT { "." IDENT } ;
    Verb      = ":" LITERAL ;

A ``**`` wildcard may only be the last element of a variable's pattern.
"""

from __future__ import annotations

import re

from apimodel.model.entities import LiteralSegment, PathSegment, PathTemplate, VariableSegment, VerbSegment
from apimodel.parser.lexer import LexerError, Token, TokenType, tokenize

# ###############
# Public Interface
# ###############


class PathTemplateError(Exception):
    """Raised when a path template is syntactically invalid.

    Attributes:
        template: The offending template text.
        column: 1-based column of the problem.
    """

    def __init__(self, message: str, template: str, column: int) -> None:
        super().__init__(f"Invalid path template '{template}' at column {column}: {message}")
        self.template = template
        self.column = column


def parse_path_template(template: str) -> PathTemplate:
    """Parse an HTTP path template into its segment sequence.

    Args:
        template: The raw template, e.g. ``/v1/{parent=projects/*}/foos:bulkCreate``.

    Returns:
        The parsed PathTemplate.

    Raises:
        PathTemplateError: If the template contains disallowed characters or
            is syntactically invalid.
    """
    try:
        tokens = tokenize(template)
    except LexerError as exc:
        raise PathTemplateError(exc.message, template, exc.column) from exc
    return _Parser(template, tokens).parse()


# ################
# Implementation
# ################

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class _Parser:
    """Recursive-descent parser over path template tokens."""

    def __init__(self, template: str, tokens: list[Token]) -> None:
        self._template = template
        self._tokens = tokens
        self._pos = 0

    def parse(self) -> PathTemplate:
        segments: list[PathSegment] = []
        self._expect(TokenType.SLASH)
        segments.append(self._parse_segment())
        while self._check(TokenType.SLASH):
            self._advance()
            segments.append(self._parse_segment())
        if self._check(TokenType.COLON):
            self._advance()
            verb = self._expect(TokenType.LITERAL)
            segments.append(VerbSegment(value=verb.value))
        self._expect(TokenType.EOF)
        return PathTemplate(segments=segments)

    # ------------------------------------------------------------------
    # Token stream helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        if tok.type != TokenType.EOF:
            self._pos += 1
        return tok

    def _check(self, *types: TokenType) -> bool:
        return self._current().type in types

    def _expect(self, *types: TokenType) -> Token:
        """Consume the current token if it matches, otherwise raise PathTemplateError."""
        tok = self._current()
        if tok.type not in types:
            expected = " or ".join(_describe(t) for t in types)
            raise self._error(f"expected {expected}, got {_describe(tok.type)}", tok)
        return self._advance()

    def _error(self, message: str, tok: Token) -> PathTemplateError:
        return PathTemplateError(message, self._template, tok.column)

    # ------------------------------------------------------------------
    # Grammar rules
    # ------------------------------------------------------------------

    def _parse_segment(self) -> PathSegment:
        tok = self._current()
        if tok.type == TokenType.LITERAL:
            self._advance()
            return LiteralSegment(value=tok.value)
        if tok.type == TokenType.LBRACE:
            return self._parse_variable()
        if tok.type in (TokenType.STAR, TokenType.DOUBLE_STAR):
            raise self._error("wildcards are only allowed inside a variable", tok)
        raise self._error(f"expected a path segment, got {_describe(tok.type)}", tok)

    def _parse_variable(self) -> VariableSegment:
        self._expect(TokenType.LBRACE)
        field_path = self._parse_field_path()
        pattern = ["*"]
        if self._check(TokenType.EQUALS):
            self._advance()
            pattern = self._parse_pattern()
        self._expect(TokenType.RBRACE)
        return VariableSegment(field_path=field_path, segments=pattern)

    def _parse_field_path(self) -> list[str]:
        tok = self._expect(TokenType.LITERAL)
        components = tok.value.split(".")
        for component in components:
            if not _IDENTIFIER.fullmatch(component):
                raise self._error(f"invalid field path '{tok.value}'", tok)
        return components

    def _parse_pattern(self) -> list[str]:
        pattern = [self._parse_pattern_segment()]
        while self._check(TokenType.SLASH):
            slash = self._advance()
            if pattern[-1] == "**":
                raise self._error("'**' must be the last segment of a variable pattern", slash)
            pattern.append(self._parse_pattern_segment())
        return pattern

    def _parse_pattern_segment(self) -> str:
        tok = self._expect(TokenType.STAR, TokenType.DOUBLE_STAR, TokenType.LITERAL)
        return tok.value


def _describe(token_type: TokenType) -> str:
    if token_type == TokenType.LITERAL:
        return "a literal"
    if token_type == TokenType.EOF:
        return "end of template"
    return f"'{token_type.value}'"
