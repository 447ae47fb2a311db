# Copyright 2026 APIModel Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the path template lexical scanner."""

import pytest

from apimodel.parser.lexer import LexerError, Token, TokenType, tokenize

# ###############
# Test Helpers
# ###############


def _tokens_no_eof(template: str) -> list[Token]:
    """Return all tokens except the terminal EOF token."""
    result = tokenize(template)
    assert result[-1].type == TokenType.EOF
    return result[:-1]


def _types(template: str) -> list[TokenType]:
    return [tok.type for tok in _tokens_no_eof(template)]


def _values(template: str) -> list[str]:
    return [tok.value for tok in _tokens_no_eof(template)]


# ###############
# EOF Handling
# ###############


class TestEof:
    def test_empty_string_produces_eof(self) -> None:
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF
        assert tokens[0].value == ""
        assert tokens[0].column == 1

    def test_eof_column_follows_last_character(self) -> None:
        tokens = tokenize("/v1")
        assert tokens[-1].column == 4


# ###############
# Symbols and Wildcards
# ###############


class TestSymbols:
    @pytest.mark.parametrize(
        "template,expected",
        [
            ("/", TokenType.SLASH),
            ("{", TokenType.LBRACE),
            ("}", TokenType.RBRACE),
            ("=", TokenType.EQUALS),
            (":", TokenType.COLON),
            ("*", TokenType.STAR),
            ("**", TokenType.DOUBLE_STAR),
        ],
    )
    def test_single_token(self, template: str, expected: TokenType) -> None:
        assert _types(template) == [expected]

    def test_three_stars_are_rejected(self) -> None:
        with pytest.raises(LexerError) as exc_info:
            tokenize("/v1/***")
        assert exc_info.value.column == 5

    def test_wildcard_glued_to_literal_is_rejected(self) -> None:
        with pytest.raises(LexerError, match="whole segment"):
            tokenize("/v1/*abc")


# ###############
# Literals
# ###############


class TestLiterals:
    def test_full_template(self) -> None:
        assert _types("/v1/{name=projects/*}:cancel") == [
            TokenType.SLASH,
            TokenType.LITERAL,
            TokenType.SLASH,
            TokenType.LBRACE,
            TokenType.LITERAL,
            TokenType.EQUALS,
            TokenType.LITERAL,
            TokenType.SLASH,
            TokenType.STAR,
            TokenType.RBRACE,
            TokenType.COLON,
            TokenType.LITERAL,
        ]

    def test_field_path_is_one_literal(self) -> None:
        assert _values("{book.name}") == ["{", "book.name", "}"]

    def test_unreserved_punctuation_is_literal(self) -> None:
        assert _values("a-b_c~d%20e") == ["a-b_c~d%20e"]

    def test_columns_are_one_based(self) -> None:
        tokens = _tokens_no_eof("/v1/foo")
        assert [t.column for t in tokens] == [1, 2, 4, 5]


# ###############
# Errors
# ###############


class TestErrors:
    @pytest.mark.parametrize(
        "template,column",
        [
            ("/v1/a b", 6),
            ("/v1/a?b", 6),
            ("/v1/#", 5),
            ("/v1/café", 8),
        ],
    )
    def test_invalid_character_reports_column(self, template: str, column: int) -> None:
        with pytest.raises(LexerError) as exc_info:
            tokenize(template)
        assert exc_info.value.column == column
        assert f"Column {column}" in str(exc_info.value)
