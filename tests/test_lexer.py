"""Tests for the bra-ket lexer."""

from __future__ import annotations

import pytest

from braket.errors import LexError
from braket.lexer import Lexer, tokenize
from braket.source import Span
from braket.tokens import Token, TokenKind


def lex(source: str) -> list[tuple[TokenKind, str]]:
    """Helper: lex source and return (kind, value) pairs."""
    return [(t.kind, t.value) for t in tokenize(source)]


def kinds(source: str) -> list[TokenKind]:
    """Helper: lex source and return just the token kinds."""
    return [t.kind for t in tokenize(source)]


class TestLexerBasic:
    def test_empty_source(self):
        assert tokenize("") == []

    def test_whitespace_only(self):
        assert tokenize(" \t\n  \r\n") == []

    def test_identifier(self):
        assert lex("hello") == [(TokenKind.IDENTIFIER, "hello")]

    def test_underscore_identifier(self):
        assert lex("_") == [(TokenKind.IDENTIFIER, "_")]

    def test_identifier_with_digits(self):
        assert lex("x_12y") == [(TokenKind.IDENTIFIER, "x_12y")]

    def test_maximal_munch(self):
        assert lex("abc def") == [
            (TokenKind.IDENTIFIER, "abc"),
            (TokenKind.IDENTIFIER, "def"),
        ]

    def test_punctuation(self):
        assert kinds("\\.{}<|>") == [
            TokenKind.LAMBDA,
            TokenKind.DOT,
            TokenKind.LBRACE,
            TokenKind.RBRACE,
            TokenKind.BRA,
            TokenKind.DELIM,
            TokenKind.KET,
        ]

    def test_identifier_stops_at_punctuation(self):
        assert lex("x}") == [(TokenKind.IDENTIFIER, "x"), (TokenKind.RBRACE, "}")]


class TestLexerScenarios:
    def test_nested_lambda(self):
        assert lex(r"\x.{\y.{<x|y>}}") == [
            (TokenKind.LAMBDA, "\\"),
            (TokenKind.IDENTIFIER, "x"),
            (TokenKind.DOT, "."),
            (TokenKind.LBRACE, "{"),
            (TokenKind.LAMBDA, "\\"),
            (TokenKind.IDENTIFIER, "y"),
            (TokenKind.DOT, "."),
            (TokenKind.LBRACE, "{"),
            (TokenKind.BRA, "<"),
            (TokenKind.IDENTIFIER, "x"),
            (TokenKind.DELIM, "|"),
            (TokenKind.IDENTIFIER, "y"),
            (TokenKind.KET, ">"),
            (TokenKind.RBRACE, "}"),
            (TokenKind.RBRACE, "}"),
        ]

    def test_spaced_application(self):
        assert kinds(r"< \x . {x} | < \t . {t} | y > >") == [
            TokenKind.BRA,
            TokenKind.LAMBDA,
            TokenKind.IDENTIFIER,
            TokenKind.DOT,
            TokenKind.LBRACE,
            TokenKind.IDENTIFIER,
            TokenKind.RBRACE,
            TokenKind.DELIM,
            TokenKind.BRA,
            TokenKind.LAMBDA,
            TokenKind.IDENTIFIER,
            TokenKind.DOT,
            TokenKind.LBRACE,
            TokenKind.IDENTIFIER,
            TokenKind.RBRACE,
            TokenKind.DELIM,
            TokenKind.IDENTIFIER,
            TokenKind.KET,
            TokenKind.KET,
        ]

    def test_deterministic(self):
        source = r"<\f.{<f|f>}|\x.{x}>"
        assert tokenize(source) == tokenize(source)

    def test_whitespace_does_not_affect_equality(self):
        assert tokenize(r"\x.{x}") == tokenize("\\ x . { x }")


class TestLexerSpans:
    def test_identifier_span(self):
        tok = Lexer("  abc", "t.lam").lex()[0]
        assert tok.span == Span("t.lam", 1, 3, 1, 5)

    def test_punctuation_span(self):
        toks = Lexer("<x|y>", "t.lam").lex()
        assert toks[4].span == Span("t.lam", 1, 5, 1, 5)

    def test_multiline_span(self):
        toks = Lexer("<x\n  |y>", "t.lam").lex()
        assert toks[2].kind == TokenKind.DELIM
        assert toks[2].span == Span("t.lam", 2, 3, 2, 3)

    def test_span_not_part_of_equality(self):
        a = Token(TokenKind.IDENTIFIER, "x", Span("a", 1, 1, 1, 1))
        b = Token(TokenKind.IDENTIFIER, "x", Span("b", 9, 9, 9, 9))
        assert a == b


class TestLexerErrors:
    def test_unknown_character(self):
        with pytest.raises(LexError) as exc:
            tokenize("@")
        assert exc.value.char == "@"

    def test_error_span(self):
        with pytest.raises(LexError) as exc:
            tokenize("<x|\n y#>", "t.lam")
        assert exc.value.span == Span("t.lam", 2, 3, 2, 3)
        assert exc.value.diagnostics[0].code == "E100"

    def test_digit_cannot_start_identifier(self):
        with pytest.raises(LexError):
            tokenize("1x")

    def test_non_ascii_letter_rejected(self):
        with pytest.raises(LexError) as exc:
            tokenize("é")
        assert exc.value.char == "é"

    def test_unicode_lambda_has_note(self):
        with pytest.raises(LexError) as exc:
            tokenize("λx.{x}")
        assert exc.value.diagnostics[0].notes

    def test_parentheses_rejected(self):
        with pytest.raises(LexError):
            tokenize("(x)")
