"""Lexer for bra-ket lambda terms.

Produces the full token list for a source text. Whitespace is skipped and
never produces a token; there are no comments or literals.
"""

from __future__ import annotations

from braket.errors import LexError
from braket.source import Span
from braket.tokens import PUNCTUATION, Token, TokenKind


def _is_ident_start(ch: str) -> bool:
    return ch.isascii() and (ch.isalpha() or ch == '_')


def _is_ident_body(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch == '_')


class Lexer:
    """Tokenizes bra-ket source text."""

    def __init__(self, source: str, filename: str = "<stdin>") -> None:
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.col = 1
        self.tokens: list[Token] = []

    def lex(self) -> list[Token]:
        """Tokenize the entire source and return the token list."""
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch.isspace():
                self._advance()
            elif ch in PUNCTUATION:
                line, col = self.line, self.col
                self._advance()
                self._emit(PUNCTUATION[ch], ch, line, col)
            elif _is_ident_start(ch):
                self._lex_identifier()
            else:
                span = Span(self.filename, self.line, self.col, self.line, self.col)
                raise LexError(ch, span)
        return self.tokens

    # ── Helpers ───────────────────────────────────────────────────

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _emit(self, kind: TokenKind, value: str, start_line: int, start_col: int) -> Token:
        end_col = self.col - 1 if self.col > 1 else 1
        span = Span(self.filename, start_line, start_col, self.line, end_col)
        tok = Token(kind, value, span)
        self.tokens.append(tok)
        return tok

    def _lex_identifier(self) -> None:
        line, col = self.line, self.col
        start = self.pos
        self._advance()
        while _is_ident_body(self._peek()):
            self._advance()
        self._emit(TokenKind.IDENTIFIER, self.source[start:self.pos], line, col)


def tokenize(text: str, filename: str = "<stdin>") -> list[Token]:
    """Tokenize ``text``. Raises LexError on an unrecognized character."""
    return Lexer(text, filename).lex()
