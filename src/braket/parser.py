"""Parser for bra-ket lambda terms.

Recursive descent over the token list, resolving variable names to de Bruijn
indices as it goes:

    Term        := Variable | Lambda | Application
    Variable    := IDENT
    Lambda      := '\\' IDENT '.' '{' Term '}'
    Application := '<' Term '|' Term '>'

Bound variables get the distance (1-indexed) from the innermost binder to the
one that introduced them. Unbound names go into a free-variable table, one
slot per distinct name, and are referenced as ``-(slot + 1)``.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from braket.errors import ParseError
from braket.source import Span
from braket.terms import Application, Lambda, Term, Variable, free_index
from braket.tokens import SPELLING, Token, TokenKind

_END = "end of input"


def _describe(tok: Token | None) -> str:
    if tok is None:
        return _END
    if tok.kind == TokenKind.IDENTIFIER:
        return f"identifier {tok.value!r}"
    return repr(tok.value)


class Parser:
    """Parses a list of tokens into a Term and its free-variable table."""

    def __init__(self, tokens: list[Token], filename: str = "<stdin>") -> None:
        self.tokens = tokens
        self.pos = 0
        self.filename = filename
        self.env: list[str] = []
        self.free_vars: list[str] = []

    # ── Token access ─────────────────────────────────────────────

    def _current(self) -> Token | None:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def _at(self, kind: TokenKind) -> bool:
        tok = self._current()
        return tok is not None and tok.kind == kind

    def _advance(self) -> Token:
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def _end_span(self) -> Span:
        """Zero-width span just past the last token."""
        if not self.tokens or self.tokens[-1].span is None:
            return Span(self.filename, 1, 1, 1, 1)
        last = self.tokens[-1].span
        return Span(self.filename, last.end_line, last.end_col + 1,
                    last.end_line, last.end_col + 1)

    def _fail(self, expected: str) -> ParseError:
        tok = self._current()
        span = tok.span if tok is not None else self._end_span()
        return ParseError(expected, _describe(tok), span)

    def _expect(self, kind: TokenKind, context: str) -> Token:
        if self._at(kind):
            return self._advance()
        raise self._fail(f"{SPELLING[kind]!r} {context}")

    def _expect_ident(self, context: str) -> str:
        if self._at(TokenKind.IDENTIFIER):
            return self._advance().value
        raise self._fail(f"identifier {context}")

    @contextmanager
    def _binder(self, name: str) -> Iterator[None]:
        self.env.append(name)
        try:
            yield
        finally:
            self.env.pop()

    # ── Entry point ──────────────────────────────────────────────

    def parse(self) -> tuple[Term, list[str]]:
        """Parse exactly one term; returns it with the free-variable table."""
        term = self._parse_term()
        if self._current() is not None:
            raise self._fail(_END)
        return term, list(self.free_vars)

    # ── Productions ──────────────────────────────────────────────

    def _parse_term(self) -> Term:
        tok = self._current()
        if tok is None:
            raise ParseError("a term", _END, self._end_span(), unexpected=True)
        if tok.kind == TokenKind.IDENTIFIER:
            return self._parse_variable()
        if tok.kind == TokenKind.LAMBDA:
            return self._parse_lambda()
        if tok.kind == TokenKind.BRA:
            return self._parse_application()
        raise ParseError("a term", f"token {_describe(tok)}", tok.span, unexpected=True)

    def _parse_variable(self) -> Variable:
        name = self._advance().value
        return Variable(self._resolve(name))

    def _parse_lambda(self) -> Lambda:
        self._advance()  # '\'
        param = self._expect_ident("after '\\' in lambda")
        self._expect(TokenKind.DOT, "after parameter in lambda")
        self._expect(TokenKind.LBRACE, "after '.' in lambda")
        with self._binder(param):
            body = self._parse_term()
            self._expect(TokenKind.RBRACE, "to close lambda body")
        return Lambda(param, body)

    def _parse_application(self) -> Application:
        self._advance()  # '<'
        fn = self._parse_term()
        self._expect(TokenKind.DELIM, "between function and argument")
        arg = self._parse_term()
        self._expect(TokenKind.KET, "to close application")
        return Application(fn, arg)

    # ── Scope resolution ─────────────────────────────────────────

    def _resolve(self, name: str) -> int:
        for depth, bound in enumerate(reversed(self.env), start=1):
            if bound == name:
                return depth
        if name in self.free_vars:
            return free_index(self.free_vars.index(name))
        self.free_vars.append(name)
        return free_index(len(self.free_vars) - 1)


def parse(tokens: list[Token], filename: str = "<stdin>") -> tuple[Term, list[str]]:
    """Parse ``tokens`` into a term and its free-variable table.

    Raises ParseError on the first mismatch; there is no partial result.
    """
    return Parser(tokens, filename).parse()
