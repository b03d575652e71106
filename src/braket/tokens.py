"""Token kinds and token representation for the bra-ket lexer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from braket.source import Span


class TokenKind(Enum):
    IDENTIFIER = auto()

    # Punctuation
    LAMBDA = auto()  # \
    DOT = auto()     # .
    LBRACE = auto()  # {
    RBRACE = auto()  # }
    BRA = auto()     # <
    DELIM = auto()   # |
    KET = auto()     # >


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    span: Span | None = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        if self.kind == TokenKind.IDENTIFIER:
            return f"{self.kind.name} {self.value}"
        return f"{self.kind.name} {self.value!r}"


PUNCTUATION: dict[str, TokenKind] = {
    "\\": TokenKind.LAMBDA,
    ".": TokenKind.DOT,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "<": TokenKind.BRA,
    "|": TokenKind.DELIM,
    ">": TokenKind.KET,
}

# Source spelling of each punctuation kind, for error messages.
SPELLING: dict[TokenKind, str] = {kind: ch for ch, kind in PUNCTUATION.items()}
