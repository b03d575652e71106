"""Bra-ket lambda calculus: tokenizer, de Bruijn parser and pretty printer."""

from __future__ import annotations

from braket.errors import CompileError, InvalidTermError, LexError, ParseError
from braket.lexer import tokenize
from braket.parser import parse
from braket.printer import PrinterOptions, format_term, to_source
from braket.terms import Application, Lambda, Term, Variable

__version__ = "0.1.0"

# Mirrors the three-call interface: tokenize, parse, format.
format = format_term


def render(text: str, options: PrinterOptions | None = None) -> str:
    """Tokenize, parse and pretty-print ``text`` in one call."""
    term, free_vars = parse(tokenize(text))
    return format_term(term, free_vars, options)


__all__ = [
    "Application",
    "CompileError",
    "InvalidTermError",
    "Lambda",
    "LexError",
    "ParseError",
    "PrinterOptions",
    "Term",
    "Variable",
    "format",
    "format_term",
    "parse",
    "render",
    "to_source",
    "tokenize",
]
