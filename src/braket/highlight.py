"""Pygments lexer for bra-ket lambda terms."""

from pygments import highlight as _highlight
from pygments.formatters import TerminalFormatter
from pygments.lexer import RegexLexer, default
from pygments.token import Error, Keyword, Name, Punctuation, Text


class BraketLexer(RegexLexer):
    """Pygments lexer for bra-ket lambda terms."""

    name = "Braket"
    aliases = ["braket", "lam"]
    filenames = ["*.lam"]
    mimetypes = ["text/x-braket"]

    tokens = {
        "root": [
            (r"\s+", Text),
            # Lambda marker; the parameter that follows is a binder
            (r"\\", Keyword, "binder"),
            (r"[A-Za-z_][A-Za-z0-9_]*", Name.Variable),
            (r"[<>|]", Punctuation),
            (r"[.{}]", Punctuation),
            (r".", Error),
        ],
        "binder": [
            (r"\s+", Text),
            (r"[A-Za-z_][A-Za-z0-9_]*", Name.Function, "#pop"),
            default("#pop"),
        ],
    }


def highlight(source: str) -> str:
    """Return ``source`` coloured for a terminal."""
    return _highlight(source, BraketLexer(), TerminalFormatter())
