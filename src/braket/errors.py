"""Rust-style colored diagnostic rendering and pipeline errors."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from braket.source import SourceText

if TYPE_CHECKING:
    from braket.source import Span


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
    Severity.NOTE: "\033[1;36m",     # bold cyan
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"

LEX_ERROR = "E100"
PARSE_ERROR = "E200"
INVALID_TERM = "E300"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a specific source location."""

    span: Span
    message: str
    style: str = "primary"  # "primary" or "secondary"


@dataclass
class Diagnostic:
    """A single diagnostic message with optional labels and notes."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class DiagnosticRenderer:
    """Renders diagnostics in Rust-style format with colors."""

    def __init__(self, *, color: bool = True) -> None:
        self.color = color
        self._sources: dict[str, SourceText] = {}

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def add_source(self, filename: str, text: str) -> None:
        """Register in-memory text (stdin, CLI arguments) under a filename."""
        self._sources[filename] = SourceText(filename, text)

    def _get_source_line(self, filename: str, line_num: int) -> str | None:
        """Load and cache source file, return the 1-indexed line."""
        if filename not in self._sources:
            text = ""
            try:
                path = Path(filename)
                if path.is_file():
                    text = path.read_text()
            except OSError:
                pass
            self._sources[filename] = SourceText(filename, text)
        return self._sources[filename].line_at(line_num)

    def render(self, diag: Diagnostic) -> str:
        lines: list[str] = []
        sev = diag.severity
        color = _COLORS[sev]

        # Header: error[E200]: message
        lines.append(
            f"{self._c(color)}{sev.value}[{diag.code}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        )

        for label in diag.labels:
            span = label.span
            loc = f"{span.file}:{span.start_line}:{span.start_col}"
            lines.append(
                f"  {self._c(_BLUE)}-->{self._c(_RESET)} {loc}"
            )
            gutter = f"{span.start_line:>4}"
            lines.append(f"  {self._c(_BLUE)}   |{self._c(_RESET)}")

            source_line = self._get_source_line(span.file, span.start_line)
            if source_line is not None:
                lines.append(
                    f"  {self._c(_BLUE)}{gutter} |{self._c(_RESET)} {source_line}"
                )

            if span.start_line == span.end_line:
                caret_len = max(1, span.end_col - span.start_col + 1)
                padding = " " * (span.start_col - 1)
                carets = "^" * caret_len
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)} "
                    f"{padding}{self._c(color)}{carets}{self._c(_RESET)}"
                )
            elif source_line is None:
                lines.append(
                    f"  {self._c(_BLUE)}{gutter} |{self._c(_RESET)}"
                )

            if label.message:
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)}   "
                    f"{self._c(color)}{label.message}{self._c(_RESET)}"
                )

        for note in diag.notes:
            lines.append(f"  {self._c(_BLUE)}={self._c(_RESET)} note: {note}")

        return "\n".join(lines)


class CompileError(Exception):
    """Error carrying one or more diagnostics."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = diagnostics
        messages = [d.message for d in diagnostics]
        if len(messages) == 1:
            super().__init__(messages[0])
        else:
            super().__init__(f"{len(diagnostics)} error(s): {'; '.join(messages)}")


def _error(code: str, message: str, span: Span | None, notes: list[str] | None = None) -> Diagnostic:
    labels = [DiagnosticLabel(span=span, message="")] if span is not None else []
    return Diagnostic(
        severity=Severity.ERROR,
        code=code,
        message=message,
        labels=labels,
        notes=notes or [],
    )


class LexError(CompileError):
    """A character that cannot start any token."""

    def __init__(self, char: str, span: Span) -> None:
        self.char = char
        self.span = span
        notes = []
        if char == "λ":
            notes.append("write lambdas with a backslash, e.g. \\x.{x}")
        super().__init__([
            _error(LEX_ERROR, f"unexpected character {char!r}", span, notes),
        ])


class ParseError(CompileError):
    """Token stream does not match the grammar."""

    def __init__(self, expected: str, found: str, span: Span | None, *,
                 unexpected: bool = False) -> None:
        self.expected = expected
        self.found = found
        self.span = span
        if unexpected:
            message = f"unexpected {found}, expected {expected}"
        else:
            message = f"expected {expected}, got {found}"
        super().__init__([_error(PARSE_ERROR, message, span)])


class InvalidTermError(CompileError):
    """A term whose variable indices do not fit its binders or free table."""

    def __init__(self, message: str) -> None:
        super().__init__([_error(INVALID_TERM, message, None)])
