"""Term printers.

``PrettyPrinter`` renders the display form (``λx. λy. xy``): bound variables
are named after the binder they point at, free variables get a prefix, and
parentheses are added only where a rendered piece gets long or an argument is
compound. The display form is not meant to be parsed again.

``SourceWriter`` renders the canonical input form (``\\x.{\\y.{<x|y>}}``),
renaming binders where needed so that parsing the output gives back an equal
term and the same free-variable table.
"""

from __future__ import annotations

from dataclasses import dataclass

from braket.errors import InvalidTermError
from braket.terms import Application, Lambda, Term, Variable


@dataclass(frozen=True)
class PrinterOptions:
    paren_threshold: int = 10
    free_prefix: str = "$"
    lambda_symbol: str = "λ"
    wrap_variable_args: bool = False


def _is_wrapped(text: str) -> bool:
    """True if the opening paren at index 0 is closed by the final char."""
    if not (text.startswith("(") and text.endswith(")")):
        return False
    depth = 0
    for i, ch in enumerate(text):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0 and i < len(text) - 1:
                return False
    return depth == 0


def _wrap(text: str) -> str:
    return text if _is_wrapped(text) else f"({text})"


def _bound_name(env: list[str], index: int) -> str:
    if index > len(env):
        raise InvalidTermError(
            f"variable index {index} exceeds binder depth {len(env)}"
        )
    return env[len(env) - index]


def _free_name(free_vars: list[str], var: Variable) -> str:
    slot = var.free_slot
    if slot >= len(free_vars):
        raise InvalidTermError(
            f"free variable slot {slot} outside table of {len(free_vars)}"
        )
    return free_vars[slot]


class PrettyPrinter:
    """Format a term and its free-variable table to display text."""

    def __init__(self, options: PrinterOptions | None = None) -> None:
        self.options = options or PrinterOptions()
        self.env: list[str] = []
        self.free_vars: list[str] = []

    # ── Public API ─────────────────────────────────────────────

    def format(self, term: Term, free_vars: list[str]) -> str:
        self.env = []
        self.free_vars = list(free_vars)
        return self._format(term)

    # ── Dispatch ───────────────────────────────────────────────

    def _format(self, term: Term) -> str:
        if isinstance(term, Variable):
            return self._format_variable(term)
        if isinstance(term, Lambda):
            return self._format_lambda(term)
        if isinstance(term, Application):
            return self._format_application(term)
        raise InvalidTermError(f"not a term: {term!r}")

    def _format_variable(self, var: Variable) -> str:
        if var.index > 0:
            return _bound_name(self.env, var.index)
        if var.is_free:
            return self.options.free_prefix + _free_name(self.free_vars, var)
        raise InvalidTermError("variable index 0 refers to no binder")

    def _format_lambda(self, lam: Lambda) -> str:
        self.env.append(lam.param)
        try:
            body = self._format(lam.body)
        finally:
            self.env.pop()
        body = self._limit(body)
        return f"{self.options.lambda_symbol}{lam.param}. {body}"

    def _format_application(self, app: Application) -> str:
        fn = self._limit(self._format(app.fn))
        arg = self._format(app.arg)
        if self.options.wrap_variable_args or not isinstance(app.arg, Variable):
            arg = _wrap(arg)
        return f"{fn}{arg}"

    def _limit(self, text: str) -> str:
        """Wrap text longer than the threshold."""
        if len(text) > self.options.paren_threshold:
            return _wrap(text)
        return text


class SourceWriter:
    """Format a term back to parseable ``\\x.{..}`` / ``<f|a>`` source."""

    def __init__(self) -> None:
        self.env: list[str] = []
        self.free_vars: list[str] = []

    def write(self, term: Term, free_vars: list[str]) -> str:
        self.env = []
        self.free_vars = list(free_vars)
        return self._write(term)

    def _write(self, term: Term) -> str:
        if isinstance(term, Variable):
            if term.index > 0:
                return _bound_name(self.env, term.index)
            if term.is_free:
                return _free_name(self.free_vars, term)
            raise InvalidTermError("variable index 0 refers to no binder")
        if isinstance(term, Lambda):
            name = self._fresh(term.param)
            self.env.append(name)
            try:
                body = self._write(term.body)
            finally:
                self.env.pop()
            return f"\\{name}.{{{body}}}"
        if isinstance(term, Application):
            return f"<{self._write(term.fn)}|{self._write(term.arg)}>"
        raise InvalidTermError(f"not a term: {term!r}")

    def _fresh(self, name: str) -> str:
        """Binder name that neither shadows an active binder nor a free name."""
        candidate = name
        n = 0
        while candidate in self.env or candidate in self.free_vars:
            n += 1
            candidate = f"{name}_{n}"
        return candidate


def format_term(term: Term, free_vars: list[str],
                options: PrinterOptions | None = None) -> str:
    """Render ``term`` in display form."""
    return PrettyPrinter(options).format(term, free_vars)


def to_source(term: Term, free_vars: list[str]) -> str:
    """Render ``term`` as canonical source text."""
    return SourceWriter().write(term, free_vars)
