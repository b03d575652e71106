"""Term node definitions for bra-ket lambda terms.

Bound variables are stored as de Bruijn indices counted outward from 1, so
alpha-equivalent terms compare equal. Free variables are negative indices
into a separate free-variable table: ``-(slot + 1)``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Variable:
    index: int

    @property
    def is_free(self) -> bool:
        return self.index < 0

    @property
    def free_slot(self) -> int:
        """Position in the free-variable table. Only valid for free variables."""
        return -self.index - 1


@dataclass(frozen=True)
class Lambda:
    param: str = field(compare=False)  # display only
    body: Term


@dataclass(frozen=True)
class Application:
    fn: Term
    arg: Term


Term = Union[Variable, Lambda, Application]


def free_index(slot: int) -> int:
    """Variable index for free-variable table slot ``slot``."""
    return -(slot + 1)


def describe(term: Term) -> str:
    """Compact structural repr, e.g. ``Lambda(x, Application(2, -1))``."""
    if isinstance(term, Variable):
        return str(term.index)
    if isinstance(term, Lambda):
        return f"Lambda({term.param}, {describe(term.body)})"
    return f"Application({describe(term.fn)}, {describe(term.arg)})"
