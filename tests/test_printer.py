"""Tests for the display printer and the source writer."""

from __future__ import annotations

import pytest

from braket import render
from braket.errors import InvalidTermError
from braket.lexer import tokenize
from braket.parser import parse
from braket.printer import PrettyPrinter, PrinterOptions, format_term, to_source
from braket.terms import Application, Lambda, Variable


def pretty(source: str, **options) -> str:
    """Parse source and format it in display form."""
    term, free = parse(tokenize(source))
    return format_term(term, free, PrinterOptions(**options))


def _roundtrip(source: str):
    """Parse, write back to source, parse again."""
    term, free = parse(tokenize(source))
    written = to_source(term, free)
    again, again_free = parse(tokenize(written))
    return (term, free), (again, again_free), written


class TestPrettyPrinterBasic:
    def test_scenario(self):
        assert pretty(r"\x.{\y.{<x|y>}}") == "λx. λy. xy"

    def test_bound_variable(self):
        assert pretty(r"\x.{x}") == "λx. x"

    def test_free_variable_prefixed(self):
        assert pretty("x") == "$x"

    def test_free_and_bound_distinguishable(self):
        assert pretty(r"\x.{<x|y>}") == "λx. x$y"

    def test_shadowed_name(self):
        assert pretty(r"\x.{\x.{x}}") == "λx. λx. x"

    def test_compound_argument_wrapped(self):
        assert pretty("<f|<g|a>>") == "$f($g$a)"

    def test_left_nested_application(self):
        assert pretty("<<f|a>|b>") == "$f$a$b"

    def test_lambda_argument_wrapped(self):
        assert pretty(r"<f|\x.{x}>") == "$f(λx. x)"

    def test_render_helper(self):
        assert render(r"\x.{\y.{<x|y>}}") == "λx. λy. xy"


class TestPrettyPrinterThreshold:
    def test_long_body_wrapped(self):
        # body "λy. λz. xyz" is 11 characters
        assert pretty(r"\x.{\y.{\z.{<<x|y>|z>}}}") == "λx. (λy. λz. xyz)"

    def test_body_at_threshold_not_wrapped(self):
        # body "λy. λz. yz" is exactly 10 characters
        assert pretty(r"\x.{\y.{\z.{<y|z>}}}") == "λx. λy. λz. yz"

    def test_long_function_wrapped(self):
        result = pretty(r"<\long_name.{long_name}|a>")
        assert result == "(λlong_name. long_name)$a"

    def test_threshold_configurable(self):
        assert pretty(r"\x.{\y.{<x|y>}}", paren_threshold=2) == "λx. (λy. xy)"

    def test_wrapped_function_inside_argument(self):
        source = r"<f|<\abcdefgh.{abcdefgh}|a>>"
        assert pretty(source) == "$f((λabcdefgh. abcdefgh)$a)"

    def test_sibling_parens_not_treated_as_wrapped(self):
        # argument renders as "(λabcdefgh. abcdefgh)($g$b)"
        result = pretty(r"<h|<\abcdefgh.{abcdefgh}|<g|b>>>")
        assert result == "$h((λabcdefgh. abcdefgh)($g$b))"


class TestPrinterOptions:
    def test_custom_free_prefix(self):
        assert pretty("<f|x>", free_prefix="?") == "?f?x"

    def test_custom_lambda_symbol(self):
        assert pretty(r"\x.{x}", lambda_symbol="\\") == "\\x. x"

    def test_wrap_variable_args(self):
        assert pretty(r"\x.{\y.{<x|y>}}", wrap_variable_args=True) == "λx. λy. x(y)"


class TestPrettyPrinterInvalid:
    def test_index_exceeds_depth(self):
        with pytest.raises(InvalidTermError):
            format_term(Lambda("x", Variable(2)), [])

    def test_free_slot_out_of_table(self):
        with pytest.raises(InvalidTermError):
            format_term(Variable(-2), ["a"])

    def test_zero_index(self):
        with pytest.raises(InvalidTermError):
            format_term(Variable(0), [])

    def test_printer_reusable_after_error(self):
        printer = PrettyPrinter()
        with pytest.raises(InvalidTermError):
            printer.format(Lambda("x", Variable(5)), [])
        assert printer.env == []
        assert printer.format(Lambda("y", Variable(1)), []) == "λy. y"

    def test_constructed_tree_uses_positional_names(self):
        term = Lambda("a", Lambda("a", Variable(2)))
        assert format_term(term, []) == "λa. λa. a"


class TestSourceWriter:
    def test_canonical_form(self):
        term, free = parse(tokenize("\\ x . { < x | y > }"))
        assert to_source(term, free) == r"\x.{<x|y>}"

    def test_closed_roundtrip(self):
        (term, free), (again, again_free), _ = _roundtrip(r"\f.{\x.{<f|<f|x>>}}")
        assert again == term
        assert again_free == free == []

    def test_open_roundtrip(self):
        (term, free), (again, again_free), _ = _roundtrip(r"<\x.{<x|z>}|<y|z>>")
        assert again == term
        assert again_free == free == ["z", "y"]

    def test_shadowing_renamed(self):
        (term, _), (again, _), written = _roundtrip(r"\x.{<\x.{x}|x>}")
        assert written == r"\x.{<\x_1.{x_1}|x>}"
        assert again == term

    def test_constructed_capture_avoided(self):
        term = Lambda("a", Lambda("a", Variable(2)))
        written = to_source(term, [])
        assert written == r"\a.{\a_1.{a}}"
        again, free = parse(tokenize(written))
        assert again == term
        assert free == []

    def test_binder_renamed_away_from_free_name(self):
        term = Lambda("y", Application(Variable(1), Variable(-1)))
        written = to_source(term, ["y"])
        assert written == r"\y_1.{<y_1|y>}"
        again, free = parse(tokenize(written))
        assert again == term
        assert free == ["y"]

    def test_invalid_term(self):
        with pytest.raises(InvalidTermError):
            to_source(Variable(3), [])
