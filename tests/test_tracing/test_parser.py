"""Tests for call expression parsing."""

import pytest

from app.services.tracing.errors import ParseError
from app.services.tracing.parser import ParsedCall, parse_call, tokenize_arguments


class TestParseCall:
    """Tests for parse_call."""

    def test_splits_name_and_arguments(self):
        """f(1, 'a', 2) yields the name and three raw tokens."""
        assert parse_call("f(1, 'a', 2)") == ParsedCall(name="f", arguments=("1", "'a'", "2"))

    def test_empty_argument_list(self):
        """f() has no arguments."""
        assert parse_call("f()") == ParsedCall(name="f", arguments=())

    def test_blank_argument_list(self):
        """Whitespace between the parentheses counts as no arguments."""
        assert parse_call("f(   )").arguments == ()

    def test_keeps_schema_qualified_name(self):
        """The name keeps its namespace separator."""
        assert parse_call("billing.close_invoice(42)").name == "billing.close_invoice"

    def test_missing_opening_parenthesis(self):
        """A call without ( is rejected."""
        with pytest.raises(ParseError, match="opening"):
            parse_call("f")

    def test_missing_closing_parenthesis(self):
        """An unclosed call is rejected."""
        with pytest.raises(ParseError, match="closing"):
            parse_call("f(1,2")

    def test_closing_parenthesis_must_follow_opening(self):
        """A ) before the ( does not close the call."""
        with pytest.raises(ParseError):
            parse_call("f)(1")

    def test_uses_last_closing_parenthesis(self):
        """Everything up to the last ) belongs to the arguments."""
        assert parse_call("f(g(1), 2)").arguments == ("g(1)", "2")

    def test_ignores_text_after_closing_parenthesis(self):
        """Trailing text after the call is dropped."""
        assert parse_call("f(1) ;").arguments == ("1",)

    @pytest.mark.parametrize("call", [None, "", "   "])
    def test_empty_call_string(self, call):
        """Empty input is a parse error, not an empty call."""
        with pytest.raises(ParseError, match="empty"):
            parse_call(call)

    def test_missing_routine_name(self):
        """(1) has no name to resolve."""
        with pytest.raises(ParseError, match="name"):
            parse_call("  (1)")


class TestTokenizeArguments:
    """Tests for the argument tokenizer."""

    def test_trims_leading_whitespace_only(self):
        """Trailing whitespace is kept as written."""
        assert tokenize_arguments("  1 ,  2") == ["1 ", "2"]

    def test_skips_empty_runs(self):
        """Consecutive commas do not produce empty tokens."""
        assert tokenize_arguments("1,,2,") == ["1", "2"]

    def test_quoted_commas_are_not_special(self):
        """A comma inside quotes still separates tokens."""
        assert tokenize_arguments("'a,b'") == ["'a", "b'"]
