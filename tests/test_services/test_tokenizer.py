"""Tests for the formula tokenizer."""

import pytest

from sheet_calc.services.tokenizer import (
    has_operator,
    is_operator,
    tokenize,
    tokenize_formula,
)
from sheet_calc.utils.exceptions import InvalidFormulaSyntaxError


class TestTokenize:
    """Tests for tokenize."""

    def test_splits_on_operators(self) -> None:
        """Operators become their own tokens."""
        assert tokenize("var1+var2") == ["var1", "+", "var2"]

    def test_strips_whitespace_and_parentheses(self) -> None:
        """Whitespace around tokens is dropped."""
        assert tokenize(" a + 12*(b) ") == ["a", "+", "12", "*", "(", "b", ")"]

    def test_adjacent_operators(self) -> None:
        """Consecutive operator characters are separate tokens."""
        assert tokenize("((1))") == ["(", "(", "1", ")", ")"]
        assert tokenize("2--3") == ["2", "-", "-", "3"]

    def test_leading_minus(self) -> None:
        """A sign is an operator token, not part of the number."""
        assert tokenize("-5") == ["-", "5"]

    def test_decimal_numbers_stay_whole(self) -> None:
        """A dot is not an operator."""
        assert tokenize("1.5/0.25") == ["1.5", "/", "0.25"]

    def test_inner_whitespace_kept(self) -> None:
        """Whitespace inside an operand is not a separator."""
        assert tokenize("hello world") == ["hello world"]

    def test_empty_body(self) -> None:
        """An empty body has no tokens."""
        assert tokenize("") == []
        assert tokenize("   ") == []


class TestTokenizeFormula:
    """Tests for tokenize_formula."""

    def test_drops_leading_equals(self) -> None:
        """The formula marker is not a token."""
        assert tokenize_formula("=1+2") == ["1", "+", "2"]

    def test_non_formula_raises(self) -> None:
        """A value without '=' is rejected."""
        with pytest.raises(InvalidFormulaSyntaxError) as exc_info:
            tokenize_formula("1+2")
        assert exc_info.value.formula == "1+2"


class TestOperatorHelpers:
    """Tests for is_operator and has_operator."""

    @pytest.mark.parametrize("token", ["+", "-", "*", "/", "(", ")"])
    def test_is_operator(self, token: str) -> None:
        assert is_operator(token)

    @pytest.mark.parametrize("token", ["", "a", "1", "++", "="])
    def test_is_not_operator(self, token: str) -> None:
        assert not is_operator(token)

    def test_has_operator(self) -> None:
        assert has_operator("a(b")
        assert has_operator("-1")
        assert not has_operator("hello")
        assert not has_operator("5.50")
