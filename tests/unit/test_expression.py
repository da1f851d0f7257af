"""
Unit tests for the restricted formula evaluator.

Run: pytest tests/unit/test_expression.py -v
"""

import math

import pytest

from resident.core.errors import FormulaError
from resident.core.expression import Formula, parse_formula, referenced_names, tokenize


class TestTokenize:
    """Test tokenize function."""

    def test_braced_variable_becomes_name(self):
        assert tokenize("{dist} * 2") == [("name", "dist"), ("op", "*"), ("number", "2")]

    def test_double_star_is_power(self):
        assert tokenize("a ** 2") == [("name", "a"), ("op", "^"), ("number", "2")]

    def test_scientific_notation(self):
        assert tokenize("1.5e-3") == [("number", "1.5e-3")]

    def test_rejects_unknown_characters(self):
        with pytest.raises(FormulaError):
            tokenize("a; import os")


class TestFormula:
    """Test Formula parsing and evaluation."""

    # ========================================
    # Arithmetic
    # ========================================

    def test_inverse_square_example(self):
        formula = Formula("a*2.5*(100/dist)^2*t")
        assert formula.evaluate({"a": 10, "dist": 100, "t": 2}) == pytest.approx(50.0)

    def test_braced_and_bare_names_are_equivalent(self):
        values = {"a": 3, "b": 4}
        assert Formula("{a} * {b}").evaluate(values) == Formula("a * b").evaluate(values)

    def test_operator_precedence(self):
        assert Formula("2 + 3 * 4").evaluate({}) == 14
        assert Formula("(2 + 3) * 4").evaluate({}) == 20

    def test_power_is_right_associative(self):
        assert Formula("2^3^2").evaluate({}) == 512

    def test_unary_minus_binds_looser_than_power(self):
        assert Formula("-2^2").evaluate({}) == -4

    def test_functions_and_constants(self):
        assert Formula("sqrt(16) + max(1, 2, 3)").evaluate({}) == 7
        assert Formula("2 * pi").evaluate({}) == pytest.approx(2 * math.pi)

    # ========================================
    # Names
    # ========================================

    def test_names_exclude_constants_and_functions(self):
        assert Formula("sqrt(x) * pi + y").names == {"x", "y"}

    def test_referenced_names_of_tree(self):
        assert referenced_names(parse_formula("a*(b+c)")) == {"a", "b", "c"}

    # ========================================
    # Errors
    # ========================================

    def test_missing_variable(self):
        with pytest.raises(FormulaError, match="Missing values"):
            Formula("a + b").evaluate({"a": 1})

    def test_division_by_zero(self):
        with pytest.raises(FormulaError, match="Division by zero"):
            Formula("a / b").evaluate({"a": 1, "b": 0})

    def test_disallowed_function(self):
        with pytest.raises(FormulaError, match="not allowed"):
            Formula("__import__(1)")

    def test_domain_error_is_formula_error(self):
        with pytest.raises(FormulaError):
            Formula("log(x)").evaluate({"x": 0})

    def test_unbalanced_parentheses(self):
        with pytest.raises(FormulaError):
            Formula("(a + 1")

    def test_trailing_tokens(self):
        with pytest.raises(FormulaError, match="Unexpected token"):
            Formula("a b")

    def test_empty_formula(self):
        with pytest.raises(FormulaError, match="Empty"):
            Formula("   ")

    def test_deep_nesting_rejected(self):
        with pytest.raises(FormulaError, match="nests deeper"):
            Formula("(" * 150 + "a" + ")" * 150)

    def test_long_sign_chain_rejected(self):
        with pytest.raises(FormulaError, match="nests deeper"):
            Formula("-" * 400 + "a")

    def test_moderate_nesting_allowed(self):
        assert Formula("(" * 50 + "a" + ")" * 50).evaluate({"a": 3}) == 3

    def test_oversized_formula_rejected(self):
        with pytest.raises(FormulaError, match="more than"):
            Formula(" + ".join(["a"] * 400))
