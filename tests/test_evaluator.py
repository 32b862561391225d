"""Local arithmetic evaluator tests: no network, no model."""
from __future__ import annotations

import pytest

from app.evaluation.evaluator import contains_math, sanitize_expression, try_evaluate


def test_evaluates_mixed_decimal_expression() -> None:
    assert try_evaluate("3*0.5+3*(-1)") == -1.5


def test_integral_results_are_ints() -> None:
    result = try_evaluate("2 + 3 * 4")
    assert result == 14
    assert isinstance(result, int)


@pytest.mark.parametrize("text", ["", None, "   ", "x + y = z", "()", "+-*/", "abc"])
def test_returns_none_without_digits(text) -> None:
    assert try_evaluate(text) is None


def test_strips_non_arithmetic_characters() -> None:
    # "=" and letters are dropped before evaluation
    assert try_evaluate("Compute: (1 + 2) * 3 =") == 9


def test_sanitize_removes_whitespace() -> None:
    assert sanitize_expression(" 1 +\n 2 ") == "1+2"


def test_division_by_zero_is_none() -> None:
    assert try_evaluate("1/0") is None


def test_power_is_supported() -> None:
    assert try_evaluate("2**10") == 1024


def test_overflow_is_none() -> None:
    assert try_evaluate("10**400") is None


def test_complex_result_is_none() -> None:
    assert try_evaluate("(-8)**(0.5)") is None


@pytest.mark.parametrize("text", ["2(3)", "4//2", "1.2.3", "3+", "007"])
def test_malformed_expressions_are_none(text: str) -> None:
    assert try_evaluate(text) is None


def test_contains_math() -> None:
    assert contains_math("x = y")
    assert contains_math("7")
    assert contains_math("3 × 4")
    assert not contains_math("hello world")
    assert not contains_math("")
    assert not contains_math(None)
