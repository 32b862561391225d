"""Best-effort arithmetic on an OCR transcript.

The transcript is reduced to digits, ``+ - * / ( ) .`` and whitespace, then
evaluated with floating-point semantics. Anything that is not plain arithmetic
after that reduction yields ``None`` rather than an error.
"""
from __future__ import annotations

import ast
import logging
import math
import re

logger = logging.getLogger(__name__)

_DISALLOWED_CHARS = re.compile(r"[^0-9+\-*/().\s]")
_WHITESPACE = re.compile(r"\s+")
_DIGIT = re.compile(r"[0-9]")
_MATH_HINT = re.compile(r"[0-9=+\-×*/()]")

Number = int | float


class _ArithmeticEvaluator(ast.NodeVisitor):
    def visit_Expression(self, node: ast.Expression) -> float:
        return self.visit(node.body)

    def visit_Constant(self, node: ast.Constant) -> float:
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise ValueError(f"unsupported constant: {node.value!r}")
        return float(node.value)

    def visit_UnaryOp(self, node: ast.UnaryOp) -> float:
        operand = self.visit(node.operand)
        if isinstance(node.op, ast.UAdd):
            return +operand
        if isinstance(node.op, ast.USub):
            return -operand
        raise ValueError(f"unsupported unary operator: {type(node.op).__name__}")

    def visit_BinOp(self, node: ast.BinOp) -> float:
        left = self.visit(node.left)
        right = self.visit(node.right)
        if isinstance(node.op, ast.Add):
            return left + right
        if isinstance(node.op, ast.Sub):
            return left - right
        if isinstance(node.op, ast.Mult):
            return left * right
        if isinstance(node.op, ast.Div):
            return left / right
        if isinstance(node.op, ast.Pow):
            result = left ** right
            if isinstance(result, complex):
                raise ValueError("complex result")
            return result
        raise ValueError(f"unsupported operator: {type(node.op).__name__}")

    def generic_visit(self, node: ast.AST) -> float:
        raise ValueError(f"unsupported: {type(node).__name__}")


def sanitize_expression(text: str | None) -> str:
    """Keep only arithmetic characters and drop all whitespace."""
    cleaned = _DISALLOWED_CHARS.sub("", text or "")
    return _WHITESPACE.sub("", cleaned)


def try_evaluate(text: str | None) -> Number | None:
    """Evaluate *text* as arithmetic; return ``None`` unless the result is a finite number.

    >>> try_evaluate("3*0.5+3*(-1)")
    -1.5
    """
    expr = sanitize_expression(text)
    if not expr or not _DIGIT.search(expr):
        return None

    try:
        tree = ast.parse(expr, mode="eval")
        value = _ArithmeticEvaluator().visit(tree)
    except (SyntaxError, ValueError, ZeroDivisionError, OverflowError, RecursionError) as exc:
        logger.debug("evaluation_skipped", extra={"expr": expr[:80], "reason": str(exc)})
        return None

    if not math.isfinite(value):
        return None
    if value.is_integer():
        return int(value)
    return value


def contains_math(text: str | None) -> bool:
    """True when *text* holds at least one digit or arithmetic symbol."""
    return bool(text) and bool(_MATH_HINT.search(text))
