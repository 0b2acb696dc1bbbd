"""Expression evaluator for fully resolved formulas.

Evaluates infix arithmetic over ``+ - * /`` with parentheses using a small
recursive descent parser:

    expression := term (("+" | "-") term)*
    term       := unary (("*" | "/") unary)*
    unary      := ("+" | "-") unary | primary
    primary    := NUMBER | "(" expression ")"

Multiplication and division bind tighter than addition and subtraction,
operators of equal precedence associate left to right, and all arithmetic
is done on Python floats.
"""

import math
import re

from sheet_calc.services.tokenizer import has_operator
from sheet_calc.utils.exceptions import InvalidFormulaSyntaxError
from sheet_calc.utils.logging import get_logger

logger = get_logger(__name__)

_TOKEN_RE = re.compile(
    r"\s*(?:(?P<number>\d+(?:\.\d*)?|\.\d+)|(?P<op>[-+*/()])|(?P<mismatch>\S))",
    re.ASCII,
)


def _lex(expression: str) -> list[str]:
    tokens: list[str] = []
    for match in _TOKEN_RE.finditer(expression):
        if match.group("mismatch") is not None:
            raise InvalidFormulaSyntaxError(
                f"Unexpected character {match.group('mismatch')!r} in expression",
                expression=expression,
            )
        token = match.group("number") or match.group("op")
        if token:
            tokens.append(token)
    return tokens


class _ExpressionParser:
    """Single-use parser that evaluates while it parses."""

    def __init__(self, expression: str) -> None:
        self.expression = expression
        self.tokens = _lex(expression)
        self.pos = 0

    def _peek(self) -> str | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _advance(self) -> str:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def _fail(self, message: str) -> InvalidFormulaSyntaxError:
        return InvalidFormulaSyntaxError(message, expression=self.expression)

    def parse(self) -> float:
        if not self.tokens:
            raise self._fail("Empty expression")
        value = self._expression()
        if self._peek() is not None:
            raise self._fail(f"Unexpected token {self._peek()!r}")
        return value

    def _expression(self) -> float:
        value = self._term()
        while self._peek() in ("+", "-"):
            op = self._advance()
            right = self._term()
            value = value + right if op == "+" else value - right
        return value

    def _term(self) -> float:
        value = self._unary()
        while self._peek() in ("*", "/"):
            op = self._advance()
            right = self._unary()
            if op == "*":
                value = value * right
            elif right == 0:
                raise self._fail("Division by zero")
            else:
                value = value / right
        return value

    def _unary(self) -> float:
        if self._peek() in ("+", "-"):
            op = self._advance()
            operand = self._unary()
            return -operand if op == "-" else operand
        return self._primary()

    def _primary(self) -> float:
        token = self._peek()
        if token is None:
            raise self._fail("Unexpected end of expression")
        if token == "(":
            self._advance()
            value = self._expression()
            if self._peek() != ")":
                raise self._fail("Missing closing parenthesis")
            self._advance()
            return value
        if token in ("+", "-", "*", "/", ")"):
            raise self._fail(f"Unexpected operator {token!r}")
        self._advance()
        return float(token)


def evaluate_number(expression: str) -> float:
    """Evaluate an arithmetic expression to a finite float.

    Raises:
        InvalidFormulaSyntaxError: On malformed input, division by zero, or a
            non-finite result.
    """
    try:
        value = _ExpressionParser(expression).parse()
    except RecursionError:
        raise InvalidFormulaSyntaxError(
            "Expression is nested too deeply", expression=expression
        ) from None
    if not math.isfinite(value):
        raise InvalidFormulaSyntaxError(
            f"Expression does not evaluate to a finite number: {value}",
            expression=expression,
        )
    return value


def format_number(value: float) -> str:
    """Render a float canonically.

    Trailing zeros after the decimal point are dropped together with a
    bare trailing point: ``3.0 -> "3"``, ``-8.5 -> "-8.5"``. Exponent
    notation is left as Python renders it.
    """
    text = repr(float(value))
    if "." in text and "e" not in text:
        text = text.rstrip("0").rstrip(".")
    return text


def evaluate(expression: str) -> str:
    """Evaluate a resolved expression to its display result.

    Text without any operator or parenthesis is returned verbatim, which is
    how a formula that just points at another cell passes a string through.

    Args:
        expression: Concatenation of fully resolved formula tokens.

    Returns:
        The display result.

    Raises:
        InvalidFormulaSyntaxError: If the expression cannot be evaluated.
    """
    if not has_operator(expression):
        logger.debug("Expression has no operators, returning it as is", result=expression)
        return expression

    result = format_number(evaluate_number(expression))
    logger.debug("Expression evaluated", expression=expression, result=result)
    return result
