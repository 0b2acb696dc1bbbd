"""Formula tokenizer.

Splits formula text into single-character operator/parenthesis tokens and
operand tokens (numbers or cell names). Operands are not validated here.
"""

import re

from sheet_calc.utils.exceptions import InvalidFormulaSyntaxError

OPERATORS = frozenset("+-*/()")

# Zero-width split on both sides of every operator character
_SPLIT_RE = re.compile(r"(?=[-+*/()])|(?<=[-+*/()])")


def is_operator(token: str) -> bool:
    """Whether ``token`` is a single operator or parenthesis character."""
    return len(token) == 1 and token in OPERATORS


def has_operator(text: str) -> bool:
    """Whether ``text`` contains any operator or parenthesis character."""
    return any(ch in OPERATORS for ch in text)


def tokenize(body: str) -> list[str]:
    """Split a formula body (leading ``=`` already removed) into tokens.

    Every token is stripped of surrounding whitespace and empty tokens are
    dropped, so ``" a + 12*(b) "`` gives ``["a", "+", "12", "*", "(", "b", ")"]``.
    """
    return [part.strip() for part in _SPLIT_RE.split(body) if part.strip()]


def tokenize_formula(raw_value: str) -> list[str]:
    """Tokenize a raw formula value including its leading ``=``.

    Raises:
        InvalidFormulaSyntaxError: If ``raw_value`` is not a formula.
    """
    if not raw_value.startswith("="):
        raise InvalidFormulaSyntaxError(
            "Not a valid formula: must start with '='", formula=raw_value
        )
    return tokenize(raw_value[1:])
