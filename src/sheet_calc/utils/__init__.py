"""Utilities package for sheet-calc.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from sheet_calc.utils.exceptions import (
    CalculationError,
    CellNotFoundError,
    ErrorCode,
    HTTPStatusMixin,
    InvalidFormulaSyntaxError,
    NotFoundError,
    RecursiveFormulaError,
    ReferenceNotFoundError,
    ResolutionDepthExceededError,
    SheetCalcError,
    SheetNotFoundError,
    ValidationError,
)
from sheet_calc.utils.logging import (
    LogContext,
    StructuredLogger,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Exceptions
    "CalculationError",
    "CellNotFoundError",
    "ErrorCode",
    "HTTPStatusMixin",
    "InvalidFormulaSyntaxError",
    "NotFoundError",
    "RecursiveFormulaError",
    "ReferenceNotFoundError",
    "ResolutionDepthExceededError",
    "SheetCalcError",
    "SheetNotFoundError",
    "ValidationError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
