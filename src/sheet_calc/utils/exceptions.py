"""Centralized exception classes for sheet-calc.

This module provides a hierarchy of custom exceptions with error codes,
HTTP status code mapping, and structured error details for consistent
error handling throughout the application.

Exception Hierarchy:
    SheetCalcError (base)
    ├── NotFoundError
    │   ├── CellNotFoundError
    │   └── SheetNotFoundError
    ├── CalculationError
    │   ├── RecursiveFormulaError
    │   ├── ReferenceNotFoundError
    │   ├── InvalidFormulaSyntaxError
    │   └── ResolutionDepthExceededError
    └── ValidationError

Error Codes:
    All errors have a unique error code (e.g., "E2001") that can be used
    for programmatic error handling and documentation.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the application.

    Error codes are grouped by category:
    - E1xxx: Lookup errors (cells, sheets)
    - E2xxx: Calculation errors
    - E4xxx: Request validation errors
    - E9xxx: Internal/unexpected errors
    """

    # Lookup errors (E1xxx)
    CELL_NOT_FOUND = "E1001"
    SHEET_NOT_FOUND = "E1002"

    # Calculation errors (E2xxx)
    CALCULATION_FAILED = "E2001"
    RECURSIVE_FORMULA = "E2002"
    REFERENCE_NOT_FOUND = "E2003"
    INVALID_FORMULA_SYNTAX = "E2004"
    RESOLUTION_DEPTH_EXCEEDED = "E2005"

    # Validation errors (E4xxx)
    INVALID_REQUEST = "E4001"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"


class HTTPStatusMixin:
    """Mixin that provides HTTP status code for exceptions.

    Subclasses should set the `http_status` class attribute.
    """

    http_status: int = 500


class SheetCalcError(Exception, HTTPStatusMixin):
    """Base exception for all sheet-calc errors.

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
        http_status: HTTP status code for API responses (default 500).
    """

    http_status: int = 500

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary for API responses.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# Lookup Errors (E1xxx)
# =============================================================================


class NotFoundError(SheetCalcError):
    """Base class for absent cells and sheets."""

    http_status: int = 404

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CELL_NOT_FOUND,
        sheet_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if sheet_name is not None:
            details["sheet_name"] = sheet_name
        super().__init__(message, error_code, details)
        self.sheet_name = sheet_name


class CellNotFoundError(NotFoundError):
    """Raised when a (sheet, cell) pair has no stored cell."""

    def __init__(
        self,
        sheet_name: str,
        cell_name: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the looked-up identity.

        Args:
            sheet_name: Sheet that was searched.
            cell_name: Cell name that was not found.
            message: Optional custom message.
            details: Additional details.
        """
        details = details or {}
        details["cell_name"] = cell_name
        message = message or f"Cell '{cell_name}' in sheet {sheet_name} not found"
        super().__init__(
            message=message,
            error_code=ErrorCode.CELL_NOT_FOUND,
            sheet_name=sheet_name,
            details=details,
        )
        self.cell_name = cell_name


class SheetNotFoundError(NotFoundError):
    """Raised when a sheet holds no cells."""

    def __init__(
        self,
        sheet_name: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = message or f"Sheet {sheet_name} not found"
        super().__init__(
            message=message,
            error_code=ErrorCode.SHEET_NOT_FOUND,
            sheet_name=sheet_name,
            details=details,
        )


# =============================================================================
# Calculation Errors (E2xxx)
# =============================================================================


class CalculationError(SheetCalcError):
    """Umbrella for every failure while computing a cell's result.

    The original cause, when there is one, is chained with ``raise ... from``
    and is available as ``__cause__``.
    """

    http_status: int = 422

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CALCULATION_FAILED,
        formula: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the formula being calculated.

        Args:
            message: Error message.
            error_code: Error code.
            formula: Raw formula text whose calculation failed.
            details: Additional details.
        """
        details = details or {}
        if formula is not None:
            details["formula"] = formula
        super().__init__(message, error_code, details)
        self.formula = formula


class RecursiveFormulaError(CalculationError):
    """Raised when a formula refers back to a cell being calculated."""

    def __init__(
        self,
        cell_name: str,
        path: list[str] | None = None,
        formula: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the offending reference.

        Args:
            cell_name: The reference that closes the cycle.
            path: Cell names on the resolution path, root first.
            formula: Formula being calculated.
            details: Additional details.
        """
        details = details or {}
        details["cell_name"] = cell_name
        if path:
            details["path"] = path
        super().__init__(
            message=f"Recursive formula: {cell_name} refers to itself",
            error_code=ErrorCode.RECURSIVE_FORMULA,
            formula=formula,
            details=details,
        )
        self.cell_name = cell_name
        self.path = path or []


class ReferenceNotFoundError(CalculationError):
    """Raised when a name in a formula does not resolve to a stored cell."""

    def __init__(
        self,
        cell_name: str,
        formula: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["cell_name"] = cell_name
        super().__init__(
            message=f"Failed to fill formula: cell {cell_name} not found",
            error_code=ErrorCode.REFERENCE_NOT_FOUND,
            formula=formula,
            details=details,
        )
        self.cell_name = cell_name


class InvalidFormulaSyntaxError(CalculationError):
    """Raised when an expression cannot be evaluated to a finite number."""

    def __init__(
        self,
        message: str,
        expression: str | None = None,
        formula: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if expression is not None:
            details["expression"] = expression
        super().__init__(
            message=message,
            error_code=ErrorCode.INVALID_FORMULA_SYNTAX,
            formula=formula,
            details=details,
        )
        self.expression = expression


class ResolutionDepthExceededError(CalculationError):
    """Raised when reference expansion nests deeper than allowed."""

    def __init__(
        self,
        max_depth: int,
        formula: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["max_depth"] = max_depth
        super().__init__(
            message=f"Formula references nest deeper than {max_depth} levels",
            error_code=ErrorCode.RESOLUTION_DEPTH_EXCEEDED,
            formula=formula,
            details=details,
        )
        self.max_depth = max_depth


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(SheetCalcError):
    """General validation error for input data."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        field: str | None = None,
        errors: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with validation details.

        Args:
            message: Main error message.
            field: Field that failed validation.
            errors: List of validation errors.
            details: Additional details.
        """
        details = details or {}
        if field:
            details["field"] = field
        if errors:
            details["validation_errors"] = errors
        super().__init__(
            message=message,
            error_code=ErrorCode.INVALID_REQUEST,
            details=details,
        )
