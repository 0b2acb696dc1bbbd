"""Pydantic models for API requests and responses."""

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from sheet_calc.utils.exceptions import ErrorCode

ERROR_RESULT = "ERROR"
"""Sentinel result reported when a cell's calculation fails."""

_NUMBER_RE = re.compile(r"-?\d+(\.\d+)?", re.ASCII)


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: str
    version: str


class CellKind(str, Enum):
    """Classification of a cell's raw value, derived at write time."""

    STRING = "string"
    NUMBER = "number"
    FORMULA = "formula"

    @classmethod
    def classify(cls, raw_value: str) -> "CellKind":
        """Derive the kind of a raw value.

        A leading ``=`` makes a formula; an optionally signed decimal makes
        a number; anything else is a string.
        """
        if raw_value.startswith("="):
            return cls.FORMULA
        if is_number(raw_value):
            return cls.NUMBER
        return cls.STRING


def is_number(text: str) -> bool:
    """Whether ``text`` is an optionally signed decimal literal."""
    return _NUMBER_RE.fullmatch(text) is not None


class AddCellRequest(BaseModel):
    """Request body for writing a cell."""

    value: str = Field(..., description="Raw cell value; a leading '=' marks a formula")


class CascadeWarning(BaseModel):
    """A dependent cell that no longer evaluates after a write."""

    cell: str = Field(..., description="Name of the dependent cell")
    message: str = Field(..., description="Why the dependent failed to evaluate")


class CellResponse(BaseModel):
    """Response model for a single cell."""

    value: str = Field(..., description="Raw value as written")
    result: str = Field(
        ..., description="Computed display result, or 'ERROR' if calculation failed"
    )
    warnings: list[CascadeWarning] | None = Field(
        default=None,
        description="Dependent cells that failed to re-evaluate after this write",
    )


class ErrorDetail(BaseModel):
    """Error detail model for API error responses.

    This model provides structured error responses with:
    - Human-readable error message
    - Machine-readable error code
    - Optional additional details for debugging
    - Optional request ID for correlation
    """

    detail: str = Field(..., description="Human-readable error message")
    error_code: str | None = Field(
        default=None,
        description="Machine-readable error code (e.g., 'E1001')",
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional error details for debugging",
    )
    request_id: str | None = Field(
        default=None,
        description="Request ID for error correlation",
    )

    @classmethod
    def from_error_code(
        cls,
        error_code: ErrorCode,
        detail: str,
        details: dict[str, Any] | None = None,
        request_id: str | None = None,
    ) -> "ErrorDetail":
        """Create an ErrorDetail from an ErrorCode enum value.

        Args:
            error_code: The error code enum.
            detail: Human-readable error message.
            details: Optional additional details.
            request_id: Optional request ID.

        Returns:
            ErrorDetail instance.
        """
        return cls(
            detail=detail,
            error_code=error_code.value,
            details=details,
            request_id=request_id,
        )
