"""Tests for the centralized exception classes."""

from sheet_calc.utils.exceptions import (
    CalculationError,
    CellNotFoundError,
    ErrorCode,
    InvalidFormulaSyntaxError,
    NotFoundError,
    RecursiveFormulaError,
    ReferenceNotFoundError,
    ResolutionDepthExceededError,
    SheetCalcError,
    SheetNotFoundError,
    ValidationError,
)


class TestErrorCode:
    """Tests for ErrorCode enumeration."""

    def test_error_codes_are_unique(self) -> None:
        """All error codes should have unique values."""
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))

    def test_error_code_format(self) -> None:
        """Error codes should follow Exxxx format."""
        for code in ErrorCode:
            assert code.value.startswith("E")
            assert len(code.value) == 5
            assert code.value[1:].isdigit()

    def test_calculation_errors_start_with_e2(self) -> None:
        """Calculation error codes should start with E2."""
        for code in [
            ErrorCode.CALCULATION_FAILED,
            ErrorCode.RECURSIVE_FORMULA,
            ErrorCode.REFERENCE_NOT_FOUND,
            ErrorCode.INVALID_FORMULA_SYNTAX,
            ErrorCode.RESOLUTION_DEPTH_EXCEEDED,
        ]:
            assert code.value.startswith("E2")


class TestSheetCalcError:
    """Tests for the base exception."""

    def test_defaults(self) -> None:
        error = SheetCalcError("Something broke")
        assert error.message == "Something broke"
        assert error.error_code == ErrorCode.INTERNAL_ERROR
        assert error.details == {}
        assert error.http_status == 500

    def test_str_includes_code(self) -> None:
        error = SheetCalcError("Something broke", ErrorCode.CALCULATION_FAILED)
        assert str(error) == "[E2001] Something broke"

    def test_to_dict(self) -> None:
        error = SheetCalcError("Oops", details={"key": "value"})
        assert error.to_dict() == {
            "error_code": "E9001",
            "message": "Oops",
            "details": {"key": "value"},
        }


class TestNotFoundErrors:
    """Tests for absent cells and sheets."""

    def test_cell_not_found(self) -> None:
        error = CellNotFoundError("s1", "var1")
        assert isinstance(error, NotFoundError)
        assert error.http_status == 404
        assert error.error_code == ErrorCode.CELL_NOT_FOUND
        assert error.message == "Cell 'var1' in sheet s1 not found"
        assert error.details == {"cell_name": "var1", "sheet_name": "s1"}

    def test_sheet_not_found(self) -> None:
        error = SheetNotFoundError("s1")
        assert error.http_status == 404
        assert error.error_code == ErrorCode.SHEET_NOT_FOUND
        assert error.sheet_name == "s1"


class TestCalculationErrors:
    """Tests for the calculation error family."""

    def test_all_are_calculation_errors(self) -> None:
        errors = [
            RecursiveFormulaError("a"),
            ReferenceNotFoundError("a"),
            InvalidFormulaSyntaxError("bad"),
            ResolutionDepthExceededError(3),
        ]
        for error in errors:
            assert isinstance(error, CalculationError)
            assert error.http_status == 422

    def test_recursive_formula(self) -> None:
        error = RecursiveFormulaError("var4", path=["var4"], formula="=var3+var4")
        assert error.message == "Recursive formula: var4 refers to itself"
        assert error.details["path"] == ["var4"]
        assert error.formula == "=var3+var4"

    def test_reference_not_found(self) -> None:
        error = ReferenceNotFoundError("x", formula="=x+1")
        assert error.error_code == ErrorCode.REFERENCE_NOT_FOUND
        assert error.details == {"cell_name": "x", "formula": "=x+1"}

    def test_invalid_syntax_keeps_expression(self) -> None:
        error = InvalidFormulaSyntaxError("Division by zero", expression="1/0")
        assert error.expression == "1/0"
        assert error.formula is None
        assert "formula" not in error.details

    def test_depth_exceeded(self) -> None:
        error = ResolutionDepthExceededError(64)
        assert error.max_depth == 64
        assert "64" in error.message


class TestValidationError:
    """Tests for ValidationError."""

    def test_fields(self) -> None:
        error = ValidationError("Bad name", field="cell_name", errors=["blank"])
        assert error.http_status == 400
        assert error.error_code == ErrorCode.INVALID_REQUEST
        assert error.details == {"field": "cell_name", "validation_errors": ["blank"]}
