"""Sheet service: the write and read operations on cells.

Writes are calculated before they are stored, so a value whose formula
cannot be calculated is rejected and leaves the store untouched. Reads
calculate on demand and never write back; a calculation failure on a read
is reported with the ERROR sentinel instead of raising.
"""

from dataclasses import dataclass, field

from sheet_calc.models import ERROR_RESULT
from sheet_calc.services.calculator import calculate
from sheet_calc.services.cascade import DependentFailure, cascade, should_cascade
from sheet_calc.services.resolver import DEFAULT_MAX_DEPTH
from sheet_calc.services.sheet_store import Cell, SheetStore
from sheet_calc.utils.exceptions import (
    CalculationError,
    SheetNotFoundError,
    ValidationError,
)
from sheet_calc.utils.logging import LogContext, get_logger

logger = get_logger(__name__)


@dataclass
class CellResult:
    """Raw value and computed result of a cell."""

    value: str
    result: str
    warnings: list[DependentFailure] = field(default_factory=list)


class SheetService:
    """Adds and reads cells of case-insensitive sheets.

    Args:
        store: Where cells are kept.
        max_depth: Maximum formula nesting when calculating a cell.
        cascade_enabled: Whether writes re-evaluate dependent cells.
    """

    def __init__(
        self,
        store: SheetStore,
        max_depth: int = DEFAULT_MAX_DEPTH,
        cascade_enabled: bool = True,
    ) -> None:
        self.store = store
        self.max_depth = max_depth
        self.cascade_enabled = cascade_enabled

    def add_cell(self, sheet_name: str, cell_name: str, value: str) -> CellResult:
        """Write a cell and return its calculated result.

        Args:
            sheet_name: Sheet to write to, any casing.
            cell_name: Cell to create or overwrite, any casing.
            value: Raw value; a leading ``=`` makes it a formula.

        Returns:
            The written value, its result, and any dependents that no
            longer calculate after the write.

        Raises:
            ValidationError: If the sheet or cell name is blank.
            CalculationError: If the value cannot be calculated. Nothing is
                stored in that case.
        """
        self._validate_names(sheet_name, cell_name)
        cell = Cell.create(sheet_name, cell_name, value)

        with LogContext(sheet=sheet_name, cell=cell_name):
            try:
                result = calculate(cell, self.store, max_depth=self.max_depth)
            except CalculationError as e:
                logger.error("Add cell calculation error", value=value, error=str(e))
                raise

            stored = self.store.put(cell)
            warnings: list[DependentFailure] = []
            if self.cascade_enabled and should_cascade(stored):
                warnings = cascade(stored, self.store, max_depth=self.max_depth)

            logger.info(
                "Cell saved",
                kind=stored.kind.value,
                result=result,
                failed_dependents=len(warnings),
            )

        return CellResult(value=value, result=result, warnings=warnings)

    def get_cell(self, sheet_name: str, cell_name: str) -> CellResult:
        """Read a cell, calculating its current result.

        Raises:
            CellNotFoundError: If the cell does not exist.
        """
        cell = self.store.get(sheet_name, cell_name)
        with LogContext(sheet=sheet_name, cell=cell_name):
            return CellResult(value=cell.raw_value, result=self._result_of(cell))

    def get_sheet(self, sheet_name: str) -> dict[str, CellResult]:
        """Read every cell of a sheet, keyed by stored cell name.

        Raises:
            SheetNotFoundError: If the sheet has no cells.
        """
        cells = self.store.list_by_sheet(sheet_name)
        if not cells:
            raise SheetNotFoundError(sheet_name)

        with LogContext(sheet=sheet_name):
            return {
                cell.name: CellResult(value=cell.raw_value, result=self._result_of(cell))
                for cell in cells
            }

    def _result_of(self, cell: Cell) -> str:
        try:
            return calculate(cell, self.store, max_depth=self.max_depth)
        except CalculationError as e:
            logger.error("Calculation error", cell=cell.name, error=str(e))
            return ERROR_RESULT

    @staticmethod
    def _validate_names(sheet_name: str, cell_name: str) -> None:
        if not sheet_name.strip():
            raise ValidationError("Sheet name must not be blank", field="sheet_name")
        if not cell_name.strip():
            raise ValidationError("Cell name must not be blank", field="cell_name")
