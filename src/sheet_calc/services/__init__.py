"""Services for sheet-calc: storage, formula engine and sheet operations."""

from sheet_calc.services.calculator import calculate
from sheet_calc.services.sheet_service import CellResult, SheetService
from sheet_calc.services.sheet_store import Cell, InMemorySheetStore, SheetStore

__all__ = [
    "Cell",
    "CellResult",
    "InMemorySheetStore",
    "SheetService",
    "SheetStore",
    "calculate",
]
