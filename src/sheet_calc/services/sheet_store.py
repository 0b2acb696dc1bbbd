"""Sheet store: case-insensitive storage of cells keyed by (sheet, name).

The engine only talks to the ``SheetStore`` protocol. ``InMemorySheetStore``
is the implementation the service ships with; any other backend (a
document database, SQL) only has to honour the same four operations.

Key features of the in-memory store:
- Thread-safe reads and writes guarded by a re-entrant lock
- Case-insensitive identity on both sheet and cell name
- First-written spelling of names preserved across overwrites
"""

import re
import threading
from dataclasses import dataclass, replace
from typing import Protocol, runtime_checkable

from sheet_calc.models import CellKind
from sheet_calc.utils.exceptions import CellNotFoundError
from sheet_calc.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Cell:
    """A stored cell.

    ``kind`` is always ``CellKind.classify(raw_value)``; use ``Cell.create``
    to build one from a raw value.
    """

    sheet_name: str
    name: str
    raw_value: str
    kind: CellKind

    @classmethod
    def create(cls, sheet_name: str, name: str, raw_value: str) -> "Cell":
        return cls(
            sheet_name=sheet_name,
            name=name,
            raw_value=raw_value,
            kind=CellKind.classify(raw_value),
        )

    @property
    def key(self) -> tuple[str, str]:
        """Case-insensitive identity of the cell."""
        return cell_key(self.sheet_name, self.name)

    def has_name(self, name: str) -> bool:
        """Whether ``name`` refers to this cell (case-insensitive)."""
        return self.name.lower() == name.lower()


def cell_key(sheet_name: str, name: str) -> tuple[str, str]:
    return sheet_name.lower(), name.lower()


@runtime_checkable
class SheetStore(Protocol):
    """Storage contract the calculation engine depends on."""

    def get(self, sheet_name: str, name: str) -> Cell:
        """Return the cell, raising CellNotFoundError when absent."""
        ...

    def list_by_sheet(self, sheet_name: str) -> list[Cell]:
        """Return every cell of a sheet; empty when the sheet does not exist."""
        ...

    def find_dependents(self, sheet_name: str, name: str) -> list[Cell]:
        """Return formula cells of the sheet whose text contains ``name``."""
        ...

    def put(self, cell: Cell) -> Cell:
        """Insert or overwrite a cell by case-insensitive identity."""
        ...


class InMemorySheetStore:
    """Thread-safe in-memory implementation of ``SheetStore``.

    Cells live in a dict keyed by the lower-cased (sheet, name) pair and
    are kept in insertion order.
    """

    def __init__(self) -> None:
        self._cells: dict[tuple[str, str], Cell] = {}
        self._lock = threading.RLock()

    def get(self, sheet_name: str, name: str) -> Cell:
        """Get a cell by sheet and name.

        Args:
            sheet_name: Sheet to look in, any casing.
            name: Cell name, any casing.

        Returns:
            The stored Cell.

        Raises:
            CellNotFoundError: If no such cell exists.
        """
        with self._lock:
            cell = self._cells.get(cell_key(sheet_name, name))

        if cell is None:
            raise CellNotFoundError(sheet_name, name)
        return cell

    def list_by_sheet(self, sheet_name: str) -> list[Cell]:
        sheet_key = sheet_name.lower()
        with self._lock:
            return [
                cell for key, cell in self._cells.items() if key[0] == sheet_key
            ]

    def find_dependents(self, sheet_name: str, name: str) -> list[Cell]:
        """Find formula cells whose text contains ``name``.

        This is a plain text match, not a parse of the formula: a name that
        is a substring of a longer reference also matches.

        Args:
            sheet_name: Sheet to search, any casing.
            name: Cell name to look for, matched literally and
                case-insensitively.

        Returns:
            Matching cells in insertion order.
        """
        pattern = re.compile(rf"^=.*{re.escape(name)}.*", re.IGNORECASE)
        return [
            cell
            for cell in self.list_by_sheet(sheet_name)
            if pattern.match(cell.raw_value)
        ]

    def put(self, cell: Cell) -> Cell:
        """Insert a new cell or overwrite an existing one in place.

        An overwrite keeps the spelling of the sheet and cell names from the
        first write.

        Args:
            cell: The cell to store.

        Returns:
            The cell as stored.
        """
        with self._lock:
            existing = self._cells.get(cell.key)
            if existing is not None:
                cell = replace(existing, raw_value=cell.raw_value, kind=cell.kind)
            self._cells[cell.key] = cell

        logger.debug(
            "Cell stored",
            sheet=cell.sheet_name,
            cell=cell.name,
            kind=cell.kind.value,
            created=existing is None,
        )
        return cell

    def count(self) -> int:
        """Get the current number of stored cells."""
        with self._lock:
            return len(self._cells)

    def clear_all(self) -> None:
        """Remove all cells. Used primarily for testing."""
        with self._lock:
            self._cells.clear()
        logger.info("All cells cleared")
