from collections.abc import Callable

import pytest

from sheet_calc.services.sheet_service import SheetService
from sheet_calc.services.sheet_store import Cell, InMemorySheetStore


@pytest.fixture
def store() -> InMemorySheetStore:
    """Empty in-memory store, one per test."""
    return InMemorySheetStore()


@pytest.fixture
def service(store: InMemorySheetStore) -> SheetService:
    """Sheet service over the test's store with default settings."""
    return SheetService(store)


@pytest.fixture
def put_cells(store: InMemorySheetStore) -> Callable[..., None]:
    """Store raw values into a sheet directly, bypassing calculation."""

    def _put(sheet_name: str, **values: str) -> None:
        for name, raw_value in values.items():
            store.put(Cell.create(sheet_name, name, raw_value))

    return _put
