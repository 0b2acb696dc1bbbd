"""Tests for reference resolution."""

from unittest.mock import MagicMock

import pytest

from sheet_calc.services.resolver import ReferenceResolver
from sheet_calc.services.sheet_store import Cell, InMemorySheetStore
from sheet_calc.utils.exceptions import (
    CellNotFoundError,
    InvalidFormulaSyntaxError,
    RecursiveFormulaError,
    ResolutionDepthExceededError,
)
from sheet_calc.utils.logging import PerformanceMetrics


def resolve(store: InMemorySheetStore, raw_value: str, **kwargs) -> list[str]:
    root = Cell.create("s1", "root", raw_value)
    return ReferenceResolver(store, root, **kwargs).resolve()


class TestReferenceResolver:
    """Tests for ReferenceResolver."""

    def test_substitutes_values(self, store: InMemorySheetStore, put_cells) -> None:
        put_cells("s1", var1="1", var2="2")
        assert resolve(store, "=var1+var2") == ["1", "+", "2"]

    def test_numbers_and_operators_kept(self, store: InMemorySheetStore) -> None:
        assert resolve(store, "=(1+2.5)*-3") == ["(", "1", "+", "2.5", ")", "*", "-", "3"]

    def test_lookup_is_case_insensitive(
        self, store: InMemorySheetStore, put_cells
    ) -> None:
        put_cells("S1", Var1="7")
        assert resolve(store, "=VAR1*2") == ["7", "*", "2"]

    def test_string_substituted_verbatim(
        self, store: InMemorySheetStore, put_cells
    ) -> None:
        put_cells("s1", cellx="hello")
        assert resolve(store, "=cellX") == ["hello"]

    def test_nested_formulas_spliced_without_grouping(
        self, store: InMemorySheetStore, put_cells
    ) -> None:
        """A referenced formula's tokens are inserted in place."""
        put_cells("s1", a="=b*2", b="=c+1", c="3")
        assert resolve(store, "=a+1") == ["3", "+", "1", "*", "2", "+", "1"]

    def test_diamond_references_allowed(
        self, store: InMemorySheetStore, put_cells
    ) -> None:
        """The same cell on two separate branches is not a cycle."""
        put_cells("s1", b="2", a="=b+b")
        assert resolve(store, "=a*a") == ["2", "+", "2", "*", "2", "+", "2"]

    def test_self_reference_detected_before_lookup(self) -> None:
        """A direct self-reference fails without touching the store."""
        store = MagicMock(spec=InMemorySheetStore)
        root = Cell.create("s1", "Var1", "=VAR1*2")

        with pytest.raises(RecursiveFormulaError) as exc_info:
            ReferenceResolver(store, root).resolve()

        store.get.assert_not_called()
        assert exc_info.value.cell_name == "VAR1"
        assert exc_info.value.path == ["Var1"]
        assert exc_info.value.formula == "=VAR1*2"

    def test_indirect_cycle_detected(
        self, store: InMemorySheetStore, put_cells
    ) -> None:
        """A cycle not involving the root still terminates."""
        put_cells("s1", a="=b+1", b="=a+1")
        with pytest.raises(RecursiveFormulaError) as exc_info:
            resolve(store, "=a")
        assert exc_info.value.path == ["root", "a", "b"]

    def test_cycle_back_to_root(self, store: InMemorySheetStore, put_cells) -> None:
        put_cells("s1", a="=root")
        with pytest.raises(RecursiveFormulaError):
            resolve(store, "=a+1")

    def test_missing_reference(self, store: InMemorySheetStore) -> None:
        with pytest.raises(CellNotFoundError) as exc_info:
            resolve(store, "=missing+1")
        assert exc_info.value.cell_name == "missing"

    def test_non_formula_root_rejected(self, store: InMemorySheetStore) -> None:
        with pytest.raises(InvalidFormulaSyntaxError):
            resolve(store, "1+2")

    def test_override_replaces_stored_cell(
        self, store: InMemorySheetStore, put_cells
    ) -> None:
        """The override is used in place of the stored cell."""
        put_cells("s1", var1="1", var2="2")
        override = Cell.create("s1", "VAR1", "5")
        metrics = PerformanceMetrics(operation="test")

        tokens = resolve(store, "=var1+var2", override=override, metrics=metrics)

        assert tokens == ["5", "+", "2"]
        assert metrics.store_lookups == 1

    def test_override_may_be_unstored(self, store: InMemorySheetStore) -> None:
        override = Cell.create("s1", "fresh", "=1+1")
        assert resolve(store, "=fresh*3", override=override) == [
            "1",
            "+",
            "1",
            "*",
            "3",
        ]

    def test_depth_limit(self, store: InMemorySheetStore, put_cells) -> None:
        """Expansion deeper than max_depth fails."""
        put_cells("s1", c2="=c1", c1="=c0", c0="1")

        assert resolve(store, "=c2", max_depth=2) == ["1"]
        with pytest.raises(ResolutionDepthExceededError) as exc_info:
            resolve(store, "=c2", max_depth=1)
        assert exc_info.value.max_depth == 1
        assert exc_info.value.formula == "=c2"
