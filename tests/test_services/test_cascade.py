"""Tests for dependent re-evaluation after a write."""

from unittest.mock import patch

import pytest

from sheet_calc.services.cascade import (
    DependentFailure,
    cascade,
    find_dependents,
    should_cascade,
)
from sheet_calc.services.sheet_store import Cell, InMemorySheetStore
from sheet_calc.utils.exceptions import (
    InvalidFormulaSyntaxError,
    RecursiveFormulaError,
)


class TestShouldCascade:
    """Tests for should_cascade."""

    @pytest.mark.parametrize(
        ("raw_value", "expected"),
        [
            ("=a+1", True),
            ("hello", True),
            ("", True),
            ("0", True),
            ("1", False),
            ("-0", False),
            ("0.0", False),
            ("42.5", False),
        ],
    )
    def test_by_kind(self, raw_value: str, expected: bool) -> None:
        assert should_cascade(Cell.create("s1", "a", raw_value)) is expected


class TestFindDependents:
    """Tests for find_dependents."""

    def test_excludes_written_cell(
        self, store: InMemorySheetStore, put_cells
    ) -> None:
        """The written cell is never its own dependent."""
        put_cells("s1", sum="=sum2+1", sum2="1")
        written = Cell.create("s1", "SUM", "=sum2+1")
        assert find_dependents(written, store) == []

    def test_substring_over_match(self, store: InMemorySheetStore, put_cells) -> None:
        put_cells("s1", var10="5", x="=var10+1", y="=2")
        written = Cell.create("s1", "var1", "hello")
        assert [c.name for c in find_dependents(written, store)] == ["x"]


class TestCascade:
    """Tests for cascade."""

    def test_no_failures(self, store: InMemorySheetStore, put_cells) -> None:
        put_cells("s1", var1="1", var2="2", var3="=var1+var2")
        written = Cell.create("s1", "var1", "=var2*2")
        assert cascade(written, store) == []

    def test_reports_failing_dependent(
        self, store: InMemorySheetStore, put_cells
    ) -> None:
        """Dependents that stop calculating are reported, not raised."""
        put_cells("s1", a="1", b="=a+1", c="=a*2")
        written = Cell.create("s1", "a", "text")

        failures = cascade(written, store)

        assert [f.cell_name for f in failures] == ["b", "c"]
        assert all(isinstance(f, DependentFailure) for f in failures)
        assert isinstance(failures[0].error, InvalidFormulaSyntaxError)
        assert failures[0].message == failures[0].error.message

    def test_written_value_used_before_store(
        self, store: InMemorySheetStore, put_cells
    ) -> None:
        """The written cell overrides the stored one during the cascade."""
        put_cells("s1", a="1", b="=a")
        written = Cell.create("s1", "a", "=b")

        failures = cascade(written, store)

        assert len(failures) == 1
        assert isinstance(failures[0].error, RecursiveFormulaError)

    def test_over_matched_dependents_still_calculate(
        self, store: InMemorySheetStore, put_cells
    ) -> None:
        """A substring match that does not really depend is harmless."""
        put_cells("s1", var1="1", var10="5", x="=var10+1")
        assert cascade(Cell.create("s1", "var1", "hello"), store) == []

    def test_does_not_write(self, store: InMemorySheetStore, put_cells) -> None:
        put_cells("s1", a="1", b="=a+1")
        cascade(Cell.create("s1", "a", "2"), store)
        assert store.get("s1", "a").raw_value == "1"
        assert store.get("s1", "b").raw_value == "=a+1"

    def test_other_sheets_untouched(
        self, store: InMemorySheetStore, put_cells
    ) -> None:
        put_cells("s2", a="1", b="=a+1")
        assert cascade(Cell.create("s1", "a", "text"), store) == []

    @patch("sheet_calc.services.cascade.logger")
    def test_failures_logged_as_warnings(
        self, mock_logger, store: InMemorySheetStore, put_cells
    ) -> None:
        put_cells("s1", a="1", b="=a+1")
        cascade(Cell.create("s1", "a", "text"), store)
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.kwargs["dependent"] == "b"
