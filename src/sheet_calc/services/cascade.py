"""Re-evaluation of cells that refer to a just-written cell.

Dependents are found by a case-insensitive text search of formula values
for the written cell's name, not from parsed references. A name that is a
substring of a longer name therefore also selects the longer name's
dependents, and cells that depend on the written cell only through other
formulas are not visited.

Results of the re-evaluation are thrown away. The cascade only reports
which dependents stopped evaluating; it never stores anything and never
raises.
"""

from dataclasses import dataclass

from sheet_calc.models import CellKind
from sheet_calc.services.calculator import calculate
from sheet_calc.services.resolver import DEFAULT_MAX_DEPTH
from sheet_calc.services.sheet_store import Cell, SheetStore
from sheet_calc.utils.exceptions import CalculationError
from sheet_calc.utils.logging import get_logger, timed_operation

logger = get_logger(__name__)


@dataclass(frozen=True)
class DependentFailure:
    """A dependent cell that failed to calculate during a cascade."""

    cell_name: str
    error: CalculationError

    @property
    def message(self) -> str:
        return self.error.message


def should_cascade(cell: Cell) -> bool:
    """Whether writing ``cell`` re-evaluates its dependents.

    Formula and string writes do. Number writes do not, except for the
    literal ``"0"``.
    """
    match cell.kind:
        case CellKind.FORMULA | CellKind.STRING:
            return True
        case CellKind.NUMBER:
            return cell.raw_value == "0"


def find_dependents(written: Cell, store: SheetStore) -> list[Cell]:
    """Cells of the same sheet whose formula text mentions ``written``."""
    return [
        cell
        for cell in store.find_dependents(written.sheet_name, written.name)
        if not cell.has_name(written.name)
    ]


def cascade(
    written: Cell,
    store: SheetStore,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[DependentFailure]:
    """Re-run calculation for every dependent of ``written``.

    ``written`` is used in place of whatever the store holds under its
    name, so the cascade can run before or after the write is stored.

    Args:
        written: The cell that was just written.
        store: Store the dependents and their references are read from.
        max_depth: Maximum formula nesting for each dependent.

    Returns:
        The dependents that failed to calculate, in store order.
    """
    failures: list[DependentFailure] = []
    with timed_operation(logger, "cascade") as metrics:
        metrics.custom_metrics["cell"] = written.name
        for dependent in find_dependents(written, store):
            metrics.dependents_evaluated += 1
            try:
                calculate(
                    dependent,
                    store,
                    override=written,
                    max_depth=max_depth,
                    metrics=metrics,
                )
            except CalculationError as e:
                metrics.dependents_failed += 1
                logger.warning(
                    "Dependent cell no longer calculates",
                    cell=written.name,
                    dependent=dependent.name,
                    error=str(e),
                )
                failures.append(DependentFailure(cell_name=dependent.name, error=e))
    return failures
