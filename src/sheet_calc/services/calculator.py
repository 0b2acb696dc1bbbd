"""Computes the display result of a single cell."""

from sheet_calc.models import CellKind
from sheet_calc.services.evaluator import evaluate
from sheet_calc.services.resolver import DEFAULT_MAX_DEPTH, ReferenceResolver
from sheet_calc.services.sheet_store import Cell, SheetStore
from sheet_calc.utils.exceptions import (
    CalculationError,
    CellNotFoundError,
    ReferenceNotFoundError,
)
from sheet_calc.utils.logging import PerformanceMetrics, get_logger

logger = get_logger(__name__)


def calculate(
    cell: Cell,
    store: SheetStore,
    override: Cell | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
    metrics: PerformanceMetrics | None = None,
) -> str:
    """Compute the result of ``cell``.

    Strings and numbers are their own result. Formulas are resolved against
    ``store`` and evaluated.

    Args:
        cell: Cell to calculate; its current ``raw_value`` is used even if
            the store holds a different one.
        store: Store referenced cells are read from.
        override: Cell used in place of the stored cell with the same name.
        max_depth: Maximum formula nesting below ``cell``.
        metrics: Optional metrics to count store lookups on.

    Returns:
        The display result.

    Raises:
        CalculationError: If the formula cannot be calculated. Missing
            references surface as ReferenceNotFoundError with the store's
            CellNotFoundError as cause.
    """
    match cell.kind:
        case CellKind.NUMBER | CellKind.STRING:
            return cell.raw_value
        case CellKind.FORMULA:
            return _calculate_formula(cell, store, override, max_depth, metrics)


def _calculate_formula(
    cell: Cell,
    store: SheetStore,
    override: Cell | None,
    max_depth: int,
    metrics: PerformanceMetrics | None,
) -> str:
    resolver = ReferenceResolver(
        store, cell, override=override, max_depth=max_depth, metrics=metrics
    )
    try:
        tokens = resolver.resolve()
    except CellNotFoundError as e:
        logger.debug(
            "Failed to fill formula", formula=cell.raw_value, missing=e.cell_name
        )
        raise ReferenceNotFoundError(e.cell_name, formula=cell.raw_value) from e

    try:
        return evaluate("".join(tokens))
    except CalculationError as e:
        if e.formula is None:
            e.formula = cell.raw_value
            e.details["formula"] = cell.raw_value
        raise
