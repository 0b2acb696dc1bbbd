"""Reference resolution for formula cells.

Turns a formula's tokens into a sequence holding only operators,
parentheses and literal values by replacing every cell-name operand with
what that cell holds. Formula cells are expanded recursively and their
tokens spliced in place.

Resolution refuses to follow a reference back to any cell that is already
being expanded (the root of the calculation included), and refuses to
nest deeper than a configured limit.
"""

from sheet_calc.models import CellKind, is_number
from sheet_calc.services.sheet_store import Cell, SheetStore
from sheet_calc.services.tokenizer import is_operator, tokenize_formula
from sheet_calc.utils.exceptions import (
    RecursiveFormulaError,
    ResolutionDepthExceededError,
)
from sheet_calc.utils.logging import PerformanceMetrics, get_logger

logger = get_logger(__name__)

DEFAULT_MAX_DEPTH = 64


class ReferenceResolver:
    """Expands the references of one formula cell against a store.

    Args:
        store: Store to look referenced cells up in.
        root: The formula cell whose calculation is being performed. Its
            ``raw_value`` is used as is; it is never re-read from the store.
        override: A cell to use instead of the stored one with the same
            name, e.g. a value that is being written but not stored yet.
        max_depth: How many levels of formula-in-formula expansion are
            allowed below the root.
        metrics: Optional metrics object; store lookups are counted on it.
    """

    def __init__(
        self,
        store: SheetStore,
        root: Cell,
        override: Cell | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        metrics: PerformanceMetrics | None = None,
    ) -> None:
        self.store = store
        self.root = root
        self.override = override
        self.max_depth = max_depth
        self.metrics = metrics

    def resolve(self) -> list[str]:
        """Resolve the root formula.

        Returns:
            Tokens containing only operators, parentheses and literals.

        Raises:
            RecursiveFormulaError: If a reference leads back to a cell that
                is being expanded.
            ResolutionDepthExceededError: If expansion nests too deeply.
            CellNotFoundError: If a referenced cell does not exist.
            InvalidFormulaSyntaxError: If the root is not a formula.
        """
        return self._fill(self.root, [self.root.name])

    def _fill(self, cell: Cell, path: list[str]) -> list[str]:
        if len(path) - 1 > self.max_depth:
            raise ResolutionDepthExceededError(
                self.max_depth, formula=self.root.raw_value
            )

        result: list[str] = []
        for token in tokenize_formula(cell.raw_value):
            if is_operator(token) or is_number(token):
                result.append(token)
                continue

            self._check_cycle(token, path)
            referenced = self._lookup(token)
            match referenced.kind:
                case CellKind.FORMULA:
                    result.extend(self._fill(referenced, [*path, referenced.name]))
                case CellKind.NUMBER | CellKind.STRING:
                    result.append(referenced.raw_value)

        logger.debug("Filled formula", formula=cell.raw_value, tokens=result)
        return result

    def _check_cycle(self, name: str, path: list[str]) -> None:
        lowered = name.lower()
        if any(lowered == step.lower() for step in path):
            raise RecursiveFormulaError(
                name, path=list(path), formula=self.root.raw_value
            )

    def _lookup(self, name: str) -> Cell:
        if self.override is not None and self.override.has_name(name):
            return self.override
        if self.metrics is not None:
            self.metrics.store_lookups += 1
        return self.store.get(self.root.sheet_name, name)
