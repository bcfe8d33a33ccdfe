"""Solver adapter interface and result type."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from time import perf_counter
from typing import Dict, Optional

from routeform.algorithms.base import SolveStatus
from routeform.algorithms.model import OptimizationModel
from routeform.exceptions import OptimizationFailedError, SolverUnavailableError
from routeform.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SolveResult:
    """Outcome of one solver call.

    Attributes:
        status: Final solver status.
        primal_values: Variable index -> value. Empty unless status is OPTIMAL.
        objective: Objective value, 0.0 unless status is OPTIMAL.
        message: Backend-specific status text.
    """

    status: SolveStatus
    primal_values: Dict[int, float] = field(default_factory=dict)
    objective: float = 0.0
    message: str = ""

    @property
    def is_optimal(self) -> bool:
        return self.status == SolveStatus.OPTIMAL

    def raise_for_status(self) -> None:
        """Raise OptimizationFailedError unless the solve was optimal."""
        if not self.is_optimal:
            raise OptimizationFailedError(self.status, self.message or None)


class SolverAdapter(ABC):
    """Base class for LP/MIP backends.

    Subclasses translate an :class:`OptimizationModel` into the backend's
    native problem, run it, and report a :class:`SolveResult`. The call is
    blocking; ``time_limit`` (seconds) is handed to the backend unchanged.
    """

    #: Registry name of the backend.
    name: str = ""

    def __init__(self, time_limit: Optional[float] = None) -> None:
        if time_limit is not None and time_limit <= 0:
            raise ValueError(f"time_limit must be positive, got {time_limit}")
        self.time_limit = time_limit

    def available(self) -> bool:
        """Whether the backend engine can be invoked."""
        return True

    def solve(self, model: OptimizationModel) -> SolveResult:
        """Solve a model.

        A model without variables (no demands) is trivially optimal.

        Raises:
            SolverUnavailableError: If the backend cannot be invoked.
        """
        if model.num_variables == 0:
            return SolveResult(SolveStatus.OPTIMAL, {}, 0.0, "empty model")
        if not self.available():
            raise SolverUnavailableError(
                f"Solver backend '{self.name}' is not available"
            )

        logger.debug(
            f"Solving {model.mode.name.lower()} model with '{self.name}' "
            f"({model.num_variables} variables)"
        )
        start = perf_counter()
        result = self._solve(model)
        logger.debug(
            f"Solver '{self.name}' finished in {perf_counter() - start:.3f} s "
            f"with status {result.status.name}"
        )
        return result

    @abstractmethod
    def _solve(self, model: OptimizationModel) -> SolveResult:
        """Backend-specific solve of a non-empty model."""
