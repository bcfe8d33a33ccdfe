"""Solver adapters for routing models.

Backends are resolved by name with :func:`get_solver`:

- ``"cbc"`` (alias ``"pulp"``): PuLP with its bundled CBC binary. Default.
- ``"highs"``: HiGHS through ``scipy.optimize.milp``.
"""

from __future__ import annotations

from typing import Dict, Optional, Type

from routeform.exceptions import SolverUnavailableError
from routeform.solver.base import SolveResult, SolverAdapter
from routeform.solver.highs import HighsSolver
from routeform.solver.pulp_backend import PulpSolver

DEFAULT_SOLVER = "cbc"

_SOLVERS: Dict[str, Type[SolverAdapter]] = {
    "cbc": PulpSolver,
    "pulp": PulpSolver,
    "highs": HighsSolver,
}


def available_solvers() -> list[str]:
    """Registered backend names."""
    return sorted(_SOLVERS)


def get_solver(
    name: str = DEFAULT_SOLVER, time_limit: Optional[float] = None
) -> SolverAdapter:
    """Instantiate a solver backend by name.

    Raises:
        SolverUnavailableError: If the name is unknown.
    """
    key = (name or "").strip().lower()
    solver_cls = _SOLVERS.get(key)
    if solver_cls is None:
        raise SolverUnavailableError(
            f"Unknown solver '{name}'. Available: {', '.join(available_solvers())}"
        )
    return solver_cls(time_limit=time_limit)


__all__ = [
    "DEFAULT_SOLVER",
    "HighsSolver",
    "PulpSolver",
    "SolveResult",
    "SolverAdapter",
    "available_solvers",
    "get_solver",
]
