"""Error types raised by the route optimization pipeline.

Every error is fatal for the run that raised it: the orchestrator never
returns a partial allocation.
"""

from __future__ import annotations

from typing import Hashable, Optional


class RouteformError(Exception):
    """Base class for all routeform errors."""


class NoRouteError(RouteformError):
    """A demand has no loopless path between its endpoints.

    Attributes:
        demand_id: Identifier of the demand without a route, if known.
        source: Demand ingress node.
        target: Demand egress node.
    """

    def __init__(
        self,
        source: Hashable,
        target: Hashable,
        demand_id: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> None:
        self.demand_id = demand_id
        self.source = source
        self.target = target
        subject = f"demand '{demand_id}'" if demand_id else "demand"
        msg = f"There are no admissible routes for {subject} from '{source}' to '{target}'"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class ModelBuildError(RouteformError):
    """The optimization model cannot be built from the given inputs."""


class OptimizationFailedError(RouteformError):
    """The solver finished without an optimal solution.

    Attributes:
        status: Final solver status (a ``SolveStatus`` member).
    """

    def __init__(self, status: object, detail: Optional[str] = None) -> None:
        self.status = status
        name = getattr(status, "name", str(status))
        msg = f"An optimal solution was not found (status: {name})"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class SolverUnavailableError(RouteformError):
    """The requested solver backend cannot be invoked."""
