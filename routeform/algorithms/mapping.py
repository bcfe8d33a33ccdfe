from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional

from routeform.algorithms.base import (
    DEFAULT_PRUNE_THRESHOLD,
    SOLUTION_TOL,
    RouteAllocation,
)
from routeform.algorithms.model import OptimizationModel

#: Carried traffic below this is solver noise and is always pruned.
NOISE_FLOOR = 1e-7


def _check_threshold(prune_threshold: float) -> None:
    if prune_threshold < 0:
        raise ValueError(f"prune_threshold must be >= 0, got {prune_threshold}")


def carried_traffic(
    model: OptimizationModel, primal_values: Mapping[int, float]
) -> List[float]:
    """
    Convert solver variable values into carried traffic per route.

    Slightly negative values produced by the solver are clipped to zero.
    Variables missing from ``primal_values`` carry nothing.
    """
    return [
        max(0.0, primal_values.get(index, 0.0)) * model.flow_scale[index]
        for index in range(model.num_variables)
    ]


def map_solution(
    model: OptimizationModel,
    primal_values: Mapping[int, float],
    prune_threshold: float = DEFAULT_PRUNE_THRESHOLD,
) -> List[RouteAllocation]:
    """
    Assign the solver's primal solution to candidate routes.

    Args:
        model: The solved model.
        primal_values: Variable index -> value as returned by the solver.
        prune_threshold: Routes carrying less than this are dropped.

    Returns:
        Allocations in model variable order, without pruned routes.

    Raises:
        ValueError: If prune_threshold is negative.
    """
    _check_threshold(prune_threshold)
    allocations = [
        RouteAllocation(route=route, carried=carried)
        for route, carried in zip(model.routes, carried_traffic(model, primal_values))
    ]
    return prune_allocations(allocations, prune_threshold)


def prune_allocations(
    allocations: Iterable[RouteAllocation],
    prune_threshold: float = DEFAULT_PRUNE_THRESHOLD,
    tol: float = SOLUTION_TOL,
) -> List[RouteAllocation]:
    """
    Drop allocations carrying less than ``prune_threshold``; order is kept.

    Pruning never costs a demand more than ``tol`` of its traffic. When the
    routes of one demand that fall below the threshold carry more than
    ``tol`` together, only their solver noise (below ``NOISE_FLOOR``) is
    dropped and the rest is kept. Applying the function to its own output
    returns the same list.

    Raises:
        ValueError: If prune_threshold is negative.
    """
    _check_threshold(prune_threshold)
    allocations = list(allocations)
    noise = min(prune_threshold, NOISE_FLOOR)

    # Traffic each demand would lose, noise excluded
    below: Dict[Optional[str], float] = {}
    for alloc in allocations:
        if noise <= alloc.carried < prune_threshold:
            below[alloc.demand_id] = below.get(alloc.demand_id, 0.0) + alloc.carried

    kept = []
    for alloc in allocations:
        if alloc.carried < noise:
            continue
        if alloc.carried < prune_threshold and below[alloc.demand_id] <= tol:
            continue
        kept.append(alloc)
    return kept


def total_cost(allocations: Iterable[RouteAllocation]) -> float:
    """Sum of hop count x carried traffic."""
    return sum(alloc.cost for alloc in allocations)


def allocated_traffic(
    model: OptimizationModel, allocations: Iterable[RouteAllocation]
) -> List[float]:
    """Carried traffic per model variable; routes without an allocation carry 0."""
    by_route = {id(alloc.route): alloc.carried for alloc in allocations}
    return [by_route.get(id(route), 0.0) for route in model.routes]
