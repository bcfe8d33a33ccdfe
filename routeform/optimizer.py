"""Route optimization pipeline.

Candidate paths -> model -> solve -> allocation. Any stage failure aborts the
run; no partial allocation is ever returned.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from time import perf_counter
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from routeform.algorithms.base import (
    DEFAULT_PRUNE_THRESHOLD,
    SOLUTION_TOL,
    CandidateRoute,
    RouteAllocation,
    SolveMode,
    SolveStatus,
)
from routeform.algorithms.mapping import allocated_traffic, map_solution
from routeform.algorithms.mapping import total_cost as allocation_cost
from routeform.algorithms.model import (
    OptimizationModel,
    build_model,
    check_solution,
    links_from_graph,
)
from routeform.algorithms.spf import generate_paths
from routeform.config import DEFAULT_CONFIG, OptimizerConfig
from routeform.exceptions import OptimizationFailedError
from routeform.graph import EdgeID, StrictMultiDiGraph
from routeform.logging import get_logger
from routeform.network import Demand, Link, Network, free_id
from routeform.solver import SolverAdapter, get_solver

logger = get_logger(__name__)

SUMMARY_PREFIX = "Ok! Total number of wavelengths used in the links: "


@dataclass
class OptimizationResult:
    """Outcome of a successful optimization run.

    Attributes:
        allocations: Routes that carry traffic, in model order.
        total_cost: Sum of hop count x carried traffic over the allocations.
        model: The solved model, kept for inspection.
    """

    allocations: List[RouteAllocation]
    total_cost: float
    model: Optional[OptimizationModel] = field(default=None, repr=False)

    def summary(self) -> str:
        """Human-readable report line with the total cost."""
        return f"{SUMMARY_PREFIX}{self.total_cost:g}"

    def by_demand(self) -> Dict[str, List[RouteAllocation]]:
        grouped: Dict[str, List[RouteAllocation]] = {}
        for alloc in self.allocations:
            grouped.setdefault(alloc.demand_id, []).append(alloc)
        return grouped

    def to_dict(self) -> Dict[str, object]:
        return {
            "total_cost": self.total_cost,
            "summary": self.summary(),
            "allocations": [
                {
                    "demand": alloc.demand_id,
                    "links": [str(e_id) for e_id in alloc.route.edges],
                    "nodes": [str(n) for n in alloc.route.nodes],
                    "hops": alloc.route.hop_count,
                    "carried": alloc.carried,
                }
                for alloc in self.allocations
            ],
        }


def _with_ids(demands: Sequence[Demand]) -> List[Demand]:
    """
    Copies of anonymous demands get a positional ID; inputs are not modified.

    A generated ID never repeats one set by the caller: the numeric suffix is
    raised until the ID is free.
    """
    taken = {demand.id for demand in demands if demand.id}
    named: List[Demand] = []
    for n, demand in enumerate(demands):
        if not demand.id:
            generated = free_id(demand.source, demand.target, n, taken)
            demand = replace(demand, id=generated)
            taken.add(demand.id)
        named.append(demand)
    return named


def generate_candidates(
    graph: StrictMultiDiGraph,
    demands: Sequence[Demand],
    k: int,
    workers: int = 1,
    max_hops: Optional[int] = None,
) -> List[Tuple[Demand, List[CandidateRoute]]]:
    """
    Candidate routes for every demand, in demand order.

    With ``workers > 1`` demands are processed by a thread pool; the graph is
    only read. The first NoRouteError in demand order is raised.
    """

    def _paths(demand: Demand) -> List[CandidateRoute]:
        return generate_paths(
            graph,
            demand.source,
            demand.target,
            k,
            demand_id=demand.id,
            max_hops=max_hops,
        )

    if workers > 1 and len(demands) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(_paths, demand) for demand in demands]
            # result() re-raises in submission order
            routes = [future.result() for future in futures]
    else:
        routes = [_paths(demand) for demand in demands]

    return list(zip(demands, routes))


def optimize(
    graph: StrictMultiDiGraph,
    demands: Sequence[Demand],
    k: int = DEFAULT_CONFIG.k,
    mode: SolveMode = SolveMode.CONTINUOUS,
    prune_threshold: float = DEFAULT_PRUNE_THRESHOLD,
    solver: Optional[SolverAdapter] = None,
    links: Optional[Mapping[EdgeID, Link]] = None,
    workers: int = 1,
    max_hops: Optional[int] = None,
) -> OptimizationResult:
    """
    Compute a minimum hop-usage routing that carries all demands.

    Args:
        graph: Read-only network snapshot.
        demands: Demands to route; their order fixes the model order.
        k: Maximum candidate paths per demand.
        mode: Continuous (bifurcated) or integer (non-bifurcated) routing.
        prune_threshold: Routes carrying less than this are dropped.
        solver: Solver backend; defaults to CBC through PuLP.
        links: Link table keyed by edge key. Derived from the graph if None.
        workers: Threads used for path generation.
        max_hops: Optional hop limit for candidate paths.

    Returns:
        OptimizationResult with the allocation and its total cost.

    Raises:
        NoRouteError: A demand has no loopless path.
        ModelBuildError: Invalid capacities, volumes or routes.
        SolverUnavailableError: The backend cannot be invoked.
        OptimizationFailedError: The solver did not reach optimality.
    """
    if prune_threshold < 0:
        raise ValueError(f"prune_threshold must be >= 0, got {prune_threshold}")
    demands = _with_ids(demands)
    solver = solver or get_solver()
    links = links if links is not None else links_from_graph(graph)
    start = perf_counter()

    candidates = generate_candidates(graph, demands, k, workers, max_hops)
    logger.info(
        f"Generated {sum(len(routes) for _, routes in candidates)} candidate routes "
        f"for {len(candidates)} demands (k={k})"
    )

    model = build_model(candidates, links, mode)
    logger.info(
        f"Built {model.mode.name.lower()} model with {model.num_variables} variables, "
        f"{len(model.demand_constraints) + len(model.capacity_constraints)} constraints"
    )

    result = solver.solve(model)
    result.raise_for_status()

    allocations = map_solution(model, result.primal_values, prune_threshold)
    violation = check_solution(
        model,
        allocated_traffic(model, allocations),
        {demand.id: demand.volume for demand in demands},
        SOLUTION_TOL,
    )
    if violation:
        raise OptimizationFailedError(
            SolveStatus.ERROR, f"solution check failed, {violation}"
        )

    cost = allocation_cost(allocations)
    logger.info(
        f"Optimization finished in {perf_counter() - start:.3f} s: "
        f"{len(allocations)} routes carry traffic, total cost {cost:g} "
        f"(objective {result.objective:g})"
    )
    return OptimizationResult(allocations=allocations, total_cost=cost, model=model)


def optimize_network(
    network: Network, config: OptimizerConfig = DEFAULT_CONFIG
) -> OptimizationResult:
    """Run :func:`optimize` on a Network with the given configuration."""
    return optimize(
        network.to_strict_multidigraph(),
        list(network.demands.values()),
        k=config.k,
        mode=config.mode,
        prune_threshold=config.prune_threshold,
        solver=get_solver(config.solver, time_limit=config.time_limit),
        links=network.links,
        workers=config.workers,
        max_hops=config.max_hops,
    )
