"""Path-based multicommodity flow model.

One decision variable per candidate route. The objective minimizes total
link-hop usage; every demand is fully carried and no link exceeds its capacity.

Continuous mode::

    min  sum_r hops(r) * x_r
    s.t. sum_{r in R(d)} x_r        == volume(d)     for every demand d
         sum_{r : e in r} x_r       <= capacity(e)   for every used link e
         x_r >= 0

Integer mode uses binary selections y_r with flow(r) = volume(d) * y_r::

    min  sum_r hops(r) * volume(d) * y_r
    s.t. sum_{r in R(d)} y_r                 == 1
         sum_{r : e in r} volume(d) * y_r    <= capacity(e)
         y_r in {0, 1}

The model is a backend-neutral description; solver adapters translate it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from routeform.algorithms.base import CandidateRoute, SolveMode
from routeform.exceptions import ModelBuildError
from routeform.graph import EdgeID, StrictMultiDiGraph
from routeform.logging import get_logger
from routeform.network import Demand, Link

logger = get_logger(__name__)


@dataclass(frozen=True)
class DemandConstraint:
    """Equality row: the routes of one demand carry all of its traffic."""

    demand_id: str
    var_indices: Tuple[int, ...]
    coefficients: Tuple[float, ...]
    rhs: float


@dataclass(frozen=True)
class CapacityConstraint:
    """Inequality row: traffic on one link stays within its capacity."""

    link_id: EdgeID
    var_indices: Tuple[int, ...]
    coefficients: Tuple[float, ...]
    rhs: float


@dataclass
class OptimizationModel:
    """
    A built routing model.

    Attributes:
        mode: Variable domain (continuous flow or binary selection).
        routes: Candidate routes; index i is decision variable i.
        objective: Objective coefficient per variable.
        flow_scale: Multiplier turning a variable value into carried traffic
            (1 in continuous mode, the demand volume in integer mode).
        demand_constraints: One equality row per demand, in demand order.
        capacity_constraints: One inequality row per link traversed by at
            least one route, in link order.
    """

    mode: SolveMode
    routes: List[CandidateRoute] = field(default_factory=list)
    objective: List[float] = field(default_factory=list)
    flow_scale: List[float] = field(default_factory=list)
    demand_constraints: List[DemandConstraint] = field(default_factory=list)
    capacity_constraints: List[CapacityConstraint] = field(default_factory=list)

    @property
    def num_variables(self) -> int:
        return len(self.routes)

    @property
    def is_integer(self) -> bool:
        return self.mode == SolveMode.INTEGER

    def variable_name(self, index: int) -> str:
        return f"r_{index}"

    def routes_of_demand(self, demand_id: str) -> List[int]:
        """Variable indices of the routes serving a demand."""
        return [
            i for i, route in enumerate(self.routes) if route.demand_id == demand_id
        ]


def _check_route(
    route: CandidateRoute, demand: Demand, links: Mapping[EdgeID, Link]
) -> None:
    """Validate that a route is a simple chain between the demand endpoints."""
    if route.demand_id is not None and route.demand_id != demand.id:
        raise ModelBuildError(
            f"Route {route.edges} belongs to demand '{route.demand_id}', not '{demand.id}'"
        )
    if not route.edges:
        raise ModelBuildError(f"Empty route for demand '{demand.id}'")
    if len(route.nodes) != len(route.edges) + 1:
        raise ModelBuildError(f"Route {route.edges} has an inconsistent node sequence")
    if route.nodes[0] != demand.source or route.nodes[-1] != demand.target:
        raise ModelBuildError(
            f"Route {route.edges} does not connect '{demand.source}' to '{demand.target}'"
        )
    if len(set(route.nodes)) != len(route.nodes):
        raise ModelBuildError(f"Route {route.edges} visits a node twice")

    for hop, e_id in enumerate(route.edges):
        link = links.get(e_id)
        if link is None:
            raise ModelBuildError(f"Route {route.edges} uses unknown link '{e_id}'")
        if (link.source, link.target) != (route.nodes[hop], route.nodes[hop + 1]):
            raise ModelBuildError(
                f"Link '{e_id}' does not continue route {route.edges} at hop {hop}"
            )


def _check_quantity(value: float, what: str) -> None:
    if not isinstance(value, (int, float)) or math.isnan(value) or value < 0:
        raise ModelBuildError(f"{what} must be a non-negative number, got {value!r}")


def build_model(
    candidates_by_demand: Sequence[Tuple[Demand, Sequence[CandidateRoute]]],
    links: Mapping[EdgeID, Link],
    mode: SolveMode = SolveMode.CONTINUOUS,
) -> OptimizationModel:
    """
    Build the route-based optimization model.

    Args:
        candidates_by_demand: Demands with their candidate routes, in the order
            that fixes variable and row order.
        links: Link objects keyed by edge key; capacity rows follow this order.
        mode: Continuous (bifurcated) or integer (non-bifurcated) routing.

    Returns:
        OptimizationModel: The assembled model.

    Raises:
        ModelBuildError: On negative capacity or volume, a demand without
            candidates, or a route that is not a valid chain over known links.
    """
    model = OptimizationModel(mode=SolveMode(mode))
    seen_demands = set()
    traversing: Dict[EdgeID, List[Tuple[int, float]]] = {}

    for demand, routes in candidates_by_demand:
        if demand.id in seen_demands:
            raise ModelBuildError(f"Demand '{demand.id}' is listed twice")
        seen_demands.add(demand.id)
        _check_quantity(demand.volume, f"Offered traffic of demand '{demand.id}'")
        if not routes:
            raise ModelBuildError(f"Demand '{demand.id}' has no candidate routes")

        scale = float(demand.volume) if model.is_integer else 1.0
        first = model.num_variables
        for route in routes:
            _check_route(route, demand, links)
            index = model.num_variables
            model.routes.append(route)
            model.flow_scale.append(scale)
            model.objective.append(route.hop_count * scale)
            for e_id in route.edges:
                traversing.setdefault(e_id, []).append((index, scale))

        indices = tuple(range(first, model.num_variables))
        model.demand_constraints.append(
            DemandConstraint(
                demand_id=demand.id,
                var_indices=indices,
                coefficients=(1.0,) * len(indices),
                rhs=1.0 if model.is_integer else float(demand.volume),
            )
        )

    for link_id, link in links.items():
        _check_quantity(link.capacity, f"Capacity of link '{link_id}'")
        terms = traversing.get(link_id)
        if not terms or math.isinf(link.capacity):
            continue
        model.capacity_constraints.append(
            CapacityConstraint(
                link_id=link_id,
                var_indices=tuple(index for index, _ in terms),
                coefficients=tuple(coef for _, coef in terms),
                rhs=float(link.capacity),
            )
        )

    logger.debug(
        f"Built {model.mode.name.lower()} model: {model.num_variables} variables, "
        f"{len(model.demand_constraints)} demand rows, "
        f"{len(model.capacity_constraints)} capacity rows"
    )
    return model


def links_from_graph(graph: StrictMultiDiGraph) -> Dict[EdgeID, Link]:
    """
    Derive a link table from a StrictMultiDiGraph, in edge insertion order.

    Useful when the caller only holds a graph snapshot and no Network.
    """
    table: Dict[EdgeID, Link] = {}
    for e_id, (src, dst, _, attr) in graph.get_edges().items():
        table[e_id] = Link(
            source=src, target=dst, capacity=attr.get("capacity", 1.0), id=e_id
        )
    return table


def check_solution(
    model: OptimizationModel,
    carried: Sequence[float],
    demands: Mapping[str, float],
    tol: float,
) -> Optional[str]:
    """
    Verify flow conservation and capacity feasibility of carried traffic.

    Args:
        model: The solved model.
        carried: Carried traffic per variable.
        demands: Offered traffic per demand ID.
        tol: Absolute tolerance.

    Returns:
        None if feasible, else a description of the first violation.
    """
    for row in model.demand_constraints:
        total = sum(carried[i] for i in row.var_indices)
        if abs(total - demands[row.demand_id]) > tol:
            offered = demands[row.demand_id]
            return f"demand '{row.demand_id}' carries {total}, offered {offered}"
    for row in model.capacity_constraints:
        total = sum(carried[i] for i in row.var_indices)
        if total > row.rhs + tol:
            return f"link '{row.link_id}' carries {total}, capacity {row.rhs}"
    return None
