from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple

from routeform.graph import EdgeID, NodeID

#: A path as the ordered tuple of edge keys it traverses.
EdgePath = Tuple[EdgeID, ...]

#: Carried traffic below this value is treated as numerical noise.
DEFAULT_PRUNE_THRESHOLD = 0.001

#: Absolute tolerance for flow-conservation and capacity checks on solutions.
SOLUTION_TOL = 1e-4


class SolveMode(IntEnum):
    """Domain of the per-route decision variables."""

    #: Fractional flow per route; a demand may be split (bifurcated routing).
    CONTINUOUS = 1
    #: Binary route selection; each demand uses exactly one route.
    INTEGER = 2


class SolveStatus(IntEnum):
    """Final status reported by a solver backend."""

    OPTIMAL = 1
    INFEASIBLE = 2
    UNBOUNDED = 3
    ERROR = 4


@dataclass(frozen=True)
class CandidateRoute:
    """
    A loopless path offered to the optimizer as a routing option for a demand.

    Attributes:
        demand_id: Identifier of the demand this route serves.
        edges: Edge keys in traversal order.
        nodes: Node sequence, ``len(nodes) == len(edges) + 1``.
    """

    demand_id: Optional[str]
    edges: EdgePath
    nodes: Tuple[NodeID, ...]

    @property
    def hop_count(self) -> int:
        return len(self.edges)

    @property
    def src(self) -> NodeID:
        return self.nodes[0]

    @property
    def dst(self) -> NodeID:
        return self.nodes[-1]


@dataclass(frozen=True)
class RouteAllocation:
    """Traffic carried by one candidate route in a solved model."""

    route: CandidateRoute
    carried: float

    @property
    def demand_id(self) -> Optional[str]:
        return self.route.demand_id

    @property
    def cost(self) -> float:
        """Hop-weighted resource usage of this allocation."""
        return self.route.hop_count * self.carried
