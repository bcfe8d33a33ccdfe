"""Network snapshot: nodes, capacitated links, demands and installed routes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Container, Dict, Iterable, List

from routeform.algorithms.base import RouteAllocation
from routeform.graph import StrictMultiDiGraph


@dataclass
class Node:
    """A network node.

    Attributes:
        name (str): Node name, unique within the network.
        attrs (Dict[str, Any]): Free-form metadata carried to the graph.
    """

    name: str
    attrs: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Link:
    """Represents a directed capacitated link between two nodes.

    Attributes:
        source (str): Tail node name.
        target (str): Head node name.
        capacity (float): Traffic units the link can carry (default 1.0).
        attrs (Dict[str, Any]): Free-form metadata carried to the graph.
        id (str): Stable identifier "{source}|{target}|{index}", assigned by
            the Network on insertion. Also used as the graph edge key.
    """

    source: str
    target: str
    capacity: float = 1.0
    attrs: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default="", compare=False)


@dataclass
class Demand:
    """A required traffic volume from one node to another.

    Attributes:
        source (str): Ingress node name.
        target (str): Egress node name.
        volume (float): Offered traffic.
        attrs (Dict[str, Any]): Additional metadata.
        id (str): Stable identifier "{source}|{target}|{index}", assigned by
            the Network on insertion.
    """

    source: str
    target: str
    volume: float = 0.0
    attrs: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default="", compare=False)


def free_id(source: str, target: str, n: int, taken: Container[str]) -> str:
    """First "source|target|i" with i >= n that is not in ``taken``."""
    while f"{source}|{target}|{n}" in taken:
        n += 1
    return f"{source}|{target}|{n}"


@dataclass
class Network:
    """A container for nodes, links, demands and the installed routing.

    The optimizer treats the network as a read-only snapshot. Routing state is
    only replaced through :meth:`clear_routes` and :meth:`install_routes`.

    Attributes:
        nodes (Dict[str, Node]): Node name -> Node.
        links (Dict[str, Link]): Mapping from link ID -> Link object, in
            insertion order.
        demands (Dict[str, Demand]): Mapping from demand ID -> Demand object,
            in insertion order.
        routes (List[RouteAllocation]): Currently installed routing.
        attrs (Dict[str, Any]): Network-level metadata.
    """

    nodes: Dict[str, Node] = field(default_factory=dict)
    links: Dict[str, Link] = field(default_factory=dict)
    demands: Dict[str, Demand] = field(default_factory=dict)
    routes: List[RouteAllocation] = field(default_factory=list)
    attrs: Dict[str, Any] = field(default_factory=dict)

    def add_node(self, node: Node) -> None:
        """Register a node under its name.

        Raises:
            ValueError: If the name is taken.
        """
        if node.name in self.nodes:
            raise ValueError(f"Node '{node.name}' already exists in the network.")
        self.nodes[node.name] = node

    def add_link(self, link: Link) -> Link:
        """Add a link and assign its ID if it has none.

        Returns:
            Link: The added link.

        Raises:
            ValueError: If an endpoint does not exist or the ID is taken.
        """
        self._check_endpoints(link.source, link.target)
        if not link.id:
            link.id = free_id(link.source, link.target, len(self.links), self.links)
        if link.id in self.links:
            raise ValueError(f"Link '{link.id}' already exists in the network.")
        self.links[link.id] = link
        return link

    def add_demand(self, demand: Demand) -> Demand:
        """Add a demand and assign its ID if it has none.

        Returns:
            Demand: The added demand.

        Raises:
            ValueError: If an endpoint does not exist or the ID is taken.
        """
        self._check_endpoints(demand.source, demand.target)
        if not demand.id:
            demand.id = free_id(
                demand.source, demand.target, len(self.demands), self.demands
            )
        if demand.id in self.demands:
            raise ValueError(f"Demand '{demand.id}' already exists in the network.")
        self.demands[demand.id] = demand
        return demand

    def _check_endpoints(self, source: str, target: str) -> None:
        if source not in self.nodes:
            raise ValueError(f"Source node '{source}' not found in network.")
        if target not in self.nodes:
            raise ValueError(f"Target node '{target}' not found in network.")

    def to_strict_multidigraph(self) -> StrictMultiDiGraph:
        """Create a StrictMultiDiGraph snapshot of this Network.

        Each link becomes one directed edge keyed by the link ID and carrying
        its ``capacity``. Links are directed; no reverse edges are added.

        Returns:
            StrictMultiDiGraph: One node per Node, one edge per Link.
        """
        graph = StrictMultiDiGraph()
        for node_name, node in self.nodes.items():
            graph.add_node(node_name, **node.attrs)
        for link_id, link in self.links.items():
            graph.add_edge(
                link.source,
                link.target,
                key=link_id,
                **{**link.attrs, "capacity": link.capacity},
            )
        return graph

    def clear_routes(self) -> None:
        """Remove any previously installed routing."""
        self.routes = []

    def install_routes(self, allocations: Iterable[RouteAllocation]) -> None:
        """Replace the installed routing with the given allocations."""
        self.routes = list(allocations)

    def carried_by_demand(self) -> Dict[str, float]:
        """Total carried traffic per demand ID under the installed routing."""
        totals = {demand_id: 0.0 for demand_id in self.demands}
        for alloc in self.routes:
            totals[alloc.demand_id] = totals.get(alloc.demand_id, 0.0) + alloc.carried
        return totals

    def link_utilization(self) -> Dict[str, float]:
        """Total carried traffic per link ID under the installed routing."""
        loads = {link_id: 0.0 for link_id in self.links}
        for alloc in self.routes:
            for link_id in alloc.route.edges:
                loads[link_id] = loads.get(link_id, 0.0) + alloc.carried
        return loads
