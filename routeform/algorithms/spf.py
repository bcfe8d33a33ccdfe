from collections import deque
from heapq import heappop, heappush
from typing import (
    Dict,
    Iterator,
    List,
    Optional,
    Set,
    Tuple,
)

from routeform.algorithms.base import CandidateRoute, EdgePath
from routeform.exceptions import NoRouteError
from routeform.graph import EdgeID, NodeID, StrictMultiDiGraph
from routeform.logging import get_logger

logger = get_logger(__name__)

NodePath = Tuple[NodeID, ...]


def _hops_to_dst(
    graph: StrictMultiDiGraph,
    dst_node: NodeID,
    excluded_edges: Set[EdgeID],
    excluded_nodes: Set[NodeID],
) -> Dict[NodeID, int]:
    """
    Reverse breadth-first search from dst_node.

    Returns:
        Maps each node that can reach dst_node to its minimal hop count,
        ignoring excluded edges and nodes.
    """
    incoming_adjacencies = graph._pred
    hops: Dict[NodeID, int] = {dst_node: 0}
    queue = deque([dst_node])

    while queue:
        node_id = queue.popleft()
        for pred_id, edges_map in incoming_adjacencies[node_id].items():
            if pred_id in hops or pred_id in excluded_nodes:
                continue
            if any(e_id not in excluded_edges for e_id in edges_map):
                hops[pred_id] = hops[node_id] + 1
                queue.append(pred_id)

    return hops


def spf(
    graph: StrictMultiDiGraph,
    src_node: NodeID,
    dst_node: NodeID,
    excluded_edges: Optional[Set[EdgeID]] = None,
    excluded_nodes: Optional[Set[NodeID]] = None,
) -> Optional[Tuple[EdgePath, NodePath]]:
    """
    Minimum hop-count path from src_node to dst_node.

    Among all paths with the minimal number of hops, the one whose edge-key
    sequence is lexicographically smallest is returned, so the result does not
    depend on adjacency iteration order. A shortest path never repeats a node.

    Args:
        graph: The directed graph.
        src_node: The source node.
        dst_node: The destination node.
        excluded_edges: Edge keys that may not be used.
        excluded_nodes: Nodes that may not be visited. Must not contain
            src_node or dst_node.

    Returns:
        A tuple (edges, nodes) describing the path, or None if dst_node is not
        reachable. For src_node == dst_node the empty path ((), (src_node,))
        is returned.

    Raises:
        KeyError: If src_node or dst_node is not in the graph.
    """
    if src_node not in graph:
        raise KeyError(f"Source node '{src_node}' is not in the graph.")
    if dst_node not in graph:
        raise KeyError(f"Destination node '{dst_node}' is not in the graph.")

    excluded_edges = excluded_edges or set()
    excluded_nodes = excluded_nodes or set()

    hops = _hops_to_dst(graph, dst_node, excluded_edges, excluded_nodes)
    if src_node not in hops:
        return None

    edges: List[EdgeID] = []
    nodes: List[NodeID] = [src_node]
    node_id = src_node
    while node_id != dst_node:
        want = hops[node_id] - 1
        for e_id, nbr_id in graph.out_edges_sorted(node_id):
            if e_id in excluded_edges or nbr_id in excluded_nodes:
                continue
            if hops.get(nbr_id) == want:
                edges.append(e_id)
                nodes.append(nbr_id)
                node_id = nbr_id
                break

    return tuple(edges), tuple(nodes)


def ksp(
    graph: StrictMultiDiGraph,
    src_node: NodeID,
    dst_node: NodeID,
    max_k: Optional[int] = None,
    max_hops: Optional[int] = None,
    excluded_edges: Optional[Set[EdgeID]] = None,
    excluded_nodes: Optional[Set[NodeID]] = None,
) -> Iterator[Tuple[EdgePath, NodePath]]:
    """
    Generator of up to k loopless shortest paths using Yen's algorithm.

    Path length is the hop count. Paths come out in ascending order of
    (hop count, edge-key sequence), parallel edges giving distinct paths.
    After the first SPF, each new path is found by deviating from the last
    accepted path at every spur node: edges that previously accepted paths
    take out of the shared root are removed, root nodes are removed, and the
    best spur path is pushed to a candidate heap.

    Args:
        graph: The directed graph.
        src_node: The source node.
        dst_node: The destination node.
        max_k: If set, yields at most k paths.
        max_hops: If set, paths longer than this many hops are not yielded.
        excluded_edges: Edge keys to exclude globally.
        excluded_nodes: Nodes to exclude globally.

    Yields:
        (edges, nodes) for each path from src_node to dst_node.

    Raises:
        KeyError: If src_node or dst_node is not in the graph.
    """
    excluded_edges = set(excluded_edges or ())
    excluded_nodes = set(excluded_nodes or ())

    if src_node == dst_node:
        return
    if src_node in excluded_nodes or dst_node in excluded_nodes:
        return

    first = spf(graph, src_node, dst_node, excluded_edges, excluded_nodes)
    if first is None:
        return
    if max_hops is not None and len(first[0]) > max_hops:
        return

    shortest_paths: List[Tuple[EdgePath, NodePath]] = [first]
    candidates: List[Tuple[int, EdgePath, NodePath]] = []
    visited = {first[0]}
    yield first

    while max_k is None or len(shortest_paths) < max_k:
        last_edges, last_nodes = shortest_paths[-1]

        for idx in range(len(last_edges)):
            spur_node = last_nodes[idx]
            root_edges = last_edges[:idx]
            root_nodes = last_nodes[:idx]

            excl_e = set(excluded_edges)
            excl_n = excluded_nodes | set(root_nodes)
            # Force a deviation from every accepted path sharing this root
            for sp_edges, _ in shortest_paths:
                if sp_edges[:idx] == root_edges:
                    excl_e.add(sp_edges[idx])

            spur = spf(graph, spur_node, dst_node, excl_e, excl_n)
            if spur is None:
                continue

            spur_edges, spur_nodes = spur
            total_edges = root_edges + spur_edges
            if total_edges in visited:
                continue
            if max_hops is not None and len(total_edges) > max_hops:
                continue

            visited.add(total_edges)
            heappush(
                candidates, (len(total_edges), total_edges, root_nodes + spur_nodes)
            )

        if not candidates:
            break

        _, edges, nodes = heappop(candidates)
        shortest_paths.append((edges, nodes))
        yield edges, nodes


def generate_paths(
    graph: StrictMultiDiGraph,
    src_node: NodeID,
    dst_node: NodeID,
    k: int,
    demand_id: Optional[str] = None,
    max_hops: Optional[int] = None,
) -> List[CandidateRoute]:
    """
    Build up to k candidate routes for one demand.

    Args:
        graph: The directed graph.
        src_node: Demand ingress node.
        dst_node: Demand egress node.
        k: Maximum number of loopless paths, a positive integer.
        demand_id: Identifier stored on each route and used in error messages.
        max_hops: Optional hop limit for admissible paths.

    Returns:
        Between 1 and k routes in ascending (hop count, edge keys) order.

    Raises:
        ValueError: If k is not a positive integer.
        NoRouteError: If no loopless path exists, or an endpoint is not in
            the graph.
    """
    if isinstance(k, bool) or not isinstance(k, int) or k <= 0:
        raise ValueError(f"k must be a positive integer, got {k!r}")

    for node_id in (src_node, dst_node):
        if node_id not in graph:
            raise NoRouteError(
                src_node, dst_node, demand_id, reason=f"node '{node_id}' not found"
            )

    routes = [
        CandidateRoute(demand_id=demand_id, edges=edges, nodes=nodes)
        for edges, nodes in ksp(
            graph, src_node, dst_node, max_k=k, max_hops=max_hops
        )
    ]
    if not routes:
        raise NoRouteError(src_node, dst_node, demand_id)

    logger.debug(
        f"Generated {len(routes)} candidate route(s) for "
        f"{src_node} -> {dst_node} (k={k})"
    )
    return routes
