from __future__ import annotations

from pickle import dumps, loads
from typing import Any, Dict, Hashable, Iterator, List, Optional, Tuple

import networkx as nx

NodeID = Hashable
EdgeID = Hashable
AttrDict = Dict[str, Any]
#: (source, target, key, attributes) of one link.
EdgeTuple = Tuple[NodeID, NodeID, EdgeID, AttrDict]


class StrictMultiDiGraph(nx.MultiDiGraph):
    """
    Directed multigraph of capacitated links, addressed by unique edge keys.

    Compared to a plain networkx MultiDiGraph:
      - Adding an edge never creates its endpoints; both must exist.
      - Adding a node or a key twice raises ValueError, as does removing
        something that is not there.
      - Every edge has a ``capacity`` attribute, 1.0 unless given.
      - An index from edge key to (source, target, key, attrs) is kept in
        insertion order, so links can be looked up without knowing their
        endpoints.

    Edge keys identify links in the optimization model and decide between
    paths of equal hop count, so the keys of one graph must be mutually
    orderable. Keys that are not supplied come from a per-graph integer
    counter.
    """

    def __init__(self, *args, **kwargs) -> None:
        self._by_key: Dict[EdgeID, EdgeTuple] = {}
        self._next_key = 0
        super().__init__(*args, **kwargs)

    def new_edge_key(self, src_node: NodeID, dst_node: NodeID) -> EdgeID:
        """Next integer key not yet used by any edge of this graph."""
        while self._next_key in self._by_key:
            self._next_key += 1
        self._next_key += 1
        return self._next_key - 1

    def copy(self, as_view: bool = False, pickle: bool = True) -> StrictMultiDiGraph:
        """
        Copy the graph.

        Args:
            as_view: Passed to networkx when ``pickle`` is False.
            pickle: Deep copy through pickle, keeping keys and the key counter.

        Returns:
            StrictMultiDiGraph: The copy.
        """
        if pickle:
            return loads(dumps(self))
        return super().copy(as_view=as_view)

    def _record(self, key: EdgeID) -> EdgeTuple:
        try:
            return self._by_key[key]
        except KeyError:
            raise ValueError(f"Edge with id='{key}' not found.") from None

    #
    # Nodes
    #
    def add_node(self, n: NodeID, **attr: Any) -> None:
        """
        Add a node.

        Raises:
            ValueError: If the node is already present.
        """
        if n in self._node:
            raise ValueError(f"Node '{n}' already exists in this graph.")
        super().add_node(n, **attr)

    def remove_node(self, n: NodeID) -> None:
        """
        Remove a node together with its inbound and outbound links.

        Raises:
            ValueError: If the node is not present.
        """
        if n not in self._node:
            raise ValueError(f"Node '{n}' does not exist.")
        for adjacency in (self._succ[n], self._pred[n]):
            for edges_map in adjacency.values():
                for e_id in edges_map:
                    self._by_key.pop(e_id, None)
        super().remove_node(n)

    #
    # Links
    #
    def add_edge(
        self,
        src_node: NodeID,
        dst_node: NodeID,
        key: Optional[EdgeID] = None,
        **attr: Any,
    ) -> EdgeID:
        """
        Add a directed link between two existing nodes.

        Args:
            src_node: Tail of the link.
            dst_node: Head of the link.
            key: Unique edge key; generated when None.
            **attr: Link attributes. ``capacity`` defaults to 1.0.

        Returns:
            EdgeID: The key of the new link.

        Raises:
            ValueError: If an endpoint is missing or the key is taken.
        """
        for role, node in (("Source", src_node), ("Target", dst_node)):
            if node not in self._node:
                raise ValueError(f"{role} node '{node}' does not exist.")
        if key is None:
            key = self.new_edge_key(src_node, dst_node)
        elif key in self._by_key:
            raise ValueError(f"Edge with id '{key}' already exists.")

        attr.setdefault("capacity", 1.0)
        super().add_edge(src_node, dst_node, key=key, **attr)
        attrs = self._succ[src_node][dst_node][key]
        self._by_key[key] = (src_node, dst_node, key, attrs)
        return key

    def remove_edge_by_id(self, key: EdgeID) -> None:
        """
        Remove the link with the given key.

        Raises:
            ValueError: If there is no such link.
        """
        src_node, dst_node, _, _ = self._record(key)
        del self._by_key[key]
        super().remove_edge(src_node, dst_node, key=key)

    #
    # Lookups
    #
    def get_edges(self) -> Dict[EdgeID, EdgeTuple]:
        """All links as edge key -> (source, target, key, attrs), in insertion order."""
        return self._by_key

    def get_edge_attr(self, key: EdgeID) -> AttrDict:
        """Attribute dict of a link; raises ValueError for unknown keys."""
        return self._record(key)[3]

    def has_edge_by_id(self, key: EdgeID) -> bool:
        return key in self._by_key

    def edge_endpoints(self, key: EdgeID) -> Tuple[NodeID, NodeID]:
        """(source, target) of a link; raises ValueError for unknown keys."""
        src_node, dst_node, _, _ = self._record(key)
        return src_node, dst_node

    def edges_between(self, u: NodeID, v: NodeID) -> List[EdgeID]:
        """Keys of the links from u to v, empty if there are none."""
        return list(self._succ.get(u, {}).get(v, {}))

    def out_edges_sorted(self, u: NodeID) -> Iterator[Tuple[EdgeID, NodeID]]:
        """
        Outbound links of ``u`` as (edge key, neighbor), in ascending key order.

        This is the order used to break ties between equal hop-count paths.
        """
        pairs = [
            (e_id, nbr)
            for nbr, edges_map in self._succ[u].items()
            for e_id in edges_map
        ]
        yield from sorted(pairs, key=lambda pair: pair[0])

    def capacity(self, key: EdgeID) -> float:
        """Capacity of a link; raises ValueError for unknown keys."""
        return self._record(key)[3]["capacity"]
