import pytest

from routeform.algorithms.base import CandidateRoute, RouteAllocation
from routeform.network import Demand, Link, Network, Node


def test_link_and_demand_ids(net_line3):
    assert list(net_line3.links) == ["1|2|0", "2|3|1"]
    assert list(net_line3.demands) == ["1|3|0"]
    assert net_line3.links["2|3|1"].capacity == 2


def test_explicit_ids_are_kept():
    net = Network()
    net.add_node(Node("A"))
    net.add_node(Node("B"))
    link = net.add_link(Link("A", "B", id="ab"))
    assert link.id == "ab"
    assert net.add_demand(Demand("A", "B", 1, id="x")).id == "x"
    with pytest.raises(ValueError, match="Link 'ab' already exists"):
        net.add_link(Link("B", "A", id="ab"))
    with pytest.raises(ValueError, match="Demand 'x' already exists"):
        net.add_demand(Demand("B", "A", 1, id="x"))


def test_parallel_links_get_distinct_ids():
    net = Network()
    net.add_node(Node("A"))
    net.add_node(Node("B"))
    first = net.add_link(Link("A", "B"))
    second = net.add_link(Link("A", "B"))
    assert first.id != second.id


def test_generated_ids_skip_explicit_ones():
    net = Network()
    net.add_node(Node("A"))
    net.add_node(Node("B"))
    net.add_link(Link("A", "B", id="A|B|1"))
    assert net.add_link(Link("A", "B")).id == "A|B|2"
    net.add_demand(Demand("A", "B", 1, id="A|B|1"))
    assert net.add_demand(Demand("A", "B", 1)).id == "A|B|2"


def test_missing_endpoints():
    net = Network()
    net.add_node(Node("A"))
    with pytest.raises(ValueError, match="Target node 'B' not found"):
        net.add_link(Link("A", "B"))
    with pytest.raises(ValueError, match="Source node 'C' not found"):
        net.add_demand(Demand("C", "A", 1))


def test_duplicate_node():
    net = Network()
    net.add_node(Node("A"))
    with pytest.raises(ValueError, match="Node 'A' already exists"):
        net.add_node(Node("A"))


def test_to_strict_multidigraph(net_line3):
    net_line3.links["1|2|0"].attrs["distance"] = 5
    graph = net_line3.to_strict_multidigraph()
    assert set(graph.nodes) == {"1", "2", "3"}
    assert list(graph.get_edges()) == ["1|2|0", "2|3|1"]
    assert graph.edge_endpoints("1|2|0") == ("1", "2")
    assert graph.get_edge_attr("1|2|0") == {"distance": 5, "capacity": 2}
    # Links are directed; no reverse edge is created
    assert graph.edges_between("2", "1") == []


def test_routing_state(net_line3):
    route = CandidateRoute("1|3|0", ("1|2|0", "2|3|1"), ("1", "2", "3"))
    net_line3.install_routes([RouteAllocation(route, 1.5)])

    assert net_line3.carried_by_demand() == {"1|3|0": 1.5}
    assert net_line3.link_utilization() == {"1|2|0": 1.5, "2|3|1": 1.5}

    net_line3.clear_routes()
    assert net_line3.routes == []
    assert net_line3.carried_by_demand() == {"1|3|0": 0.0}
    assert net_line3.link_utilization() == {"1|2|0": 0.0, "2|3|1": 0.0}
