import pytest

from routeform.graph import StrictMultiDiGraph
from routeform.network import Demand, Link, Network, Node


@pytest.fixture
def line3():
    # Capacity:
    #      [2]        [2]
    #  1 ───────► 2 ───────► 3
    #
    g = StrictMultiDiGraph()
    for node in ("1", "2", "3"):
        g.add_node(node)

    g.add_edge("1", "2", key=0, capacity=2)
    g.add_edge("2", "3", key=1, capacity=2)
    return g


@pytest.fixture
def line3_shortcut(line3):
    # Capacity:
    #      [2]        [2]
    #  1 ───────► 2 ───────► 3
    #  │                     ▲
    #  └─────────────────────┘
    #            [1]
    line3.add_edge("1", "3", key=2, capacity=1)
    return line3


@pytest.fixture
def square1():
    # All links 1 hop, capacity 1:
    #       [0]        [1]
    #   ┌────────►B─────────┐
    #   │                   ▼
    #   A                   C
    #   │                   ▲
    #   └────────►D─────────┘
    #       [2]        [3]
    g = StrictMultiDiGraph()
    for node in ("A", "B", "C", "D"):
        g.add_node(node)

    g.add_edge("A", "B", key=0, capacity=1)
    g.add_edge("B", "C", key=1, capacity=1)
    g.add_edge("A", "D", key=2, capacity=1)
    g.add_edge("D", "C", key=3, capacity=1)
    return g


@pytest.fixture
def parallel1():
    # Parallel links:
    #      [0,1,2]       [3,4]
    #  A ══════════► B ════════► C
    #  │                         ▲
    #  └─────────────────────────┘
    #              [5]
    g = StrictMultiDiGraph()
    for node in ("A", "B", "C"):
        g.add_node(node)

    g.add_edge("A", "B", key=0, capacity=1)
    g.add_edge("A", "B", key=1, capacity=1)
    g.add_edge("A", "B", key=2, capacity=1)
    g.add_edge("B", "C", key=3, capacity=1)
    g.add_edge("B", "C", key=4, capacity=1)
    g.add_edge("A", "C", key=5, capacity=1)
    return g


@pytest.fixture
def graph5():
    # Fully connected directed graph on A..E, every link capacity 1.
    # Keys follow insertion order: A->B=0, A->C=1, ..., E->D=19.
    g = StrictMultiDiGraph()
    nodes = ("A", "B", "C", "D", "E")
    for node in nodes:
        g.add_node(node)

    key = 0
    for src in nodes:
        for dst in nodes:
            if src != dst:
                g.add_edge(src, dst, key=key, capacity=1)
                key += 1
    return g


@pytest.fixture
def loop_graph():
    # A cycle hanging off the path; loopless paths must never enter it twice.
    #
    #  A ──► B ──► C ──► D
    #        ▲     │
    #        └─ E ◄┘
    g = StrictMultiDiGraph()
    for node in ("A", "B", "C", "D", "E"):
        g.add_node(node)

    g.add_edge("A", "B", key=0)
    g.add_edge("B", "C", key=1)
    g.add_edge("C", "D", key=2)
    g.add_edge("C", "E", key=3)
    g.add_edge("E", "B", key=4)
    return g


@pytest.fixture
def disconnected():
    g = StrictMultiDiGraph()
    for node in ("A", "B", "C"):
        g.add_node(node)
    g.add_edge("A", "B", key=0)
    g.add_edge("C", "B", key=1)
    return g


@pytest.fixture
def net_line3():
    """Network form of ``line3`` with one 2-unit demand from 1 to 3."""
    net = Network()
    for name in ("1", "2", "3"):
        net.add_node(Node(name))
    net.add_link(Link("1", "2", capacity=2))
    net.add_link(Link("2", "3", capacity=2))
    net.add_demand(Demand("1", "3", volume=2))
    return net


@pytest.fixture
def net_line3_shortcut(net_line3):
    """``net_line3`` plus a direct 1 -> 3 link of capacity 1; demand raised to 3."""
    net_line3.add_link(Link("1", "3", capacity=1))
    next(iter(net_line3.demands.values())).volume = 3
    return net_line3
