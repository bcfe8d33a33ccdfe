import pytest

from routeform.config import OptimizerConfig
from routeform.exceptions import NoRouteError
from routeform.optimizer import SUMMARY_PREFIX
from routeform.scenario import Scenario

SCENARIO_YAML = """
network:
  nodes: [A, B, C]
  links:
    - {source: A, target: B, capacity: 2}
    - {source: B, target: C, capacity: 2}
    - {source: A, target: C, capacity: 1}
demands:
  - {source: A, target: C, volume: 3}
optimizer:
  k: 5
  solver: highs
"""


def test_from_yaml():
    scenario = Scenario.from_yaml(SCENARIO_YAML)
    assert list(scenario.network.nodes) == ["A", "B", "C"]
    assert list(scenario.network.links) == ["A|B|0", "B|C|1", "A|C|2"]
    assert scenario.network.links["A|C|2"].capacity == 1.0
    assert list(scenario.network.demands) == ["A|C|0"]
    assert scenario.config == OptimizerConfig(k=5, solver="highs")
    assert scenario.result is None


def test_run():
    scenario = Scenario.from_yaml(SCENARIO_YAML)
    assert scenario.run() == f"{SUMMARY_PREFIX}5"
    assert scenario.result.total_cost == pytest.approx(5.0)
    assert scenario.network.link_utilization() == pytest.approx(
        {"A|B|0": 2.0, "B|C|1": 2.0, "A|C|2": 1.0}
    )


def test_run_overrides():
    scenario = Scenario.from_yaml(SCENARIO_YAML.replace("volume: 3", "volume: 1"))
    assert scenario.run({"isNonBifurcated": "true"}) == f"{SUMMARY_PREFIX}1"
    (alloc,) = scenario.network.routes
    assert alloc.route.edges == ("A|C|2",)


def test_nodes_mapping_and_ids():
    scenario = Scenario.from_yaml(
        """
network:
  nodes:
    A: {attrs: {site: x}}
    B:
  links:
    - {source: A, target: B, id: ab}
demands:
  - {source: A, target: B, volume: 0.5, id: d1}
"""
    )
    assert scenario.network.nodes["A"].attrs == {"site": "x"}
    assert scenario.network.nodes["B"].attrs == {}
    assert scenario.network.links["ab"].capacity == 1.0
    assert scenario.network.demands["d1"].volume == 0.5
    assert scenario.config == OptimizerConfig()


def test_empty_document():
    scenario = Scenario.from_yaml("")
    assert scenario.network.nodes == {}
    assert scenario.run() == f"{SUMMARY_PREFIX}0"


def test_unreachable_demand():
    scenario = Scenario.from_yaml(
        """
network:
  nodes: [A, B]
  links: [{source: B, target: A}]
demands: [{source: A, target: B, volume: 1}]
"""
    )
    with pytest.raises(NoRouteError):
        scenario.run()


@pytest.mark.parametrize(
    "text, match",
    [
        ("- a\n- b\n", "must map to a dictionary"),
        ("extra: 1\n", "Unrecognized top-level key"),
        ("network: [1]\n", "'network' must be a mapping"),
        ("network: {nodes: 3}\n", "'nodes' must be a list or a mapping"),
        ("network: {nodes: {A: {x: 1}}}\n", "may only define 'attrs'"),
        ("network: {links: {a: 1}}\n", "'links' must be a list"),
        (
            "network: {nodes: [A, B], links: [{source: A, target: B, cost: 1}]}\n",
            "Unrecognized key 'cost' in link",
        ),
        ("network: {nodes: [A]}\ndemands: [{source: A}]\n", "'source' and 'target'"),
        ("demands: {a: 1}\n", "'demands' must be a list"),
        ("optimizer: [1]\n", "'optimizer' must be a mapping"),
        ("optimizer: {depth: 2}\n", "Unknown optimizer parameter 'depth'"),
    ],
)
def test_invalid_documents(text, match):
    with pytest.raises(ValueError, match=match):
        Scenario.from_yaml(text)
