"""Scenario files: a network, its demands and optimizer options in YAML."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from routeform.algorithm import RouteFormulationAlgorithm
from routeform.config import OptimizerConfig
from routeform.logging import get_logger
from routeform.network import Demand, Link, Network, Node
from routeform.optimizer import OptimizationResult

logger = get_logger(__name__)

_TOP_LEVEL_KEYS = {"network", "demands", "optimizer"}
_LINK_KEYS = {"source", "target", "capacity", "attrs", "id"}
_DEMAND_KEYS = {"source", "target", "volume", "attrs", "id"}


@dataclass
class Scenario:
    """A network plus the optimizer configuration to run on it.

    Typical usage example:

        scenario = Scenario.from_yaml(yaml_str)
        report = scenario.run()
        # Inspect scenario.network.routes
    """

    network: Network
    config: OptimizerConfig = field(default_factory=OptimizerConfig)
    result: Optional[OptimizationResult] = field(default=None, init=False, repr=False)

    def run(self, overrides: Optional[Dict[str, Any]] = None) -> str:
        """Optimize the network's routing; returns the report line."""
        algorithm = RouteFormulationAlgorithm(self.config)
        if overrides:
            algorithm.config = OptimizerConfig.from_options(overrides, base=self.config)
        report = algorithm.run(self.network)
        self.result = algorithm.last_result
        return report

    @classmethod
    def from_yaml(cls, yaml_str: str) -> Scenario:
        """Construct a Scenario from a YAML string.

        Top-level keys:
          - network: ``nodes`` (list of names or mapping name -> {attrs}) and
            ``links`` (list of {source, target, capacity})
          - demands: list of {source, target, volume}
          - optimizer: OptimizerConfig fields (k, non_bifurcated, ...)

        Raises:
            ValueError: On unknown keys or malformed sections.
        """
        data = yaml.safe_load(yaml_str)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("The provided YAML must map to a dictionary at top-level.")

        unknown = set(data) - _TOP_LEVEL_KEYS
        if unknown:
            raise ValueError(
                f"Unrecognized top-level key(s): {', '.join(sorted(unknown))}"
            )

        network = _build_network(data.get("network") or {})

        demands = data.get("demands") or []
        if not isinstance(demands, list):
            raise ValueError("'demands' must be a list")
        for entry in demands:
            _check_entry(entry, _DEMAND_KEYS, "demand")
            network.add_demand(
                Demand(
                    source=str(entry["source"]),
                    target=str(entry["target"]),
                    volume=float(entry.get("volume", 0.0)),
                    attrs=entry.get("attrs") or {},
                    id=str(entry.get("id", "")),
                )
            )

        optimizer = data.get("optimizer") or {}
        if not isinstance(optimizer, dict):
            raise ValueError("'optimizer' must be a mapping")
        config = OptimizerConfig.from_options(optimizer)

        logger.debug(
            f"Loaded scenario: {len(network.nodes)} nodes, {len(network.links)} links, "
            f"{len(network.demands)} demands"
        )
        return cls(network=network, config=config)


def _check_entry(entry: Any, allowed: set, what: str) -> None:
    if not isinstance(entry, dict):
        raise ValueError(f"Each {what} definition must be a mapping")
    if "source" not in entry or "target" not in entry:
        raise ValueError(f"Each {what} definition must include 'source' and 'target'")
    for key in entry:
        if key not in allowed:
            raise ValueError(f"Unrecognized key '{key}' in {what} definition")


def _build_network(section: Any) -> Network:
    if not isinstance(section, dict):
        raise ValueError("'network' must be a mapping")

    network = Network()
    nodes = section.get("nodes") or []
    if isinstance(nodes, list):
        for name in nodes:
            network.add_node(Node(name=str(name)))
    elif isinstance(nodes, dict):
        for name, node_def in nodes.items():
            node_def = node_def or {}
            if not isinstance(node_def, dict) or set(node_def) - {"attrs"}:
                raise ValueError(f"Node '{name}' may only define 'attrs'")
            network.add_node(Node(name=str(name), attrs=node_def.get("attrs") or {}))
    else:
        raise ValueError("'nodes' must be a list or a mapping")

    links = section.get("links") or []
    if not isinstance(links, list):
        raise ValueError("'links' must be a list")
    for entry in links:
        _check_entry(entry, _LINK_KEYS, "link")
        network.add_link(
            Link(
                source=str(entry["source"]),
                target=str(entry["target"]),
                capacity=float(entry.get("capacity", 1.0)),
                attrs=entry.get("attrs") or {},
                id=str(entry.get("id", "")),
            )
        )
    return network
