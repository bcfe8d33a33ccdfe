"""Host plugin adapter for the route formulation algorithm.

A host tool discovers the adapter's parameters, passes string options to
:meth:`RouteFormulationAlgorithm.configure`, then calls
:meth:`RouteFormulationAlgorithm.run` with its network. The adapter replaces
the network's routing with the optimal allocation and returns a report line.
"""

from __future__ import annotations

from typing import List, Mapping, Optional, Tuple

from routeform.config import OptimizerConfig
from routeform.logging import get_logger
from routeform.network import Network
from routeform.optimizer import OptimizationResult, optimize_network

logger = get_logger(__name__)

#: (name, default value, description)
Parameter = Tuple[str, str, str]


class RouteFormulationAlgorithm:
    """Route-based routing optimization with k loopless candidate paths per demand."""

    description = (
        "Routing optimization: carries all demands over up to k loopless shortest "
        "paths each, minimizing total link-hop usage subject to link capacities"
    )

    def __init__(self, config: Optional[OptimizerConfig] = None) -> None:
        self.config = config or OptimizerConfig()
        self.last_result: Optional[OptimizationResult] = None

    @staticmethod
    def parameters() -> List[Parameter]:
        """Input parameters with their defaults, as host-facing strings."""
        defaults = OptimizerConfig()
        return [
            (
                "k",
                str(defaults.k),
                "Maximum number of loopless admissible paths per demand",
            ),
            (
                "isNonBifurcated",
                str(defaults.non_bifurcated).lower(),
                "True if the traffic is constrained to be non-bifurcated",
            ),
            (
                "pruneThreshold",
                str(defaults.prune_threshold),
                "Routes carrying less traffic than this are removed",
            ),
            ("solver", defaults.solver, "Solver backend: cbc or highs"),
        ]

    def configure(self, options: Mapping[str, str]) -> OptimizerConfig:
        """Apply host options on top of the defaults.

        Raises:
            ValueError: On unknown parameters or unparsable values.
        """
        self.config = OptimizerConfig.from_options(options)
        logger.debug(f"Configured route formulation: {self.config}")
        return self.config

    def run(self, network: Network) -> str:
        """Optimize the routing of ``network`` and install it.

        Prior routes are cleared first. If the optimization fails, the error
        propagates and no routes are installed.

        Returns:
            Report line with the total cost.
        """
        network.clear_routes()
        result = optimize_network(network, self.config)
        network.install_routes(result.allocations)
        self.last_result = result
        return result.summary()
