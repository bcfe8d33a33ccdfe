"""routeform: route-based routing optimization for capacitated networks.

Each demand gets up to k loopless shortest candidate paths; a linear (or
binary, for non-bifurcated routing) program then picks the flow on every
path so that all traffic is carried, no link is overloaded and total
link-hop usage is minimal.

Primary API:
    optimize() - Optimize routing for a graph snapshot and demands
    optimize_network() - Same, for a Network with an OptimizerConfig
    generate_paths() - k loopless shortest paths for one demand
    RouteFormulationAlgorithm - Host plugin adapter

Example:
    from routeform import Demand, Link, Network, Node, optimize_network

    net = Network()
    for name in ("A", "B", "C"):
        net.add_node(Node(name))
    net.add_link(Link("A", "B", capacity=2))
    net.add_link(Link("B", "C", capacity=2))
    net.add_demand(Demand("A", "C", volume=2))

    result = optimize_network(net)
    print(result.summary())
"""

from __future__ import annotations

from routeform import cli, logging
from routeform.algorithm import RouteFormulationAlgorithm
from routeform.algorithms.base import (
    CandidateRoute,
    RouteAllocation,
    SolveMode,
    SolveStatus,
)
from routeform.algorithms.mapping import map_solution, prune_allocations
from routeform.algorithms.model import OptimizationModel, build_model
from routeform.algorithms.spf import generate_paths, ksp, spf
from routeform.config import OptimizerConfig
from routeform.exceptions import (
    ModelBuildError,
    NoRouteError,
    OptimizationFailedError,
    RouteformError,
    SolverUnavailableError,
)
from routeform.graph import StrictMultiDiGraph
from routeform.network import Demand, Link, Network, Node
from routeform.optimizer import OptimizationResult, optimize, optimize_network
from routeform.scenario import Scenario
from routeform.solver import SolveResult, SolverAdapter, get_solver

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Model
    "Network",
    "Node",
    "Link",
    "Demand",
    "StrictMultiDiGraph",
    "Scenario",
    # Algorithms
    "spf",
    "ksp",
    "generate_paths",
    "build_model",
    "map_solution",
    "prune_allocations",
    "optimize",
    "optimize_network",
    "RouteFormulationAlgorithm",
    # Types
    "CandidateRoute",
    "RouteAllocation",
    "OptimizationModel",
    "OptimizationResult",
    "OptimizerConfig",
    "SolveMode",
    "SolveStatus",
    "SolveResult",
    "SolverAdapter",
    "get_solver",
    # Errors
    "RouteformError",
    "NoRouteError",
    "ModelBuildError",
    "OptimizationFailedError",
    "SolverUnavailableError",
    # Modules
    "cli",
    "logging",
]
