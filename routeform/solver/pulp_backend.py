"""PuLP backend using the CBC binary bundled with PuLP."""

from __future__ import annotations

from typing import Optional

import pulp

from routeform.algorithms.base import SolveStatus
from routeform.algorithms.model import OptimizationModel
from routeform.exceptions import SolverUnavailableError
from routeform.solver.base import SolveResult, SolverAdapter

_STATUS_MAP = {
    pulp.LpStatusOptimal: SolveStatus.OPTIMAL,
    pulp.LpStatusInfeasible: SolveStatus.INFEASIBLE,
    pulp.LpStatusUnbounded: SolveStatus.UNBOUNDED,
}


class PulpSolver(SolverAdapter):
    """Solve routing models with PuLP + CBC.

    Args:
        time_limit: Optional CBC time limit in seconds.
        msg: Whether CBC prints its log.
    """

    name = "cbc"

    def __init__(self, time_limit: Optional[float] = None, msg: bool = False) -> None:
        super().__init__(time_limit)
        self.msg = msg

    def _command(self) -> pulp.PULP_CBC_CMD:
        return pulp.PULP_CBC_CMD(msg=self.msg, timeLimit=self.time_limit)

    def available(self) -> bool:
        return bool(self._command().available())

    def to_problem(self, model: OptimizationModel) -> tuple[pulp.LpProblem, list]:
        """Translate a model into an LpProblem and its variables, in model order."""
        prob = pulp.LpProblem("route_formulation", pulp.LpMinimize)
        cat = pulp.LpBinary if model.is_integer else pulp.LpContinuous
        variables = [
            pulp.LpVariable(model.variable_name(i), lowBound=0, cat=cat)
            for i in range(model.num_variables)
        ]

        prob += (
            pulp.lpSum(coef * var for coef, var in zip(model.objective, variables)),
            "total_hops",
        )
        for n, row in enumerate(model.demand_constraints):
            prob += (
                pulp.lpSum(
                    coef * variables[i]
                    for i, coef in zip(row.var_indices, row.coefficients)
                )
                == row.rhs,
                f"demand_{n}",
            )
        for n, row in enumerate(model.capacity_constraints):
            prob += (
                pulp.lpSum(
                    coef * variables[i]
                    for i, coef in zip(row.var_indices, row.coefficients)
                )
                <= row.rhs,
                f"capacity_{n}",
            )
        return prob, variables

    def _solve(self, model: OptimizationModel) -> SolveResult:
        prob, variables = self.to_problem(model)
        try:
            prob.solve(self._command())
        except pulp.PulpSolverError as exc:
            raise SolverUnavailableError(f"CBC could not be run: {exc}") from exc

        message = pulp.LpStatus.get(prob.status, str(prob.status))
        status = _STATUS_MAP.get(prob.status, SolveStatus.ERROR)
        # A time limit can stop CBC with a feasible but unproven incumbent
        if status == SolveStatus.OPTIMAL and prob.sol_status != pulp.LpSolutionOptimal:
            status = SolveStatus.ERROR
            message = pulp.LpSolution.get(prob.sol_status, str(prob.sol_status))
        if status != SolveStatus.OPTIMAL:
            return SolveResult(status, message=message)

        values = {
            i: float(var.varValue) if var.varValue is not None else 0.0
            for i, var in enumerate(variables)
        }
        objective = pulp.value(prob.objective)
        return SolveResult(
            SolveStatus.OPTIMAL,
            values,
            float(objective) if objective is not None else 0.0,
            message,
        )
