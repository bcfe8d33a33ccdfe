"""HiGHS backend through scipy.optimize.milp."""

from __future__ import annotations

import numpy as np
from scipy.optimize import Bounds, LinearConstraint, milp
from scipy.sparse import coo_matrix

from routeform.algorithms.base import SolveStatus
from routeform.algorithms.model import OptimizationModel
from routeform.solver.base import SolveResult, SolverAdapter

# scipy.optimize.milp status codes
_STATUS_MAP = {
    0: SolveStatus.OPTIMAL,
    2: SolveStatus.INFEASIBLE,
    3: SolveStatus.UNBOUNDED,
}


class HighsSolver(SolverAdapter):
    """Solve routing models with HiGHS (bundled with scipy)."""

    name = "highs"

    def _constraint(self, model: OptimizationModel) -> LinearConstraint:
        rows, cols, data = [], [], []
        lower, upper = [], []
        n_row = 0
        for row in model.demand_constraints:
            rows.extend([n_row] * len(row.var_indices))
            cols.extend(row.var_indices)
            data.extend(row.coefficients)
            lower.append(row.rhs)
            upper.append(row.rhs)
            n_row += 1
        for row in model.capacity_constraints:
            rows.extend([n_row] * len(row.var_indices))
            cols.extend(row.var_indices)
            data.extend(row.coefficients)
            lower.append(-np.inf)
            upper.append(row.rhs)
            n_row += 1

        matrix = coo_matrix(
            (data, (rows, cols)), shape=(n_row, model.num_variables)
        ).tocsr()
        return LinearConstraint(matrix, np.array(lower), np.array(upper))

    def _solve(self, model: OptimizationModel) -> SolveResult:
        n = model.num_variables
        if model.is_integer:
            integrality = np.ones(n)
            bounds = Bounds(np.zeros(n), np.ones(n))
        else:
            integrality = np.zeros(n)
            bounds = Bounds(np.zeros(n), np.full(n, np.inf))

        options = {"disp": False}
        if self.time_limit is not None:
            options["time_limit"] = self.time_limit

        res = milp(
            c=np.asarray(model.objective, dtype=float),
            constraints=[self._constraint(model)],
            integrality=integrality,
            bounds=bounds,
            options=options,
        )

        status = _STATUS_MAP.get(res.status, SolveStatus.ERROR)
        if status != SolveStatus.OPTIMAL or res.x is None:
            return SolveResult(status, message=str(res.message))

        values = {i: float(value) for i, value in enumerate(res.x)}
        return SolveResult(
            SolveStatus.OPTIMAL, values, float(res.fun), str(res.message)
        )
