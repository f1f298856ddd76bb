"""
nelder_mead.py
--------------

Derivative-free minimization with SciPy's Nelder-Mead simplex.

A missing NLL is handed to the simplex as +inf, so such a vertex is never
accepted as an improvement. The count of those evaluations, and the first
diagnostic of each kind they produced, are kept on the returned run.

Status mapping
--------------
- scipy status 0 -> CONVERGED
- not converged and the final simplex is rank deficient -> DEGENERATE
- scipy status 1 or 2 (evaluation/iteration budget) -> MAXITER
- anything else -> UNKNOWN
"""

from __future__ import annotations

import math

import numpy as np
from scipy.optimize import minimize

from choicefit.errors import Diagnostic, FailedEvaluationError
from choicefit.inference.base import OptimizerEngine
from choicefit.results import Convergence, OptimizationRun


class NelderMead(OptimizerEngine):
    """
    Nelder-Mead simplex search.

    Parameters
    ----------
    max_iter : int, default=500
        Iteration budget per run.
    xatol, fatol : float, default=1e-4
        Absolute tolerances on the simplex size and on the spread of
        objective values, as in ``scipy.optimize.minimize``.
    adaptive : bool, default=False
        Use dimension-adapted simplex coefficients.
    """

    def __init__(
        self,
        max_iter: int = 500,
        xatol: float = 1e-4,
        fatol: float = 1e-4,
        adaptive: bool = False,
    ):
        if max_iter <= 0:
            raise ValueError(f"max_iter must be positive, got {max_iter}")
        self.max_iter = int(max_iter)
        self.xatol = float(xatol)
        self.fatol = float(fatol)
        self.adaptive = bool(adaptive)

    def minimize(self, objective, x0, *, run_index: int = 0) -> OptimizationRun:
        x0 = np.asarray(x0, dtype=float).reshape(-1)
        n_missing = 0
        seen: dict[str, Diagnostic] = {}

        def fn(x):
            nonlocal n_missing
            value = objective.evaluate(x)
            for diagnostic in value.diagnostics:
                seen.setdefault(diagnostic.kind, diagnostic)
            if value.nll is None or not math.isfinite(value.nll):
                n_missing += 1
                return math.inf
            return value.nll

        res = minimize(
            fn,
            x0,
            method="Nelder-Mead",
            options={
                "maxiter": self.max_iter,
                "xatol": self.xatol,
                "fatol": self.fatol,
                "adaptive": self.adaptive,
            },
        )
        if not math.isfinite(res.fun):
            raise FailedEvaluationError(
                f"Nelder-Mead ended on a missing NLL at {res.x.tolist()} "
                f"(start={x0.tolist()})"
            )
        return OptimizationRun(
            run_index=run_index,
            raw_params=tuple(float(v) for v in res.x),
            nll=float(res.fun),
            convergence=self.classify(res),
            parameter_names=objective.parameter_names,
            start=tuple(x0.tolist()),
            n_evaluations=int(res.nfev),
            n_missing_evaluations=n_missing,
            message=str(res.message),
            subject=objective.subject,
            diagnostics=tuple(seen.values()),
        )

    @staticmethod
    def classify(res) -> Convergence:
        """Map a scipy OptimizeResult to a Convergence status."""
        if res.status == 0:
            return Convergence.CONVERGED
        simplex = getattr(res, "final_simplex", None)
        if simplex is not None:
            vertices = np.asarray(simplex[0])
            edges = vertices[1:] - vertices[0]
            if np.linalg.matrix_rank(edges) < vertices.shape[1]:
                return Convergence.DEGENERATE
        if res.status in (1, 2):
            return Convergence.MAXITER
        return Convergence.UNKNOWN

    def __repr__(self) -> str:
        return (
            f"NelderMead(max_iter={self.max_iter}, xatol={self.xatol}, "
            f"fatol={self.fatol})"
        )
