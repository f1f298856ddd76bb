"""
base.py
-------

Abstract base class for optimizer engines.

All engines implement ``minimize(objective, x0)`` and return one
OptimizationRun in raw (unconstrained) coordinates. An engine raises when a
run cannot produce a usable result; the multi-start sweep traps that per run.

All engines (NelderMead, OptaxOptimizer) subclass from this base.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from choicefit.model.objective import Objective
    from choicefit.results import OptimizationRun


class OptimizerEngine(ABC):
    """
    Abstract interface for optimizer engines.

    Methods
    -------
    minimize(objective, x0) -> OptimizationRun
        Minimize the objective from one starting vector.
    """

    @abstractmethod
    def minimize(
        self, objective: Objective, x0: Any, *, run_index: int = 0
    ) -> OptimizationRun:
        """
        Run one minimization.

        Parameters
        ----------
        objective : Objective
            Bound objective; evaluated at raw parameter vectors.
        x0 : array-like
            Raw starting vector.
        run_index : int
            Position of this run in its sweep.

        Returns
        -------
        OptimizationRun

        Raises
        ------
        FailedEvaluationError
            If the run ends on a missing or non-finite NLL.
        """
        ...
