"""
choicefit.results
=================

Plain result records and model selection.

    from choicefit.results import OptimizationRun, FitResult, select_best, bic
"""

from .fit import FitResult, aic, bic, compare_models, select_best
from .run import Convergence, OptimizationRun, RunFailure, SweepResult

__all__ = [
    "Convergence",
    "OptimizationRun",
    "RunFailure",
    "SweepResult",
    "FitResult",
    "select_best",
    "bic",
    "aic",
    "compare_models",
]
