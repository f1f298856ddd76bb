"""
inference
=========

Optimizer engines and multi-start fitting.

This subpackage wraps off-the-shelf minimizers with named-parameter
bookkeeping, per-run failure isolation and result normalization.

Engines
-------
- NelderMead : derivative-free simplex search (scipy.optimize).
- OptaxOptimizer : gradient descent on the differentiable loss (Optax).

Fitting
-------
- multistart : one engine, many random starts, failures isolated per run.
- fit_model / fit_subjects : bind data, sweep, select the best run.
"""

from .base import OptimizerEngine
from .fit import ENGINES, FitConfig, fit_model, fit_subjects, make_engine
from .multistart import multistart
from .nelder_mead import NelderMead
from .optax_optimizer import OptaxOptimizer

__all__ = [
    "OptimizerEngine",
    "NelderMead",
    "OptaxOptimizer",
    "ENGINES",
    "make_engine",
    "multistart",
    "FitConfig",
    "fit_model",
    "fit_subjects",
]
