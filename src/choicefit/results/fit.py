"""
fit.py
------

Best-run selection and goodness of fit.

- select_best : lowest-NLL converged run, earliest run index on ties
- bic, aic : information criteria from an NLL at the optimum
- FitResult : best run plus back-transformed parameters and BIC/AIC
- compare_models : rank competing fits of the same trials by BIC

BIC = k ln(n) + 2 NLL. Lower is better; the value only means something
relative to other models fitted to the identical trial set.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from choicefit.errors import NoConvergedRunError

from .run import OptimizationRun, SweepResult

if TYPE_CHECKING:
    from choicefit.model.base import BehavioralModel


def bic(n_params: int, n_datapoints: int, neg_loglik: float) -> float:
    """
    Bayesian Information Criterion.

    Parameters
    ----------
    n_params : int
        Number of free parameters (k).
    n_datapoints : int
        Number of trials (n).
    neg_loglik : float
        NLL at the optimum (already negative-log).

    Examples
    --------
    >>> round(bic(2, 100, 50.0), 3)
    109.21
    """
    return n_params * math.log(n_datapoints) - 2 * -neg_loglik


def aic(n_params: int, neg_loglik: float) -> float:
    """Akaike Information Criterion, 2k + 2 NLL."""
    return 2 * n_params + 2 * neg_loglik


def select_best(runs: Iterable[OptimizationRun], *, subject: Any = None) -> OptimizationRun:
    """
    Pick the converged run with the lowest NLL.

    Ties resolve to the lowest ``run_index``.

    Raises
    ------
    NoConvergedRunError
        If no run converged. Non-converged runs are never used as a fallback.
    """
    runs = list(runs)
    converged = [r for r in runs if r.converged and math.isfinite(r.nll)]
    if not converged:
        raise NoConvergedRunError(
            f"no converged run among {len(runs)} (subject={subject!r})",
            subject=subject,
            n_runs=len(runs),
        )
    return min(converged, key=lambda r: (r.nll, r.run_index))


@dataclass(frozen=True)
class FitResult:
    """
    Terminal artifact of fitting one model to one subject.

    Attributes
    ----------
    model_name : str
    best : OptimizationRun
        Selected run (raw coordinates).
    params : dict[str, float]
        Best parameters back-transformed to model space.
    n_trials : int
    n_params : int
    bic : float
    aic : float
    sweep : SweepResult | None
        Every run of the sweep, for diagnostics.
    subject : Any
    """

    model_name: str
    best: OptimizationRun
    params: dict[str, float]
    n_trials: int
    n_params: int
    bic: float
    aic: float
    sweep: SweepResult | None = None
    subject: Any = None

    @property
    def nll(self) -> float:
        return self.best.nll

    @classmethod
    def from_sweep(
        cls, model: BehavioralModel, sweep: SweepResult, n_trials: int
    ) -> FitResult:
        """Select the best run of a sweep and derive the fit quantities."""
        best = select_best(sweep.runs, subject=sweep.subject)
        k = len(model.parameters)
        values = model.parameters.constrain(best.raw_params)
        return cls(
            model_name=model.name,
            best=best,
            params=model.parameters.to_dict(values),
            n_trials=n_trials,
            n_params=k,
            bic=bic(k, n_trials, best.nll),
            aic=aic(k, best.nll),
            sweep=sweep,
            subject=sweep.subject,
        )

    def to_record(self) -> dict[str, Any]:
        """Flat row: identifiers, fitted parameters, NLL and criteria."""
        return {
            "subject": self.subject,
            "model": self.model_name,
            **self.params,
            "neg_loglik": self.nll,
            "n_trials": self.n_trials,
            "n_params": self.n_params,
            "bic": self.bic,
            "aic": self.aic,
            "run": self.best.run_index,
        }


def compare_models(fits: Sequence[FitResult]) -> list[FitResult]:
    """
    Rank fits of competing models by BIC (best first).

    Raises
    ------
    ValueError
        If the fits do not share one subject and trial count.
    """
    fits = list(fits)
    if not fits:
        return []
    subjects = {repr(f.subject) for f in fits}
    trials = {f.n_trials for f in fits}
    if len(subjects) > 1 or len(trials) > 1:
        raise ValueError(
            "BIC comparison needs fits to the identical trial set; got "
            f"subjects {sorted(subjects)} with trial counts {sorted(trials)}"
        )
    return sorted(fits, key=lambda f: f.bic)
