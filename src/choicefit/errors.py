"""
errors.py
---------

Exception and warning taxonomy for choicefit.

Hard failures
-------------
- ContractViolation : out-of-domain input reached a component
  (probability outside [0, 1], likelihood outside (0, 1]).
  Aborts the current evaluation or optimizer run only.
- FailedEvaluationError : the objective could not produce a finite NLL
  at the end of a run.
- NoConvergedRunError : a multi-start sweep produced no converged run.

Non-fatal diagnostics
---------------------
Core functions return ``Diagnostic`` records inside their result types.
``Diagnostic.emit()`` forwards a record to the ``warnings`` module using
the category that matches its kind, so diagnostics stay distinguishable
from exceptions in whatever channel the caller watches.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field


class ChoiceFitError(Exception):
    """Base class for all choicefit errors."""


class ContractViolation(ChoiceFitError, ValueError):
    """An input violated a component's documented domain."""


class InvalidTrialError(ContractViolation):
    """Trial covariates fall outside the behavioral model's domain."""


class LikelihoodRangeError(ContractViolation):
    """A likelihood outside (0, 1] survived to the scorer's final check."""


class FailedEvaluationError(ChoiceFitError, RuntimeError):
    """The objective returned a missing or non-finite NLL at the optimum."""


class NoConvergedRunError(ChoiceFitError, RuntimeError):
    """No run in a multi-start sweep reached convergence."""

    def __init__(self, message: str, *, subject=None, n_runs: int = 0):
        super().__init__(message)
        self.subject = subject
        self.n_runs = n_runs


class ChoiceFitWarning(UserWarning):
    """Base class for non-fatal choicefit diagnostics."""


class CorrectedInputWarning(ChoiceFitWarning):
    """An input was auto-repaired (e.g. ambiguous gamble reset to p=0.5)."""


class DegenerateLikelihoodWarning(ChoiceFitWarning):
    """Likelihoods were NaN or zero and were excluded as missing."""


class TemperatureDefaultWarning(ChoiceFitWarning):
    """A non-numeric temperature was replaced by the default."""


class RunFailedWarning(ChoiceFitWarning):
    """One optimizer run in a sweep failed and was excluded."""


_CATEGORIES: dict[str, type[ChoiceFitWarning]] = {
    "corrected_win_prob": CorrectedInputWarning,
    "nan_likelihood": DegenerateLikelihoodWarning,
    "zero_likelihood": DegenerateLikelihoodWarning,
    "all_missing": DegenerateLikelihoodWarning,
    "temperature_default": TemperatureDefaultWarning,
    "run_failed": RunFailedWarning,
}


@dataclass(frozen=True)
class Diagnostic:
    """
    A non-fatal event raised while evaluating a model.

    Attributes
    ----------
    kind : str
        Machine-readable tag, e.g. ``"zero_likelihood"``.
    message : str
        Human-readable description.
    indices : tuple[int, ...]
        0-based positions (trials or likelihood entries) the event refers to.
    """

    kind: str
    message: str
    indices: tuple[int, ...] = field(default_factory=tuple)

    @property
    def category(self) -> type[ChoiceFitWarning]:
        return _CATEGORIES.get(self.kind, ChoiceFitWarning)

    def emit(self, stacklevel: int = 2) -> None:
        """Forward this diagnostic to ``warnings.warn``."""
        warnings.warn(self.message, self.category, stacklevel=stacklevel + 1)
