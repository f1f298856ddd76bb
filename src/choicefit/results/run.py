"""
run.py
------

Records produced by the optimization driver.

- Convergence : status of one optimizer run
- OptimizationRun : final raw parameters, NLL and status of one run
- RunFailure : a run that raised; kept for reporting, never selected
- SweepResult : every run and failure of one multi-start sweep

All records are plain, immutable data for downstream reporting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from choicefit.errors import Diagnostic


class Convergence(str, Enum):
    """Optimizer status, with the labels used in tidy output."""

    CONVERGED = "converged"
    MAXITER = "maxit reached"
    DEGENERATE = "simplex degeneracy"
    UNKNOWN = "unknown problem"


@dataclass(frozen=True)
class OptimizationRun:
    """
    Result of one optimizer invocation.

    Attributes
    ----------
    run_index : int
        Position of the run in its sweep (0-based); used as tie-break.
    raw_params : tuple[float, ...]
        Final parameters in the optimizer's unconstrained coordinates.
    nll : float
        Objective value at ``raw_params``.
    convergence : Convergence
    parameter_names : tuple[str, ...]
    start : tuple[float, ...]
        Raw starting vector.
    n_evaluations : int
        Objective evaluations (or optimizer steps) used.
    n_missing_evaluations : int
        Evaluations whose NLL was missing (treated as +inf by the search).
    message : str
        Optimizer message.
    subject : Any
    diagnostics : tuple[Diagnostic, ...]
        First diagnostic of each kind (e.g. ``zero_likelihood``) seen while
        the search evaluated the objective.
    loss_history : tuple[tuple[int, float], ...]
        (step, loss) pairs, filled by gradient engines when tracking is on.
    """

    run_index: int
    raw_params: tuple[float, ...]
    nll: float
    convergence: Convergence
    parameter_names: tuple[str, ...] = ()
    start: tuple[float, ...] = ()
    n_evaluations: int = 0
    n_missing_evaluations: int = 0
    message: str = ""
    subject: Any = None
    diagnostics: tuple[Diagnostic, ...] = ()
    loss_history: tuple[tuple[int, float], ...] = ()

    @property
    def converged(self) -> bool:
        return self.convergence is Convergence.CONVERGED

    @property
    def params(self) -> dict[str, float]:
        """Raw parameters keyed by name."""
        return dict(zip(self.parameter_names, self.raw_params))

    def to_records(self) -> list[dict[str, Any]]:
        """
        One row per parameter, in tidy long format.

        Returns
        -------
        list of dict
            keys: subject, run, parameter, value, neg_loglik, convergence
        """
        return [
            {
                "subject": self.subject,
                "run": self.run_index,
                "parameter": name,
                "value": value,
                "neg_loglik": self.nll,
                "convergence": self.convergence.value,
            }
            for name, value in zip(self.parameter_names, self.raw_params)
        ]


@dataclass(frozen=True)
class RunFailure:
    """
    A run that raised instead of returning.

    Carries enough context to reproduce the failing run.
    """

    run_index: int
    start: tuple[float, ...]
    error: BaseException
    subject: Any = None

    @property
    def message(self) -> str:
        return (
            f"run {self.run_index} (subject={self.subject!r}, "
            f"start={list(self.start)}) failed: "
            f"{type(self.error).__name__}: {self.error}"
        )


@dataclass(frozen=True)
class SweepResult:
    """All outcomes of one multi-start sweep, ordered by run index."""

    runs: tuple[OptimizationRun, ...]
    failures: tuple[RunFailure, ...] = field(default_factory=tuple)
    subject: Any = None

    @property
    def n_launched(self) -> int:
        return len(self.runs) + len(self.failures)

    @property
    def converged(self) -> tuple[OptimizationRun, ...]:
        return tuple(r for r in self.runs if r.converged)

    def to_records(self) -> list[dict[str, Any]]:
        rows = []
        for run in self.runs:
            rows.extend(run.to_records())
        return rows
