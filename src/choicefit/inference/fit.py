"""
fit.py
------

Fitting entry points.

- FitConfig : validated sweep configuration with documented defaults
- fit_model : bind one subject's data, run the sweep, select the best run
- fit_subjects : the same for many subjects, optionally in parallel

A subject whose sweep produced no converged run appears in the output of
``fit_subjects`` as its NoConvergedRunError rather than being dropped.
"""

from __future__ import annotations

from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from choicefit.errors import NoConvergedRunError
from choicefit.inference.base import OptimizerEngine
from choicefit.inference.multistart import multistart
from choicefit.inference.nelder_mead import NelderMead
from choicefit.inference.optax_optimizer import OptaxOptimizer
from choicefit.model.objective import Objective
from choicefit.results import FitResult
from choicefit.utils.rng import make_key, subject_key

if TYPE_CHECKING:
    from choicefit.data import TrialData
    from choicefit.model.base import BehavioralModel

# Registry for string-based engine selection
ENGINES: dict[str, type[OptimizerEngine]] = {
    "nelder-mead": NelderMead,
    "optax": OptaxOptimizer,
}


def make_engine(name: str, **options: Any) -> OptimizerEngine:
    """Instantiate a registered engine by name."""
    try:
        engine_cls = ENGINES[name]
    except KeyError:
        raise ValueError(
            f"unknown engine {name!r}; choose from {sorted(ENGINES)}"
        ) from None
    return engine_cls(**options)


@dataclass
class FitConfig:
    """
    Configuration of a multi-start fit.

    Attributes
    ----------
    engine : str
        Registered engine name ("nelder-mead" or "optax").
    engine_options : dict
        Keyword arguments for the engine (e.g. ``{"max_iter": 1000}``).
    n_starts : int
        Runs per subject. 25 or more is recommended for real data.
    seed : int
        Seed of the starting guesses.
    n_workers : int | None
        Thread-pool size for the runs of one sweep (None = sequential).
    timeout : float | None
        Per-run time limit in seconds, counted from when each run starts.
    emit_warnings : bool
        Forward diagnostics and run failures to ``warnings``.

    Examples
    --------
    >>> config = FitConfig(n_starts=50, engine_options={"max_iter": 1000})
    """

    engine: str = "nelder-mead"
    engine_options: dict[str, Any] = field(default_factory=dict)
    n_starts: int = 25
    seed: int = 0
    n_workers: int | None = None
    timeout: float | None = None
    emit_warnings: bool = True

    def __post_init__(self):
        """Validate configuration."""
        if self.engine not in ENGINES:
            raise ValueError(
                f"unknown engine {self.engine!r}; choose from {sorted(ENGINES)}"
            )
        if self.n_starts <= 0:
            raise ValueError(f"n_starts must be positive, got {self.n_starts}")
        if self.n_workers is not None and self.n_workers <= 0:
            raise ValueError(f"n_workers must be positive, got {self.n_workers}")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    def make_engine(self) -> OptimizerEngine:
        return make_engine(self.engine, **self.engine_options)


def fit_model(
    model: BehavioralModel,
    data: TrialData,
    config: FitConfig | None = None,
    *,
    key=None,
    subject: Any = None,
) -> FitResult:
    """
    Fit one model to one subject's trials.

    Parameters
    ----------
    model : BehavioralModel
    data : TrialData
    config : FitConfig, optional
        Defaults to ``FitConfig()``.
    key : jax.Array, optional
        PRNG key for the starts; overrides ``config.seed``.
    subject : Any, optional
        Reporting identifier; defaults to ``data.subject``.

    Returns
    -------
    FitResult

    Raises
    ------
    NoConvergedRunError
        If no run converged.
    InvalidTrialError
        If the data does not fit the model's covariates or choice range.
    """
    config = config or FitConfig()
    objective = Objective(
        model, data, subject=subject, emit_diagnostics=config.emit_warnings
    )
    sweep = multistart(
        objective,
        config.make_engine(),
        n_starts=config.n_starts,
        key=make_key(config.seed if key is None else key),
        n_workers=config.n_workers,
        timeout=config.timeout,
        emit_warnings=config.emit_warnings,
    )
    return FitResult.from_sweep(model, sweep, objective.n_trials)


def fit_subjects(
    model: BehavioralModel,
    datasets: Mapping[Any, TrialData],
    config: FitConfig | None = None,
    *,
    subject_workers: int | None = None,
) -> dict[Any, FitResult | NoConvergedRunError]:
    """
    Fit one model to several subjects.

    Parameters
    ----------
    model : BehavioralModel
    datasets : mapping
        Subject identifier -> that subject's TrialData.
    config : FitConfig, optional
    subject_workers : int, optional
        Fit subjects on a thread pool of this size.

    Returns
    -------
    dict
        Subject -> FitResult, or the NoConvergedRunError for that subject.
        Starting guesses depend on the subject's position in ``datasets``.
    """
    config = config or FitConfig()
    base_key = make_key(config.seed)

    def fit_one(position: int, subject: Any, data: TrialData):
        try:
            return fit_model(
                model, data, config, key=subject_key(base_key, position), subject=subject
            )
        except NoConvergedRunError as exc:
            return exc

    items = list(datasets.items())
    if subject_workers is None:
        outcomes = [fit_one(i, s, d) for i, (s, d) in enumerate(items)]
    else:
        with ThreadPoolExecutor(max_workers=subject_workers) as pool:
            futures = [pool.submit(fit_one, i, s, d) for i, (s, d) in enumerate(items)]
            outcomes = [f.result() for f in futures]
    return {subject: outcome for (subject, _), outcome in zip(items, outcomes)}
