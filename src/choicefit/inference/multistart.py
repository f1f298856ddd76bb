"""
multistart.py
-------------

Multi-start sweep: run one engine from many random starts.

Each run is isolated. An exception in one run (an invalid evaluation, a
missing NLL at the end, a timeout) is recorded as a RunFailure, reported
with a RunFailedWarning, and the sweep continues. Failures are never
counted as results.

Runs share no mutable state, so they can be fanned out to worker threads;
results are collected back in run-index order.

Timeouts
--------
A run's deadline is counted from the moment that run starts, never from
when it was queued. The run executes on its own helper thread; when the
deadline passes, the caller records a TimeoutError and moves on while the
helper finishes in the background and its result is discarded.
"""

from __future__ import annotations

import warnings
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from functools import partial
from typing import TYPE_CHECKING, Callable

import jax
import numpy as np

from choicefit.errors import RunFailedWarning
from choicefit.inference.nelder_mead import NelderMead
from choicefit.results import OptimizationRun, RunFailure, SweepResult
from choicefit.utils.rng import make_key

if TYPE_CHECKING:
    from choicefit.inference.base import OptimizerEngine
    from choicefit.model.objective import Objective


def _failure(objective, run_index, start, error, emit) -> RunFailure:
    failure = RunFailure(
        run_index=run_index,
        start=tuple(float(v) for v in start),
        error=error,
        subject=objective.subject,
    )
    if emit:
        warnings.warn(failure.message, RunFailedWarning, stacklevel=3)
    return failure


def run_with_deadline(
    call: Callable[[], OptimizationRun], timeout: float
) -> OptimizationRun:
    """
    Run ``call`` on a fresh helper thread and wait at most ``timeout`` seconds.

    Raises
    ------
    TimeoutError
        If ``call`` has not returned in time. The helper thread is left to
        finish on its own.
    """
    helper = ThreadPoolExecutor(max_workers=1)
    try:
        return helper.submit(call).result(timeout=timeout)
    except FutureTimeout:
        raise TimeoutError(f"no result within {timeout} s") from None
    finally:
        helper.shutdown(wait=False)


def multistart(
    objective: Objective,
    engine: OptimizerEngine | None = None,
    *,
    n_starts: int = 25,
    seed: int = 0,
    key: jax.Array | None = None,
    n_workers: int | None = None,
    timeout: float | None = None,
    emit_warnings: bool = True,
) -> SweepResult:
    """
    Minimize ``objective`` from ``n_starts`` random starting vectors.

    Parameters
    ----------
    objective : Objective
        Bound objective for one subject and model.
    engine : OptimizerEngine, optional
        Defaults to NelderMead().
    n_starts : int, default=25
        Number of runs.
    seed : int, default=0
        Seed for the starting guesses (ignored when ``key`` is given).
    key : jax.Array, optional
        PRNG key for the starting guesses.
    n_workers : int, optional
        Run on a thread pool of this size. None runs one at a time.
    timeout : float, optional
        Seconds each run may take, counted from when it starts. A run that
        overruns is recorded as failed with a TimeoutError; later runs are
        unaffected.
    emit_warnings : bool, default=True
        Issue a RunFailedWarning per failed run.

    Returns
    -------
    SweepResult
        Successful runs and failures, each ordered by run index.
    """
    if n_starts <= 0:
        raise ValueError(f"n_starts must be positive, got {n_starts}")
    engine = engine or NelderMead()
    key = make_key(seed if key is None else key)
    starts = np.asarray(objective.model.parameters.sample_starts(key, n_starts))

    def run(i: int) -> OptimizationRun:
        call = partial(engine.minimize, objective, starts[i], run_index=i)
        return call() if timeout is None else run_with_deadline(call, timeout)

    outcomes: list[OptimizationRun | RunFailure] = []
    if n_workers is None:
        for i in range(n_starts):
            try:
                outcomes.append(run(i))
            except Exception as exc:
                outcomes.append(_failure(objective, i, starts[i], exc, emit_warnings))
    else:
        with ThreadPoolExecutor(max_workers=n_workers) as pool:
            futures = [pool.submit(run, i) for i in range(n_starts)]
            for i, future in enumerate(futures):
                try:
                    outcomes.append(future.result())
                except Exception as exc:
                    outcomes.append(
                        _failure(objective, i, starts[i], exc, emit_warnings)
                    )

    return SweepResult(
        runs=tuple(o for o in outcomes if isinstance(o, OptimizationRun)),
        failures=tuple(o for o in outcomes if isinstance(o, RunFailure)),
        subject=objective.subject,
    )
