"""
optax_optimizer.py
------------------

Gradient-based minimization of the objective using Optax.

- Uses gradient descent on the differentiable loss (sum of -ln p).
- Defaults to Adam, but any Optax optimizer can be passed in.
- Stops early once the loss changes by less than ``tol`` between steps.

Connections
-----------
- Calls Objective.value_and_grad(raw) for each step.
- The final point is rescored with Objective.evaluate so the reported NLL
  follows the same missing-value rules as the Nelder-Mead engine.
"""

from __future__ import annotations

import math

import jax.numpy as jnp
import numpy as np
import optax

from choicefit.errors import FailedEvaluationError
from choicefit.inference.base import OptimizerEngine
from choicefit.results import Convergence, OptimizationRun


class OptaxOptimizer(OptimizerEngine):
    """
    Optax gradient-descent engine.

    Parameters
    ----------
    steps : int, default=500
        Maximum number of optimization steps.
    learning_rate : float, default=0.05
        Learning rate for the default optimizer (Adam).
    tol : float, default=1e-6
        Absolute change in loss below which the run counts as converged.
    optimizer : optax.GradientTransformation, optional
        Optax optimizer to use instead of Adam.
    track_history : bool, optional
        When True, record the loss every ``log_every`` steps on the returned
        run's ``loss_history``.
    log_every : int, optional
        Record every N steps (also records the last step).

    Notes
    -----
    - Gradients are computed with jax.value_and_grad through the logistic
      reparametrization, so the search stays unconstrained.
    - A NaN or infinite loss aborts the run with FailedEvaluationError.
    """

    def __init__(
        self,
        steps: int = 500,
        learning_rate: float = 0.05,
        tol: float = 1e-6,
        optimizer: optax.GradientTransformation | None = None,
        *,
        track_history: bool = False,
        log_every: int = 10,
    ):
        if steps <= 0:
            raise ValueError(f"steps must be positive, got {steps}")
        self.steps = int(steps)
        self.tol = float(tol)
        self.optimizer = optimizer or optax.adam(learning_rate=learning_rate)
        self.track_history = track_history
        self.log_every = max(1, int(log_every))
        # run_index -> (step, loss) pairs of the last run with that index
        self._histories: dict[int, tuple[tuple[int, float], ...]] = {}

    def minimize(self, objective, x0, *, run_index: int = 0) -> OptimizationRun:
        start = np.asarray(x0, dtype=float).reshape(-1)
        params = jnp.asarray(start)
        opt_state = self.optimizer.init(params)

        history: list[tuple[int, float]] = []
        convergence = Convergence.MAXITER
        previous = math.inf
        n_steps = 0
        for i in range(self.steps):
            loss, grads = objective.value_and_grad(params)
            loss = float(loss)
            n_steps = i + 1
            if not math.isfinite(loss):
                raise FailedEvaluationError(
                    f"non-finite loss at step {i}, params={np.asarray(params).tolist()} "
                    f"(start={start.tolist()})"
                )
            if self.track_history and (i % self.log_every == 0 or i == self.steps - 1):
                history.append((i, loss))
            if abs(previous - loss) < self.tol:
                convergence = Convergence.CONVERGED
                break
            previous = loss
            updates, opt_state = self.optimizer.update(grads, opt_state, params)
            params = optax.apply_updates(params, updates)

        raw = np.asarray(params, dtype=float)
        if self.track_history:
            self._histories[run_index] = tuple(history)
        final = objective.evaluate(raw)
        nll = final.nll
        if nll is None:
            raise FailedEvaluationError(
                f"optax run ended on a missing NLL at {raw.tolist()} "
                f"(start={start.tolist()})"
            )
        return OptimizationRun(
            run_index=run_index,
            raw_params=tuple(raw.tolist()),
            nll=nll,
            convergence=convergence,
            parameter_names=objective.parameter_names,
            start=tuple(start.tolist()),
            n_evaluations=n_steps,
            message=f"{convergence.value} after {n_steps} steps",
            subject=objective.subject,
            diagnostics=final.diagnostics,
            loss_history=tuple(history),
        )

    # Optional helper
    def get_history(self, run_index: int = 0) -> tuple[list[int], list[float]]:
        """Return (steps, losses) of the last tracked run with ``run_index``."""
        pairs = self._histories.get(run_index, ())
        return [step for step, _ in pairs], [loss for _, loss in pairs]
