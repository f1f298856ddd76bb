"""
td.py
-----

Temporal-difference value learning on a multi-armed bandit.

    V'(chosen) = V(chosen) + alpha * (r - V(chosen))

Only the chosen option is updated; the others carry forward unchanged.
The update keeps one number per option, not the reward history.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import lax

from .base import Arrays, BehavioralModel
from .choice import choice_probabilities
from .parameters import Parameter, ParameterSpace


def td_update(learning_rate, reward, value):
    """
    One temporal-difference update.

    Parameters
    ----------
    learning_rate : float
        Weight of the prediction error. The [0, 1] range is not enforced
        here; the objective keeps it there through reparametrization.
    reward : float
        Observed outcome.
    value : float
        Current value estimate.

    Returns
    -------
    float or jnp.ndarray
        Updated estimate.

    Examples
    --------
    >>> td_update(0.5, 1.0, 0.5)
    0.75
    """
    return value + learning_rate * (reward - value)


class TDLearningModel(BehavioralModel):
    """
    TD learner with a softmax choice rule.

    Parameters
    ----------
    prior_value : float, default=0.5
        Value estimate of every option at the start of each evaluation.
    n_options : int, default=2
        Number of options (arms).

    Notes
    -----
    Parameters, in positional order:

    - ``alpha`` : learning rate, logistic-bounded to (0, 1)
    - ``tau`` : softmax temperature, unbounded

    Trial covariates: ``reward`` (outcome of the chosen option).
    """

    name = "td_learning"

    def __init__(self, prior_value: float = 0.5, n_options: int = 2):
        if n_options < 1:
            raise ValueError(f"n_options must be >= 1, got {n_options}")
        self.prior_value = float(prior_value)
        self.n_options = int(n_options)
        self.parameters = ParameterSpace(
            [Parameter("alpha", lower=0.0, upper=1.0), Parameter("tau")]
        )

    @property
    def covariates(self) -> tuple[str, ...]:
        return ("reward",)

    def trial_probabilities(self, params: jnp.ndarray, arrays: Arrays) -> jnp.ndarray:
        alpha, tau = params[0], params[1]
        values = jnp.full((self.n_options,), self.prior_value)

        def step(values, trial):
            choice, reward = trial
            # probability comes from the pre-update values
            prob = choice_probabilities(values, tau)[choice]
            values = values.at[choice].set(td_update(alpha, reward, values[choice]))
            return values, prob

        _, probs = lax.scan(step, values, (arrays["choice"], arrays["reward"]))
        return probs
