"""
risk_ambiguity.py
-----------------

Subjective utility of gambles under risk and ambiguity.

    U = v ** alpha * (p + beta * A / 2)

alpha is the risk-preference exponent, beta the ambiguity attitude
(negative = ambiguity averse), v the amount, p the win probability and
A the ambiguity level (fraction of the probability display that is hidden).

Ambiguous gambles are always presented at a nominal p = 0.5. A trial with
A != 0 and p != 0.5 is treated as a data-entry error: p is reset to 0.5 and
a "corrected_win_prob" diagnostic is raised. A probability or ambiguity
outside [0, 1] is rejected.

The fitted task is a choice between a certain amount (option 0, utility
safe_value ** alpha) and the gamble (option 1).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import jax.numpy as jnp
import numpy as np

from choicefit.errors import Diagnostic, InvalidTrialError

from .base import Arrays, BehavioralModel, Evaluated
from .choice import choice_probabilities
from .parameters import Parameter, ParameterSpace

if TYPE_CHECKING:
    from choicefit.data import TrialData

NOMINAL_AMBIGUOUS_WIN_PROB = 0.5


def gamble_utility(alpha, beta, value, win_prob, ambiguity):
    """Utility formula without input checks (traceable)."""
    return value**alpha * (win_prob + beta * ambiguity / 2)


def check_gambles(win_prob, ambiguity) -> tuple[np.ndarray, tuple[Diagnostic, ...]]:
    """
    Validate gamble probabilities and apply the ambiguity correction.

    Parameters
    ----------
    win_prob, ambiguity : array-like
        Same shape.

    Returns
    -------
    win_prob : np.ndarray
        Corrected copy.
    diagnostics : tuple[Diagnostic, ...]

    Raises
    ------
    InvalidTrialError
        If any probability or ambiguity level falls outside [0, 1].
    """
    win_prob = np.array(win_prob, dtype=float, ndmin=1)
    ambiguity = np.asarray(ambiguity, dtype=float).reshape(win_prob.shape)

    in_range = (win_prob >= 0) & (win_prob <= 1) & (ambiguity >= 0) & (ambiguity <= 1)
    if not in_range.all():
        bad = np.flatnonzero(~in_range)
        raise InvalidTrialError(
            "The gamble risk/ambiguity must fall in [0, 1]; "
            f"offending entries {bad.tolist()}"
        )

    wrong = (ambiguity != 0) & (win_prob != NOMINAL_AMBIGUOUS_WIN_PROB)
    if not wrong.any():
        return win_prob, ()
    idx = tuple(np.flatnonzero(wrong).tolist())
    win_prob[wrong] = NOMINAL_AMBIGUOUS_WIN_PROB
    return win_prob, (
        Diagnostic(
            "corrected_win_prob",
            "Non-zero ambiguity level specified. Risk level changed to 50%.",
            idx,
        ),
    )


def risk_ambiguity_utility(
    alpha: float, beta: float, value: float, win_prob: float, ambiguity: float
) -> Evaluated:
    """
    Utility of a single gamble.

    Parameters
    ----------
    alpha : float
        Risk-preference exponent.
    beta : float
        Ambiguity attitude.
    value : float
        Gamble amount (assumed >= 0).
    win_prob : float
        Win probability in [0, 1].
    ambiguity : float
        Ambiguity level in [0, 1].

    Returns
    -------
    Evaluated
        ``value`` is the utility as a float; ``diagnostics`` records a
        win-probability correction if one was applied.

    Raises
    ------
    InvalidTrialError
        If win_prob or ambiguity lies outside [0, 1].

    Examples
    --------
    >>> risk_ambiguity_utility(1, 0, 25, 0.75, 0).value
    18.75
    """
    p, diagnostics = check_gambles(win_prob, ambiguity)
    u = gamble_utility(alpha, beta, float(value), float(p[0]), float(ambiguity))
    return Evaluated(float(u), diagnostics)


class RiskAmbiguityModel(BehavioralModel):
    """
    Safe-versus-gamble choices under risk and ambiguity.

    Parameters
    ----------
    safe_value : float | None, default=None
        Amount of the certain option. When None, every trial must carry a
        ``safe_value`` covariate.
    alpha_bounds : tuple[float, float], default=(0, 2)
        Range of the risk exponent.
    beta_bounds : tuple[float, float], default=(-1, 1)
        Range of the ambiguity attitude.

    Notes
    -----
    Parameters, in positional order: ``alpha``, ``beta`` (both
    logistic-bounded) and ``tau`` (unbounded temperature).

    Trial covariates: ``value``, ``win_prob``, ``ambiguity`` and, unless a
    constant was given, ``safe_value``. Choice 0 is the safe option and
    choice 1 the gamble.
    """

    name = "risk_ambiguity"
    n_options = 2

    def __init__(
        self,
        safe_value: float | None = None,
        *,
        alpha_bounds: tuple[float, float] = (0.0, 2.0),
        beta_bounds: tuple[float, float] = (-1.0, 1.0),
    ):
        self.safe_value = None if safe_value is None else float(safe_value)
        self.parameters = ParameterSpace(
            [
                Parameter("alpha", *alpha_bounds),
                Parameter("beta", *beta_bounds),
                Parameter("tau"),
            ]
        )

    @property
    def covariates(self) -> tuple[str, ...]:
        base = ("value", "win_prob", "ambiguity")
        return base if self.safe_value is not None else (*base, "safe_value")

    def prepare(self, data: TrialData):
        arrays, _ = super().prepare(data)
        win_prob, diagnostics = check_gambles(
            data.covariate("win_prob"), data.covariate("ambiguity")
        )
        arrays["win_prob"] = jnp.asarray(win_prob)
        if self.safe_value is not None:
            arrays["safe_value"] = jnp.full((len(data),), self.safe_value)
        return arrays, diagnostics

    def trial_probabilities(self, params: jnp.ndarray, arrays: Arrays) -> jnp.ndarray:
        alpha, beta, tau = params[0], params[1], params[2]
        u_gamble = gamble_utility(
            alpha, beta, arrays["value"], arrays["win_prob"], arrays["ambiguity"]
        )
        u_safe = arrays["safe_value"] ** alpha
        probs = choice_probabilities(jnp.stack([u_safe, u_gamble], axis=-1), tau)
        return jnp.take_along_axis(probs, arrays["choice"][:, None], axis=1)[:, 0]
