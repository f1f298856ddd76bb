"""
choice.py
---------

Temperature-scaled softmax choice rule.

P(choose i) = exp(v_i / tau) / sum_j exp(v_j / tau)

- tau -> 0+ approaches a hardmax. Numerically the exponentials overflow and
  the ratio becomes NaN; callers must tolerate that (the objective guards it).
- tau -> inf approaches a uniform distribution.
- Adding a constant to every value leaves the probabilities unchanged;
  scaling the values does not (it sharpens the separation).

The exponentials are not max-shifted, so the degenerate behaviour above is
exactly what callers observe.

Temperature policy
------------------
``DEFAULT_TEMPERATURE`` (1.0) is used when ``temperature`` is None. Any
real number is accepted, including numpy and JAX scalars and size-1
arrays such as a fitted tau. Anything else (strings, booleans, complex
numbers, arrays holding several values) is replaced by the default, and a
``TemperatureDefaultWarning`` is issued.
"""

from __future__ import annotations

from collections.abc import Sequence

import jax.numpy as jnp
import numpy as np

from choicefit.errors import Diagnostic

DEFAULT_TEMPERATURE = 1.0


def resolve_temperature(temperature) -> float:
    """Apply the default-substitution policy to a user-supplied temperature."""
    if temperature is None:
        return DEFAULT_TEMPERATURE
    value = np.asarray(temperature)
    if value.size != 1 or not (
        np.issubdtype(value.dtype, np.integer) or np.issubdtype(value.dtype, np.floating)
    ):
        Diagnostic(
            "temperature_default",
            f"non-numeric temperature {temperature!r}; using {DEFAULT_TEMPERATURE}",
        ).emit(stacklevel=3)
        return DEFAULT_TEMPERATURE
    return float(value.reshape(-1)[0])


def choice_probabilities(values: jnp.ndarray, temperature) -> jnp.ndarray:
    """
    Softmax over the last axis without policy handling.

    This is the traceable form used inside jitted kernels.
    """
    weights = jnp.exp(values / temperature)
    return weights / jnp.sum(weights, axis=-1, keepdims=True)


def softmax_probabilities(
    option_values: Sequence[float] | jnp.ndarray, temperature=None
) -> jnp.ndarray:
    """
    Probability of choosing each option.

    Parameters
    ----------
    option_values : array-like, shape (K,)
        Option values (K >= 1).
    temperature : float | None
        Softmax temperature. See module docstring for the default policy.

    Returns
    -------
    jnp.ndarray, shape (K,)
    """
    tau = resolve_temperature(temperature)
    return choice_probabilities(jnp.asarray(option_values, dtype=float), tau)


def softmax(
    option_values: Sequence[float] | jnp.ndarray,
    option_chosen: int,
    temperature=None,
) -> float:
    """
    Probability of choosing one option.

    Parameters
    ----------
    option_values : array-like, shape (K,)
        Option values.
    option_chosen : int
        0-based index of the option whose probability is returned.
    temperature : float | None
        Softmax temperature (default 1.0).

    Returns
    -------
    float
        May be NaN for extreme temperatures.

    Examples
    --------
    >>> round(softmax([4, 3], 0), 3)
    0.731
    >>> softmax([40, 30], 0) > 0.9999
    True
    """
    return float(softmax_probabilities(option_values, temperature)[option_chosen])
