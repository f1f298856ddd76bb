"""
rng.py
------

Key handling and start sampling for multi-start sweeps.

A run's starting vector depends only on (seed, subject position, run
index), never on the order in which workers pick runs up:

    seed --make_key--> sweep key --subject_key(position)--> subject key
    subject key --split(n)--> one key per run --uniform--> start vector

Examples
--------
>>> from choicefit.utils.rng import make_key, uniform_starts
>>> starts = uniform_starts(make_key(0), 3, [0.0, 0.0], [1.0, 1.0])
>>> starts.shape
(3, 2)
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
import jax.random as jr
import numpy as np


def make_key(seed_or_key) -> jax.Array:
    """Integer seed -> new PRNG key. A key passes through unchanged."""
    if isinstance(seed_or_key, (int, np.integer)):
        return jr.PRNGKey(int(seed_or_key))
    return seed_or_key


def subject_key(key: jax.Array, position: int) -> jax.Array:
    """Key for the subject at ``position`` in a multi-subject fit."""
    return jr.fold_in(key, position)


def uniform_starts(key: jax.Array, n: int, lower, upper) -> jnp.ndarray:
    """
    Draw ``n`` starting vectors, each entry uniform in [lower, upper].

    Run ``i`` draws from the ``i``-th key of ``split(key, n)``.

    Parameters
    ----------
    key : jax.Array
    n : int
        Number of runs.
    lower, upper : array-like, shape (n_params,)
        Per-parameter bounds.

    Returns
    -------
    jnp.ndarray, shape (n, n_params)
    """
    lower = jnp.asarray(lower, dtype=float)
    upper = jnp.asarray(upper, dtype=float)
    return jnp.stack(
        [
            jr.uniform(k, lower.shape, minval=lower, maxval=upper)
            for k in jr.split(key, n)
        ]
    )
