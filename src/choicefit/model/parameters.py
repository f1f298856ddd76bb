"""
parameters.py
-------------

Bounded reparametrization and the fixed parameter schema of a model.

The optimizer searches an unconstrained real vector ("raw" coordinates).
Before a model uses it, each bounded parameter is passed through the
generalized logistic

    g(x; L, U) = L + (U - L) / (1 + exp(-x))

which is strictly increasing, equals the midpoint at x = 0 and never
reaches either bound for finite x. Parameters without bounds pass through
unchanged.

A ParameterSpace is built once per model type. Names are carried only for
reporting; inside the objective parameters are read by position.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import jax
import jax.numpy as jnp

from choicefit.utils.rng import uniform_starts


def logistic(x, lower: float = 0.0, upper: float = 1.0):
    """
    Map a real number into (lower, upper).

    Parameters
    ----------
    x : float or jnp.ndarray
        Unconstrained value(s).
    lower, upper : float
        Bounds of the target interval.

    Returns
    -------
    jnp.ndarray
        Saturates to the bounds for very large |x|.

    Examples
    --------
    >>> float(logistic(0.0))
    0.5
    >>> float(logistic(0.0, lower=-1.0, upper=1.0))
    0.0
    """
    return lower + (upper - lower) * jax.nn.sigmoid(x)


def logit(y, lower: float = 0.0, upper: float = 1.0):
    """Inverse of ``logistic``; infinite at the bounds."""
    z = (jnp.asarray(y, dtype=float) - lower) / (upper - lower)
    return jnp.log(z) - jnp.log1p(-z)


@dataclass(frozen=True)
class Parameter:
    """
    One named model parameter.

    Attributes
    ----------
    name : str
        Reporting name (e.g. "alpha").
    lower, upper : float | None
        Bounds of the constrained value. Give both or neither.
    init_range : tuple[float, float]
        Range, in raw coordinates, that starting guesses are drawn from.
        The default [0, 1] sits next to the logistic midpoint.
    """

    name: str
    lower: float | None = None
    upper: float | None = None
    init_range: tuple[float, float] = (0.0, 1.0)

    def __post_init__(self):
        if (self.lower is None) != (self.upper is None):
            raise ValueError(
                f"parameter {self.name!r}: give both bounds or neither, "
                f"got lower={self.lower}, upper={self.upper}"
            )
        if self.bounded and not self.lower < self.upper:
            raise ValueError(
                f"parameter {self.name!r}: lower must be < upper, "
                f"got ({self.lower}, {self.upper})"
            )
        lo, hi = self.init_range
        if not lo <= hi:
            raise ValueError(f"parameter {self.name!r}: init_range must be ordered")

    @property
    def bounded(self) -> bool:
        return self.lower is not None

    def constrain(self, raw):
        if self.bounded:
            return logistic(raw, self.lower, self.upper)
        return raw

    def unconstrain(self, value):
        if self.bounded:
            return logit(value, self.lower, self.upper)
        return value


class ParameterSpace:
    """
    Ordered, fixed schema of a model's parameters.

    Parameters
    ----------
    parameters : sequence of Parameter
        In the positional order the model unpacks them.
    """

    def __init__(self, parameters: Sequence[Parameter]):
        self.parameters = tuple(parameters)
        names = [p.name for p in self.parameters]
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate parameter names: {names}")
        self._lower_init = jnp.array([p.init_range[0] for p in self.parameters])
        self._upper_init = jnp.array([p.init_range[1] for p in self.parameters])

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.parameters)

    def index(self, name: str) -> int:
        return self.names.index(name)

    def __len__(self) -> int:
        return len(self.parameters)

    def __iter__(self):
        return iter(self.parameters)

    def __repr__(self) -> str:
        return f"ParameterSpace({list(self.names)})"

    def _check_length(self, vector) -> None:
        if len(vector) != len(self):
            raise ValueError(
                f"expected {len(self)} parameters {list(self.names)}, got {len(vector)}"
            )

    def constrain(self, raw) -> jnp.ndarray:
        """Raw optimizer vector -> model-space vector (traceable)."""
        raw = jnp.asarray(raw, dtype=float)
        self._check_length(raw)
        return jnp.stack([p.constrain(raw[i]) for i, p in enumerate(self.parameters)])

    def unconstrain(self, values) -> jnp.ndarray:
        """Model-space vector -> raw optimizer vector."""
        values = jnp.asarray(values, dtype=float)
        self._check_length(values)
        return jnp.stack(
            [p.unconstrain(values[i]) for i, p in enumerate(self.parameters)]
        )

    def to_dict(self, vector: Iterable[float]) -> dict[str, float]:
        """Attach names to a vector for reporting."""
        vector = [float(v) for v in vector]
        self._check_length(vector)
        return dict(zip(self.names, vector))

    def sample_starts(self, key: jax.Array, n: int) -> jnp.ndarray:
        """
        Draw ``n`` independent raw starting vectors.

        Each parameter is uniform over its ``init_range``.

        Returns
        -------
        jnp.ndarray, shape (n, n_params)
        """
        return uniform_starts(key, n, self._lower_init, self._upper_init)
