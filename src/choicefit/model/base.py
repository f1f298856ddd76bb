"""
base.py
-------

Base class for behavioral model plugins.

A behavioral model maps trial observables plus a parameter vector to the
probability of each observed choice. Each model defines:

- parameters
    Fixed ParameterSpace (names, bounds, start ranges), positional order.
- covariates
    Trial fields the model reads, validated once when data is bound.
- prepare(data)
    Check and (where a correction policy exists) repair covariates, then
    convert them to JAX arrays. Returns the arrays plus diagnostics.
- trial_probabilities(params, arrays)
    Traceable kernel: model-space parameter vector -> per-trial probability
    of the option that was actually chosen.

Connections
-----------
- The Objective (model/objective.py) jits ``trial_probabilities``, guards
  NaN outputs and hands the series to the likelihood scorer.
- New models subclass BehavioralModel and implement the kernel.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import jax.numpy as jnp
import numpy as np

from choicefit.errors import Diagnostic, InvalidTrialError

if TYPE_CHECKING:
    from choicefit.data import TrialData
    from choicefit.model.parameters import ParameterSpace

Arrays = dict[str, jnp.ndarray]


@dataclass(frozen=True)
class Evaluated:
    """A value together with the non-fatal diagnostics raised computing it."""

    value: Any
    diagnostics: tuple[Diagnostic, ...] = field(default_factory=tuple)

    def __float__(self) -> float:
        return float(self.value)


class BehavioralModel(ABC):
    """
    Abstract base class for behavioral models.

    Subclasses set ``name``, ``parameters`` and ``n_options`` and implement
    ``covariates`` and ``trial_probabilities``.
    """

    name: str = "model"
    parameters: ParameterSpace
    n_options: int = 2

    @property
    @abstractmethod
    def covariates(self) -> tuple[str, ...]:
        """Names of the trial covariates this model reads."""
        ...

    @abstractmethod
    def trial_probabilities(self, params: jnp.ndarray, arrays: Arrays) -> jnp.ndarray:
        """
        Per-trial probability of the observed choice.

        Parameters
        ----------
        params : jnp.ndarray, shape (n_params,)
            Constrained (model-space) parameter vector.
        arrays : dict
            Output of ``prepare``.

        Returns
        -------
        jnp.ndarray, shape (n_trials,)
        """
        ...

    @property
    def n_free_parameters(self) -> int:
        return len(self.parameters)

    def prepare(self, data: TrialData) -> tuple[Arrays, tuple[Diagnostic, ...]]:
        """
        Validate trial data and convert it to JAX arrays.

        Raises
        ------
        InvalidTrialError
            If the data is empty, a covariate is missing or a choice does
            not index one of the model's options.
        """
        if len(data) == 0:
            raise InvalidTrialError(f"{self.name}: no trials to fit")
        missing = [c for c in self.covariates if c not in data.covariate_names]
        if missing:
            raise InvalidTrialError(
                f"{self.name}: trial data lacks covariates {missing}; "
                f"has {list(data.covariate_names)}"
            )
        choices = np.asarray(data.choices)
        bad = np.flatnonzero((choices < 0) | (choices >= self.n_options))
        if bad.size:
            raise InvalidTrialError(
                f"{self.name}: choices must be in [0, {self.n_options}), "
                f"trials {(bad + 1).tolist()} are not"
            )
        return data.to_jax(self.covariates), ()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(parameters={list(self.parameters.names)})"
