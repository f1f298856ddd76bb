"""
objective.py
------------

Objective function handed to the optimizer.

For one raw parameter vector and one subject's trial sequence:

1. constrain the raw vector (logistic for bounded parameters)
2. run the model kernel: per trial, probability of the observed choice from
   the current values, then update the chosen option only
3. replace NaN probabilities with 0 before scoring
4. score with ``neg_loglik`` and sum with missing-poisoning semantics

Step 3 means a NaN from the choice rule is reported by the scorer as a
zero likelihood and excluded. Routing it straight to "missing" would
give the same total but a different diagnostic kind.

Every evaluation starts from the model's prior values; nothing is cached
between calls except the jitted kernel, so identical inputs give
bit-identical results and concurrent calls are safe.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

import jax
import jax.numpy as jnp
import numpy as np

from choicefit.data import TrialData
from choicefit.errors import Diagnostic

from .base import BehavioralModel
from .likelihood import NLLSeries, neg_loglik


@dataclass(frozen=True)
class ObjectiveValue:
    """
    Result of one objective evaluation.

    Attributes
    ----------
    nll : float | None
        Summed NLL, or None when any trial's likelihood was missing.
    series : NLLSeries
        Per-trial scores.
    """

    nll: float | None
    series: NLLSeries
    diagnostics: tuple[Diagnostic, ...] = field(default_factory=tuple)

    @property
    def missing(self) -> bool:
        return self.nll is None


class Objective:
    """
    Negative log-likelihood of one subject's data under one model.

    Parameters
    ----------
    model : BehavioralModel
        Model plugin.
    data : TrialData
        Ordered trials; read once here and never modified.
    subject : Any, optional
        Reporting identifier; defaults to ``data.subject``.
    emit_diagnostics : bool, default=True
        Forward data-preparation diagnostics (e.g. corrected gambles) to
        ``warnings`` when binding.

    Examples
    --------
    >>> from choicefit.model import TDLearningModel
    >>> data = TrialData.from_arrays([0, 1, 0], reward=[1.0, 0.0, 1.0])
    >>> objective = Objective(TDLearningModel(), data)
    >>> value = objective.evaluate([0.0, 1.0])
    """

    def __init__(
        self,
        model: BehavioralModel,
        data: TrialData,
        *,
        subject: Any = None,
        emit_diagnostics: bool = True,
    ):
        self.model = model
        self.subject = data.subject if subject is None else subject
        self._arrays, self.diagnostics = model.prepare(data)
        self._n_trials = len(data)
        if emit_diagnostics:
            for diagnostic in self.diagnostics:
                diagnostic.emit(stacklevel=2)

        parameters = model.parameters
        arrays = self._arrays

        def probabilities(raw):
            return model.trial_probabilities(parameters.constrain(raw), arrays)

        def loss(raw):
            return -jnp.sum(jnp.log(probabilities(raw)))

        self._probabilities = jax.jit(probabilities)
        self._loss = jax.jit(loss)
        self._value_and_grad = jax.jit(jax.value_and_grad(loss))

    @property
    def n_trials(self) -> int:
        return self._n_trials

    @property
    def n_parameters(self) -> int:
        return len(self.model.parameters)

    @property
    def parameter_names(self) -> tuple[str, ...]:
        return self.model.parameters.names

    def _raw(self, raw_params) -> jnp.ndarray:
        raw = jnp.asarray(raw_params, dtype=float).reshape(-1)
        if raw.shape[0] != self.n_parameters:
            raise ValueError(
                f"expected {self.n_parameters} parameters "
                f"{list(self.parameter_names)}, got {raw.shape[0]}"
            )
        return raw

    def likelihoods(self, raw_params) -> np.ndarray:
        """Per-trial probability of the observed choice, NaN already set to 0."""
        probs = np.asarray(self._probabilities(self._raw(raw_params)), dtype=float)
        return np.where(np.isnan(probs), 0.0, probs)

    def evaluate(self, raw_params) -> ObjectiveValue:
        """
        Score one raw parameter vector.

        Raises
        ------
        LikelihoodRangeError
            If the model produced a probability outside (0, 1].
        """
        series = neg_loglik(self.likelihoods(raw_params))
        return ObjectiveValue(series.total(), series, series.diagnostics)

    def __call__(self, raw_params) -> float:
        """Scalar NLL; a missing NLL is reported as +inf."""
        nll = self.evaluate(raw_params).nll
        return math.inf if nll is None else nll

    def loss(self, raw_params) -> jnp.ndarray:
        """Differentiable sum of -ln p (no missing handling), for autodiff."""
        return self._loss(self._raw(raw_params))

    def value_and_grad(self, raw_params) -> tuple[jnp.ndarray, jnp.ndarray]:
        """Loss and its gradient with respect to the raw vector."""
        return self._value_and_grad(self._raw(raw_params))

    def __repr__(self) -> str:
        return (
            f"Objective(model={self.model.name!r}, subject={self.subject!r}, "
            f"n_trials={self.n_trials})"
        )
