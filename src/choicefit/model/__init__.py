"""
choicefit.model
===============

Model-layer API: everything needed to score parameters against data.

Includes
--------
- Choice rule (softmax, softmax_probabilities)
- Reparametrization (logistic, logit, Parameter, ParameterSpace)
- Behavioral models (BehavioralModel base, TDLearningModel, RiskAmbiguityModel)
  and their plain update rules (td_update, risk_ambiguity_utility)
- Likelihood scorer (neg_loglik, NLLSeries, poisoned_sum)
- Objective function (Objective, ObjectiveValue)

Kernels use JAX (jax.numpy as jnp) so they can be jitted and differentiated
for the Optax engine; likelihood scoring runs on NumPy.

Typical usage
-------------
    from choicefit.model import TDLearningModel, Objective
"""

from .base import BehavioralModel, Evaluated
from .choice import DEFAULT_TEMPERATURE, softmax, softmax_probabilities
from .likelihood import NLLSeries, neg_loglik, poisoned_sum
from .objective import Objective, ObjectiveValue
from .parameters import Parameter, ParameterSpace, logistic, logit
from .risk_ambiguity import RiskAmbiguityModel, check_gambles, risk_ambiguity_utility
from .td import TDLearningModel, td_update

__all__ = [
    # Choice rule
    "DEFAULT_TEMPERATURE",
    "softmax",
    "softmax_probabilities",
    # Reparametrization
    "logistic",
    "logit",
    "Parameter",
    "ParameterSpace",
    # Models
    "BehavioralModel",
    "Evaluated",
    "TDLearningModel",
    "td_update",
    "RiskAmbiguityModel",
    "risk_ambiguity_utility",
    "check_gambles",
    # Likelihood
    "neg_loglik",
    "NLLSeries",
    "poisoned_sum",
    # Objective
    "Objective",
    "ObjectiveValue",
]
