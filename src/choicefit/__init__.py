"""
choicefit
=========

Maximum-likelihood parameter estimation for cognitive choice models.

Given one agent's ordered binary decisions and the trial stimuli, choicefit
finds the latent parameters (learning rate, risk and ambiguity attitudes,
choice temperature) that best explain the choices under a behavioral model,
and scores competing models with BIC.

----------------------------------------------------------------------
Workflow
----------------------------------------------------------------------

Core design
-----------
1. Choice rule (model/choice.py):
   - Temperature-scaled softmax over option values.

2. Behavioral models (model/td.py, model/risk_ambiguity.py):
   - TDLearningModel: temporal-difference value learning on a bandit.
   - RiskAmbiguityModel: safe option versus gamble, utility under risk
     and ambiguity.
   - Parameters live in a fixed ParameterSpace; bounded ones are searched
     through a logistic reparametrization (model/parameters.py).

3. Likelihood scorer (model/likelihood.py):
   - Per-trial NLL with NaN/zero likelihoods excluded as missing and
     reported as diagnostics; missing entries poison the sum.

4. Objective (model/objective.py):
   - Binds one model to one subject's TrialData; jitted trial loop.

5. Inference (inference/):
   - NelderMead (scipy) and OptaxOptimizer engines.
   - multistart: randomized starts, per-run failure isolation.
   - fit_model / fit_subjects: sweep + best-run selection.

6. Results (results/):
   - OptimizationRun, SweepResult, FitResult, select_best, bic, aic,
     compare_models.

Unified import style
--------------------
Top-level:
  from choicefit import TrialData, TDLearningModel, RiskAmbiguityModel
  from choicefit import Objective, FitConfig, fit_model, fit_subjects

Subpackages:
  from choicefit.model import softmax, logistic, neg_loglik, td_update
  from choicefit.inference import NelderMead, OptaxOptimizer, multistart
  from choicefit.results import select_best, bic, compare_models

Numerics
--------
Importing choicefit enables 64-bit floats in JAX (``jax_enable_x64``), so
objectives are evaluated in double precision.

----------------------------------------------------------------------
"""

import jax

jax.config.update("jax_enable_x64", True)

# Re-export subpackages for unified import style (e.g., choicefit.model)
from . import data as data  # noqa: E402
from . import errors as errors  # noqa: E402
from . import inference as inference  # noqa: E402
from . import model as model  # noqa: E402
from . import results as results  # noqa: E402
from . import utils as utils  # noqa: E402
from .data.dataset import Trial, TrialData  # noqa: E402

# Errors
from .errors import (  # noqa: E402
    ChoiceFitError,
    ChoiceFitWarning,
    ContractViolation,
    Diagnostic,
    NoConvergedRunError,
)

# Inference
from .inference import (  # noqa: E402
    FitConfig,
    NelderMead,
    OptaxOptimizer,
    fit_model,
    fit_subjects,
    multistart,
)

# Model
from .model import (  # noqa: E402
    Objective,
    RiskAmbiguityModel,
    TDLearningModel,
    neg_loglik,
    softmax,
)

# Results
from .results import (  # noqa: E402
    Convergence,
    FitResult,
    OptimizationRun,
    bic,
    compare_models,
    select_best,
)

__version__ = "0.1.0"

__all__ = [
    # Data
    "Trial",
    "TrialData",
    # Models
    "TDLearningModel",
    "RiskAmbiguityModel",
    "Objective",
    "softmax",
    "neg_loglik",
    # Inference
    "NelderMead",
    "OptaxOptimizer",
    "multistart",
    "FitConfig",
    "fit_model",
    "fit_subjects",
    # Results
    "Convergence",
    "OptimizationRun",
    "FitResult",
    "select_best",
    "bic",
    "compare_models",
    # Errors
    "ChoiceFitError",
    "ChoiceFitWarning",
    "ContractViolation",
    "Diagnostic",
    "NoConvergedRunError",
    # Subpackages
    "data",
    "errors",
    "model",
    "inference",
    "results",
    "utils",
]
