"""
Central pytest configuration for this project.

This file is automatically discovered by pytest and is intended for:

- **Fixtures**: reusable objects or setup logic shared across multiple test files.
- **Simulators**: small synthetic agents that generate choice data with known
  parameters. They exist only to exercise the fitting pipeline.

Notes
-----
- Contributors should
  install the package in editable mode (`pip install -e .`) so that imports are resolved
  consistently in local dev and CI environments.
- Keep this file focused on test setup. Do not add application logic here.
"""

import numpy as np
import pytest

from choicefit import TrialData
from choicefit.model import RiskAmbiguityModel, TDLearningModel


def simulate_td_agent(
    alpha,
    tau,
    n_trials,
    *,
    reward_probs=(0.8, 0.2),
    reversal_every=None,
    prior_value=0.5,
    seed=0,
    subject=None,
):
    """Two-armed bandit played by a TD learner with a softmax choice rule."""
    rng = np.random.default_rng(seed)
    probs = list(reward_probs)
    values = np.full(len(probs), prior_value)
    choices, rewards = [], []
    for t in range(n_trials):
        if reversal_every and t > 0 and t % reversal_every == 0:
            probs = probs[::-1]
        weights = np.exp(values / tau)
        c = int(rng.choice(len(probs), p=weights / weights.sum()))
        r = float(rng.random() < probs[c])
        values[c] += alpha * (r - values[c])
        choices.append(c)
        rewards.append(r)
    return TrialData.from_arrays(choices, reward=rewards, subject=subject)


def simulate_gambler(alpha, beta, tau, n_trials, *, safe_value=5.0, seed=0):
    """Safe-versus-gamble choices from the risk/ambiguity utility model."""
    rng = np.random.default_rng(seed)
    value = rng.choice([5.0, 8.0, 12.0, 20.0, 30.0], size=n_trials)
    ambiguous = rng.random(n_trials) < 0.5
    ambiguity = np.where(ambiguous, rng.choice([0.25, 0.5, 0.75], size=n_trials), 0.0)
    win_prob = np.where(ambiguous, 0.5, rng.choice([0.25, 0.5, 0.75], size=n_trials))
    u_gamble = value**alpha * (win_prob + beta * ambiguity / 2)
    u_safe = safe_value**alpha
    p_gamble = 1.0 / (1.0 + np.exp((u_safe - u_gamble) / tau))
    choices = (rng.random(n_trials) < p_gamble).astype(int)
    return TrialData.from_arrays(
        choices, value=value, win_prob=win_prob, ambiguity=ambiguity
    )


@pytest.fixture
def simulate_td():
    """Factory fixture returning the TD-agent simulator."""
    return simulate_td_agent


@pytest.fixture
def simulate_gambles():
    """Factory fixture returning the gamble simulator."""
    return simulate_gambler


@pytest.fixture
def td_model():
    return TDLearningModel()


@pytest.fixture
def risk_model():
    return RiskAmbiguityModel(safe_value=5.0)


@pytest.fixture
def short_bandit_data():
    """Three hand-checkable bandit trials."""
    return TrialData.from_arrays([0, 1, 0], reward=[1.0, 0.0, 1.0], subject="s01")


@pytest.fixture(scope="module")
def informative_bandit_data():
    """1000 trials, reversals every 100 trials, alpha=0.2, tau=0.25."""
    return simulate_td_agent(
        0.2, 0.25, 1000, reversal_every=100, seed=7, subject="s-informative"
    )
