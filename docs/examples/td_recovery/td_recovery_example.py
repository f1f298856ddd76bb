"""
TD learner: simulate, fit, compare
----------------------------------

Simulates a two-armed bandit session played by a TD learner with known
parameters, fits it with a 25-start Nelder-Mead sweep, and compares the
TD model against a gradient (Optax) fit of the same data. Plots the NLL of
every run and the Optax learning curve.
"""
from __future__ import annotations

import os

import matplotlib.pyplot as plt
import numpy as np

from choicefit import FitConfig, Objective, TDLearningModel, TrialData, fit_model
from choicefit.inference import OptaxOptimizer
from choicefit.model import logit

PLOTS_DIR = os.path.join(os.path.dirname(__file__), "plots")


def simulate_bandit(alpha: float, tau: float, n_trials: int, seed: int = 0) -> TrialData:
    rng = np.random.default_rng(seed)
    reward_probs = [0.8, 0.2]
    values = np.full(2, 0.5)
    data = TrialData(subject="sim-01")
    for t in range(n_trials):
        if t > 0 and t % 100 == 0:
            reward_probs = reward_probs[::-1]
        weights = np.exp(values / tau)
        choice = int(rng.choice(2, p=weights / weights.sum()))
        reward = float(rng.uniform() < reward_probs[choice])
        values[choice] += alpha * (reward - values[choice])
        data.add_trial(choice, reward=reward)
    return data


# 1) Synthetic data
print("[1/4] Simulating a TD agent...")
alpha_true, tau_true = 0.2, 0.25
data = simulate_bandit(alpha_true, tau_true, n_trials=1000, seed=7)
model = TDLearningModel()

# 2) Multi-start Nelder-Mead
print("[2/4] Fitting with 25 Nelder-Mead starts...")
# --8<-- [start:fit]
config = FitConfig(n_starts=25, seed=0, engine_options={"max_iter": 500})
fit = fit_model(model, data, config)
print(fit.to_record())
# --8<-- [end:fit]

# 3) Gradient fit of the same objective
print("[3/4] Fitting with Optax (Adam)...")
# --8<-- [start:optax]
objective = Objective(model, data)
optimizer = OptaxOptimizer(steps=1500, learning_rate=0.05, track_history=True, log_every=10)
run = optimizer.minimize(objective, [0.0, 0.5])
print(f"optax NLL={run.nll:.3f} ({run.convergence.value}), params={model.parameters.to_dict(model.parameters.constrain(run.raw_params))}")
# --8<-- [end:optax]

truth_nll = objective([float(logit(alpha_true)), tau_true])
print(f"NLL at generating parameters: {truth_nll:.3f}")

# 4) Plots
print("[4/4] Plotting...")
os.makedirs(PLOTS_DIR, exist_ok=True)

runs = fit.sweep.runs
fig, ax = plt.subplots(figsize=(6, 4))
ax.scatter(
    [r.run_index for r in runs],
    [r.nll for r in runs],
    c=["#377eb8" if r.converged else "#d95f02" for r in runs],
    s=18,
)
ax.axhline(truth_nll, color="#4daf4a", lw=1.5, ls="--", label="Generating parameters")
ax.axhline(fit.nll, color="#377eb8", lw=1.0, label="Selected run")
ax.set_xlabel("Run")
ax.set_ylabel("Negative log-likelihood")
ax.set_title(
    f"alpha={fit.params['alpha']:.3f} (true {alpha_true}), "
    f"tau={fit.params['tau']:.3f} (true {tau_true})"
)
ax.legend(loc="upper right")
ax.grid(True, alpha=0.3)
plt.tight_layout()
fig.savefig(os.path.join(PLOTS_DIR, "td_recovery_runs.png"), dpi=200, bbox_inches="tight")

# --8<-- [start:loss_history]
steps_hist = [step for step, _ in run.loss_history]
loss_hist = [loss for _, loss in run.loss_history]
# --8<-- [end:loss_history]
if steps_hist and loss_hist:
    fig2, ax2 = plt.subplots(figsize=(6, 4))
    ax2.plot(steps_hist, loss_hist, color="#4444aa")
    ax2.set_title("Learning curve (NLL), Adam lr=0.05")
    ax2.set_xlabel("Step")
    ax2.set_ylabel("Loss")
    ax2.grid(True, alpha=0.3)
    plt.tight_layout()
    fig2.savefig(os.path.join(PLOTS_DIR, "td_recovery_learning_curve.png"), dpi=200, bbox_inches="tight")
