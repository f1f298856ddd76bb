"""
test_recovery.py
----------------

End-to-end fits on simulated agents.

Coverage:
- a 100-trial TD agent (alpha=0.2, tau=1) swept with 25 Nelder-Mead starts
- parameter recovery on an informative (long, reversing) bandit session
- several subjects at once, including a subject that never converges
- gradient (Optax) engine and the risk/ambiguity model

A 100-trial session at tau=1 carries little information about alpha, so
for that case the tests check that the sweep reaches a likelihood at least
as good as the generating parameters rather than a fixed tolerance.
"""

import math

import pytest

from choicefit import (
    FitConfig,
    FitResult,
    NoConvergedRunError,
    Objective,
    OptaxOptimizer,
    fit_model,
    fit_subjects,
    multistart,
)
from choicefit.model import logit


def raw_td(alpha, tau):
    return [float(logit(alpha)), tau]


class TestSimulatedSubject:
    @pytest.fixture
    def data(self, simulate_td):
        return simulate_td(0.2, 1.0, 100, seed=0, subject="s01")

    def test_sweep_reaches_generating_likelihood(self, td_model, data):
        objective = Objective(td_model, data)
        sweep = multistart(objective, n_starts=25, seed=0)
        assert sweep.n_launched == 25
        assert sweep.subject == "s01"
        truth = objective(raw_td(0.2, 1.0))
        assert min(r.nll for r in sweep.runs) <= truth + 1e-6

    def test_reproducible(self, td_model, data):
        objective = Objective(td_model, data)
        a = multistart(objective, n_starts=5, seed=3)
        b = multistart(objective, n_starts=5, seed=3)
        assert [r.raw_params for r in a.runs] == [r.raw_params for r in b.runs]
        assert [r.convergence for r in a.runs] == [r.convergence for r in b.runs]


class TestRecovery:
    def test_recovers_generating_parameters(self, td_model, informative_bandit_data):
        fit = fit_model(td_model, informative_bandit_data, FitConfig(n_starts=10))
        assert fit.best.converged
        assert fit.params["alpha"] == pytest.approx(0.2, abs=0.1)
        assert fit.params["tau"] == pytest.approx(0.25, abs=0.1)
        assert fit.subject == "s-informative"
        assert fit.n_trials == 1000
        assert fit.bic == pytest.approx(2 * math.log(1000) + 2 * fit.nll)

    def test_optax_engine(self, td_model, informative_bandit_data):
        objective = Objective(td_model, informative_bandit_data)
        engine = OptaxOptimizer(steps=1500, learning_rate=0.05, tol=0.0)
        run = engine.minimize(objective, [0.0, 0.5])
        assert run.nll <= objective(raw_td(0.2, 0.25)) + 0.5

    def test_fit_with_optax_config(self, td_model, informative_bandit_data):
        config = FitConfig(
            engine="optax",
            engine_options={"steps": 2000, "learning_rate": 0.05, "tol": 1e-3},
            n_starts=3,
        )
        fit = fit_model(td_model, informative_bandit_data, config)
        assert fit.best.converged
        assert fit.model_name == "td_learning"


class TestManySubjects:
    def test_fit_subjects(self, td_model, simulate_td):
        datasets = {
            "a": simulate_td(0.3, 0.5, 120, seed=1),
            "b": simulate_td(0.6, 0.5, 120, seed=2),
        }
        fits = fit_subjects(td_model, datasets, FitConfig(n_starts=5))
        assert list(fits) == ["a", "b"]
        assert fits["a"].subject == "a"
        assert fits["b"].subject == "b"
        # the input data is not relabelled
        assert datasets["a"].subject is None

    def test_no_converged_subject_is_reported(self, td_model, simulate_td):
        datasets = {
            "s1": simulate_td(0.3, 0.5, 50, seed=4),
            "s2": simulate_td(0.3, 0.5, 50, seed=5),
        }
        config = FitConfig(n_starts=3, engine_options={"max_iter": 1})
        fits = fit_subjects(td_model, datasets, config)
        assert set(fits) == {"s1", "s2"}
        assert isinstance(fits["s1"], NoConvergedRunError)
        assert fits["s1"].subject == "s1"

    def test_fit_model_raises_without_convergence(self, td_model, simulate_td):
        config = FitConfig(n_starts=2, engine_options={"max_iter": 1})
        with pytest.raises(NoConvergedRunError):
            fit_model(td_model, simulate_td(0.3, 0.5, 50, seed=4), config)

    def test_subjects_in_parallel_match_sequential(self, td_model, simulate_td):
        datasets = {s: simulate_td(0.4, 0.5, 80, seed=i) for i, s in enumerate("xyz")}
        config = FitConfig(n_starts=3)
        sequential = fit_subjects(td_model, datasets, config)
        parallel = fit_subjects(td_model, datasets, config, subject_workers=3)
        for s in datasets:
            assert type(parallel[s]) is type(sequential[s])
            if isinstance(sequential[s], FitResult):
                assert parallel[s].best.raw_params == sequential[s].best.raw_params


class TestRiskAmbiguityFit:
    def test_fit_beats_truth(self, risk_model, simulate_gambles):
        data = simulate_gambles(0.8, -0.5, 1.0, 300, seed=8)
        data.subject = "gambler"
        fit = fit_model(risk_model, data, FitConfig(n_starts=10))
        assert fit.subject == "gambler"
        assert set(fit.params) == {"alpha", "beta", "tau"}
        assert 0.0 < fit.params["alpha"] < 2.0
        assert -1.0 < fit.params["beta"] < 1.0
        truth = [float(logit(0.8, 0.0, 2.0)), float(logit(-0.5, -1.0, 1.0)), 1.0]
        assert fit.nll <= Objective(risk_model, data)(truth) + 1e-6
        assert fit.n_params == 3
