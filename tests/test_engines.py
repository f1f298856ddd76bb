"""
test_engines.py
---------------

Tests for the optimizer engines.

Coverage:
- NelderMead: convergence on a real objective, status classification,
  failure when the search ends on a missing NLL, diagnostics kept per run
- OptaxOptimizer: descent on the differentiable loss, per-run loss history
  (also under concurrent runs)
- engine registry and FitConfig validation
"""

from concurrent.futures import ThreadPoolExecutor
from types import SimpleNamespace

import numpy as np
import pytest

from choicefit import Objective
from choicefit.errors import Diagnostic, FailedEvaluationError
from choicefit.inference import ENGINES, FitConfig, NelderMead, OptaxOptimizer, make_engine
from choicefit.results import Convergence


class ConstantObjective:
    """Objective stand-in that always reports a missing NLL."""

    parameter_names = ("a", "b")
    subject = "fake"

    def evaluate(self, raw):
        return SimpleNamespace(
            nll=None, diagnostics=(Diagnostic("all_missing", "every trial missing"),)
        )


class WalledObjective(ConstantObjective):
    """Quadratic bowl at the origin, missing for a > 0.5."""

    def evaluate(self, raw):
        raw = np.asarray(raw)
        if raw[0] > 0.5:
            zero = Diagnostic("zero_likelihood", "zero likelihood on trial 0", (0,))
            return SimpleNamespace(nll=None, diagnostics=(zero,))
        return SimpleNamespace(nll=float(np.sum(raw**2)), diagnostics=())


def fake_result(status, simplex=None):
    return SimpleNamespace(status=status, final_simplex=simplex)


class TestNelderMead:
    def test_converges_on_bandit_data(self, td_model, simulate_td):
        data = simulate_td(0.3, 0.5, 300, seed=11, subject="s1")
        objective = Objective(td_model, data)
        run = NelderMead().minimize(objective, [0.0, 1.0], run_index=4)
        assert run.converged
        assert run.run_index == 4
        assert run.subject == "s1"
        assert run.parameter_names == ("alpha", "tau")
        assert run.start == (0.0, 1.0)
        assert run.nll == pytest.approx(objective(run.raw_params), rel=1e-12)
        assert run.nll < objective([0.0, 1.0])
        assert run.n_evaluations > 0

    def test_iteration_budget(self, td_model, simulate_td):
        objective = Objective(td_model, simulate_td(0.3, 0.5, 100, seed=2))
        run = NelderMead(max_iter=1).minimize(objective, [0.0, 1.0])
        assert run.convergence is Convergence.MAXITER
        assert not run.converged

    def test_missing_everywhere_fails(self):
        with pytest.raises(FailedEvaluationError):
            NelderMead(max_iter=20).minimize(ConstantObjective(), [0.0, 0.0])

    def test_counts_missing_evaluations(self):
        run = NelderMead().minimize(WalledObjective(), [0.5, 0.5])
        assert run.n_missing_evaluations >= 1
        assert run.converged
        assert np.allclose(run.raw_params, [0.0, 0.0], atol=1e-3)

    def test_keeps_search_diagnostics(self):
        run = NelderMead().minimize(WalledObjective(), [0.5, 0.5])
        assert [d.kind for d in run.diagnostics] == ["zero_likelihood"]
        assert run.diagnostics[0].indices == (0,)

    def test_clean_search_has_no_diagnostics(self, td_model, simulate_td):
        objective = Objective(td_model, simulate_td(0.3, 0.5, 100, seed=2))
        run = NelderMead(max_iter=50).minimize(objective, [0.0, 1.0])
        assert run.diagnostics == ()
        assert run.n_missing_evaluations == 0

    def test_invalid_budget(self):
        with pytest.raises(ValueError):
            NelderMead(max_iter=0)


class TestClassify:
    def test_success(self):
        assert NelderMead.classify(fake_result(0)) is Convergence.CONVERGED

    @pytest.mark.parametrize("status", [1, 2])
    def test_budget_exhausted(self, status):
        simplex = (np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]]), None)
        result = fake_result(status, simplex)
        assert NelderMead.classify(result) is Convergence.MAXITER

    def test_collapsed_simplex(self):
        # all vertices on one line
        simplex = (np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0]]), None)
        result = fake_result(2, simplex)
        assert NelderMead.classify(result) is Convergence.DEGENERATE

    def test_unknown_status(self):
        simplex = (np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]]), None)
        assert NelderMead.classify(fake_result(3, simplex)) is Convergence.UNKNOWN

    def test_labels(self):
        assert [c.value for c in Convergence] == [
            "converged",
            "maxit reached",
            "simplex degeneracy",
            "unknown problem",
        ]


class TestOptaxOptimizer:
    def test_descends(self, td_model, simulate_td):
        data = simulate_td(0.3, 0.5, 300, seed=5)
        objective = Objective(td_model, data)
        start = [0.0, 1.0]
        run = OptaxOptimizer(steps=300, learning_rate=0.05).minimize(objective, start)
        assert run.nll < objective(start)
        assert run.nll == pytest.approx(objective(run.raw_params), rel=1e-12)
        assert run.n_evaluations <= 300

    def test_history(self, td_model, short_bandit_data):
        engine = OptaxOptimizer(steps=25, tol=0.0, track_history=True, log_every=10)
        engine.minimize(Objective(td_model, short_bandit_data), [0.0, 1.0])
        steps, losses = engine.get_history()
        assert steps == [0, 10, 20, 24]
        assert len(losses) == 4
        assert losses[-1] < losses[0]

    def test_history_on_run(self, td_model, short_bandit_data):
        engine = OptaxOptimizer(steps=12, tol=0.0, track_history=True, log_every=5)
        objective = Objective(td_model, short_bandit_data)
        run = engine.minimize(objective, [0.0, 1.0], run_index=3)
        assert [step for step, _ in run.loss_history] == [0, 5, 10, 11]
        assert engine.get_history(3) == (
            [step for step, _ in run.loss_history],
            [loss for _, loss in run.loss_history],
        )
        assert engine.get_history(0) == ([], [])

    def test_no_history_by_default(self, td_model, short_bandit_data):
        run = OptaxOptimizer(steps=5).minimize(
            Objective(td_model, short_bandit_data), [0.0, 1.0]
        )
        assert run.loss_history == ()
        assert run.diagnostics == ()

    def test_histories_stay_separate_across_threads(self, td_model, short_bandit_data):
        objective = Objective(td_model, short_bandit_data)
        engine = OptaxOptimizer(steps=30, tol=0.0, track_history=True, log_every=10)
        starts = [[0.0, 2.0], [0.5, 2.5], [-0.5, 3.0], [1.0, 3.5]]
        expected = [
            engine.minimize(objective, s, run_index=i).loss_history
            for i, s in enumerate(starts)
        ]
        with ThreadPoolExecutor(max_workers=4) as pool:
            futures = [
                pool.submit(engine.minimize, objective, s, run_index=i)
                for i, s in enumerate(starts)
            ]
            runs = [f.result() for f in futures]
        for i, run in enumerate(runs):
            assert [step for step, _ in run.loss_history] == [0, 10, 20, 29]
            assert run.loss_history == expected[i]
            assert engine.get_history(i)[1] == [loss for _, loss in expected[i]]

    def test_nonfinite_loss_fails(self, td_model, short_bandit_data):
        objective = Objective(td_model, short_bandit_data)
        with pytest.raises(FailedEvaluationError):
            OptaxOptimizer(steps=5).minimize(objective, [0.0, 1e-4])


class TestRegistry:
    def test_engines(self):
        assert set(ENGINES) == {"nelder-mead", "optax"}
        engine = make_engine("nelder-mead", max_iter=50)
        assert isinstance(engine, NelderMead)
        assert engine.max_iter == 50

    def test_unknown_engine(self):
        with pytest.raises(ValueError, match="unknown engine"):
            make_engine("bfgs")

    def test_config_defaults(self):
        config = FitConfig()
        assert config.engine == "nelder-mead"
        assert config.n_starts == 25
        assert isinstance(config.make_engine(), NelderMead)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"engine": "bfgs"},
            {"n_starts": 0},
            {"n_workers": 0},
            {"timeout": -1.0},
        ],
    )
    def test_config_validation(self, kwargs):
        with pytest.raises(ValueError):
            FitConfig(**kwargs)
