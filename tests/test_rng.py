"""
test_rng.py
-----------

Tests for key handling and start sampling.
"""

import jax.random as jr
import numpy as np

from choicefit.utils import make_key, subject_key, uniform_starts


class TestKeys:
    def test_seed_and_key_agree(self):
        key = jr.PRNGKey(5)
        np.testing.assert_array_equal(make_key(5), key)
        np.testing.assert_array_equal(make_key(np.int64(5)), key)
        assert make_key(key) is key

    def test_subject_keys_differ(self):
        base = make_key(0)
        a = uniform_starts(subject_key(base, 0), 4, [0.0], [1.0])
        b = uniform_starts(subject_key(base, 1), 4, [0.0], [1.0])
        assert not np.allclose(a, b)


class TestUniformStarts:
    def test_bounds_and_shape(self):
        starts = np.asarray(uniform_starts(make_key(1), 50, [0.0, -2.0], [1.0, 2.0]))
        assert starts.shape == (50, 2)
        assert np.all((starts[:, 0] >= 0.0) & (starts[:, 0] <= 1.0))
        assert np.all((starts[:, 1] >= -2.0) & (starts[:, 1] <= 2.0))

    def test_one_key_per_run(self):
        key = make_key(2)
        starts = np.asarray(uniform_starts(key, 3, [0.0, 0.0], [1.0, 1.0]))
        for i, k in enumerate(jr.split(key, 3)):
            np.testing.assert_allclose(
                starts[i], jr.uniform(k, (2,), minval=0.0, maxval=1.0)
            )

    def test_runs_are_distinct(self):
        starts = np.asarray(uniform_starts(make_key(3), 10, [0.0], [1.0]))
        assert len(np.unique(starts)) == 10
