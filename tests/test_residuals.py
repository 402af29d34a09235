"""Tests for the incremental residual cache."""

import numpy as np
import pytest

from bayesian_mediation._backends import resolve_backend
from bayesian_mediation.residuals import ResidualCache
from bayesian_mediation.sampler import MediationSampler
from bayesian_mediation.state import ModelData, ModelParameters


@pytest.fixture()
def setup():
    rng = np.random.default_rng(11)
    n, q = 30, 5
    backend = resolve_backend("numpy")
    data = ModelData.from_arrays(
        rng.standard_normal(n),
        rng.standard_normal(n),
        rng.standard_normal((n, q)),
        rng.standard_normal((n, 2)),
        rng.standard_normal((n, 3)),
        backend=backend,
    )
    params = ModelParameters.create(
        data,
        rng.standard_normal(q),
        rng.standard_normal(q),
        np.full(q, 0.5),
        np.full(q, 0.5),
        beta_a=0.3,
    )
    params.beta_c[:] = rng.standard_normal(2)
    params.alpha_c[:] = rng.standard_normal((3, q))
    return data, params, backend


class TestResidualCache:
    def test_initial_values_match_definitions(self, setup):
        data, params, backend = setup
        cache = ResidualCache(data, params, backend)
        expected_res1 = (
            data.Y - params.beta_a * data.A - data.M @ params.beta_m - data.C1 @ params.beta_c
        )
        expected_res2_c = data.M - data.C2 @ params.alpha_c
        expected_res2 = expected_res2_c - np.outer(data.A, params.alpha_a)
        np.testing.assert_allclose(cache.res1, expected_res1)
        np.testing.assert_allclose(cache.res2_c, expected_res2_c)
        np.testing.assert_allclose(cache.res2, expected_res2)

    def test_buffers_column_major(self, setup):
        cache = ResidualCache(*setup)
        assert cache.res2.flags.f_contiguous
        assert cache.res2_c.flags.f_contiguous

    def test_apply_delta_tracks_parameter_change(self, setup):
        data, params, backend = setup
        cache = ResidualCache(data, params, backend)
        old = float(params.beta_m[2])
        params.beta_m[2] = old + 1.7
        cache.apply_delta(cache.res1, data.M[:, 2], old, params.beta_m[2])
        assert cache.max_discrepancy() < 1e-10

    def test_apply_delta_on_column_view(self, setup):
        data, params, backend = setup
        cache = ResidualCache(data, params, backend)
        old = float(params.alpha_c[1, 3])
        params.alpha_c[1, 3] = -2.0
        cache.apply_delta(cache.res2[:, 3], data.C2[:, 1], old, -2.0)
        cache.apply_delta(cache.res2_c[:, 3], data.C2[:, 1], old, -2.0)
        assert cache.max_discrepancy() < 1e-10

    def test_discrepancy_detects_stale_cache(self, setup):
        data, params, backend = setup
        cache = ResidualCache(data, params, backend)
        params.beta_a += 1.0
        assert cache.max_discrepancy() > 0.1
        cache.recompute()
        assert cache.max_discrepancy() < 1e-12

    def test_recompute_keeps_views_valid(self, setup):
        data, params, backend = setup
        cache = ResidualCache(data, params, backend)
        view = cache.res2[:, 0]
        params.alpha_a[0] += 1.0
        cache.recompute()
        np.testing.assert_array_equal(view, cache.res2[:, 0])


class TestCacheConsistencyOverChain:
    """The incrementally maintained cache never drifts from a rebuild."""

    def test_consistent_after_many_sweeps(self):
        rng = np.random.default_rng(5)
        n, q = 40, 6
        A = rng.standard_normal(n)
        M = np.outer(A, rng.standard_normal(q)) + rng.standard_normal((n, q))
        Y = 0.5 * A + M @ rng.standard_normal(q) + rng.standard_normal(n)
        sampler = MediationSampler(
            Y,
            A,
            M,
            rng.standard_normal((n, 2)),
            rng.standard_normal((n, 2)),
            np.zeros(q),
            np.zeros(q),
            np.full(q, 0.5),
            np.full(q, 0.5),
            random_state=1,
            backend="numpy",
            log_every=0,
        )
        for it in range(50):
            sampler.iteration(100, it)
            assert sampler.residuals.max_discrepancy() < 1e-8
