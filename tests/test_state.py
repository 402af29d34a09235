"""Tests for the model state containers."""

import numpy as np
import pytest

from bayesian_mediation._backends import resolve_backend
from bayesian_mediation.state import (
    VARIANCE_NAMES,
    ModelData,
    ModelParameters,
    VarianceComponents,
)


@pytest.fixture()
def backend():
    return resolve_backend("numpy")


@pytest.fixture()
def arrays():
    rng = np.random.default_rng(3)
    n, q = 20, 4
    return {
        "Y": rng.standard_normal(n),
        "A": rng.standard_normal(n),
        "M": rng.standard_normal((n, q)),
        "C1": rng.standard_normal((n, 2)),
        "C2": rng.standard_normal((n, 3)),
    }


def _vectors(q, pi=0.5):
    return np.zeros(q), np.zeros(q), np.full(q, pi), np.full(q, pi)


class TestModelData:
    def test_dimensions(self, arrays, backend):
        data = ModelData.from_arrays(**arrays, backend=backend)
        assert (data.n, data.q, data.w1, data.w2) == (20, 4, 2, 3)

    def test_norm_caches(self, arrays, backend):
        data = ModelData.from_arrays(**arrays, backend=backend)
        assert data.A2norm == pytest.approx(float(arrays["A"] @ arrays["A"]))
        np.testing.assert_allclose(data.M2norm, (arrays["M"] ** 2).sum(axis=0))
        np.testing.assert_allclose(data.C1_2norm, (arrays["C1"] ** 2).sum(axis=0))
        np.testing.assert_allclose(data.C2_2norm, (arrays["C2"] ** 2).sum(axis=0))

    def test_arrays_read_only(self, arrays, backend):
        data = ModelData.from_arrays(**arrays, backend=backend)
        for arr in (data.Y, data.A, data.M, data.C1, data.C2, data.M2norm):
            assert not arr.flags.writeable

    def test_matrices_column_major(self, arrays, backend):
        data = ModelData.from_arrays(**arrays, backend=backend)
        assert data.M.flags.f_contiguous

    def test_missing_covariates(self, arrays, backend):
        arrays.update(C1=None, C2=None)
        data = ModelData.from_arrays(**arrays, backend=backend)
        assert data.w1 == 0
        assert data.w2 == 0

    def test_row_mismatch_raises(self, arrays, backend):
        arrays["M"] = arrays["M"][:-1]
        with pytest.raises(ValueError, match="'M' has 19 rows"):
            ModelData.from_arrays(**arrays, backend=backend)

    def test_empty_mediators_raise(self, arrays, backend):
        arrays["M"] = np.zeros((20, 0))
        with pytest.raises(ValueError, match="at least one mediator"):
            ModelData.from_arrays(**arrays, backend=backend)

    def test_zero_exposure_raises(self, arrays, backend):
        arrays["A"] = np.zeros(20)
        with pytest.raises(ValueError, match="identically zero"):
            ModelData.from_arrays(**arrays, backend=backend)

    def test_zero_covariate_column_raises(self, arrays, backend):
        arrays["C2"][:, 1] = 0.0
        with pytest.raises(ValueError, match=r"'C2' has all-zero column\(s\) at index \[1\]"):
            ModelData.from_arrays(**arrays, backend=backend)


class TestModelParameters:
    def setup_method(self):
        rng = np.random.default_rng(0)
        self.data = ModelData.from_arrays(
            rng.standard_normal(10),
            rng.standard_normal(10),
            rng.standard_normal((10, 3)),
            rng.standard_normal((10, 2)),
            rng.standard_normal((10, 1)),
            backend=resolve_backend("numpy"),
        )

    def test_shared_handles_not_copied(self):
        beta_m, alpha_a, pi_m, pi_a = _vectors(3)
        params = ModelParameters.create(self.data, beta_m, alpha_a, pi_m, pi_a)
        assert params.beta_m is beta_m
        assert params.alpha_a is alpha_a
        assert params.pi_m is pi_m
        assert params.pi_a is pi_a

    def test_owned_shapes(self):
        params = ModelParameters.create(self.data, *_vectors(3))
        assert params.beta_c.shape == (2,)
        assert params.alpha_c.shape == (1, 3)
        assert params.r1.shape == (3,)
        np.testing.assert_array_equal(params.r3, 0.0)
        assert params.beta_a == 0.0

    def test_beta_a_start(self):
        params = ModelParameters.create(self.data, *_vectors(3), beta_a=0.25)
        assert params.beta_a == 0.25

    def test_list_rejected(self):
        _, alpha_a, pi_m, pi_a = _vectors(3)
        with pytest.raises(TypeError, match="updated in place"):
            ModelParameters.create(self.data, [0.0, 0.0, 0.0], alpha_a, pi_m, pi_a)

    def test_wrong_dtype_rejected(self):
        _, alpha_a, pi_m, pi_a = _vectors(3)
        with pytest.raises(TypeError, match="float64"):
            ModelParameters.create(
                self.data, np.zeros(3, dtype=np.float32), alpha_a, pi_m, pi_a
            )

    def test_wrong_length_rejected(self):
        beta_m, alpha_a, pi_m, _ = _vectors(3)
        with pytest.raises(ValueError, match=r"shape \(3,\)"):
            ModelParameters.create(self.data, beta_m, alpha_a, pi_m, np.full(4, 0.5))

    @pytest.mark.parametrize("bad", [0.0, -0.1, 1.5])
    def test_probability_range(self, bad):
        beta_m, alpha_a, pi_m, pi_a = _vectors(3)
        pi_m[1] = bad
        with pytest.raises(ValueError, match="'pi_m' values must lie in"):
            ModelParameters.create(self.data, beta_m, alpha_a, pi_m, pi_a)

    def test_probability_one_allowed(self):
        ModelParameters.create(self.data, *_vectors(3, pi=1.0))

    @pytest.mark.parametrize("bad", [0.1, 1.0 / 9.0])
    def test_probability_at_or_below_floor_rejected(self, bad):
        # q = 3, so the floor is 1/9.
        beta_m, alpha_a, pi_m, pi_a = _vectors(3)
        pi_a[0] = bad
        with pytest.raises(ValueError, match=r"'pi_a' values must lie in \(0.111111, 1\]"):
            ModelParameters.create(self.data, beta_m, alpha_a, pi_m, pi_a)

    def test_probability_just_above_floor_allowed(self):
        ModelParameters.create(self.data, *_vectors(3, pi=0.12))

    def test_single_mediator_has_no_floor(self, arrays, backend):
        arrays.update(M=arrays["M"][:, :1])
        data = ModelData.from_arrays(**arrays, backend=backend)
        ModelParameters.create(data, *_vectors(1, pi=0.001))

    def test_aliased_vectors_rejected(self):
        beta_m, _, pi_m, pi_a = _vectors(3)
        with pytest.raises(ValueError, match="distinct"):
            ModelParameters.create(self.data, beta_m, beta_m, pi_m, pi_a)

    def test_read_only_vector_rejected(self):
        beta_m, alpha_a, pi_m, pi_a = _vectors(3)
        beta_m.flags.writeable = False
        with pytest.raises(ValueError, match="writeable"):
            ModelParameters.create(self.data, beta_m, alpha_a, pi_m, pi_a)


class TestVarianceComponents:
    def test_as_dict_keys(self):
        v = VarianceComponents(*range(1, 8))
        assert set(v.as_dict()) == set(VARIANCE_NAMES)
        assert v.as_dict()["sigma_e"] == 7
