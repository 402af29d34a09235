"""Tests for the prior hyperparameter container."""

import dataclasses

import pytest

from bayesian_mediation.priors import PriorHyperparameters


class TestPriorHyperparameters:
    def test_defaults(self):
        p = PriorHyperparameters()
        assert (p.shape_m0, p.rate_m0) == (2.0, 0.1)
        assert (p.shape_m1, p.rate_m1) == (2.0, 0.5)
        assert (p.shape_a, p.rate_a) == (2.0, 1.0)
        assert (p.shape_ma0, p.rate_ma0) == (2.0, 1.0)
        assert (p.shape_ma1, p.rate_ma1) == (2.0, 2.0)
        assert (p.shape_e, p.rate_e) == (2.0, 1.0)
        assert (p.shape_g, p.rate_g) == (2.0, 1.0)
        assert p.pi_step == 0.01

    def test_frozen(self):
        p = PriorHyperparameters()
        with pytest.raises(dataclasses.FrozenInstanceError):
            p.rate_m0 = 1.0  # type: ignore[misc]

    @pytest.mark.parametrize("field", ["rate_m0", "shape_e", "pi_step"])
    def test_non_positive_rejected(self, field):
        with pytest.raises(ValueError, match=field):
            PriorHyperparameters(**{field: 0.0})

    def test_replace_returns_new_instance(self):
        p = PriorHyperparameters()
        q = p.replace(rate_m1=3.0)
        assert q.rate_m1 == 3.0
        assert p.rate_m1 == 0.5

    def test_replace_validates(self):
        with pytest.raises(ValueError):
            PriorHyperparameters().replace(shape_g=-1.0)
