"""Tests for the result dataclass and the posterior summaries."""

import json
import math

import numpy as np
import pandas as pd
import pytest

from bayesian_mediation._results import (
    SUMMARY_COLUMNS,
    MediationResult,
    _numpy_to_python,
    summarize_draws,
)
from bayesian_mediation.sinks import column_labels


def _draws(rows, q, names=None):
    return pd.DataFrame(np.asarray(rows, dtype=float), columns=column_labels(q, names))


def _result(**overrides):
    draws = _draws([[1.0, 0.5, 2.0, 0.5, 0.1], [3.0, 0.5, 4.0, 0.5, 0.3]], 1, ["m"])
    kwargs = dict(
        beta_m=np.array([3.0]),
        alpha_a=np.array([4.0]),
        pi_m=np.array([0.5]),
        pi_a=np.array([0.5]),
        beta_a=0.3,
        variances={"sigma_e": 1.0},
        summary=summarize_draws(draws, 1, ["m"]),
        beta_a_mean=0.2,
        beta_a_sd=0.1,
        mediator_names=["m"],
        n_iter=30,
        burn_in=5,
        thin=10,
        n_retained=2,
        acceptance_rate=0.5,
        backend="numpy",
        draws=draws,
    )
    kwargs.update(overrides)
    return MediationResult(**kwargs)


class TestNumpyToPython:
    def test_scalars_and_arrays(self):
        out = _numpy_to_python({"a": np.float64(1.5), "b": np.arange(2), "c": (np.int64(3),)})
        assert out == {"a": 1.5, "b": [0, 1], "c": (3,)}
        assert type(out["a"]) is float

    def test_dataframe_to_records(self):
        frame = pd.DataFrame({"x": [1.0]}, index=["m1"])
        assert _numpy_to_python(frame) == [{"index": "m1", "x": 1.0}]


class TestSummarizeDraws:
    def test_values(self):
        # q = 2, three draws
        rows = [
            [1.0, 0.5, 2.0, 0.6, 1.0, 0.4, 0.0, 0.3, 0.0],
            [2.0, 0.5, 2.0, 0.6, 3.0, 0.4, 0.0, 0.3, 0.0],
            [3.0, 0.5, 2.0, 0.6, 5.0, 0.4, 0.0, 0.3, 0.0],
        ]
        summary = summarize_draws(_draws(rows, 2), 2)
        assert list(summary.columns) == list(SUMMARY_COLUMNS)
        assert list(summary.index) == ["0", "1"]
        assert summary.loc["0", "beta_m_mean"] == pytest.approx(2.0)
        assert summary.loc["0", "beta_m_sd"] == pytest.approx(1.0)
        assert summary.loc["0", "indirect_mean"] == pytest.approx(4.0)
        assert summary.loc["1", "indirect_mean"] == pytest.approx(0.0)
        assert summary.loc["0", "pi_a_mean"] == pytest.approx(0.6)
        assert summary.loc["1", "pi_m_mean"] == pytest.approx(0.4)

    def test_interval_contains_mean(self):
        rng = np.random.default_rng(0)
        rows = np.column_stack(
            [rng.normal(1, 0.1, 500), np.full(500, 0.5), rng.normal(2, 0.1, 500),
             np.full(500, 0.5), np.zeros(500)]
        )
        s = summarize_draws(_draws(rows, 1), 1).iloc[0]
        assert s["indirect_lower"] < s["indirect_mean"] < s["indirect_upper"]
        assert s["indirect_lower"] > 0.0

    def test_empty_gives_nan(self):
        summary = summarize_draws(_draws(np.empty((0, 5)), 1, ["m"]), 1, ["m"])
        assert list(summary.index) == ["m"]
        assert summary.isna().all().all()

    def test_single_draw_sd_nan(self):
        summary = summarize_draws(_draws([[1.0, 0.5, 1.0, 0.5, 0.0]], 1), 1)
        assert summary.loc["0", "beta_m_mean"] == 1.0
        assert math.isnan(summary.loc["0", "beta_m_sd"])

    def test_width_mismatch(self):
        with pytest.raises(ValueError, match="expected 9"):
            summarize_draws(_draws([[0.0] * 5], 1), 2)

    @pytest.mark.parametrize("level", [0.0, 1.0, 1.5])
    def test_credible_level_validated(self, level):
        with pytest.raises(ValueError, match="credible_level"):
            summarize_draws(_draws([[0.0] * 5], 1), 1, credible_level=level)


class TestMediationResult:
    def test_attribute_and_item_access(self):
        result = _result()
        assert result["n_retained"] == result.n_retained == 2
        assert result.get("missing", "d") == "d"
        assert "backend" in result
        assert "nope" not in result
        assert 3 not in result

    def test_missing_key_raises(self):
        with pytest.raises(KeyError):
            _result()["nope"]

    def test_frozen(self):
        with pytest.raises(AttributeError):
            _result().n_iter = 1  # type: ignore[misc]

    def test_to_dict_excludes_draws_and_is_json_safe(self):
        d = _result().to_dict()
        assert "draws" not in d
        assert d["beta_m"] == [3.0]
        assert d["summary"][0]["index"] == "m"
        json.dumps(d)
