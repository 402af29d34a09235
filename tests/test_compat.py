"""Tests for input conversion and Polars compatibility."""

import numpy as np
import pandas as pd
import pytest

from bayesian_mediation._compat import (
    _as_float_matrix,
    _as_float_vector,
    _column_names,
    _ensure_pandas_df,
)


class TestEnsurePandasDf:
    def test_pandas_passthrough(self):
        df = pd.DataFrame({"a": [1, 2, 3]})
        assert _ensure_pandas_df(df) is df

    def test_series_promoted(self):
        result = _ensure_pandas_df(pd.Series([1.0, 2.0], name="s"))
        assert isinstance(result, pd.DataFrame)
        assert list(result.columns) == ["s"]

    def test_rejects_invalid_type(self):
        with pytest.raises(TypeError, match="must be a NumPy array or pandas"):
            _ensure_pandas_df([1, 2, 3])

    def test_error_includes_name(self):
        with pytest.raises(TypeError, match="'M'"):
            _ensure_pandas_df({"a": 1}, name="M")


class TestAsFloatMatrix:
    def test_none_becomes_empty_block(self):
        out = _as_float_matrix(None, name="C1", n_rows=4)
        assert out.shape == (4, 0)

    def test_none_without_rows_raises(self):
        with pytest.raises(ValueError, match="required"):
            _as_float_matrix(None, name="M")

    def test_vector_becomes_column(self):
        out = _as_float_matrix(np.arange(3), name="M")
        assert out.shape == (3, 1)
        assert out.dtype == np.float64

    def test_row_mismatch(self):
        with pytest.raises(ValueError, match="has 3 rows"):
            _as_float_matrix(np.zeros((3, 2)), name="C2", n_rows=5)

    def test_non_finite_rejected(self):
        with pytest.raises(ValueError, match="NaN or infinite"):
            _as_float_matrix(np.array([[1.0], [np.nan]]), name="M")

    def test_three_dimensional_rejected(self):
        with pytest.raises(ValueError, match="1-D or 2-D"):
            _as_float_matrix(np.zeros((2, 2, 2)), name="M")

    def test_dataframe_input(self):
        df = pd.DataFrame({"m1": [1, 2], "m2": [3, 4]})
        out = _as_float_matrix(df, name="M")
        np.testing.assert_array_equal(out, [[1.0, 3.0], [2.0, 4.0]])


class TestAsFloatVector:
    def test_single_column_frame(self):
        out = _as_float_vector(pd.DataFrame({"y": [1, 2, 3]}), name="Y")
        assert out.shape == (3,)

    def test_multi_column_rejected(self):
        with pytest.raises(ValueError, match="exactly one column"):
            _as_float_vector(np.zeros((3, 2)), name="Y")

    def test_length_checked(self):
        with pytest.raises(ValueError, match="expected 5"):
            _as_float_vector(np.zeros(4), name="A", length=5)

    def test_returns_copy(self):
        src = np.arange(4.0)
        out = _as_float_vector(src, name="Y")
        out[0] = 99.0
        assert src[0] == 0.0


class TestColumnNames:
    def test_array_has_no_names(self):
        assert _column_names(np.zeros((2, 2))) is None
        assert _column_names(None) is None

    def test_frame_names_stringified(self):
        assert _column_names(pd.DataFrame({0: [1.0], "b": [2.0]})) == ["0", "b"]


class TestPolars:
    def setup_method(self):
        self.pl = pytest.importorskip("polars")

    def test_polars_converted(self):
        result = _ensure_pandas_df(self.pl.DataFrame({"a": [1, 2, 3]}))
        assert isinstance(result, pd.DataFrame)
        assert result["a"].tolist() == [1, 2, 3]

    def test_polars_lazyframe_collected(self):
        lf = self.pl.DataFrame({"a": [1, 2, 3]}).lazy()
        assert _ensure_pandas_df(lf)["a"].tolist() == [1, 2, 3]

    def test_polars_series(self):
        out = _as_float_vector(self.pl.Series("y", [1.0, 2.0]), name="Y")
        np.testing.assert_array_equal(out, [1.0, 2.0])

    def test_polars_column_names(self):
        df = self.pl.DataFrame({"m1": [1.0], "m2": [2.0]})
        assert _column_names(df) == ["m1", "m2"]
