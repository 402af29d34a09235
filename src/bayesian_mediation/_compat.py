"""Input compatibility layer.

The sampler works on plain ``float64`` NumPy arrays.  The public API
additionally accepts pandas objects and, when it is installed,
Polars DataFrames / Series / LazyFrames, converting them once at the
boundary so the numerical code never sees anything but NumPy.

Polars is **not** a required dependency.  If it is not installed, the
converter simply handles NumPy and pandas inputs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeAlias

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    import polars as pl

    DataFrameLike: TypeAlias = (
        np.ndarray | pd.DataFrame | pd.Series | pl.DataFrame | pl.LazyFrame | pl.Series
    )
else:
    DataFrameLike: TypeAlias = np.ndarray | pd.DataFrame | pd.Series

# Runtime detection; Polars stays optional.
try:
    import polars as pl

    _HAS_POLARS = True
except ImportError:
    _HAS_POLARS = False


def _ensure_pandas_df(obj: Any, *, name: str = "input") -> pd.DataFrame:
    """Convert *obj* to a :class:`pandas.DataFrame` if necessary.

    Accepted types:
        * ``pandas.DataFrame`` — returned as-is.
        * ``pandas.Series`` — promoted to a one-column frame.
        * ``polars.DataFrame`` / ``polars.Series`` — converted via
          ``.to_pandas()`` / ``.to_frame().to_pandas()``.
        * ``polars.LazyFrame`` — collected then converted.

    Args:
        obj: A pandas or Polars frame-like object.
        name: Label used in error messages (e.g. ``"M"`` or ``"Y"``).

    Returns:
        A pandas ``DataFrame``.

    Raises:
        TypeError: If *obj* is not a recognised frame type.
    """
    if isinstance(obj, pd.DataFrame):
        return obj
    if isinstance(obj, pd.Series):
        return obj.to_frame()

    if _HAS_POLARS:
        if isinstance(obj, pl.LazyFrame):
            return obj.collect().to_pandas()
        if isinstance(obj, pl.DataFrame):
            return obj.to_pandas()
        if isinstance(obj, pl.Series):
            return obj.to_frame().to_pandas()

    raise TypeError(
        f"'{name}' must be a NumPy array or pandas DataFrame/Series"
        + (" or Polars DataFrame/LazyFrame/Series" if _HAS_POLARS else "")
        + f", got {type(obj).__name__}."
    )


def _column_names(obj: Any) -> list[str] | None:
    """Return column labels of a frame-like *obj*, or ``None`` for arrays."""
    if obj is None or isinstance(obj, np.ndarray):
        return None
    return [str(c) for c in _ensure_pandas_df(obj).columns]


def _as_float_matrix(obj: Any, *, name: str, n_rows: int | None = None) -> np.ndarray:
    """Convert *obj* to a C-contiguous ``(n, k)`` float64 matrix.

    ``None`` becomes an ``(n_rows, 0)`` matrix (an empty covariate
    block).  1-D input is treated as a single column.

    Raises:
        TypeError: If *obj* is not array- or frame-like.
        ValueError: If the row count disagrees with *n_rows* or the
            data contain non-finite values.
    """
    if obj is None:
        if n_rows is None:
            raise ValueError(f"'{name}' is required.")
        return np.zeros((n_rows, 0))

    if isinstance(obj, np.ndarray):
        arr = obj
    else:
        arr = _ensure_pandas_df(obj, name=name).to_numpy()

    arr = np.ascontiguousarray(arr, dtype=np.float64)
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    if arr.ndim != 2:
        raise ValueError(f"'{name}' must be 1-D or 2-D, got {arr.ndim} dimensions.")
    if n_rows is not None and arr.shape[0] != n_rows:
        raise ValueError(
            f"'{name}' has {arr.shape[0]} rows but the outcome has {n_rows}."
        )
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"'{name}' contains NaN or infinite values.")
    return arr


def _as_float_vector(obj: Any, *, name: str, length: int | None = None) -> np.ndarray:
    """Convert *obj* to a 1-D float64 vector.

    Accepts ``(n,)`` and single-column ``(n, 1)`` inputs.
    """
    mat = _as_float_matrix(obj, name=name)
    if mat.shape[1] != 1:
        raise ValueError(f"'{name}' must have exactly one column, got {mat.shape[1]}.")
    vec = mat[:, 0].copy()
    if length is not None and vec.shape[0] != length:
        raise ValueError(f"'{name}' has length {vec.shape[0]}, expected {length}.")
    return vec
