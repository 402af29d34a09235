"""Column standardisation for the model inputs.

Spike-and-slab variances are shared across mediators, so mediators on
very different scales compete unevenly for the slab.  Standardising
``Y``, ``A`` and ``M`` to mean 0 / sd 1 before sampling puts every
mediator on the same footing.  The population standard deviation
(``ddof=0``) is used.
"""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd

from ._compat import _as_float_matrix, _ensure_pandas_df


def standardize_columns(X: Any) -> Any:
    """Centre each column and scale it to unit (population) variance.

    Returns the same kind of object it was given: a NumPy array of the
    same dimensionality, or a pandas DataFrame / Series with the
    original labels.  Polars input comes back as pandas.

    Raises:
        ValueError: If a column is constant (zero standard deviation).
    """
    if isinstance(X, np.ndarray):
        mat = _as_float_matrix(X, name="X")
        out = _standardize(mat)
        return out[:, 0] if X.ndim == 1 else out

    if isinstance(X, pd.Series):
        out = _standardize(_as_float_matrix(X, name=str(X.name)))
        return pd.Series(out[:, 0], index=X.index, name=X.name)

    frame = _ensure_pandas_df(X, name="X")
    out = _standardize(_as_float_matrix(frame, name="X"))
    return pd.DataFrame(out, index=frame.index, columns=frame.columns)


def _standardize(mat: np.ndarray) -> np.ndarray:
    mean = mat.mean(axis=0)
    sd = mat.std(axis=0)
    constant = np.flatnonzero(sd == 0.0)
    if constant.size:
        raise ValueError(
            f"Cannot standardise constant column(s) at index {constant.tolist()}."
        )
    return (mat - mean) / sd


__all__ = ["standardize_columns"]
