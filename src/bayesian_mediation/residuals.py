"""Residual cache for the two regression stages.

Every full-conditional draw needs the residual of its own regression
with the coefficient being updated added back in.  Recomputing
``Y − beta_a·A − M·beta_m − C1·beta_c`` for each of the ``q + w1 + 1``
outcome-stage coefficients would cost O(n·(q + w1)) per draw; instead
three residual arrays are kept in sync with the parameters and patched
with a rank-1 update after every scalar draw:

* ``res1`` ``(n,)`` — ``Y − beta_a·A − M·beta_m − C1·beta_c``
* ``res2`` ``(n, q)`` — column j is
  ``M[:, j] − A·alpha_a[j] − C2·alpha_c[:, j]``
* ``res2_c`` ``(n, q)`` — column j is ``M[:, j] − C2·alpha_c[:, j]``
  (covariate-only; the association sampler regresses it on ``A``)

The incremental update for a coefficient that moved from ``old`` to
``new`` on regressor ``x`` is ``res += (old − new)·x``, which is
exactly the change the defining formula would produce.  Full
recomputation goes through the backend's ``gemm`` and is only run at
the first iteration.
"""

from __future__ import annotations

import numpy as np

from ._backends import BackendProtocol
from .state import ModelData, ModelParameters


def _evaluate(
    data: ModelData, params: ModelParameters, backend: BackendProtocol
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Evaluate the three residual formulas from scratch."""
    # res1 = Y - beta_a*A - M @ beta_m - C1 @ beta_c
    res1 = data.Y - params.beta_a * data.A
    res1 = backend.gemm(
        -1.0, data.M, params.beta_m.reshape(-1, 1), 1.0, res1.reshape(-1, 1)
    )
    res1 = backend.gemm(-1.0, data.C1, params.beta_c.reshape(-1, 1), 1.0, res1)[:, 0]

    # res2_c = M - C2 @ alpha_c ; res2 = res2_c - A alpha_a'
    res2_c = backend.gemm(-1.0, data.C2, params.alpha_c, 1.0, data.M)
    res2 = backend.gemm(
        -1.0, data.A.reshape(-1, 1), params.alpha_a.reshape(1, -1), 1.0, res2_c
    )
    return res1, res2, res2_c


class ResidualCache:
    """The three residual arrays, kept consistent with the parameters.

    The cache never writes to parameters; the caller is responsible
    for calling :meth:`apply_delta` with the right column in lock-step
    with each parameter write.
    """

    def __init__(
        self,
        data: ModelData,
        params: ModelParameters,
        backend: BackendProtocol,
    ) -> None:
        self._data = data
        self._params = params
        self._backend = backend
        self.res1: np.ndarray = np.zeros(data.n)
        # Column-major so the per-mediator column views are contiguous.
        self.res2: np.ndarray = np.zeros((data.n, data.q), order="F")
        self.res2_c: np.ndarray = np.zeros((data.n, data.q), order="F")
        self.recompute()

    def recompute(self) -> None:
        """Rebuild all three caches from the current parameter values.

        Writes into the existing buffers so column views handed out
        earlier stay valid.
        """
        res1, res2, res2_c = _evaluate(self._data, self._params, self._backend)
        self.res1[:] = res1
        self.res2[:] = res2
        self.res2_c[:] = res2_c

    @staticmethod
    def apply_delta(
        target: np.ndarray, column: np.ndarray, old: float, new: float
    ) -> None:
        """In-place rank-1 update ``target += (old − new) * column``.

        *target* is ``res1`` or a column view of ``res2`` / ``res2_c``.
        """
        target += (old - new) * column

    def max_discrepancy(self) -> float:
        """Largest absolute gap between the cache and a full rebuild."""
        res1, res2, res2_c = _evaluate(self._data, self._params, self._backend)
        return float(
            max(
                np.max(np.abs(res1 - self.res1)),
                np.max(np.abs(res2 - self.res2)),
                np.max(np.abs(res2_c - self.res2_c)),
            )
        )


__all__ = ["ResidualCache"]
