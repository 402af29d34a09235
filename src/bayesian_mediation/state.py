"""Model state: read-only data, shared parameters, variance components.

Three containers make up everything the sampler reads and writes:

* :class:`ModelData` — the observed arrays ``Y, A, M, C1, C2`` plus
  the column squared-norm caches.  Built once, never mutated: the
  internal arrays are read-only views and the norms are computed a
  single time through the linear-algebra backend.

* :class:`ModelParameters` — regression coefficients, inclusion
  indicators and prior inclusion probabilities.  ``beta_m``,
  ``alpha_a``, ``pi_m`` and ``pi_a`` are *shared handles*: the arrays
  the caller passes in are the arrays the sampler writes to, so the
  caller can read the final state after the run without a copy step.
  The sampler is the only writer while a chain is running.

* :class:`VarianceComponents` — the seven positive variance scalars.

Shapes (``n`` observations, ``q`` mediators, ``w1`` / ``w2`` covariates
in the outcome / mediator stage)::

    Y (n,)   A (n,)   M (n, q)   C1 (n, w1)   C2 (n, w2)
    beta_m (q,)  alpha_a (q,)  pi_m (q,)  pi_a (q,)  r1 (q,)  r3 (q,)
    beta_c (w1,) alpha_c (w2, q)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

import numpy as np

from ._backends import BackendProtocol
from ._compat import _as_float_matrix, _as_float_vector

VARIANCE_NAMES: tuple[str, ...] = (
    "sigma_m0",
    "sigma_m1",
    "sigma_a",
    "sigma_ma0",
    "sigma_ma1",
    "sigma_g",
    "sigma_e",
)
"""Variance components in their prior-initialisation draw order."""


def _read_only(arr: np.ndarray) -> np.ndarray:
    # A view, so the caller's own array keeps its flags.
    view = arr.view()
    view.flags.writeable = False
    return view


@dataclass(frozen=True)
class ModelData:
    """Observed data and the squared-norm caches derived from it."""

    Y: np.ndarray
    A: np.ndarray
    M: np.ndarray
    C1: np.ndarray
    C2: np.ndarray
    A2norm: float
    M2norm: np.ndarray
    C1_2norm: np.ndarray
    C2_2norm: np.ndarray

    @property
    def n(self) -> int:
        return self.Y.shape[0]

    @property
    def q(self) -> int:
        return self.M.shape[1]

    @property
    def w1(self) -> int:
        return self.C1.shape[1]

    @property
    def w2(self) -> int:
        return self.C2.shape[1]

    @classmethod
    def from_arrays(
        cls,
        Y: Any,
        A: Any,
        M: Any,
        C1: Any,
        C2: Any,
        backend: BackendProtocol,
    ) -> ModelData:
        """Validate the inputs and compute the squared-norm caches.

        ``C1`` / ``C2`` may be ``None`` for a stage without covariates.

        Raises:
            ValueError: On any dimension mismatch, an empty mediator
                matrix, non-finite data, or an all-zero regressor
                column (whose flat-prior conditional would be
                improper).
        """
        Y_vec = _as_float_vector(Y, name="Y")
        n = Y_vec.shape[0]
        if n == 0:
            raise ValueError("'Y' must contain at least one observation.")
        A_vec = _as_float_vector(A, name="A", length=n)
        M_mat = _as_float_matrix(M, name="M", n_rows=n)
        if M_mat.shape[1] == 0:
            raise ValueError("'M' must contain at least one mediator column.")
        C1_mat = _as_float_matrix(C1, name="C1", n_rows=n)
        C2_mat = _as_float_matrix(C2, name="C2", n_rows=n)

        A2norm = float(backend.column_sq_norms(A_vec.reshape(-1, 1))[0])
        M2norm = backend.column_sq_norms(M_mat)
        C1_2norm = backend.column_sq_norms(C1_mat)
        C2_2norm = backend.column_sq_norms(C2_mat)

        if A2norm == 0.0:
            raise ValueError("'A' is identically zero.")
        for label, norms in (("C1", C1_2norm), ("C2", C2_2norm)):
            zero = np.flatnonzero(norms == 0.0)
            if zero.size:
                raise ValueError(
                    f"'{label}' has all-zero column(s) at index {zero.tolist()}."
                )

        # Column-major: the sweep reads one regressor column at a time.
        return cls(
            Y=_read_only(Y_vec),
            A=_read_only(A_vec),
            M=_read_only(np.asfortranarray(M_mat)),
            C1=_read_only(np.asfortranarray(C1_mat)),
            C2=_read_only(np.asfortranarray(C2_mat)),
            A2norm=A2norm,
            M2norm=_read_only(M2norm),
            C1_2norm=_read_only(C1_2norm),
            C2_2norm=_read_only(C2_2norm),
        )


def _shared_vector(obj: Any, *, name: str, q: int) -> np.ndarray:
    """Validate a caller-owned parameter vector without copying it.

    The array must already be a writeable 1-D float64 array of
    length *q*; anything else would force a copy and silently break
    the shared-handle contract.
    """
    if not isinstance(obj, np.ndarray):
        raise TypeError(
            f"'{name}' must be a NumPy float64 array (it is updated in place), "
            f"got {type(obj).__name__}."
        )
    if obj.dtype != np.float64:
        raise TypeError(f"'{name}' must have dtype float64, got {obj.dtype}.")
    if obj.shape != (q,):
        raise ValueError(f"'{name}' must have shape ({q},), got {obj.shape}.")
    if not obj.flags.writeable:
        raise ValueError(f"'{name}' must be writeable.")
    if not np.all(np.isfinite(obj)):
        raise ValueError(f"'{name}' contains NaN or infinite values.")
    return obj


@dataclass
class ModelParameters:
    """Current parameter values of one chain.

    ``beta_m``, ``alpha_a``, ``pi_m`` and ``pi_a`` are the caller's own
    arrays (see module docstring); the remaining fields are owned by
    the sampler.  Indicators are stored as ``0.0`` / ``1.0`` floats so
    they enter the mixture and sufficient-statistic arithmetic
    directly.
    """

    beta_m: np.ndarray
    alpha_a: np.ndarray
    pi_m: np.ndarray
    pi_a: np.ndarray
    beta_c: np.ndarray
    alpha_c: np.ndarray
    r1: np.ndarray
    r3: np.ndarray
    beta_a: float = 0.0

    @classmethod
    def create(
        cls,
        data: ModelData,
        beta_m: np.ndarray,
        alpha_a: np.ndarray,
        pi_m: np.ndarray,
        pi_a: np.ndarray,
        *,
        beta_a: float = 0.0,
    ) -> ModelParameters:
        """Wrap the shared vectors and allocate the owned ones.

        Raises:
            TypeError: If a shared vector is not a float64 ndarray.
            ValueError: On a shape mismatch, non-finite values, or an
                inclusion probability outside ``(1/q², 1]`` (``(0, 1]``
                when ``q == 1``).
        """
        q = data.q
        beta_m = _shared_vector(beta_m, name="beta_m", q=q)
        alpha_a = _shared_vector(alpha_a, name="alpha_a", q=q)
        pi_m = _shared_vector(pi_m, name="pi_m", q=q)
        pi_a = _shared_vector(pi_a, name="pi_a", q=q)
        # At or below 1/q² a reflected proposal lands above 1 and is never
        # accepted, so the chain would stall outside its range.
        floor = 1.0 / (q * q) if q > 1 else 0.0
        for label, pi in (("pi_m", pi_m), ("pi_a", pi_a)):
            if np.any(pi <= floor) or np.any(pi > 1.0):
                raise ValueError(
                    f"'{label}' values must lie in ({floor:g}, 1] for q={q}."
                )
        if len({id(beta_m), id(alpha_a), id(pi_m), id(pi_a)}) != 4:
            raise ValueError(
                "'beta_m', 'alpha_a', 'pi_m' and 'pi_a' must be distinct arrays."
            )
        if not np.isfinite(beta_a):
            raise ValueError("'beta_a' must be finite.")

        return cls(
            beta_m=beta_m,
            alpha_a=alpha_a,
            pi_m=pi_m,
            pi_a=pi_a,
            beta_c=np.zeros(data.w1),
            alpha_c=np.zeros((data.w2, q)),
            r1=np.zeros(q),
            r3=np.zeros(q),
            beta_a=float(beta_a),
        )


@dataclass
class VarianceComponents:
    """The seven variance parameters of the model (all strictly positive)."""

    sigma_m0: float
    sigma_m1: float
    sigma_a: float
    sigma_ma0: float
    sigma_ma1: float
    sigma_g: float
    sigma_e: float

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


__all__ = [
    "VARIANCE_NAMES",
    "ModelData",
    "ModelParameters",
    "VarianceComponents",
]
