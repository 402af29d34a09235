"""Backend abstraction layer for the dense linear-algebra primitives.

The sampler itself only ever needs two bulk operations:

* a matrix multiply-accumulate ``alpha * (a @ b) + beta * c`` (the
  BLAS ``gemm`` contract), used to rebuild the residual caches from
  scratch;
* column sums of squares, used once at construction to cache the
  squared norms of every regressor column.

Each backend implements the :class:`BackendProtocol` interface.  The
sampler dispatches to the active backend via :func:`resolve_backend`
rather than testing for JAX at every call site.

Resolution follows the policy set by :mod:`._config`:

1. Programmatic override via :func:`~bayesian_mediation.set_backend`.
2. ``BAYESIAN_MEDIATION_BACKEND`` environment variable.
3. Auto-detection: ``"jax"`` if importable, else ``"numpy"``.

When ``"jax"`` is explicitly requested but JAX is not installed, an
:class:`ImportError` is raised; explicit requests are never silently
degraded.  The ``"auto"`` policy is the only mode that falls back from
JAX to NumPy.

All backends accept and return NumPy ``float64`` arrays; callers never
see backend-specific array types.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

import numpy as np

from .._config import get_backend

# ------------------------------------------------------------------ #
# BackendProtocol
# ------------------------------------------------------------------ #


@runtime_checkable
class BackendProtocol(Protocol):
    """Interface that every linear-algebra backend must implement.

    Attributes:
        name: Short identifier (e.g. ``"numpy"``, ``"jax"``).
    """

    @property
    def name(self) -> str: ...

    @property
    def is_available(self) -> bool:
        """Whether the backend's dependencies are importable."""
        ...

    def gemm(
        self,
        alpha: float,
        a: np.ndarray,
        b: np.ndarray,
        beta: float,
        c: np.ndarray,
    ) -> np.ndarray:
        """Multiply-accumulate ``alpha * (a @ b) + beta * c``.

        Inner dimensions of size zero are legal (an empty covariate
        block) and contribute nothing to the result.

        Args:
            alpha: Scale applied to the product.
            a: Left operand ``(m, k)``.
            b: Right operand ``(k, p)``.
            beta: Scale applied to the accumulator.
            c: Accumulator ``(m, p)``; not modified.

        Returns:
            A new ``(m, p)`` float64 array.
        """
        ...

    def column_sq_norms(self, x: np.ndarray) -> np.ndarray:
        """Column sums of squares of a ``(n, k)`` matrix.

        Returns:
            Array of shape ``(k,)``.
        """
        ...


# ------------------------------------------------------------------ #
# Backend resolution
# ------------------------------------------------------------------ #


def _make_numpy() -> BackendProtocol:
    from ._numpy import NumpyBackend

    return NumpyBackend()


def _make_jax() -> BackendProtocol:
    from ._jax import JaxBackend

    backend = JaxBackend()
    if not backend.is_available:
        raise ImportError(
            "Backend 'jax' was requested but JAX is not installed.  "
            "Install it with `pip install bayesian-mediation[jax]` or "
            "select the NumPy backend with set_backend('numpy')."
        )
    return backend


_FACTORIES: dict[str, Callable[[], BackendProtocol]] = {
    "numpy": _make_numpy,
    "jax": _make_jax,
}

# One instance per backend name; backends are stateless.
_BACKEND_CACHE: dict[str, BackendProtocol] = {}


def resolve_backend(name: str | None = None) -> BackendProtocol:
    """Backend instance for *name*, or for the configured policy if ``None``.

    Raises:
        ImportError: If ``"jax"`` is requested but JAX is not installed.
        ValueError: If *name* is not a recognised backend.
    """
    key = (get_backend() if name is None else name).strip().lower()
    if key not in _BACKEND_CACHE:
        factory = _FACTORIES.get(key)
        if factory is None:
            raise ValueError(
                f"Unknown backend {name!r}.  Choose from: {sorted(_FACTORIES)}."
            )
        _BACKEND_CACHE[key] = factory()
    return _BACKEND_CACHE[key]


__all__ = ["BackendProtocol", "resolve_backend"]
