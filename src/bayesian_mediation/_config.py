"""Backend selection policy.

Only the bulk linear algebra of a residual rebuild (``gemm`` and column
sums of squares) is routed through a backend; the per-coefficient
Gibbs updates are O(n) NumPy vector operations either way.  Random
draws always come from the sampler's own ``numpy.random.Generator``,
so switching backend changes a chain only at the rounding level.

Which backend is used is decided, first match wins, by:

1. a programmatic override (:func:`set_backend`, or temporarily
   :func:`use_backend`);
2. the ``BAYESIAN_MEDIATION_BACKEND`` environment variable;
3. auto-detection: ``"jax"`` when JAX imports, else ``"numpy"``.

Examples:
    From the shell::

        export BAYESIAN_MEDIATION_BACKEND=numpy

    For one block of code::

        with bayesian_mediation.use_backend("numpy"):
            result = bayesian_mediation.bayesian_mediation_analysis(...)
"""

from __future__ import annotations

import os
import warnings
from collections.abc import Iterator
from contextlib import contextmanager

_ENV_VAR = "BAYESIAN_MEDIATION_BACKEND"

_CONCRETE = ("jax", "numpy")

_VALID_BACKENDS = {*_CONCRETE, "auto"}

# None and "auto" both mean "no programmatic override".
_backend_override: str | None = None


def _normalise(name: str) -> str:
    normalised = name.strip().lower()
    if normalised not in _VALID_BACKENDS:
        raise ValueError(
            f"Unknown backend '{name}'. Choose from: {sorted(_VALID_BACKENDS)}"
        )
    return normalised


def _jax_is_available() -> bool:
    """Return ``True`` if JAX can be imported."""
    try:
        import jax  # noqa: F401
    except ImportError:
        return False
    return True


def _from_environment() -> str | None:
    raw = os.environ.get(_ENV_VAR, "")
    value = raw.strip().lower()
    if value in _CONCRETE:
        return value
    if value not in ("", "auto"):
        warnings.warn(
            f"Ignoring {_ENV_VAR}={raw!r}; expected one of {list(_CONCRETE)}.",
            UserWarning,
            stacklevel=3,
        )
    return None


def get_backend() -> str:
    """Name of the backend the next sampler will use.

    Returns:
        ``"jax"`` or ``"numpy"``.
    """
    if _backend_override in _CONCRETE:
        return _backend_override
    env = _from_environment()
    if env is not None:
        return env
    return "jax" if _jax_is_available() else "numpy"


def set_backend(name: str) -> None:
    """Override the backend selection for the rest of the session.

    Args:
        name: ``"jax"``, ``"numpy"`` or ``"auto"`` (case-insensitive).
            ``"auto"`` drops the override.

    Raises:
        ValueError: If *name* is not a recognised backend.
    """
    global _backend_override
    _backend_override = _normalise(name)


@contextmanager
def use_backend(name: str) -> Iterator[None]:
    """Temporarily override the backend; the previous setting is restored on exit."""
    global _backend_override
    previous = _backend_override
    _backend_override = _normalise(name)
    try:
        yield
    finally:
        _backend_override = previous
