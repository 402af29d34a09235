"""JAX backend for the dense linear-algebra primitives.

NumPy ↔ JAX boundary convention
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
All public methods accept NumPy arrays and return NumPy arrays.
JAX arrays are materialised at the method boundary:

* **Inbound:** ``jnp.asarray(x, dtype=jnp.float64)``.  The float64
  cast is explicit because JAX defaults to float32.
* **Outbound:** ``np.array(result, dtype=np.float64)`` — a writable host
  copy that the sampler can mutate in place afterwards.

Float64 rationale
~~~~~~~~~~~~~~~~~
The residual caches are maintained incrementally for the whole run
and compared against a full rebuild in tests; the rebuild must agree
with NumPy to ~1e-10, which float32 cannot deliver.

Graceful degradation
~~~~~~~~~~~~~~~~~~~~
If JAX is not installed, :class:`JaxBackend` can still be
instantiated (for introspection) but ``is_available`` returns
``False`` and :func:`resolve_backend` raises ``ImportError`` when
this backend is explicitly requested.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

try:
    import jax

    # Enable 64-bit floating point before any array creation.
    jax.config.update("jax_enable_x64", True)

    import jax.numpy as jnp
    from jax import jit

    _CAN_IMPORT_JAX = True
except ImportError:
    _CAN_IMPORT_JAX = False


if _CAN_IMPORT_JAX:

    @jit
    def _gemm(alpha, a, b, beta, c):  # type: ignore[no-untyped-def]
        return alpha * jnp.matmul(a, b) + beta * c

    @jit
    def _column_sq_norms(x):  # type: ignore[no-untyped-def]
        return jnp.sum(x * x, axis=0)


@dataclass(frozen=True)
class JaxBackend:
    """JAX compute backend (JIT-compiled, float64)."""

    @property
    def name(self) -> str:
        return "jax"

    @property
    def is_available(self) -> bool:  # noqa: PLR6301
        return _CAN_IMPORT_JAX

    def gemm(
        self,
        alpha: float,
        a: np.ndarray,
        b: np.ndarray,
        beta: float,
        c: np.ndarray,
    ) -> np.ndarray:
        if a.shape[1] == 0:
            # XLA handles empty contractions, but skipping the
            # compile for a no-op product is cheaper.
            return np.asarray(beta * c, dtype=np.float64)
        result = _gemm(
            alpha,
            jnp.asarray(a, dtype=jnp.float64),
            jnp.asarray(b, dtype=jnp.float64),
            beta,
            jnp.asarray(c, dtype=jnp.float64),
        )
        return np.array(result, dtype=np.float64)

    def column_sq_norms(self, x: np.ndarray) -> np.ndarray:
        if x.shape[1] == 0:
            return np.zeros(0)
        return np.array(
            _column_sq_norms(jnp.asarray(x, dtype=jnp.float64)), dtype=np.float64
        )
