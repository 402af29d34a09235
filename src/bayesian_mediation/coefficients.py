"""Full-conditional Normal draws for the regression coefficients.

Conjugate Normal–Normal algebra
-------------------------------
For a single coefficient ``b`` on regressor column ``x`` in a Gaussian
regression with noise variance ``s²`` and prior ``b ~ N(0, τ²)``, the
full conditional given everything else is Normal with

    var  = 1 / (1/τ² + ‖x‖² / s²)
    mean = x·r₋ᵦ · var / s²

where ``r₋ᵦ`` is the residual with ``b``'s own contribution added
back: ``r₋ᵦ = r + x·b``.  The residual caches hold ``r``, so the dot
product ``x·r₋ᵦ`` costs O(n) with no rebuild.

Flat priors (``τ² = ∞``) reduce to ``var = s²/‖x‖²`` and
``mean = x·r₋ᵦ / ‖x‖²``; the covariate-adjustment coefficients
``beta_c`` and ``alpha_c`` use that form.

Spike-and-slab coefficients
---------------------------
``beta_m[j]`` and ``alpha_a[j]`` have a two-component prior: variance
``τ₀²`` (spike, indicator 0) or ``τ₁²`` (slab, indicator 1).  Both
conditional Normals are drawn every sweep (active first, then
inactive) and the indicator picks which one becomes the new value.
Drawing both keeps the generator's consumption independent of the
indicator, so the draw order is the same on every iteration.
"""

from __future__ import annotations

import math

import numpy as np


def conditional_moments(
    xty: float,
    col_sq_norm: float,
    noise_var: float,
    prior_var: float = math.inf,
) -> tuple[float, float]:
    """Mean and variance of a conjugate Normal full conditional.

    Args:
        xty: ``x · (residual + x·current)``.
        col_sq_norm: ``‖x‖²``.
        noise_var: Residual variance of the regression stage.
        prior_var: Prior variance of the coefficient; ``inf`` for a
            flat prior.

    Returns:
        ``(mean, variance)``.
    """
    var = 1.0 / (1.0 / prior_var + col_sq_norm / noise_var)
    return xty * (var / noise_var), var


def partial_residual_dot(
    column: np.ndarray, col_sq_norm: float, residual: np.ndarray, current: float
) -> float:
    """``column · (residual + column * current)`` using the cached ``‖column‖²``."""
    return float(column @ residual) + current * col_sq_norm


def draw_spike_slab(
    rng: np.random.Generator,
    indicator: float,
    mean1: float,
    var1: float,
    mean0: float,
    var0: float,
) -> float:
    """Draw the active and inactive conditionals and mix by *indicator*."""
    active = rng.normal(mean1, math.sqrt(var1))
    inactive = rng.normal(mean0, math.sqrt(var0))
    return indicator * active + (1.0 - indicator) * inactive


def draw_flat_coefficient(
    rng: np.random.Generator,
    column: np.ndarray,
    col_sq_norm: float,
    residual: np.ndarray,
    current: float,
    noise_var: float,
) -> float:
    """One draw for a flat-prior covariate coefficient."""
    xty = partial_residual_dot(column, col_sq_norm, residual, current)
    mean, var = conditional_moments(xty, col_sq_norm, noise_var)
    return float(rng.normal(mean, math.sqrt(var)))


__all__ = [
    "conditional_moments",
    "draw_flat_coefficient",
    "draw_spike_slab",
    "partial_residual_dot",
]
