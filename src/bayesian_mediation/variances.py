"""Inverse-gamma draws for the seven variance components.

Each variance has an ``IG(shape, rate)`` prior and, given the current
residuals / coefficients, an ``IG`` full conditional.  A draw is taken
by sampling ``g ~ Gamma(shape, scale=1/rate)`` and returning ``1/g``.

Full conditionals
-----------------
===============  =============================  =====================================
variance         shape                          rate
===============  =============================  =====================================
``sigma_e``      ``k_e + n/2``                  ``l_e + ½·Σ res1²``
``sigma_g``      ``k_g + q·n/2``                ``l_g + ½·Σ res2²`` (all n·q entries)
``sigma_m1``     ``k_m1 + ½·Σ r1``              ``l_m1 + ½·Σ r1·beta_m²``
``sigma_a``      ``k_a + ½``                    ``l_a + beta_a²/2``
``sigma_ma1``    ``k_ma1 + ½·Σ r3``             ``l_ma1 + ½·Σ r3·alpha_a²``
``sigma_m0``     ``k_m0 + ½·Σ (1−r1)``          ``l_m0 + ½·Σ (1−r1)·beta_m²``
``sigma_ma0``    ``k_ma0 + ½·Σ (1−r3)``         ``l_ma0 + ½·Σ (1−r3)·alpha_a²``
===============  =============================  =====================================

The two noise variances are drawn at the start of a sweep; the five
component variances after the coefficient / indicator sweep, in the
row order above.

Collapse policy
---------------
``1/g`` is finite and positive whenever ``g`` is; a Gamma draw with a
positive shape is almost surely in ``(0, ∞)``.  A draw outside that
range can only come from degenerate inputs (e.g. an overflowing rate)
and would poison every later conditional, so it raises
:class:`VarianceCollapseError` instead of being clamped.
"""

from __future__ import annotations

import math

import numpy as np

from .priors import PriorHyperparameters
from .state import ModelParameters, VarianceComponents


class VarianceCollapseError(FloatingPointError):
    """An inverse-gamma draw was not a finite, strictly positive number."""


def draw_inverse_gamma(
    rng: np.random.Generator, shape: float, rate: float, *, name: str = "variance"
) -> float:
    """Draw ``1 / Gamma(shape, scale=1/rate)``.

    Raises:
        VarianceCollapseError: If the result is not finite and > 0.
    """
    g = rng.gamma(shape, 1.0 / rate)
    value = math.inf if g == 0.0 else 1.0 / g
    if not (math.isfinite(value) and value > 0.0):
        raise VarianceCollapseError(
            f"{name} draw collapsed (shape={shape!r}, rate={rate!r}, gamma={g!r})."
        )
    return float(value)


def initial_variances(
    rng: np.random.Generator, priors: PriorHyperparameters
) -> VarianceComponents:
    """One draw of every variance component from its prior."""
    p = priors
    return VarianceComponents(
        sigma_m0=draw_inverse_gamma(rng, p.shape_m0, p.rate_m0, name="sigma_m0"),
        sigma_m1=draw_inverse_gamma(rng, p.shape_m1, p.rate_m1, name="sigma_m1"),
        sigma_a=draw_inverse_gamma(rng, p.shape_a, p.rate_a, name="sigma_a"),
        sigma_ma0=draw_inverse_gamma(rng, p.shape_ma0, p.rate_ma0, name="sigma_ma0"),
        sigma_ma1=draw_inverse_gamma(rng, p.shape_ma1, p.rate_ma1, name="sigma_ma1"),
        sigma_g=draw_inverse_gamma(rng, p.shape_g, p.rate_g, name="sigma_g"),
        sigma_e=draw_inverse_gamma(rng, p.shape_e, p.rate_e, name="sigma_e"),
    )


def sample_noise_variances(
    rng: np.random.Generator,
    variances: VarianceComponents,
    priors: PriorHyperparameters,
    res1: np.ndarray,
    res2: np.ndarray,
) -> None:
    """Update ``sigma_e`` then ``sigma_g`` in place."""
    n = res1.shape[0]
    q = res2.shape[1]
    sse1 = float(res1 @ res1)
    sse2 = float(np.einsum("ij,ij->", res2, res2))
    variances.sigma_e = draw_inverse_gamma(
        rng, priors.shape_e + n / 2.0, priors.rate_e + sse1 / 2.0, name="sigma_e"
    )
    variances.sigma_g = draw_inverse_gamma(
        rng, priors.shape_g + q * (n / 2.0), priors.rate_g + sse2 / 2.0, name="sigma_g"
    )


def _mixture_sufficient_stats(
    indicators: np.ndarray, coefs: np.ndarray
) -> tuple[float, float, float, float]:
    """Half-counts and half sums of squares split by indicator value."""
    sq = coefs * coefs
    half_n1 = float(np.sum(indicators)) / 2.0
    half_ss1 = float(np.sum(sq * indicators)) / 2.0
    half_n0 = float(np.sum(1.0 - indicators)) / 2.0
    half_ss0 = float(np.sum(sq * (1.0 - indicators))) / 2.0
    return half_n1, half_ss1, half_n0, half_ss0


def sample_component_variances(
    rng: np.random.Generator,
    variances: VarianceComponents,
    priors: PriorHyperparameters,
    params: ModelParameters,
) -> None:
    """Update ``sigma_m1, sigma_a, sigma_ma1, sigma_m0, sigma_ma0`` in place."""
    p = priors
    m_n1, m_ss1, m_n0, m_ss0 = _mixture_sufficient_stats(params.r1, params.beta_m)
    a_n1, a_ss1, a_n0, a_ss0 = _mixture_sufficient_stats(params.r3, params.alpha_a)

    variances.sigma_m1 = draw_inverse_gamma(
        rng, p.shape_m1 + m_n1, p.rate_m1 + m_ss1, name="sigma_m1"
    )
    variances.sigma_a = draw_inverse_gamma(
        rng, p.shape_a + 0.5, p.rate_a + params.beta_a**2 / 2.0, name="sigma_a"
    )
    variances.sigma_ma1 = draw_inverse_gamma(
        rng, p.shape_ma1 + a_n1, p.rate_ma1 + a_ss1, name="sigma_ma1"
    )
    variances.sigma_m0 = draw_inverse_gamma(
        rng, p.shape_m0 + m_n0, p.rate_m0 + m_ss0, name="sigma_m0"
    )
    variances.sigma_ma0 = draw_inverse_gamma(
        rng, p.shape_ma0 + a_n0, p.rate_ma0 + a_ss0, name="sigma_ma0"
    )


__all__ = [
    "VarianceCollapseError",
    "draw_inverse_gamma",
    "initial_variances",
    "sample_component_variances",
    "sample_noise_variances",
]
