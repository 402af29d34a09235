"""Spike-and-slab inclusion indicators.

Given the two candidate full conditionals of a coefficient, slab
``N(m₁, v₁)`` under prior variance ``τ₁²`` and spike ``N(m₀, v₀)``
under ``τ₀²``, the posterior log-odds of the slab component after
integrating the coefficient out is

    m₁²/(2v₁) − m₀²/(2v₀) + ½·log(v₁/τ₁²) − ½·log(v₀/τ₀²) + log(π/(1−π))

The indicator is then Bernoulli with success probability
``e^x / (1 + e^x)``.  Above :data:`LOG_ODDS_CLAMP` the exponential is
not evaluated at all and the slab is chosen deterministically; no
random number is consumed on that branch.
"""

from __future__ import annotations

import math

import numpy as np
from scipy.special import logit

LOG_ODDS_CLAMP: float = 300.0
"""Log-odds at or above which the indicator is set to 1 without a draw.

``exp(300) ≈ 1.9e130`` is still representable, so the clamp is a
fixed policy threshold rather than the float64 overflow point.
"""


def prior_log_odds(pi: float) -> float:
    """``log(pi / (1 − pi))``; ``+inf`` at ``pi == 1``."""
    return float(logit(pi))


def log_odds(
    mean1: float,
    var1: float,
    prior_var1: float,
    mean0: float,
    var0: float,
    prior_var0: float,
    pi: float,
) -> float:
    """Posterior log-odds of the slab (indicator = 1) component."""
    return (
        mean1 * mean1 / (2.0 * var1)
        - mean0 * mean0 / (2.0 * var0)
        + 0.5 * math.log(var1 / prior_var1)
        - 0.5 * math.log(var0 / prior_var0)
        + prior_log_odds(pi)
    )


def inclusion_probability(log_odds_value: float) -> float:
    """Logistic transform ``e^x / (1 + e^x)`` for ``x < LOG_ODDS_CLAMP``."""
    p = math.exp(log_odds_value)
    return p / (1.0 + p)


def sample_indicator(rng: np.random.Generator, log_odds_value: float) -> float:
    """Draw a 0/1 indicator from its log-odds.

    Returns:
        ``1.0`` or ``0.0``.
    """
    if log_odds_value < LOG_ODDS_CLAMP:
        p = inclusion_probability(log_odds_value)
        return 1.0 if rng.random() < p else 0.0
    return 1.0


__all__ = [
    "LOG_ODDS_CLAMP",
    "inclusion_probability",
    "log_odds",
    "prior_log_odds",
    "sample_indicator",
]
