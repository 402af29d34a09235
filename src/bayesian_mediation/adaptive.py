"""Adaptive Metropolis update of the prior inclusion probabilities.

The per-mediator prior inclusion probabilities ``pi_m`` (for
``beta_m``) and ``pi_a`` (for ``alpha_a``) are updated jointly by one
Metropolis step per iteration:

1. **Proposal** — a multiplicative log-normal-style random walk,
   ``pi'[j] = |pi[j]·exp(ε_j)|`` with ``ε_j ~ U(−step, step)``,
   followed by the reflection rule

   * above 1: ``pi' ← 1/pi'``;
   * below ``1/q``: ``pi' ← 1/(q²·pi')``.

   For ``q = 1`` the floor ``1/q`` is 1 itself and the second rule
   would push every proposal above 1, so only the first rule applies.

2. **Target** — the Bernoulli likelihood of the current indicators,
   ``Σ_j r[j]·log p[j] + (1−r[j])·log(1−p[j])``, using ``r1`` for
   ``pi_m`` and ``r3`` for ``pi_a``.

3. **Test** — accept both proposals iff
   ``logR > log(u)``, ``u ~ U(0, 1)``, where ``logR`` sums the
   log-target differences of the two vectors.

Draw order per call: ``q`` uniforms for ``ε``, ``q`` uniforms for
``δ`` (the ``pi_a`` step), then ``u``.
"""

from __future__ import annotations

import math

import numpy as np


def propose_inclusion_probabilities(
    current: np.ndarray, log_step: np.ndarray, q: int
) -> np.ndarray:
    """Apply the multiplicative step and the reflection rule.

    Args:
        current: Current probabilities ``(q,)``.
        log_step: Log-scale increments ``(q,)``.
        q: Number of mediators (sets the ``1/q`` floor).

    Returns:
        A new ``(q,)`` array of proposed probabilities.
    """
    proposal = np.abs(current * np.exp(log_step))
    proposal = np.where(proposal > 1.0, 1.0 / proposal, proposal)
    if q > 1:
        proposal = np.where(proposal < 1.0 / q, 1.0 / (q * q * proposal), proposal)
    return proposal


def log_inclusion_posterior(p: np.ndarray, indicators: np.ndarray) -> float:
    """Bernoulli log-likelihood of *indicators* under probabilities *p*.

    Evaluated branch-wise so that ``p == 1`` with indicator 1 adds
    ``0`` rather than ``0·(−inf) = nan``; ``p == 1`` with indicator 0
    correctly yields ``−inf``.
    """
    with np.errstate(divide="ignore"):
        terms = np.where(indicators == 1.0, np.log(p), np.log1p(-p))
    return float(np.sum(terms))


def metropolis_accept(log_ratio: float, u: float) -> bool:
    """Metropolis decision ``log_ratio > log(u)``.

    ``u == 0`` gives ``log(u) = −inf`` and always accepts a finite or
    ``+inf`` ratio; a ``nan`` ratio always rejects.
    """
    log_u = math.log(u) if u > 0.0 else -math.inf
    return bool(log_ratio > log_u)


def adaptive_prior_step(
    rng: np.random.Generator,
    pi_m: np.ndarray,
    pi_a: np.ndarray,
    r1: np.ndarray,
    r3: np.ndarray,
    step: float,
) -> bool:
    """One joint Metropolis update of ``pi_m`` and ``pi_a``.

    On acceptance both arrays are overwritten **in place**; on
    rejection neither is touched.

    Returns:
        Whether the proposal was accepted.
    """
    q = pi_m.shape[0]
    eps = rng.uniform(-step, step, size=q)
    delta = rng.uniform(-step, step, size=q)
    proposal_m = propose_inclusion_probabilities(pi_m, eps, q)
    proposal_a = propose_inclusion_probabilities(pi_a, delta, q)

    log_ratio = (
        log_inclusion_posterior(proposal_a, r3)
        - log_inclusion_posterior(pi_a, r3)
        + log_inclusion_posterior(proposal_m, r1)
        - log_inclusion_posterior(pi_m, r1)
    )
    if not metropolis_accept(log_ratio, rng.random()):
        return False
    pi_a[:] = proposal_a
    pi_m[:] = proposal_m
    return True


__all__ = [
    "adaptive_prior_step",
    "log_inclusion_posterior",
    "metropolis_accept",
    "propose_inclusion_probabilities",
]
