"""Gibbs / Metropolis sampler for the spike-and-slab mediation model.

Model
-----
Outcome stage, for ``n`` observations and ``q`` candidate mediators::

    Y = beta_a·A + M·beta_m + C1·beta_c + e,          e ~ N(0, sigma_e·I)

Mediator stage, for each mediator ``j``::

    M[:, j] = alpha_a[j]·A + C2·alpha_c[:, j] + g_j,   g_j ~ N(0, sigma_g·I)

Priors::

    beta_m[j]  ~ r1[j]·N(0, sigma_m1) + (1 − r1[j])·N(0, sigma_m0)
    alpha_a[j] ~ r3[j]·N(0, sigma_ma1) + (1 − r3[j])·N(0, sigma_ma0)
    r1[j] ~ Bernoulli(pi_m[j]),   r3[j] ~ Bernoulli(pi_a[j])
    beta_a ~ N(0, sigma_a),       beta_c, alpha_c flat
    every sigma_* ~ inverse-gamma

Sweep
-----
One call to :meth:`MediationSampler.iteration` performs, in order:

1. residual rebuild (iteration 0 only);
2. ``sigma_e``, ``sigma_g``;
3. for each mediator ``j``: ``beta_m[j]``, ``alpha_a[j]``, ``r1[j]``,
   ``r3[j]``, then ``alpha_c[:, j]`` entrywise;
4. ``beta_c`` entrywise;
5. ``beta_a``;
6. ``sigma_m1``, ``sigma_a``, ``sigma_ma1``, ``sigma_m0``, ``sigma_ma0``;
7. joint Metropolis step on ``pi_m`` / ``pi_a``;
8. one row to the result sink if past burn-in on a thinning boundary.

Every draw comes from the sampler's own ``numpy.random.Generator`` in
this fixed order, so a seed fully determines the trajectory.  The
sweep is inherently sequential: ``beta_m[j]`` reads ``res1`` as left
by mediator ``j − 1`` and leaves it updated for ``j + 1``.
"""

from __future__ import annotations

import logging
import math
import warnings
from typing import Any

import numpy as np

from ._backends import BackendProtocol, resolve_backend
from .adaptive import adaptive_prior_step
from .coefficients import (
    conditional_moments,
    draw_flat_coefficient,
    draw_spike_slab,
    partial_residual_dot,
)
from .priors import PriorHyperparameters
from .residuals import ResidualCache
from .selection import log_odds, sample_indicator
from .sinks import ResultSink, format_row
from .state import ModelData, ModelParameters, VarianceComponents
from .variances import (
    initial_variances,
    sample_component_variances,
    sample_noise_variances,
)

logger = logging.getLogger(__name__)

DEFAULT_THIN: int = 10
"""Retain every ``DEFAULT_THIN``-th post-burn-in iteration."""


class MediationSampler:
    """State and per-iteration update of one Markov chain.

    Construction validates the inputs, caches the regressor squared
    norms, and initialises every variance component with one draw
    from its prior.  After that the chain advances only through
    :meth:`iteration` (or the :meth:`run` convenience loop).

    ``beta_m``, ``alpha_a``, ``pi_m`` and ``pi_a`` are updated **in
    place**: pass writeable float64 arrays and read them after the run.

    Args:
        Y: Outcome ``(n,)``.
        A: Exposure ``(n,)``.
        M: Mediators ``(n, q)``.
        C1: Outcome-stage covariates ``(n, w1)`` or ``None``.
        C2: Mediator-stage covariates ``(n, w2)`` or ``None``.
        beta_m: Shared mediator-effect vector ``(q,)`` (initial values).
        alpha_a: Shared exposure–mediator vector ``(q,)``.
        pi_m: Shared prior inclusion probabilities for ``beta_m``.
        pi_a: Shared prior inclusion probabilities for ``alpha_a``.
        priors: Prior hyperparameters; defaults to
            :class:`PriorHyperparameters()`.
        random_state: Seed or ``numpy.random.Generator``.  A generator
            is used as-is (and advanced by the chain).
        sink: Receiver for retained rows; ``None`` discards them.
        thin: Thinning interval for retained rows.
        backend: ``"numpy"``, ``"jax"`` or ``None`` for the configured
            policy.
        beta_a_init: Starting value of the exposure effect.
        log_every: Progress is logged at INFO every *log_every*
            iterations and the variance components at DEBUG every
            ``10 * log_every``; ``0`` disables both.

    Raises:
        ValueError: On mismatched dimensions or invalid arguments.
        TypeError: If a shared vector is not a float64 ndarray.
    """

    def __init__(
        self,
        Y: Any,
        A: Any,
        M: Any,
        C1: Any,
        C2: Any,
        beta_m: np.ndarray,
        alpha_a: np.ndarray,
        pi_m: np.ndarray,
        pi_a: np.ndarray,
        *,
        priors: PriorHyperparameters | None = None,
        random_state: int | np.random.Generator | None = None,
        sink: ResultSink | None = None,
        thin: int = DEFAULT_THIN,
        backend: str | None = None,
        beta_a_init: float = 0.0,
        log_every: int = 1000,
    ) -> None:
        if thin < 1:
            raise ValueError(f"'thin' must be a positive integer, got {thin}.")
        if log_every < 0:
            raise ValueError(f"'log_every' must be non-negative, got {log_every}.")

        self.backend: BackendProtocol = resolve_backend(backend)
        self.priors = priors if priors is not None else PriorHyperparameters()
        self.rng = (
            random_state
            if isinstance(random_state, np.random.Generator)
            else np.random.default_rng(random_state)
        )
        self.sink = sink
        self.thin = int(thin)
        self.log_every = int(log_every)

        self.data = ModelData.from_arrays(Y, A, M, C1, C2, self.backend)
        self.params = ModelParameters.create(
            self.data, beta_m, alpha_a, pi_m, pi_a, beta_a=beta_a_init
        )
        self.variances: VarianceComponents = initial_variances(self.rng, self.priors)
        self.residuals = ResidualCache(self.data, self.params, self.backend)

        self.n_iterations = 0
        self.n_accepted = 0
        self.n_retained = 0

    # ---- Dimensions ----------------------------------------------

    @property
    def n(self) -> int:
        return self.data.n

    @property
    def q(self) -> int:
        return self.data.q

    @property
    def w1(self) -> int:
        return self.data.w1

    @property
    def w2(self) -> int:
        return self.data.w2

    @property
    def acceptance_rate(self) -> float:
        """Fraction of accepted ``pi`` proposals so far (``nan`` before any)."""
        if self.n_iterations == 0:
            return math.nan
        return self.n_accepted / self.n_iterations

    # ---- One sweep -----------------------------------------------

    def iteration(self, burn_in: int, it: int) -> None:
        """Advance the chain by one full Gibbs / Metropolis sweep.

        Args:
            burn_in: Iterations up to and including this index are
                never written to the sink.
            it: Zero-based index of this iteration.
        """
        data, params, var = self.data, self.params, self.variances
        rng, priors, cache = self.rng, self.priors, self.residuals

        if self.log_every and it % (10 * self.log_every) == 0:
            logger.debug(
                "Iter %d %s",
                it,
                " ".join(f"{k} {v:.3E}" for k, v in var.as_dict().items()),
            )

        if it == 0:
            cache.recompute()

        sample_noise_variances(rng, var, priors, cache.res1, cache.res2)

        # Posterior variances that do not change within the sweep.
        var_m0 = 1.0 / (1.0 / var.sigma_m0 + data.M2norm / var.sigma_e)
        var_m1 = 1.0 / (1.0 / var.sigma_m1 + data.M2norm / var.sigma_e)
        _, var_alpha0 = conditional_moments(
            0.0, data.A2norm, var.sigma_g, var.sigma_ma0
        )
        _, var_alpha1 = conditional_moments(
            0.0, data.A2norm, var.sigma_g, var.sigma_ma1
        )

        for j in range(data.q):
            self._update_mediator(
                j, float(var_m0[j]), float(var_m1[j]), var_alpha0, var_alpha1
            )

        self._update_outcome_covariates()
        self._update_exposure_effect()

        sample_component_variances(rng, var, priors, params)

        accepted = adaptive_prior_step(
            rng, params.pi_m, params.pi_a, params.r1, params.r3, priors.pi_step
        )
        self.n_accepted += int(accepted)
        self.n_iterations += 1

        if self.log_every and it % self.log_every == 0:
            logger.info("Iter %d", it)

        if it > burn_in and it % self.thin == 0:
            self._emit()

    def _update_mediator(
        self,
        j: int,
        var_m0: float,
        var_m1: float,
        var_alpha0: float,
        var_alpha1: float,
    ) -> None:
        """``beta_m[j]``, ``alpha_a[j]``, ``r1[j]``, ``r3[j]``, ``alpha_c[:, j]``."""
        data, params, var = self.data, self.params, self.variances
        rng, cache = self.rng, self.residuals
        m_j = data.M[:, j]
        res2_j = cache.res2[:, j]
        res2_c_j = cache.res2_c[:, j]

        xty_m = partial_residual_dot(
            m_j, float(data.M2norm[j]), cache.res1, params.beta_m[j]
        )
        mean_m0 = xty_m * (var_m0 / var.sigma_e)
        mean_m1 = xty_m * (var_m1 / var.sigma_e)
        # res2_c already excludes alpha_a[j]: no add-back needed.
        xty_a = float(data.A @ res2_c_j)
        mean_a0 = xty_a * (var_alpha0 / var.sigma_g)
        mean_a1 = xty_a * (var_alpha1 / var.sigma_g)

        old = float(params.beta_m[j])
        new = draw_spike_slab(rng, params.r1[j], mean_m1, var_m1, mean_m0, var_m0)
        params.beta_m[j] = new
        cache.apply_delta(cache.res1, m_j, old, new)

        old = float(params.alpha_a[j])
        new = draw_spike_slab(
            rng, params.r3[j], mean_a1, var_alpha1, mean_a0, var_alpha0
        )
        params.alpha_a[j] = new
        cache.apply_delta(res2_j, data.A, old, new)

        params.r1[j] = sample_indicator(
            rng,
            log_odds(
                mean_m1,
                var_m1,
                var.sigma_m1,
                mean_m0,
                var_m0,
                var.sigma_m0,
                float(params.pi_m[j]),
            ),
        )
        params.r3[j] = sample_indicator(
            rng,
            log_odds(
                mean_a1,
                var_alpha1,
                var.sigma_ma1,
                mean_a0,
                var_alpha0,
                var.sigma_ma0,
                float(params.pi_a[j]),
            ),
        )

        for k in range(data.w2):
            c_k = data.C2[:, k]
            old = float(params.alpha_c[k, j])
            new = draw_flat_coefficient(
                rng, c_k, float(data.C2_2norm[k]), res2_j, old, var.sigma_g
            )
            params.alpha_c[k, j] = new
            cache.apply_delta(res2_j, c_k, old, new)
            cache.apply_delta(res2_c_j, c_k, old, new)

    def _update_outcome_covariates(self) -> None:
        data, params, cache = self.data, self.params, self.residuals
        for k in range(data.w1):
            c_k = data.C1[:, k]
            old = float(params.beta_c[k])
            new = draw_flat_coefficient(
                self.rng,
                c_k,
                float(data.C1_2norm[k]),
                cache.res1,
                old,
                self.variances.sigma_e,
            )
            params.beta_c[k] = new
            cache.apply_delta(cache.res1, c_k, old, new)

    def _update_exposure_effect(self) -> None:
        data, params, cache = self.data, self.params, self.residuals
        var = self.variances
        old = params.beta_a
        xty = partial_residual_dot(data.A, data.A2norm, cache.res1, old)
        mean, v = conditional_moments(xty, data.A2norm, var.sigma_e, var.sigma_a)
        new = float(self.rng.normal(mean, math.sqrt(v)))
        params.beta_a = new
        cache.apply_delta(cache.res1, data.A, old, new)

    def _emit(self) -> None:
        self.n_retained += 1
        if self.sink is None:
            return
        p = self.params
        self.sink.write(format_row(p.beta_m, p.pi_m, p.alpha_a, p.pi_a, p.beta_a))

    # ---- Driver ----------------------------------------------------

    def run(self, n_iter: int, burn_in: int) -> MediationSampler:
        """Call :meth:`iteration` for ``it = 0 … n_iter − 1``.

        Returns:
            ``self``, for chaining.

        Raises:
            ValueError: If *n_iter* or *burn_in* is negative.
        """
        if n_iter < 0 or burn_in < 0:
            raise ValueError("'n_iter' and 'burn_in' must be non-negative.")
        if burn_in >= n_iter:
            warnings.warn(
                f"burn_in={burn_in} >= n_iter={n_iter}: no draws will be retained.",
                UserWarning,
                stacklevel=2,
            )
        for it in range(n_iter):
            self.iteration(burn_in, it)
        return self


def expected_retained(n_iter: int, burn_in: int, thin: int = DEFAULT_THIN) -> int:
    """Number of indices ``burn_in < it < n_iter`` divisible by *thin*."""
    if n_iter <= burn_in + 1:
        return 0
    return (n_iter - 1) // thin - burn_in // thin


__all__ = ["DEFAULT_THIN", "MediationSampler", "expected_retained"]
