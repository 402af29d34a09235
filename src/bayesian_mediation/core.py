"""Driver for Bayesian mediation analysis with spike-and-slab selection.

The high-level entry point :func:`bayesian_mediation_analysis` wraps
the :class:`~.sampler.MediationSampler` with everything a caller
usually wants around a chain:

* conversion of NumPy / pandas / Polars inputs, with mediator names
  taken from the ``M`` frame's columns;
* optional column standardisation of ``Y``, ``A`` and ``M``;
* starting values: zeros, or least-squares estimates from the two
  regression stages fitted with statsmodels OLS (``init="ols"``);
* the sampling loop itself (``n_iter`` sweeps with constant burn-in);
* retained draws collected in memory and, when ``results_path`` is
  given, appended to a whitespace-separated text file;
* a frozen :class:`~._results.MediationResult` with posterior
  summaries.

Mediation model
~~~~~~~~~~~~~~~
The exposure ``A`` acts on the outcome ``Y`` directly (``beta_a``) and
through each candidate mediator ``M_j``: ``A → M_j`` with effect
``alpha_a[j]`` and ``M_j → Y`` with effect ``beta_m[j]``.  The
indirect effect carried by mediator ``j`` is ``alpha_a[j]·beta_m[j]``,
non-negligible only when *both* legs sit in their slab components.
The spike-and-slab indicators ``r1`` / ``r3`` select those mediators.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

import numpy as np
import pandas as pd
import statsmodels.api as sm

from ._compat import _as_float_matrix, _as_float_vector, _column_names
from ._results import MediationResult, summarize_draws
from .preprocessing import standardize_columns
from .priors import PriorHyperparameters
from .sampler import DEFAULT_THIN, MediationSampler
from .sinks import MemorySink, TeeSink, TextFileSink, column_labels

logger = logging.getLogger(__name__)


def ols_starting_values(
    Y: np.ndarray,
    A: np.ndarray,
    M: np.ndarray,
    C1: np.ndarray,
    C2: np.ndarray,
) -> tuple[np.ndarray, np.ndarray, float]:
    """Least-squares estimates of ``beta_m``, ``alpha_a`` and ``beta_a``.

    Fits the outcome model ``Y ~ A + M + C1`` once and the mediator
    model ``M_j ~ A + C2`` per mediator, without intercepts (the
    sampler's model has none; standardise or include a constant
    column in the covariates instead).

    Raises:
        ValueError: If the outcome model has at least as many
            regressors as observations.
    """
    n, q = M.shape
    X_out = np.column_stack([A, M, C1])
    if X_out.shape[1] >= n:
        raise ValueError(
            f"init='ols' needs more observations ({n}) than outcome-model "
            f"regressors ({X_out.shape[1]}); use init='zeros'."
        )
    coefs = np.asarray(sm.OLS(Y, X_out).fit().params)
    beta_a = float(coefs[0])
    beta_m = coefs[1 : 1 + q].copy()

    X_med = np.column_stack([A, C2])
    alpha_a = np.array(
        [float(np.asarray(sm.OLS(M[:, j], X_med).fit().params)[0]) for j in range(q)]
    )
    return beta_m, alpha_a, beta_a


def _initial_vector(
    value: Any, *, name: str, q: int, default: float
) -> np.ndarray:
    if value is None:
        return np.full(q, default)
    if isinstance(value, np.ndarray) and value.dtype == np.float64:
        # Caller's own array: shared, updated in place.
        return value
    return _as_float_vector(value, name=name, length=q)


def bayesian_mediation_analysis(
    Y: Any,
    A: Any,
    M: Any,
    C1: Any = None,
    C2: Any = None,
    *,
    n_iter: int = 10_000,
    burn_in: int = 2_000,
    thin: int = DEFAULT_THIN,
    beta_m: Any = None,
    alpha_a: Any = None,
    pi_m: Any = None,
    pi_a: Any = None,
    init: Literal["zeros", "ols"] = "zeros",
    priors: PriorHyperparameters | None = None,
    random_state: int | np.random.Generator | None = None,
    results_path: str | None = None,
    standardize: bool = False,
    backend: str | None = None,
    log_every: int = 1000,
) -> MediationResult:
    """Run the spike-and-slab mediation sampler and summarise the draws.

    Args:
        Y: Outcome, length ``n``.
        A: Exposure, length ``n``.
        M: Candidate mediators ``(n, q)``.  DataFrame column names are
            used as mediator labels.
        C1: Outcome-stage covariates ``(n, w1)``, optional.
        C2: Mediator-stage covariates ``(n, w2)``, optional.
        n_iter: Number of sweeps.
        burn_in: Sweeps with index ``<= burn_in`` are never retained.
        thin: Retain every *thin*-th post-burn-in sweep.
        beta_m: Starting mediator effects.  A float64 ndarray is
            updated in place; anything else is copied.  Overrides
            *init* for this vector.
        alpha_a: Starting exposure–mediator effects (as *beta_m*).
        pi_m: Starting inclusion probabilities for ``beta_m``,
            default ``0.5``.  In-place semantics as *beta_m*.
        pi_a: Starting inclusion probabilities for ``alpha_a``,
            default ``0.5``.
        init: ``"zeros"`` or ``"ols"`` (least-squares warm start for
            ``beta_m``, ``alpha_a`` and ``beta_a``).
        priors: Prior hyperparameters.
        random_state: Seed or generator.
        results_path: If given, retained rows are also appended to
            this text file.  The result reports it only when at least
            one row was written.
        standardize: Standardise ``Y``, ``A`` and ``M`` first.
        backend: ``"numpy"``, ``"jax"`` or ``None`` (configured policy).
        log_every: Progress logging interval (``0`` disables).

    Returns:
        A :class:`~._results.MediationResult`.

    Raises:
        ValueError: On inconsistent dimensions or arguments.
    """
    if init not in ("zeros", "ols"):
        raise ValueError(f"init must be 'zeros' or 'ols', got {init!r}.")

    mediator_names = _column_names(M)
    if standardize:
        Y = standardize_columns(Y)
        A = standardize_columns(A)
        M = standardize_columns(M)

    Y_vec = _as_float_vector(Y, name="Y")
    n = Y_vec.shape[0]
    A_vec = _as_float_vector(A, name="A", length=n)
    M_mat = _as_float_matrix(M, name="M", n_rows=n)
    C1_mat = _as_float_matrix(C1, name="C1", n_rows=n)
    C2_mat = _as_float_matrix(C2, name="C2", n_rows=n)
    q = M_mat.shape[1]
    if mediator_names is None:
        mediator_names = [str(j) for j in range(q)]

    beta_a_init = 0.0
    beta_m_vec = _initial_vector(beta_m, name="beta_m", q=q, default=0.0)
    alpha_a_vec = _initial_vector(alpha_a, name="alpha_a", q=q, default=0.0)
    if init == "ols":
        ols_beta_m, ols_alpha_a, beta_a_init = ols_starting_values(
            Y_vec, A_vec, M_mat, C1_mat, C2_mat
        )
        if beta_m is None:
            beta_m_vec[:] = ols_beta_m
        if alpha_a is None:
            alpha_a_vec[:] = ols_alpha_a
    pi_m_vec = _initial_vector(pi_m, name="pi_m", q=q, default=0.5)
    pi_a_vec = _initial_vector(pi_a, name="pi_a", q=q, default=0.5)

    memory = MemorySink()
    text = TextFileSink(results_path) if results_path is not None else None
    sink = TeeSink(memory, text) if text is not None else memory

    sampler = MediationSampler(
        Y_vec,
        A_vec,
        M_mat,
        C1_mat,
        C2_mat,
        beta_m_vec,
        alpha_a_vec,
        pi_m_vec,
        pi_a_vec,
        priors=priors,
        random_state=random_state,
        sink=sink,
        thin=thin,
        backend=backend,
        beta_a_init=beta_a_init,
        log_every=log_every,
    )
    logger.info(
        "Sampling n=%d q=%d w1=%d w2=%d for %d iterations (burn-in %d, thin %d)",
        sampler.n,
        sampler.q,
        sampler.w1,
        sampler.w2,
        n_iter,
        burn_in,
        thin,
    )
    sampler.run(n_iter, burn_in)

    draws = pd.DataFrame(
        memory.to_array(4 * q + 1), columns=column_labels(q, mediator_names)
    )
    beta_a_draws = draws["beta_a"].to_numpy()
    params = sampler.params

    return MediationResult(
        beta_m=params.beta_m.copy(),
        alpha_a=params.alpha_a.copy(),
        pi_m=params.pi_m.copy(),
        pi_a=params.pi_a.copy(),
        beta_a=params.beta_a,
        variances=sampler.variances.as_dict(),
        summary=summarize_draws(draws, q, mediator_names),
        beta_a_mean=float(beta_a_draws.mean()) if beta_a_draws.size else float("nan"),
        beta_a_sd=(
            float(beta_a_draws.std(ddof=1)) if beta_a_draws.size > 1 else float("nan")
        ),
        mediator_names=list(mediator_names),
        n_iter=n_iter,
        burn_in=burn_in,
        thin=thin,
        n_retained=sampler.n_retained,
        acceptance_rate=sampler.acceptance_rate,
        backend=sampler.backend.name,
        results_path=(
            str(text.path) if text is not None and text.n_written else None
        ),
        draws=draws,
    )


__all__ = ["bayesian_mediation_analysis", "ols_starting_values"]
