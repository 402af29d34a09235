"""Typed result object for a completed sampling run.

:class:`MediationResult` is a frozen dataclass that provides:

* **Attribute access** — ``result.beta_m``, ``result.acceptance_rate``.
* **Dict-like access** — ``result["beta_m"]``, ``result.get("key")``,
  ``"key" in result`` for consumers that prefer bracket syntax.
* **Serialisation** — ``.to_dict()`` returns a plain ``dict[str, Any]``
  with all NumPy types converted to native Python.  The raw ``draws``
  frame is excluded; the posterior summary is included as records.

The result is a snapshot: the arrays it holds are copies of the
chain's final state, so continuing to run the sampler does not change
a result already returned.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

import numpy as np
import pandas as pd

from .sinks import ROW_FIELDS

# ------------------------------------------------------------------ #
# Serialisation helper
# ------------------------------------------------------------------ #


def _numpy_to_python(obj: Any) -> Any:
    """Recursively convert NumPy / pandas values to Python-native types.

    Handles nested dicts, lists, np.ndarray, np.integer, np.floating
    and DataFrames (as a list of records) so that :meth:`to_dict`
    returns a fully JSON-serialisable structure.
    """
    if isinstance(obj, pd.DataFrame):
        records = obj.reset_index().to_dict("records")
        return [_numpy_to_python(rec) for rec in records]
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, (np.integer, np.bool_)):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, dict):
        return {k: _numpy_to_python(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        converted = [_numpy_to_python(item) for item in obj]
        return type(obj)(converted)
    return obj


# ------------------------------------------------------------------ #
# Dict-compatibility mixin
# ------------------------------------------------------------------ #


class _DictAccessMixin:
    """Dict-like access convenience for result dataclasses.

    Supports three access patterns:

    1. ``result["key"]``     — raises ``KeyError`` on miss
    2. ``result.get(key, d)`` — returns *d* on miss (default ``None``)
    3. ``"key" in result``   — membership test
    """

    # Fields to exclude from to_dict() serialisation.
    _EXCLUDE_FROM_DICT: ClassVar[frozenset[str]] = frozenset({"draws"})

    def __getitem__(self, key: str) -> Any:
        """Attribute lookup via bracket syntax."""
        try:
            return getattr(self, key)
        except AttributeError:
            raise KeyError(key) from None

    def get(self, key: str, default: Any = None) -> Any:
        """Attribute lookup with a fallback default."""
        return getattr(self, key, default)

    def __contains__(self, key: object) -> bool:
        """Membership test: ``"key" in result``."""
        if not isinstance(key, str):
            return False
        return hasattr(self, key)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain, JSON-serialisable dictionary."""
        result: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            if f.name in self._EXCLUDE_FROM_DICT:
                continue
            result[f.name] = _numpy_to_python(getattr(self, f.name))
        return result


# ------------------------------------------------------------------ #
# Posterior summaries
# ------------------------------------------------------------------ #


SUMMARY_COLUMNS: tuple[str, ...] = (
    "beta_m_mean",
    "beta_m_sd",
    "alpha_a_mean",
    "alpha_a_sd",
    "indirect_mean",
    "indirect_sd",
    "indirect_lower",
    "indirect_upper",
    "pi_m_mean",
    "pi_a_mean",
)


def _sd(x: np.ndarray) -> np.ndarray:
    # ddof=1 needs two draws; a single draw reports sd = nan.
    if x.shape[0] < 2:
        return np.full(x.shape[1], np.nan)
    return x.std(axis=0, ddof=1)


def _per_mediator(draws: pd.DataFrame, field_name: str, q: int) -> np.ndarray:
    """``(n_draws, q)`` block for one per-mediator field."""
    stride = len(ROW_FIELDS)
    offset = ROW_FIELDS.index(field_name)
    return draws.to_numpy()[:, offset : stride * q : stride]


def summarize_draws(
    draws: pd.DataFrame,
    q: int,
    mediator_names: Sequence[str] | None = None,
    credible_level: float = 0.95,
) -> pd.DataFrame:
    """Posterior summary per mediator.

    Columns: posterior mean and sd of ``beta_m``, ``alpha_a`` and the
    indirect effect ``beta_m·alpha_a`` (computed draw by draw), the
    equal-tailed credible interval of the indirect effect, and the
    posterior means of ``pi_m`` / ``pi_a``.  An empty *draws* frame
    gives an all-``nan`` summary.

    Args:
        draws: Retained rows laid out as by :func:`~.sinks.format_row`.
        q: Number of mediators.
        mediator_names: Row labels; defaults to ``"0" … "q-1"``.
        credible_level: Coverage of the indirect-effect interval.

    Raises:
        ValueError: If *credible_level* is not in ``(0, 1)`` or the
            frame width does not match *q*.
    """
    if not 0.0 < credible_level < 1.0:
        raise ValueError(
            f"'credible_level' must lie in (0, 1), got {credible_level}."
        )
    if draws.shape[1] != len(ROW_FIELDS) * q + 1:
        raise ValueError(
            f"draws has {draws.shape[1]} columns; expected {len(ROW_FIELDS) * q + 1}."
        )
    if mediator_names is None:
        index = [str(j) for j in range(q)]
    else:
        index = list(mediator_names)

    if draws.shape[0] == 0:
        return pd.DataFrame(np.nan, index=index, columns=list(SUMMARY_COLUMNS))

    beta_m = _per_mediator(draws, "beta_m", q)
    alpha_a = _per_mediator(draws, "alpha_a", q)
    indirect = beta_m * alpha_a
    tail = (1.0 - credible_level) / 2.0
    lower, upper = np.quantile(indirect, [tail, 1.0 - tail], axis=0)

    return pd.DataFrame(
        {
            "beta_m_mean": beta_m.mean(axis=0),
            "beta_m_sd": _sd(beta_m),
            "alpha_a_mean": alpha_a.mean(axis=0),
            "alpha_a_sd": _sd(alpha_a),
            "indirect_mean": indirect.mean(axis=0),
            "indirect_sd": _sd(indirect),
            "indirect_lower": lower,
            "indirect_upper": upper,
            "pi_m_mean": _per_mediator(draws, "pi_m", q).mean(axis=0),
            "pi_a_mean": _per_mediator(draws, "pi_a", q).mean(axis=0),
        },
        index=index,
    )


# ------------------------------------------------------------------ #
# MediationResult
# ------------------------------------------------------------------ #


@dataclass(frozen=True)
class MediationResult(_DictAccessMixin):
    """Outcome of :func:`~bayesian_mediation.bayesian_mediation_analysis`.

    All fields are accessible both as attributes and via dict syntax.
    """

    # ---- Final chain state -----------------------------------------
    beta_m: np.ndarray
    """Mediator effects ``(q,)`` at the last iteration."""

    alpha_a: np.ndarray
    """Exposure–mediator associations ``(q,)`` at the last iteration."""

    pi_m: np.ndarray
    """Prior inclusion probabilities for ``beta_m`` at the last iteration."""

    pi_a: np.ndarray
    """Prior inclusion probabilities for ``alpha_a`` at the last iteration."""

    beta_a: float
    """Direct exposure effect at the last iteration."""

    variances: dict[str, float]
    """The seven variance components at the last iteration."""

    # ---- Posterior draws -------------------------------------------
    summary: pd.DataFrame
    """Per-mediator posterior summary (see :func:`summarize_draws`)."""

    beta_a_mean: float
    """Posterior mean of ``beta_a`` over the retained draws."""

    beta_a_sd: float
    """Posterior sd of ``beta_a`` over the retained draws."""

    # ---- Run metadata ----------------------------------------------
    mediator_names: list[str]
    """Mediator labels (DataFrame columns or ``"0" … "q-1"``)."""

    n_iter: int
    """Iterations run."""

    burn_in: int
    """Burn-in length."""

    thin: int
    """Thinning interval."""

    n_retained: int
    """Rows written to the sinks."""

    acceptance_rate: float
    """Acceptance rate of the joint ``pi`` Metropolis step."""

    backend: str
    """Linear-algebra backend used."""

    results_path: str | None = None
    """Text file the draws were appended to; ``None`` when no row was written."""

    # ---- Raw draws (not serialised) --------------------------------
    draws: pd.DataFrame = field(
        default_factory=pd.DataFrame, repr=False, compare=False
    )
    """Retained rows, one column per :func:`~.sinks.column_labels` entry."""


__all__ = ["MediationResult", "summarize_draws"]
