"""Formatted ASCII table display for mediation sampling results.

The layout mirrors the statsmodels summary style: a header panel with
run metadata (iterations, burn-in, thinning, retained draws, Metropolis
acceptance rate, backend) and a body with one row per mediator showing
the posterior means of ``alpha_a``, ``beta_m`` and the indirect effect
``alpha_a·beta_m`` with its credible interval.

Mediators whose indirect-effect interval excludes zero are flagged
``(*)``; the flag is descriptive, not a test decision.
"""

from __future__ import annotations

import math
import textwrap
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ._results import MediationResult


def _truncate(name: str, max_len: int) -> str:
    """Truncate *name* to *max_len*, appending ``'...'`` if needed."""
    if len(name) <= max_len:
        return name
    return name[: max_len - 3] + "..."


def _fmt(val: float, width: int = 9, digits: int = 4) -> str:
    """Right-aligned fixed-point number; ``nan`` renders as ``N/A``."""
    if val is None or (isinstance(val, float) and math.isnan(val)):
        return f"{'N/A':>{width}}"
    return f"{val:>{width}.{digits}f}"


def _wrap(text: str, width: int = 80, indent: int = 2) -> str:
    """Word-wrap *text* to *width*, indenting continuation lines."""
    return textwrap.fill(
        text,
        width=width,
        initial_indent="",
        subsequent_indent=" " * indent,
    )


def print_posterior_table(
    result: MediationResult,
    *,
    title: str = "Bayesian Mediation Analysis (Spike-and-Slab)",
    top: int | None = None,
) -> None:
    """Print the posterior summary of a run as an 80-column table.

    Args:
        result: Result returned by
            :func:`~bayesian_mediation.bayesian_mediation_analysis`.
        title: Title for the output table.
        top: Show only the *top* mediators ranked by ``|indirect_mean|``;
            ``None`` shows all in their original order.
    """
    summary = result.summary
    if top is not None:
        order = summary["indirect_mean"].abs().sort_values(ascending=False).index
        summary = summary.loc[order[:top]]

    print("=" * 80)
    for line in textwrap.wrap(title, width=78):
        print(f"{line:^80}")
    print("=" * 80)

    col1 = 40
    col2 = 38
    acc = result.acceptance_rate
    acc_str = "N/A" if math.isnan(acc) else f"{acc:.3f}"
    direct = _fmt(result.beta_a_mean, 0).strip()
    rows = [
        ("Iterations:", f"{result.n_iter:,}", "Mediators:", str(len(result.summary))),
        ("Burn-in:", f"{result.burn_in:,}", "Retained draws:", f"{result.n_retained:,}"),
        ("Thinning:", str(result.thin), "Pi acceptance:", acc_str),
        ("Backend:", result.backend, "Direct effect:", direct),
    ]
    for ll, lv, rl, rv in rows:
        print(f"{ll:<16}{lv:<{col1 - 16}}{rl:>{col2 - 11}} {rv:>10}")

    print("-" * 80)

    # ── Table geometry (W = 80 chars) ─────────────────────────── #
    #   Mediator (fc=20) | alpha_a (9) | beta_m (9) | indirect (10)
    #   | interval (27) | flag (5)  → 20 + 9 + 9 + 10 + 27 + 5 = 80
    fc = 20
    print(
        f"{'Mediator':<{fc}}{'alpha_a':>9}{'beta_m':>9}{'Indirect':>10}"
        f"{'Credible interval':>27}{'':>5}"
    )
    print("-" * 80)

    for name, row in summary.iterrows():
        lo, hi = row["indirect_lower"], row["indirect_upper"]
        if math.isnan(lo) or math.isnan(hi):
            interval = f"{'N/A':>27}"
            flag = ""
        else:
            bounds = f"[{lo:.4f}, {hi:.4f}]"
            interval = f"{bounds:>27}"
            flag = "(*)" if lo > 0.0 or hi < 0.0 else ""
        print(
            f"{_truncate(str(name), fc):<{fc}}"
            f"{_fmt(row['alpha_a_mean'])}{_fmt(row['beta_m_mean'])}"
            f"{_fmt(row['indirect_mean'], 10)}{interval}{flag:>5}"
        )

    # ── Notes ──────────────────────────────────────────────────── #
    notes: list[str] = []
    if result.n_retained == 0:
        notes.append(
            "No draws were retained: burn_in must be smaller than n_iter "
            "and at least one post-burn-in iteration must fall on a "
            "thinning boundary."
        )
    elif result.n_retained < 100:
        notes.append(
            f"Only {result.n_retained} draws retained; posterior summaries "
            "are imprecise. Consider a longer run."
        )
    if top is not None and top < len(result.summary):
        notes.append(
            f"Showing {top} of {len(result.summary)} mediators ranked by "
            "|indirect effect|."
        )

    if notes:
        print("-" * 80)
        print("Notes")
        print("-" * 80)
        for note in notes:
            print(_wrap(f"  [!] {note}", width=80, indent=6))

    print("=" * 80)
    print("(*) credible interval of the indirect effect excludes 0")


__all__ = ["print_posterior_table"]
