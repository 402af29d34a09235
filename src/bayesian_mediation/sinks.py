"""Result sinks: where retained posterior draws go.

The sampler emits one row per retained iteration (past burn-in, on a
thinning boundary).  A row is laid out mediator by mediator, then the
exposure effect::

    beta_m[0] pi_m[0] alpha_a[0] pi_a[0]  ...  beta_m[q-1] pi_m[q-1] alpha_a[q-1] pi_a[q-1]  beta_a

The sampler only knows the :class:`ResultSink` protocol; concrete sinks
decide whether rows are kept in memory, appended to a text file, or
both.  Text output is append-only and never truncates an existing file,
so several runs (or a resumed run) accumulate in one file.

A failed write must never abort a chain that may have been running
for hours: :class:`TextFileSink` logs the ``OSError`` and carries on.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

ROW_FIELDS: tuple[str, ...] = ("beta_m", "pi_m", "alpha_a", "pi_a")
"""Per-mediator fields, in their on-row order."""


@runtime_checkable
class ResultSink(Protocol):
    """Anything that accepts one row of retained draws at a time."""

    def write(self, row: np.ndarray) -> None: ...


def format_row(
    beta_m: np.ndarray,
    pi_m: np.ndarray,
    alpha_a: np.ndarray,
    pi_a: np.ndarray,
    beta_a: float,
) -> np.ndarray:
    """Interleave the per-mediator values and append ``beta_a``.

    Returns:
        A fresh ``(4·q + 1,)`` array.
    """
    per_mediator = np.column_stack([beta_m, pi_m, alpha_a, pi_a]).ravel()
    return np.append(per_mediator, beta_a)


def column_labels(q: int, mediator_names: Sequence[str] | None = None) -> list[str]:
    """Column labels matching :func:`format_row` for *q* mediators."""
    if mediator_names is None:
        names = [str(j) for j in range(q)]
    else:
        names = list(mediator_names)
    if len(names) != q:
        raise ValueError(f"Expected {q} mediator names, got {len(names)}.")
    labels = [f"{field}[{name}]" for name in names for field in ROW_FIELDS]
    labels.append("beta_a")
    return labels


def default_results_path(q: int) -> Path:
    """``results_{q}.txt`` in the current working directory."""
    return Path(f"results_{q}.txt")


class TextFileSink:
    """Append rows to a whitespace-separated text file.

    The file is opened in append mode for each row inside a ``with``
    block, so every row is flushed and closed before the chain moves
    on.  Values are written with ``repr`` precision.

    Args:
        path: Output file.  Defaults to :func:`default_results_path`
            for *q*.
        q: Mediator count; only needed when *path* is omitted.
    """

    def __init__(
        self,
        path: str | os.PathLike[str] | None = None,
        *,
        q: int | None = None,
    ) -> None:
        if path is None:
            if q is None:
                raise ValueError("TextFileSink needs either 'path' or 'q'.")
            path = default_results_path(q)
        self.path = Path(path)
        self.n_written = 0
        self.n_failed = 0

    def write(self, row: np.ndarray) -> None:
        line = " ".join(repr(float(v)) for v in row) + "\n"
        try:
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(line)
        except OSError as exc:
            self.n_failed += 1
            logger.warning("Could not append sample to %s: %s", self.path, exc)
            return
        self.n_written += 1


class MemorySink:
    """Keep rows in memory for in-process analysis."""

    def __init__(self) -> None:
        self.rows: list[np.ndarray] = []

    def write(self, row: np.ndarray) -> None:
        self.rows.append(np.array(row, dtype=np.float64))

    def __len__(self) -> int:
        return len(self.rows)

    def to_array(self, width: int | None = None) -> np.ndarray:
        """Stack rows into an ``(n_rows, 4·q + 1)`` matrix.

        *width* sets the column count of the empty result when no row
        has been written yet.
        """
        if not self.rows:
            return np.empty((0, width if width is not None else 0))
        return np.vstack(self.rows)

    def to_frame(
        self, q: int, mediator_names: Sequence[str] | None = None
    ) -> pd.DataFrame:
        """Rows as a DataFrame labelled by :func:`column_labels`."""
        labels = column_labels(q, mediator_names)
        return pd.DataFrame(self.to_array(len(labels)), columns=labels)


class TeeSink:
    """Forward each row to several sinks in order."""

    def __init__(self, *sinks: ResultSink) -> None:
        self.sinks = sinks

    def write(self, row: np.ndarray) -> None:
        for sink in self.sinks:
            sink.write(row)


def read_results(
    path: str | os.PathLike[str],
    q: int,
    mediator_names: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Load a file written by :class:`TextFileSink` into a DataFrame.

    Raises:
        ValueError: If the row width does not match ``4·q + 1``.
    """
    labels = column_labels(q, mediator_names)
    frame = pd.read_csv(
        path, sep=r"\s+", header=None, dtype=np.float64, float_precision="round_trip"
    )
    if frame.shape[1] != len(labels):
        raise ValueError(
            f"{path} has {frame.shape[1]} columns per row; "
            f"expected {len(labels)} for q={q}."
        )
    frame.columns = labels
    return frame


__all__ = [
    "MemorySink",
    "ResultSink",
    "TeeSink",
    "TextFileSink",
    "column_labels",
    "default_results_path",
    "format_row",
    "read_results",
]
