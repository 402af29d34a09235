"""Prior hyperparameters for the spike-and-slab mediation model.

Every variance component carries an inverse-gamma prior
``IG(shape, rate)``.  The defaults reproduce the values the model was
calibrated with: a tight spike for the inactive mediator effects
(``rate_m0 = 0.1``) and progressively wider slabs for the active
components.

The adaptive prior on ``pi_m`` / ``pi_a`` has one tuning constant,
the half-width of the uniform log-scale random-walk step.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PriorHyperparameters:
    """Shape / rate pairs of the seven inverse-gamma priors.

    Attributes:
        shape_m0, rate_m0: Inactive (spike) mediator-effect variance
            ``sigma_m0``.
        shape_m1, rate_m1: Active (slab) mediator-effect variance
            ``sigma_m1``.
        shape_a, rate_a: Exposure-effect variance ``sigma_a``.
        shape_ma0, rate_ma0: Inactive exposure–mediator association
            variance ``sigma_ma0``.
        shape_ma1, rate_ma1: Active association variance ``sigma_ma1``.
        shape_e, rate_e: Outcome-stage residual variance ``sigma_e``.
        shape_g, rate_g: Mediator-stage residual variance ``sigma_g``.
        pi_step: Half-width of the uniform step ``U(-pi_step, pi_step)``
            applied to ``log(pi)`` by the adaptive prior sampler.
    """

    shape_m0: float = 2.0
    rate_m0: float = 0.1
    shape_m1: float = 2.0
    rate_m1: float = 0.5
    shape_a: float = 2.0
    rate_a: float = 1.0
    shape_ma0: float = 2.0
    rate_ma0: float = 1.0
    shape_ma1: float = 2.0
    rate_ma1: float = 2.0
    shape_e: float = 2.0
    rate_e: float = 1.0
    shape_g: float = 2.0
    rate_g: float = 1.0
    pi_step: float = 0.01

    def __post_init__(self) -> None:
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if not value > 0:
                raise ValueError(
                    f"Prior hyperparameter '{f.name}' must be positive, got {value!r}."
                )

    def replace(self, **changes: Any) -> PriorHyperparameters:
        """Return a copy with *changes* applied (validated again)."""
        return dataclasses.replace(self, **changes)


__all__ = ["PriorHyperparameters"]
