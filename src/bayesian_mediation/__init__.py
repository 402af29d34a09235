"""bayesian_mediation — Spike-and-slab Bayesian mediation analysis.

Implements a Gibbs sampler for high-dimensional mediation models in
which an exposure acts on an outcome directly and through many
candidate mediators.  Each mediator's two legs (exposure → mediator,
mediator → outcome) carry spike-and-slab priors, so the posterior
selects the mediators whose indirect effect is non-negligible.  The
per-coordinate inclusion probabilities adapt through a joint
Metropolis step.  Residuals are maintained incrementally, with an
optional JAX backend for the full recomputations.

Public API:
    .. autosummary::
        bayesian_mediation_analysis
        ols_starting_values
        MediationSampler
        MediationResult
        PriorHyperparameters
        ModelData
        ModelParameters
        VarianceComponents
        ResidualCache
        VarianceCollapseError
        TextFileSink
        MemorySink
        TeeSink
        ResultSink
        format_row
        column_labels
        read_results
        summarize_draws
        standardize_columns
        print_posterior_table
        expected_retained
        get_backend
        set_backend
        use_backend
"""

from ._config import get_backend, set_backend, use_backend
from ._results import MediationResult, summarize_draws
from .core import bayesian_mediation_analysis, ols_starting_values
from .display import print_posterior_table
from .preprocessing import standardize_columns
from .priors import PriorHyperparameters
from .residuals import ResidualCache
from .sampler import MediationSampler, expected_retained
from .sinks import (
    MemorySink,
    ResultSink,
    TeeSink,
    TextFileSink,
    column_labels,
    format_row,
    read_results,
)
from .state import ModelData, ModelParameters, VarianceComponents
from .variances import VarianceCollapseError

__all__ = [
    "MediationResult",
    "bayesian_mediation_analysis",
    "ols_starting_values",
    "MediationSampler",
    "expected_retained",
    "PriorHyperparameters",
    "ModelData",
    "ModelParameters",
    "VarianceComponents",
    "ResidualCache",
    "VarianceCollapseError",
    "ResultSink",
    "TextFileSink",
    "MemorySink",
    "TeeSink",
    "format_row",
    "column_labels",
    "read_results",
    "summarize_draws",
    "standardize_columns",
    "print_posterior_table",
    "get_backend",
    "set_backend",
    "use_backend",
]

__version__ = "0.1.0"
