"""Scientist: try new code paths in production behind a trusted control."""
from .experiments import (
    ExperimentComparison,
    ExperimentOptions,
    ExperimentResult,
    experiment,
    experiment_async,
)

__all__ = [
    "ExperimentComparison",
    "ExperimentOptions",
    "ExperimentResult",
    "experiment",
    "experiment_async",
]
