"""Control/candidate experiments with isolated candidate failures."""
from .schema import (
    NOT_RUN,
    ExperimentConfigError,
    ExperimentOptions,
    ExperimentResult,
    Failure,
    NotRun,
    Outcome,
    Success,
)
from .engine import experiment, experiment_async
from .comparison import ExperimentComparison
from .publishers import LoggingPublisher, default_publish

__all__ = [
    "NOT_RUN",
    "ExperimentComparison",
    "ExperimentConfigError",
    "ExperimentOptions",
    "ExperimentResult",
    "Failure",
    "LoggingPublisher",
    "NotRun",
    "Outcome",
    "Success",
    "default_publish",
    "experiment",
    "experiment_async",
]
