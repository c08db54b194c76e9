"""Publish sinks for experiment results."""
from __future__ import annotations

import logging
from typing import Optional

from .comparison import ExperimentComparison
from .schema import ExperimentResult

logger = logging.getLogger(__name__)


class LoggingPublisher:
    """Writes a log record naming the experiment whenever a difference is found.

    Matching results are logged at DEBUG only, so the default sink is silent
    at the usual WARNING/INFO levels unless the sides disagree.
    """

    def __init__(
        self,
        target: Optional[logging.Logger] = None,
        level: int = logging.WARNING,
    ) -> None:
        self.logger = target or logger
        self.level = level

    def __call__(self, result: ExperimentResult) -> None:
        if ExperimentComparison.has_mismatch(result):
            self.logger.log(self.level, "Experiment %s: difference found", result.experiment_name)
        else:
            self.logger.debug("Experiment %s: no difference", result.experiment_name)


default_publish = LoggingPublisher()


__all__ = ["LoggingPublisher", "default_publish"]
