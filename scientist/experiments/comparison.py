"""Comparison utilities for experiment results."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .schema import ExperimentResult, Failure, NotRun, Outcome, Success

logger = logging.getLogger(__name__)


class ExperimentComparison:
    """Utilities for inspecting a single experiment snapshot."""

    @staticmethod
    def has_mismatch(result: ExperimentResult) -> bool:
        """Check whether control and candidate disagree.

        Exactly one side failing is a mismatch, as are two successful sides
        whose values compare unequal. Values whose inequality cannot be
        reduced to a bool (array-likes) count as a mismatch. Two failing sides
        agree, and a candidate that never ran has nothing to disagree with.

        Args:
            result: Snapshot published by a wrapped experiment

        Returns:
            True if a difference was observed
        """
        control, candidate = result.control, result.candidate
        if isinstance(candidate, NotRun):
            return False

        control_failed = isinstance(control, Failure)
        candidate_failed = isinstance(candidate, Failure)
        if control_failed != candidate_failed:
            return True
        if control_failed:
            return False

        try:
            return bool(control.value != candidate.value)
        except Exception:
            logger.debug(
                "Experiment %s: results are not comparable, treating as a difference",
                result.experiment_name,
            )
            return True

    @staticmethod
    def describe_outcome(outcome: Outcome) -> str:
        """Render one side of a snapshot as short text."""
        if isinstance(outcome, Success):
            return f"returned {outcome.value!r} in {outcome.duration_ms:.3f} ms"
        if isinstance(outcome, Failure):
            return f"raised {type(outcome.error).__name__}: {outcome.error}"
        return "not run"

    @staticmethod
    def to_rows(result: ExperimentResult) -> List[Dict[str, Optional[str]]]:
        """Flatten a snapshot into one row per side for tabular display.

        Args:
            result: Snapshot published by a wrapped experiment

        Returns:
            Rows with side, status, result, error and time_ms columns
        """
        rows = []
        for side, outcome in (("control", result.control), ("candidate", result.candidate)):
            row: Dict[str, Optional[str]] = {
                "side": side,
                "status": _status(outcome),
                "result": None,
                "error": None,
                "time_ms": None,
            }
            if isinstance(outcome, Success):
                row["result"] = repr(outcome.value)
                row["time_ms"] = f"{outcome.duration_ms:.3f}"
            elif isinstance(outcome, Failure):
                row["error"] = f"{type(outcome.error).__name__}: {outcome.error}"
            rows.append(row)
        return rows

    @staticmethod
    def create_summary(result: ExperimentResult) -> str:
        """Create a text summary of a snapshot."""
        lines = [
            f"Experiment {result.experiment_name}",
            f"  arguments: {_format_arguments(result.experiment_arguments, result.experiment_keyword_arguments)}",
            f"  control:   {ExperimentComparison.describe_outcome(result.control)}",
            f"  candidate: {ExperimentComparison.describe_outcome(result.candidate)}",
        ]
        verdict = "difference found" if ExperimentComparison.has_mismatch(result) else "no difference"
        lines.append(f"  verdict:   {verdict}")
        return "\n".join(lines)


def _status(outcome: Outcome) -> str:
    if isinstance(outcome, Success):
        return "success"
    if isinstance(outcome, Failure):
        return "failure"
    return "not run"


def _format_arguments(args: tuple, kwargs: Dict[str, Any]) -> str:
    parts = [repr(arg) for arg in args]
    parts.extend(f"{key}={value!r}" for key, value in kwargs.items())
    return f"({', '.join(parts)})"


__all__ = ["ExperimentComparison"]
