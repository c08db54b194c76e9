"""Experiment result and option schemas."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple, Union

if TYPE_CHECKING:  # pragma: no cover - typing only
    from scientist.config import ExperimentSettings


class ExperimentConfigError(ValueError):
    """Raised when an experiment is wrapped with invalid configuration."""


@dataclass(frozen=True)
class Success:
    """A side that returned normally."""

    value: Any
    duration_ms: float


@dataclass(frozen=True)
class Failure:
    """A side that raised. No duration is kept for failed calls."""

    error: Exception


@dataclass(frozen=True)
class NotRun:
    """A side that was never invoked (candidate of a disabled experiment)."""


NOT_RUN = NotRun()

Outcome = Union[Success, Failure, NotRun]


@dataclass(frozen=True)
class ExperimentResult:
    """Snapshot of one invocation of a wrapped experiment function.

    Built once both sides have settled and handed to ``publish`` exactly once.
    The flat ``control_*``/``candidate_*`` properties return ``None`` when the
    corresponding piece is absent.
    """

    experiment_name: str
    experiment_arguments: Tuple[Any, ...]
    control: Outcome
    candidate: Outcome = NOT_RUN
    experiment_keyword_arguments: Dict[str, Any] = field(default_factory=dict)

    @property
    def control_result(self) -> Any:
        return _result_of(self.control)

    @property
    def candidate_result(self) -> Any:
        return _result_of(self.candidate)

    @property
    def control_error(self) -> Optional[Exception]:
        return _error_of(self.control)

    @property
    def candidate_error(self) -> Optional[Exception]:
        return _error_of(self.candidate)

    @property
    def control_time_ms(self) -> Optional[float]:
        return _time_of(self.control)

    @property
    def candidate_time_ms(self) -> Optional[float]:
        return _time_of(self.candidate)

    @property
    def candidate_ran(self) -> bool:
        return not isinstance(self.candidate, NotRun)


def _result_of(outcome: Outcome) -> Any:
    return outcome.value if isinstance(outcome, Success) else None


def _error_of(outcome: Outcome) -> Optional[Exception]:
    return outcome.error if isinstance(outcome, Failure) else None


def _time_of(outcome: Outcome) -> Optional[float]:
    return outcome.duration_ms if isinstance(outcome, Success) else None


Publisher = Callable[[ExperimentResult], None]
EnabledPredicate = Callable[..., bool]


def _default_publisher() -> Publisher:
    from .publishers import default_publish

    return default_publish


@dataclass(frozen=True)
class ExperimentOptions:
    """Wrap-time configuration shared by every call of a wrapped function.

    Attributes:
        enabled: Called with each invocation's arguments; ``None`` means the
            experiment is always enabled.
        publish: Sink receiving the :class:`ExperimentResult` of each enabled
            invocation. Defaults to logging a warning on mismatches.
    """

    enabled: Optional[EnabledPredicate] = None
    publish: Publisher = field(default_factory=_default_publisher)

    def validate(self) -> None:
        """Ensure the collaborators are callable."""
        if self.enabled is not None and not callable(self.enabled):
            raise ExperimentConfigError("enabled must be callable or None")
        if not callable(self.publish):
            raise ExperimentConfigError("publish must be callable")

    @staticmethod
    def from_settings(
        settings: "ExperimentSettings",
        publish: Optional[Publisher] = None,
    ) -> "ExperimentOptions":
        """Build options whose ``enabled`` gate follows config settings."""
        enabled_flag = settings.enabled

        def enabled(*args: Any, **kwargs: Any) -> bool:
            return enabled_flag

        if publish is None:
            return ExperimentOptions(enabled=enabled)
        return ExperimentOptions(enabled=enabled, publish=publish)
