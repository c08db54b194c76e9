"""Experiment execution engine for control/candidate function pairs."""
from __future__ import annotations

import asyncio
import functools
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, TypeVar

from .schema import (
    ExperimentConfigError,
    ExperimentOptions,
    ExperimentResult,
    Failure,
    Outcome,
    Success,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def experiment(
    name: str,
    control: Callable[..., T],
    candidate: Callable[..., T],
    options: Optional[ExperimentOptions] = None,
) -> Callable[..., T]:
    """Create a function that behaves like ``control`` while trying ``candidate``.

    The candidate runs first, then the control. The candidate's result or
    exception is only recorded; the caller always gets the control's return
    value or the control's own exception.

    Args:
        name: Experiment name, passed through to publish
        control: The trusted implementation being replaced
        candidate: The new implementation under evaluation
        options: Enabled predicate and publish sink (defaults to always
            enabled and a logging publisher)

    Returns:
        A drop-in replacement for ``control``
    """
    resolved = _resolve_options(name, control, candidate, options)

    @functools.wraps(control)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        if not _is_enabled(name, resolved, args, kwargs):
            return control(*args, **kwargs)

        candidate_outcome = _run_timed(candidate, args, kwargs)

        start = time.perf_counter()
        try:
            value = control(*args, **kwargs)
        except Exception as exc:
            _publish(name, resolved, args, kwargs, Failure(exc), candidate_outcome)
            raise
        control_outcome = Success(value, _elapsed_ms(start))

        _publish(name, resolved, args, kwargs, control_outcome, candidate_outcome)
        return value

    return wrapper


def experiment_async(
    name: str,
    control: Callable[..., Awaitable[T]],
    candidate: Callable[..., Awaitable[T]],
    options: Optional[ExperimentOptions] = None,
) -> Callable[..., Awaitable[T]]:
    """Create a coroutine function that behaves like ``control`` while trying ``candidate``.

    Both sides are started concurrently and awaited together, so the call
    takes as long as the slower of the two. Each side is timed from its own
    start to its own completion, and a failure on either side is recorded
    without interrupting the other.

    Args:
        name: Experiment name, passed through to publish
        control: The trusted coroutine function being replaced
        candidate: The new coroutine function under evaluation
        options: Enabled predicate and publish sink

    Returns:
        A drop-in replacement for ``control``
    """
    resolved = _resolve_options(name, control, candidate, options)

    @functools.wraps(control)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        if not _is_enabled(name, resolved, args, kwargs):
            return await control(*args, **kwargs)

        candidate_outcome, control_outcome = await asyncio.gather(
            _run_timed_async(candidate, args, kwargs),
            _run_timed_async(control, args, kwargs),
        )

        _publish(name, resolved, args, kwargs, control_outcome, candidate_outcome)

        if isinstance(control_outcome, Failure):
            raise control_outcome.error
        return control_outcome.value

    return wrapper


def _resolve_options(
    name: str,
    control: Callable[..., Any],
    candidate: Callable[..., Any],
    options: Optional[ExperimentOptions],
) -> ExperimentOptions:
    if not isinstance(name, str) or not name.strip():
        raise ExperimentConfigError("experiment name must be a non-empty string")
    if not callable(control):
        raise ExperimentConfigError(f"Experiment {name}: control must be callable")
    if not callable(candidate):
        raise ExperimentConfigError(f"Experiment {name}: candidate must be callable")

    resolved = options or ExperimentOptions()
    resolved.validate()
    return resolved


def _is_enabled(
    name: str,
    options: ExperimentOptions,
    args: Tuple[Any, ...],
    kwargs: Dict[str, Any],
) -> bool:
    if options.enabled is None:
        return True
    try:
        return bool(options.enabled(*args, **kwargs))
    except Exception:
        logger.exception("Experiment %s: enabled check failed, running control only", name)
        return False


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0


def _run_timed(fn: Callable[..., Any], args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Outcome:
    start = time.perf_counter()
    try:
        value = fn(*args, **kwargs)
    except Exception as exc:
        return Failure(exc)
    return Success(value, _elapsed_ms(start))


async def _run_timed_async(
    fn: Callable[..., Awaitable[Any]],
    args: Tuple[Any, ...],
    kwargs: Dict[str, Any],
) -> Outcome:
    start = time.perf_counter()
    try:
        value = await fn(*args, **kwargs)
    except Exception as exc:
        return Failure(exc)
    return Success(value, _elapsed_ms(start))


def _publish(
    name: str,
    options: ExperimentOptions,
    args: Tuple[Any, ...],
    kwargs: Dict[str, Any],
    control_outcome: Outcome,
    candidate_outcome: Outcome,
) -> None:
    result = ExperimentResult(
        experiment_name=name,
        experiment_arguments=args,
        control=control_outcome,
        candidate=candidate_outcome,
        experiment_keyword_arguments=dict(kwargs),
    )
    logger.debug(
        "Experiment %s: control=%s candidate=%s",
        name,
        type(control_outcome).__name__,
        type(candidate_outcome).__name__,
    )
    try:
        options.publish(result)
    except Exception:
        logger.exception("Experiment %s: publish failed", name)


__all__ = ["experiment", "experiment_async"]
