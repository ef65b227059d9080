"""Lifecycle logging for recommendation operations."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Any, Callable, Dict, ParamSpec, TypeVar

from stylist_app.logging_config import ensure_correlation_id, get_logger, log_event, redact_for_log

LOGGER = get_logger(__name__)
P = ParamSpec("P")
R = TypeVar("R")

_SCALARS = (str, int, float, bool, type(None))
_MAX_ARGUMENTS = 6


def _describe(value: Any) -> Any:
    if isinstance(value, _SCALARS):
        return value
    if isinstance(value, (list, tuple, set, frozenset)):
        return f"<{len(value)} items>"
    return getattr(value, "value", None) or type(value).__name__


def _argument_summary(kwargs: Dict[str, Any]) -> Dict[str, Any]:
    """Describe keyword arguments without dumping wardrobes into the log."""

    summary = {key: _describe(value) for key, value in list(kwargs.items())[:_MAX_ARGUMENTS]}
    if len(kwargs) > _MAX_ARGUMENTS:
        summary["truncated"] = True
    return redact_for_log(summary)


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def instrument_operation(operation_name: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Log start, completion (with result size) and failure of the wrapped call."""

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            correlation_id = ensure_correlation_id()
            fields = {"operation": operation_name, "correlation_id": correlation_id}
            log_event(LOGGER, logging.INFO, "operation_started", arguments=_argument_summary(kwargs), **fields)
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                log_event(
                    LOGGER,
                    logging.ERROR,
                    "operation_failed",
                    duration_ms=_elapsed_ms(start),
                    error_type=type(exc).__name__,
                    exc_info=True,
                    **fields,
                )
                raise
            result_size = len(result) if isinstance(result, (list, tuple, dict)) else None
            log_event(
                LOGGER,
                logging.INFO,
                "operation_completed",
                duration_ms=_elapsed_ms(start),
                result_size=result_size,
                **fields,
            )
            return result

        return wrapper

    return decorator


__all__ = ["instrument_operation"]
