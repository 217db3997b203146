"""Retry helpers (tenacity) for transient storage and download failures."""

import asyncio
from typing import Any, Callable, Tuple, Type, TypeVar

import httpx
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from chicpic.utils.logging import get_logger

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

# Transport-level failures only; HTTP status errors are never retried here
TRANSIENT_IO_ERRORS: Tuple[Type[BaseException], ...] = (
    ConnectionError,
    asyncio.TimeoutError,
    httpx.TransportError,
)


def _log_before_sleep(retry_state: RetryCallState) -> None:
    outcome = retry_state.outcome
    logger.warning(
        "Transient I/O error, retrying",
        operation=getattr(retry_state.fn, "__qualname__", "unknown"),
        attempt=retry_state.attempt_number,
        wait_seconds=round(retry_state.next_action.sleep, 2) if retry_state.next_action else None,
        error=repr(outcome.exception()) if outcome is not None else None,
    )


def async_retry_with_backoff(
    max_attempts: int = 3,
    min_wait: float = 1,
    max_wait: float = 10,
    retry_on: Tuple[Type[BaseException], ...] = TRANSIENT_IO_ERRORS,
) -> Callable[[F], F]:
    """
    Exponential backoff for a coroutine function.

    The last exception is re-raised unchanged once the attempts are exhausted,
    so callers keep mapping it to StorageError / ImageLoadError themselves.

    Args:
        max_attempts: Total attempts, first call included
        min_wait: Lower bound of the wait between attempts (seconds)
        max_wait: Upper bound of the wait between attempts (seconds)
        retry_on: Exception types considered transient
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(retry_on),
        before_sleep=_log_before_sleep,
        reraise=True,
    )


def retry_network_operation(max_attempts: int = 3) -> Callable[[F], F]:
    """Retry for uploads to object storage and reference image downloads."""
    return async_retry_with_backoff(max_attempts=max_attempts)
