# ABOUTME: Transport retry policy built on tenacity
# ABOUTME: Retries only retryable NetworkErrors, with linear backoff of attempt x base delay

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_incrementing,
)

from wechat2md.errors import NetworkError, NetworkErrorKind
from wechat2md.utils.logging import get_logger

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[Any]]

logger = get_logger(__name__)


@dataclass
class RetryState:
    """Attempt bookkeeping for one document's fetch call chain."""

    max_attempts: int
    attempt_number: int = 0
    last_error_kind: NetworkErrorKind | None = None

    @property
    def attempts_made(self) -> int:
        return self.attempt_number + 1


def is_retryable(error: BaseException) -> bool:
    """Only transport-layer failures are worth another attempt."""
    return isinstance(error, NetworkError) and error.retryable


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Transport error, retrying",
        attempt=retry_state.attempt_number,
        delay=retry_state.next_action.sleep if retry_state.next_action else None,
        error=str(error),
        error_kind=getattr(getattr(error, "error_kind", None), "value", None),
    )


def transport_retrying(max_retries: int, base_delay: float, sleep: SleepFunc = asyncio.sleep) -> AsyncRetrying:
    """Build the tenacity controller: max_retries extra tries, waiting base, 2 x base, 3 x base..."""
    return AsyncRetrying(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_incrementing(start=base_delay, increment=base_delay),
        retry=retry_if_exception(is_retryable),
        before_sleep=_log_retry,
        sleep=sleep,
        reraise=True,
    )


async def call_with_retry(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    max_retries: int,
    base_delay: float,
    sleep: SleepFunc = asyncio.sleep,
    state: RetryState | None = None,
) -> T:
    """Await ``func(*args)`` under the transport retry policy.

    Args:
        func: Coroutine function performing one attempt
        max_retries: Attempts allowed beyond the first
        base_delay: Backoff unit in seconds
        sleep: Awaitable sleep, injectable for tests
        state: Optional RetryState updated as attempts are made

    Returns:
        The first successful result

    Raises:
        NetworkError: The last error once retries are exhausted, or any non-retryable error
    """
    state = state or RetryState(max_attempts=max_retries + 1)

    async for attempt in transport_retrying(max_retries, base_delay, sleep):
        with attempt:
            state.attempt_number = attempt.retry_state.attempt_number - 1
            try:
                return await func(*args)
            except NetworkError as e:
                state.last_error_kind = e.error_kind
                raise

    raise RuntimeError("retry loop exited without an outcome")  # pragma: no cover
