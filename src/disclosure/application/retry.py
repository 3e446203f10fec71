"""Bounded retry of an async operation with a fixed delay between attempts."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
    wait_fixed,
)

from disclosure.application.errors import is_network_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """max_attempts counts the first try: 3 means one attempt plus two retries."""

    max_attempts: int = 3
    delay_ms: int = 2000
    is_retryable: Callable[[BaseException], bool] = is_network_error

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("RetryPolicy max_attempts must be at least 1.")
        if self.delay_ms < 0:
            raise ValueError("RetryPolicy delay_ms must be non-negative.")


class RetryExhausted(Exception):
    """Raised when every attempt failed with a retryable error. Wraps the last one."""

    def __init__(self, last_error: BaseException, attempts: int) -> None:
        super().__init__(f"Gave up after {attempts} attempts: {last_error}")
        self.last_error = last_error
        self.attempts = attempts


def _log_retry(policy: RetryPolicy) -> Callable[[RetryCallState], None]:
    def before_sleep(state: RetryCallState) -> None:
        logger.warning(
            "Attempt %d/%d failed (%s); retrying in %d ms",
            state.attempt_number,
            policy.max_attempts,
            state.outcome.exception(),
            policy.delay_ms,
        )

    return before_sleep


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    on_attempt: Callable[[int], None] | None = None,
) -> T:
    """Await operation() until it succeeds, a non-retryable error is raised, or attempts run out.

    Non-retryable errors propagate unchanged on the attempt they occur.
    Exhaustion raises RetryExhausted. on_attempt receives the 1-based attempt number.
    """
    kwargs = {}
    if on_attempt is not None:
        kwargs["before"] = lambda state: on_attempt(state.attempt_number)
    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_fixed(policy.delay_ms / 1000.0),
        retry=retry_if_exception(policy.is_retryable),
        sleep=sleep,
        before_sleep=_log_retry(policy),
        reraise=False,
        **kwargs,
    )
    try:
        return await retrying(operation)
    except RetryError as exc:
        last = exc.last_attempt
        error = last.exception()
        logger.error("Giving up after %d attempts: %s", last.attempt_number, error)
        raise RetryExhausted(error, last.attempt_number) from error
