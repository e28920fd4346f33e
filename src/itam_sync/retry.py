"""Retry policy for loaders and mutations.

Policies are explicit values handed to each call site instead of a global
default. Client errors (4xx) and responses that fail model validation are
never retried; server errors, network errors (status 0) and other
unexpected exceptions are retried up to ``max_attempts`` total attempts,
after which the last error surfaces.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from pydantic import ValidationError

from itam_sync.config import settings
from itam_sync.errors import ApiClientError
from itam_sync.log import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def is_retryable(error: BaseException) -> bool:
    """Return False for 4xx API errors and malformed responses, True otherwise.

    A response that fails validation was already accepted by the server;
    sending the request again could duplicate a write.
    """
    if isinstance(error, ValidationError):
        return False
    if isinstance(error, ApiClientError):
        return not error.is_client_error
    return True


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to attempt an operation and which failures to retry.

    Attributes:
        max_attempts: Total attempts including the first one
        retryable: Predicate deciding whether a failure may be retried
        base_delay: Delay in seconds before the second attempt
        max_delay: Upper bound for the exponential backoff
    """

    max_attempts: int = 3
    retryable: Callable[[BaseException], bool] = field(default=is_retryable)
    base_delay: float = 1.0
    max_delay: float = 30.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("Retry delays must not be negative")

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        """Whether to try again after ``attempt`` (1-based) failed with ``error``."""
        return attempt < self.max_attempts and self.retryable(error)

    def delay_for(self, attempt: int) -> float:
        """Backoff before the attempt following ``attempt``."""
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)


NO_RETRY = RetryPolicy(max_attempts=1)

QUERY_RETRY = RetryPolicy(
    max_attempts=settings.query_max_attempts,
    base_delay=settings.retry_base_delay,
    max_delay=settings.retry_max_delay,
)

MUTATION_RETRY = RetryPolicy(
    max_attempts=settings.mutation_max_attempts,
    base_delay=settings.retry_base_delay,
    max_delay=settings.retry_max_delay,
)

HEALTH_RETRY = RetryPolicy(
    max_attempts=2,
    base_delay=settings.retry_base_delay,
    max_delay=settings.retry_max_delay,
)


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    name: str = "operation",
) -> T:
    """Await ``operation`` under ``policy``.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        policy: Retry policy, defaults to NO_RETRY
        name: Label used in log events

    Returns:
        The result of the first successful attempt

    Raises:
        The last attempt's exception once attempts are exhausted or the
        failure is not retryable
    """
    policy = policy or NO_RETRY
    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as e:
            if not policy.should_retry(e, attempt):
                raise
            delay = policy.delay_for(attempt)
            logger.warning(
                "retrying",
                operation=name,
                attempt=attempt,
                max_attempts=policy.max_attempts,
                delay=delay,
                error=repr(e),
            )
            if delay:
                await asyncio.sleep(delay)
            attempt += 1
