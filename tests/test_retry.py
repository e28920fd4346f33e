"""
Tests for retry policies.
"""

import pytest
from pydantic import ValidationError

from itam_sync.dto import SoftwarePublisher
from itam_sync.errors import ApiClientError, NETWORK_ERROR
from itam_sync.retry import NO_RETRY, RetryPolicy, is_retryable, run_with_retry


class FailingOperation:
    """Fails with the given errors in order, then returns "ok"."""

    def __init__(self, *errors: Exception) -> None:
        self.errors = list(errors)
        self.attempts = 0

    async def __call__(self) -> str:
        self.attempts += 1
        if self.errors:
            raise self.errors.pop(0)
        return "ok"


def test_client_errors_are_not_retryable():
    for status in (400, 401, 403, 404, 409, 422, 499):
        assert not is_retryable(ApiClientError("nope", status=status))


def test_server_network_and_unknown_errors_are_retryable():
    assert is_retryable(ApiClientError("down", status=503))
    assert is_retryable(ApiClientError("offline", status=0, code=NETWORK_ERROR))
    assert is_retryable(RuntimeError("unexpected"))


def test_backoff_is_exponential_and_capped():
    policy = RetryPolicy(max_attempts=5, base_delay=1.0, max_delay=3.0)
    assert [policy.delay_for(n) for n in (1, 2, 3, 4)] == [1.0, 2.0, 3.0, 3.0]


def test_invalid_policy_rejected():
    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=0)


@pytest.mark.asyncio
async def test_404_is_attempted_once():
    operation = FailingOperation(ApiClientError("missing", status=404))
    policy = RetryPolicy(max_attempts=3, base_delay=0.0)

    with pytest.raises(ApiClientError) as exc_info:
        await run_with_retry(operation, policy)

    assert exc_info.value.status == 404
    assert operation.attempts == 1


@pytest.mark.asyncio
async def test_503_is_attempted_up_to_bound():
    operation = FailingOperation(*[ApiClientError("down", status=503) for _ in range(5)])
    policy = RetryPolicy(max_attempts=3, base_delay=0.0)

    with pytest.raises(ApiClientError) as exc_info:
        await run_with_retry(operation, policy)

    assert exc_info.value.status == 503
    assert operation.attempts == 3


@pytest.mark.asyncio
async def test_recovers_after_transient_failures():
    operation = FailingOperation(
        ApiClientError("offline", status=0, code=NETWORK_ERROR),
        ApiClientError("down", status=502),
    )
    result = await run_with_retry(operation, RetryPolicy(max_attempts=3, base_delay=0.0))
    assert result == "ok"
    assert operation.attempts == 3


@pytest.mark.asyncio
async def test_custom_predicate():
    operation = FailingOperation(ApiClientError("down", status=503))
    policy = RetryPolicy(max_attempts=3, retryable=lambda e: False, base_delay=0.0)

    with pytest.raises(ApiClientError):
        await run_with_retry(operation, policy)
    assert operation.attempts == 1


@pytest.mark.asyncio
async def test_no_retry_default():
    operation = FailingOperation(ApiClientError("down", status=503))
    with pytest.raises(ApiClientError):
        await run_with_retry(operation, NO_RETRY)
    assert operation.attempts == 1


def test_validation_errors_are_not_retryable():
    """A response that fails model validation was already accepted by the server."""
    with pytest.raises(ValidationError) as exc_info:
        SoftwarePublisher.model_validate({"name": "Acme"})
    assert not is_retryable(exc_info.value)


@pytest.mark.asyncio
async def test_malformed_response_is_attempted_once():
    attempts = 0

    async def create():
        nonlocal attempts
        attempts += 1
        return SoftwarePublisher.model_validate({"name": "Acme"})

    with pytest.raises(ValidationError):
        await run_with_retry(create, RetryPolicy(max_attempts=3, base_delay=0.0))
    assert attempts == 1
