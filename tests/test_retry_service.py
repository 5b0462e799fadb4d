"""Tests for retry service with exponential backoff."""

import time

import pytest
from tenacity import wait_none

from nanobanana.models.errors import ApiError, ErrorCode
from nanobanana.services.retry_service import retry_with_backoff


class FlakyCall:
    """Async callable that fails a set number of times then succeeds."""

    def __init__(self, error_code: ErrorCode, fail_count: int = 0):
        self.error_code = error_code
        self.fail_count = fail_count
        self.call_count = 0

    async def __call__(self, value="success"):
        self.call_count += 1
        if self.call_count <= self.fail_count:
            raise ApiError(self.error_code, f"Simulated failure {self.call_count}")
        return value


@pytest.mark.asyncio
async def test_retry_succeeds_after_failures():
    """Retry succeeds after transient failures."""
    call = FlakyCall(ErrorCode.SERVER_ERROR, fail_count=2)

    result = await retry_with_backoff(call, wait=wait_none())

    assert result == "success"
    assert call.call_count == 3  # Initial + 2 retries


@pytest.mark.asyncio
async def test_retry_exhausts_after_max_attempts():
    call = FlakyCall(ErrorCode.NETWORK, fail_count=999)

    with pytest.raises(ApiError) as exc_info:
        await retry_with_backoff(call, attempts=4, wait=wait_none())

    assert exc_info.value.code == ErrorCode.NETWORK
    assert call.call_count == 4


@pytest.mark.asyncio
async def test_retry_exponential_backoff_timing():
    """Default backoff waits 1s then 2s across three attempts."""
    call = FlakyCall(ErrorCode.RATE_LIMITED, fail_count=999)
    start_time = time.time()

    with pytest.raises(ApiError):
        await retry_with_backoff(call)

    elapsed = time.time() - start_time

    assert call.call_count == 3
    assert 2.5 <= elapsed <= 4.5, f"Expected ~3s backoff, got {elapsed}s"


@pytest.mark.asyncio
async def test_retry_succeeds_on_first_attempt():
    call = FlakyCall(ErrorCode.RATE_LIMITED)

    result = await retry_with_backoff(call, "done")

    assert result == "done"
    assert call.call_count == 1


@pytest.mark.asyncio
async def test_single_attempt_does_not_retry():
    call = FlakyCall(ErrorCode.RATE_LIMITED, fail_count=1)

    with pytest.raises(ApiError):
        await retry_with_backoff(call, attempts=1)

    assert call.call_count == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("code", [ErrorCode.AUTH, ErrorCode.BAD_REQUEST, ErrorCode.NO_IMAGE_FOUND, ErrorCode.DECODE])
async def test_no_retry_on_permanent_errors(code):
    call = FlakyCall(code, fail_count=1)

    with pytest.raises(ApiError) as exc_info:
        await retry_with_backoff(call, wait=wait_none())

    assert exc_info.value.code == code
    assert call.call_count == 1


@pytest.mark.asyncio
async def test_no_retry_on_other_exceptions():
    calls = []

    async def raise_value_error():
        calls.append(1)
        raise ValueError("Invalid input")

    with pytest.raises(ValueError):
        await retry_with_backoff(raise_value_error, wait=wait_none())

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_rejects_zero_attempts():
    with pytest.raises(ValueError, match="attempts"):
        await retry_with_backoff(FlakyCall(ErrorCode.NETWORK), attempts=0)
