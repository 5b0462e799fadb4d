"""Caller-level retry with exponential backoff.

The transport, extractor and batch executor never retry. Callers that want
retries wrap a call with retry_with_backoff and choose the attempt count.
"""

from typing import Any, Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from nanobanana.models.errors import ApiError

T = TypeVar("T")

DEFAULT_WAIT = wait_exponential(multiplier=1, min=1, max=4)  # 1s, 2s, 4s


def _is_retryable_error(exc: BaseException) -> bool:
    return isinstance(exc, ApiError) and exc.retryable


async def retry_with_backoff(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    attempts: int = 3,
    wait: Any = None,
    **kwargs: Any,
) -> T:
    """
    Execute an async function, retrying retryable ApiErrors with exponential backoff.

    Args:
        func: Async function to execute
        *args: Positional arguments for func
        attempts: Total attempts including the first; 1 disables retrying
        wait: Optional tenacity wait strategy (defaults to 1s, 2s, 4s)
        **kwargs: Keyword arguments for func

    Returns:
        Result from func

    Raises:
        ApiError: The last error once attempts are exhausted, or any non-retryable one immediately
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait if wait is not None else DEFAULT_WAIT,
        retry=retry_if_exception(_is_retryable_error),
        reraise=True,
    ):
        with attempt:
            return await func(*args, **kwargs)
