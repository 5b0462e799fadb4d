"""Bounded-concurrency execution of multi-image batches."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from nanobanana.models.errors import ApiError, ErrorCode
from nanobanana.models.requests import GenerationRequest
from nanobanana.models.responses import GenerationError, GenerationResult, ImagePayload

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 4

GenerateOne = Callable[[GenerationRequest], Awaitable[ImagePayload]]


class BatchExecutor:
    """Runs N independent generations and collects per-item outcomes."""

    def __init__(self, generate_one: GenerateOne, max_concurrency: int = DEFAULT_MAX_CONCURRENCY):
        """
        Initialize batch executor.

        Args:
            generate_one: Coroutine function producing one image for a request
            max_concurrency: Default bound on simultaneously running items
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._generate_one = generate_one
        self.max_concurrency = max_concurrency

    async def _run_item(
        self,
        index: int,
        request: GenerationRequest,
        semaphore: asyncio.Semaphore,
        stop_event: Optional[asyncio.Event],
    ) -> GenerationResult:
        async with semaphore:
            if stop_event is not None and stop_event.is_set():
                return GenerationResult(
                    index=index,
                    error=GenerationError(
                        code=ErrorCode.ABORTED,
                        message="batch stopped before this image started",
                        retryable=False,
                    ),
                )
            return await self._attempt(index, request)

    async def _attempt(self, index: int, request: GenerationRequest) -> GenerationResult:
        try:
            payload = await self._generate_one(request)
        except ApiError as e:
            logger.info(f"📦 [BatchExecutor] Image {index + 1} failed: {e.code.value} {e.message}")
            return GenerationResult(index=index, error=e.to_generation_error())
        logger.debug(f"📦 [BatchExecutor] Image {index + 1} done ({len(payload)} bytes)")
        return GenerationResult(index=index, payload=payload)

    async def run(
        self,
        request: GenerationRequest,
        count: Optional[int] = None,
        max_concurrency: Optional[int] = None,
        stop_event: Optional[asyncio.Event] = None,
    ) -> list[GenerationResult]:
        """
        Generate `count` images for one request template.

        A failed item never cancels its siblings. Results come back ordered by
        index whatever the completion order.

        Args:
            request: Request template shared by every item
            count: Number of images (defaults to request.count)
            max_concurrency: Override for the concurrency bound
            stop_event: When set, items not yet started are recorded as ABORTED

        Returns:
            One GenerationResult per requested image, index-ordered
        """
        count = request.count if count is None else count
        limit = max_concurrency or self.max_concurrency

        if count == 1:
            return [await self._attempt(0, request)]

        logger.info(f"📦 [BatchExecutor] Running {count} images with concurrency {limit}")
        semaphore = asyncio.Semaphore(limit)
        tasks = [self._run_item(index, request, semaphore, stop_event) for index in range(count)]
        results = await asyncio.gather(*tasks)
        return sorted(results, key=lambda result: result.index)
