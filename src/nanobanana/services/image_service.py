"""Image generation service tying validation, transport and batching together."""

import asyncio
import logging
import time
from datetime import datetime, timezone
from functools import partial
from typing import Any, Optional

from nanobanana.interfaces import ImageTransport
from nanobanana.models.metrics import GenerationMetrics
from nanobanana.models.requests import DEFAULT_ASPECT, DEFAULT_SIZE, GenerationRequest, HintMode
from nanobanana.models.responses import GenerationResult, ImageGenerationResponse, ImagePayload
from nanobanana.services import request_builder, response_extractor
from nanobanana.services.batch_executor import DEFAULT_MAX_CONCURRENCY, BatchExecutor
from nanobanana.services.retry_service import retry_with_backoff
from nanobanana.services.transport import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS, Transport
from nanobanana.validation import resolve_model

logger = logging.getLogger(__name__)


class ImageService:
    """Generates and edits images through the generateContent API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        hint_mode: HintMode = HintMode.STRUCTURED,
        retry_attempts: int = 1,
        transport: Optional[ImageTransport] = None,
    ):
        """
        Initialize image service.

        Args:
            api_key: Credential sent with every call
            base_url: Models base URL
            timeout_seconds: Per-call timeout
            max_concurrency: Concurrency bound for batches
            hint_mode: How aspect and size are conveyed to the backend
            retry_attempts: Attempts per image for retryable errors (1 = no retry)
            transport: Transport instance (creates a new one if not provided)
        """
        if not api_key:
            raise ValueError("api_key is required")
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        self._api_key = api_key
        self.hint_mode = hint_mode
        self.max_concurrency = max_concurrency
        self.retry_attempts = retry_attempts
        self.transport: ImageTransport = transport or Transport(base_url=base_url, timeout_seconds=timeout_seconds)

    async def generate_one(self, body: dict[str, Any], request: GenerationRequest) -> ImagePayload:
        """Send one prepared body and extract its image. ApiErrors propagate."""
        raw = await self.transport.send(body, self._api_key, request.model.identifier)
        return response_extractor.extract(raw)

    async def _generate_with_policy(self, body: dict[str, Any], request: GenerationRequest) -> ImagePayload:
        if self.retry_attempts <= 1:
            return await self.generate_one(body, request)
        return await retry_with_backoff(self.generate_one, body, request, attempts=self.retry_attempts)

    async def generate(
        self,
        prompt: str,
        *,
        source: Optional[ImagePayload] = None,
        model: str = "flash",
        aspect: str = DEFAULT_ASPECT,
        size: str = DEFAULT_SIZE,
        count: int = 1,
        max_concurrency: Optional[int] = None,
        stop_event: Optional[asyncio.Event] = None,
    ) -> ImageGenerationResponse:
        """
        Generate (or, with a source image, edit) one or more images.

        Args:
            prompt: Text prompt
            source: Source image for edit requests
            model: Model alias or full identifier
            aspect: Aspect ratio token
            size: Size token
            count: Number of images (1-8)
            max_concurrency: Override for the batch concurrency bound
            stop_event: Stops launching new batch items once set

        Returns:
            ImageGenerationResponse with one result per requested image

        Raises:
            InvalidOptionError: For an unknown model or illegal aspect/size, before any network call
            pydantic.ValidationError: For an empty prompt or count outside 1-8
            ApiError: For a failed single-image (count == 1) call
        """
        start_time = time.time()

        resolved = resolve_model(model)
        request, body = request_builder.build(
            prompt,
            resolved,
            source=source,
            aspect=aspect,
            size=size,
            count=count,
            hint_mode=self.hint_mode,
        )

        logger.info(
            f"🎨 [ImageService] {'Editing' if request.is_edit else 'Generating'} {count} image(s) "
            f"with {resolved.identifier} ({aspect}, {size})"
        )

        if count == 1:
            payload = await self._generate_with_policy(body, request)
            results = [GenerationResult(index=0, payload=payload)]
        else:
            executor = BatchExecutor(
                partial(self._generate_with_policy, body),
                max_concurrency=max_concurrency or self.max_concurrency,
            )
            results = await executor.run(request, count, stop_event=stop_event)

        failures = sum(1 for r in results if not r.ok)
        metrics = GenerationMetrics(
            duration_ms=int((time.time() - start_time) * 1000),
            model_used=resolved.identifier,
            image_count=len(results) - failures,
            failure_count=failures,
            timestamp=datetime.now(timezone.utc),
        )

        return ImageGenerationResponse(
            model=model,
            model_identifier=resolved.identifier,
            prompt=prompt,
            results=results,
            metrics=metrics,
        )
