"""Tests for the image generation service."""

import asyncio

import pytest
from pydantic import ValidationError

from conftest import FakeTransport, inline_part, make_response
from nanobanana.models.errors import ApiError, ErrorCode, InvalidOptionError
from nanobanana.models.requests import HintMode
from nanobanana.models.responses import ImagePayload
from nanobanana.services.image_service import ImageService


def make_service(transport, **kwargs) -> ImageService:
    return ImageService(api_key="test-key", transport=transport, **kwargs)


def test_service_requires_api_key():
    with pytest.raises(ValueError, match="api_key"):
        ImageService(api_key="", transport=FakeTransport())


def test_service_rejects_zero_concurrency():
    with pytest.raises(ValueError, match="max_concurrency"):
        ImageService(api_key="k", max_concurrency=0, transport=FakeTransport())


@pytest.mark.asyncio
async def test_generate_single_image(image_response, png_bytes):
    transport = FakeTransport([image_response])
    service = make_service(transport)

    response = await service.generate("A red dragon")

    assert response.model == "flash"
    assert response.model_identifier == "gemini-3.1-flash-image-preview"
    assert response.prompt == "A red dragon"
    assert len(response.results) == 1
    assert response.results[0].payload.data == png_bytes
    assert response.results[0].payload.mime_type == "image/png"
    assert response.metrics.image_count == 1
    assert response.metrics.failure_count == 0
    assert response.metrics.model_used == "gemini-3.1-flash-image-preview"

    assert len(transport.calls) == 1
    call = transport.calls[0]
    assert call["credential"] == "test-key"
    assert call["model"] == "gemini-3.1-flash-image-preview"
    assert call["body"] == {"contents": [{"parts": [{"text": "A red dragon"}]}]}


@pytest.mark.asyncio
async def test_generate_sends_image_config(image_response):
    transport = FakeTransport([image_response])
    service = make_service(transport)

    await service.generate("A red dragon", model="pro", aspect="16:9", size="4K")

    call = transport.calls[0]
    assert call["model"] == "gemini-3-pro-image-preview"
    assert call["body"]["generationConfig"] == {"imageConfig": {"aspectRatio": "16:9", "imageSize": "4K"}}


@pytest.mark.asyncio
async def test_generate_prompt_hint_mode(image_response):
    transport = FakeTransport([image_response])
    service = make_service(transport, hint_mode=HintMode.PROMPT)

    await service.generate("A red dragon", aspect="16:9", size="2K")

    body = transport.calls[0]["body"]
    assert "generationConfig" not in body
    assert body["contents"][0]["parts"][0]["text"] == "A red dragon. Aspect ratio: 16:9. Resolution: 2048x2048"


@pytest.mark.asyncio
async def test_edit_includes_source_image(image_response, jpeg_bytes):
    transport = FakeTransport([image_response])
    service = make_service(transport)
    source = ImagePayload(data=jpeg_bytes, mime_type="image/jpeg")

    await service.generate("make it blue", source=source)

    parts = transport.calls[0]["body"]["contents"][0]["parts"]
    assert parts[0] == {"text": "make it blue"}
    assert parts[1]["inlineData"]["mimeType"] == "image/jpeg"
    assert len(parts) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs,code",
    [
        ({"model": "turbo"}, ErrorCode.INVALID_MODEL),
        ({"model": "pro", "aspect": "1:8"}, ErrorCode.INVALID_ASPECT),
        ({"model": "flash", "size": "4K"}, ErrorCode.INVALID_SIZE),
        ({"model": "legacy", "size": "2K"}, ErrorCode.INVALID_SIZE),
    ],
)
async def test_invalid_options_never_reach_transport(kwargs, code):
    transport = FakeTransport()
    service = make_service(transport)

    with pytest.raises(InvalidOptionError) as exc_info:
        await service.generate("A red dragon", **kwargs)

    assert exc_info.value.code == code
    assert transport.calls == []


@pytest.mark.asyncio
async def test_empty_prompt_rejected():
    transport = FakeTransport()
    service = make_service(transport)

    with pytest.raises(ValidationError):
        await service.generate("")

    assert transport.calls == []


@pytest.mark.asyncio
async def test_single_image_error_propagates():
    transport = FakeTransport([ApiError(ErrorCode.AUTH, "invalid API key", status=401)])
    service = make_service(transport)

    with pytest.raises(ApiError) as exc_info:
        await service.generate("A red dragon")

    assert exc_info.value.code == ErrorCode.AUTH
    assert len(transport.calls) == 1


@pytest.mark.asyncio
async def test_single_image_without_image_raises_no_image_found():
    transport = FakeTransport([make_response(parts=[{"text": "I cannot draw that"}])])
    service = make_service(transport)

    with pytest.raises(ApiError) as exc_info:
        await service.generate("A red dragon")

    assert exc_info.value.code == ErrorCode.NO_IMAGE_FOUND


@pytest.mark.asyncio
async def test_batch_returns_partial_results(png_bytes):
    transport = FakeTransport(
        [
            make_response(parts=[inline_part(png_bytes)]),
            ApiError(ErrorCode.RATE_LIMITED, "rate limit exceeded", status=429),
            make_response(parts=[inline_part(png_bytes)]),
        ]
    )
    service = make_service(transport)

    response = await service.generate("A red dragon", count=3)

    assert [r.index for r in response.results] == [0, 1, 2]
    assert len(transport.calls) == 3
    assert len(response.succeeded) == 2
    assert len(response.failed) == 1
    assert response.failed[0].error.code == ErrorCode.RATE_LIMITED
    assert response.failed[0].error.retryable is True
    assert response.metrics.image_count == 2
    assert response.metrics.failure_count == 1


@pytest.mark.asyncio
async def test_batch_sends_identical_bodies(image_response):
    transport = FakeTransport(default=image_response)
    service = make_service(transport)

    response = await service.generate("A red dragon", count=4, aspect="3:2")

    assert response.all_succeeded
    bodies = [c["body"] for c in transport.calls]
    assert len(bodies) == 4
    assert all(b == bodies[0] for b in bodies)


@pytest.mark.asyncio
async def test_batch_respects_stop_event(image_response):
    transport = FakeTransport(default=image_response)
    service = make_service(transport, max_concurrency=1)
    stop_event = asyncio.Event()
    stop_event.set()

    response = await service.generate("A red dragon", count=3, stop_event=stop_event)

    assert transport.calls == []
    assert all(r.error.code == ErrorCode.ABORTED for r in response.results)


@pytest.mark.asyncio
async def test_retry_attempts_recover_transient_failure(image_response):
    transport = FakeTransport(
        [ApiError(ErrorCode.RATE_LIMITED, "rate limit exceeded", status=429), image_response]
    )
    service = make_service(transport, retry_attempts=2)

    response = await service.generate("A red dragon")

    assert response.all_succeeded
    assert len(transport.calls) == 2


@pytest.mark.asyncio
async def test_retry_attempts_skip_permanent_failure():
    transport = FakeTransport([ApiError(ErrorCode.BAD_REQUEST, "bad prompt", status=400)])
    service = make_service(transport, retry_attempts=3)

    with pytest.raises(ApiError) as exc_info:
        await service.generate("A red dragon")

    assert exc_info.value.code == ErrorCode.BAD_REQUEST
    assert len(transport.calls) == 1


@pytest.mark.asyncio
async def test_custom_identifier_passes_through(image_response):
    transport = FakeTransport([image_response])
    service = make_service(transport)

    response = await service.generate("A red dragon", model="gemini-9-image-exp", size="2K")

    assert response.model_identifier == "gemini-9-image-exp"
    assert transport.calls[0]["model"] == "gemini-9-image-exp"
