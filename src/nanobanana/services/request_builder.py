"""Builds generateContent request bodies from prompts and options."""

import base64
import logging
from typing import Any, Optional

from nanobanana.models.requests import (
    DEFAULT_ASPECT,
    DEFAULT_SIZE,
    GenerationRequest,
    HintMode,
    ResolvedModel,
)
from nanobanana.models.responses import ImagePayload
from nanobanana.models.wire import Content, GenerationConfig, ImageConfig, InlineData, Part, WireRequest
from nanobanana.validation import size_dimensions, validate_aspect, validate_size

logger = logging.getLogger(__name__)


def build_prompt_hint(prompt: str, aspect: str, size: str) -> str:
    """Append aspect and resolution hints to a prompt as plain text."""
    parts = [prompt]
    if aspect != DEFAULT_ASPECT:
        parts.append(f"Aspect ratio: {aspect}")
    if size != DEFAULT_SIZE:
        width, height = size_dimensions(size)
        parts.append(f"Resolution: {width}x{height}")
    return ". ".join(parts)


def build_wire_request(request: GenerationRequest, hint_mode: HintMode = HintMode.STRUCTURED) -> WireRequest:
    """
    Map a GenerationRequest onto the wire envelope.

    The prompt is always the first part; an edit request adds exactly one
    inlineData part carrying the base64 source image. In structured mode
    generationConfig.imageConfig carries both aspect and size, and is left
    out entirely when both are defaults.
    """
    text = request.prompt
    generation_config = None

    if hint_mode == HintMode.PROMPT:
        text = build_prompt_hint(request.prompt, request.aspect, request.size)
    elif not request.uses_default_options:
        generation_config = GenerationConfig(
            image_config=ImageConfig(aspect_ratio=request.aspect, image_size=request.size)
        )

    parts = [Part(text=text)]
    if request.source is not None:
        parts.append(
            Part(
                inline_data=InlineData(
                    mime_type=request.source.mime_type,
                    data=base64.b64encode(request.source.data).decode("ascii"),
                )
            )
        )

    return WireRequest(contents=[Content(parts=parts)], generation_config=generation_config)


def build(
    prompt: str,
    model: ResolvedModel,
    source: Optional[ImagePayload] = None,
    aspect: str = DEFAULT_ASPECT,
    size: str = DEFAULT_SIZE,
    count: int = 1,
    hint_mode: HintMode = HintMode.STRUCTURED,
) -> tuple[GenerationRequest, dict[str, Any]]:
    """
    Build a validated request and its JSON body.

    Args:
        prompt: Text prompt (non-empty)
        model: Resolved model
        source: Source image for edit requests
        aspect: Aspect ratio token
        size: Size token
        count: Number of images the request stands for (1-8)
        hint_mode: How aspect and size are conveyed

    Returns:
        (GenerationRequest, wire body dict)

    Raises:
        InvalidOptionError: If aspect or size is illegal for the model
        pydantic.ValidationError: If the prompt is empty or count is out of range
    """
    validate_aspect(model, aspect)
    validate_size(model, size)

    request = GenerationRequest(
        prompt=prompt,
        source=source,
        model=model,
        aspect=aspect,
        size=size,
        count=count,
    )
    body = build_wire_request(request, hint_mode).to_body()

    logger.debug(
        f"🧱 [RequestBuilder] {'edit' if request.is_edit else 'generate'} request for {model.identifier} "
        f"(aspect={aspect}, size={size}, structured={'generationConfig' in body})"
    )
    return request, body
