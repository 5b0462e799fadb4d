"""Models package for nanobanana."""

from nanobanana.models.errors import ApiError, ErrorCode, InvalidOptionError, is_retryable
from nanobanana.models.metrics import GenerationMetrics
from nanobanana.models.requests import GenerationRequest, HintMode, ModelVariant, ResolvedModel
from nanobanana.models.responses import (
    GenerationError,
    GenerationResult,
    ImageGenerationResponse,
    ImagePayload,
    extension_for_mime,
)

__all__ = [
    "ApiError",
    "ErrorCode",
    "InvalidOptionError",
    "is_retryable",
    "GenerationError",
    "GenerationMetrics",
    "GenerationRequest",
    "GenerationResult",
    "HintMode",
    "ImageGenerationResponse",
    "ImagePayload",
    "ModelVariant",
    "ResolvedModel",
    "extension_for_mime",
]
