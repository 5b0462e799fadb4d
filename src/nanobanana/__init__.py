"""nanobanana - generate and edit images with Gemini from the command line."""

from nanobanana.models.errors import ApiError, ErrorCode, InvalidOptionError, is_retryable
from nanobanana.models.metrics import GenerationMetrics
from nanobanana.models.requests import (
    DEFAULT_ASPECT,
    DEFAULT_SIZE,
    GenerationRequest,
    HintMode,
    ModelVariant,
    ResolvedModel,
)
from nanobanana.models.responses import (
    GenerationError,
    GenerationResult,
    ImageGenerationResponse,
    ImagePayload,
)
from nanobanana.interfaces import ImageTransport
from nanobanana.services.batch_executor import BatchExecutor
from nanobanana.services.image_codec import detect_mime, read_image, write_image
from nanobanana.services.image_service import ImageService
from nanobanana.services.retry_service import retry_with_backoff
from nanobanana.services.transport import Transport
from nanobanana.validation import resolve_model, validate_aspect, validate_size

__version__ = "0.1.0"

__all__ = [
    # Errors
    "ApiError",
    "ErrorCode",
    "InvalidOptionError",
    "is_retryable",
    # Request types
    "DEFAULT_ASPECT",
    "DEFAULT_SIZE",
    "GenerationRequest",
    "HintMode",
    "ModelVariant",
    "ResolvedModel",
    # Response types
    "GenerationError",
    "GenerationMetrics",
    "GenerationResult",
    "ImageGenerationResponse",
    "ImagePayload",
    # Validation
    "resolve_model",
    "validate_aspect",
    "validate_size",
    # Services
    "BatchExecutor",
    "ImageService",
    "Transport",
    "ImageTransport",
    # Utilities
    "detect_mime",
    "read_image",
    "retry_with_backoff",
    "write_image",
]
