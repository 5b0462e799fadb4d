"""Response models for nanobanana."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from nanobanana.models.errors import ErrorCode
from nanobanana.models.metrics import GenerationMetrics

MIME_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def extension_for_mime(mime_type: str) -> str:
    """Return the file extension for an image mime type, defaulting to .png."""
    return MIME_EXTENSIONS.get(mime_type, ".png")


class ImagePayload(BaseModel):
    """Immutable image bytes plus their mime type."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(..., description="Encoded image bytes")
    mime_type: str = Field("image/png", description="Mime type of data")

    @property
    def suggested_extension(self) -> str:
        return extension_for_mime(self.mime_type)

    def __len__(self) -> int:
        return len(self.data)


class GenerationError(BaseModel):
    """Error details for a failed generation."""

    code: ErrorCode = Field(..., description="Error category code")
    message: str = Field(..., description="User-friendly error message")
    retryable: bool = Field(..., description="Whether the caller may retry this request")
    status: Optional[int] = Field(None, description="HTTP or API status code, when known")


class GenerationResult(BaseModel):
    """Outcome of one unit of work inside a batch."""

    index: int = Field(..., ge=0, description="0-based index of the requested image")
    payload: Optional[ImagePayload] = Field(None, description="Generated image (present if succeeded)")
    error: Optional[GenerationError] = Field(None, description="Error details if the item failed")

    @model_validator(mode="after")
    def validate_outcome(self):
        """Ensure exactly one of payload and error is set."""
        if self.payload is None and self.error is None:
            raise ValueError("either payload or error must be present")
        if self.payload is not None and self.error is not None:
            raise ValueError("payload and error are mutually exclusive")
        return self

    @property
    def ok(self) -> bool:
        return self.payload is not None


class ImageGenerationResponse(BaseModel):
    """Ordered results of a generate or edit call."""

    model: str = Field(..., description="Model alias or identifier as requested")
    model_identifier: str = Field(..., description="Canonical model identifier used")
    prompt: str = Field(..., description="Prompt as submitted")
    results: list[GenerationResult] = Field(..., min_length=1, description="One result per requested image")
    metrics: Optional[GenerationMetrics] = Field(None, description="Timing and count tracking")

    @model_validator(mode="after")
    def validate_order(self):
        """Results are index-ordered and dense."""
        if [r.index for r in self.results] != list(range(len(self.results))):
            raise ValueError("results must be ordered by index starting at 0")
        return self

    @property
    def succeeded(self) -> list[GenerationResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> list[GenerationResult]:
        return [r for r in self.results if not r.ok]

    @property
    def all_succeeded(self) -> bool:
        return not self.failed
