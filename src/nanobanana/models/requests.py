"""Request models for nanobanana."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from nanobanana.models.responses import ImagePayload

DEFAULT_ASPECT = "1:1"
DEFAULT_SIZE = "1K"
MAX_IMAGES = 8


class ModelVariant(str, Enum):
    """Known configurations of the image generation backend."""

    FLASH = "flash"  # newest fast model
    PRO = "pro"
    LEGACY = "legacy"

    # Any full model identifier not listed above
    CUSTOM = "custom"


class HintMode(str, Enum):
    """How aspect ratio and size are conveyed to the backend."""

    STRUCTURED = "structured"  # generationConfig.imageConfig
    PROMPT = "prompt"  # natural-language hint appended to the prompt


class ResolvedModel(BaseModel):
    """A model alias or identifier resolved to its variant."""

    model_config = ConfigDict(frozen=True)

    variant: ModelVariant = Field(..., description="Variant that decides legality rules")
    identifier: str = Field(..., min_length=1, description="Canonical model identifier used in the endpoint")


class GenerationRequest(BaseModel):
    """Validated request for one or more images sharing a prompt and options."""

    model_config = ConfigDict(frozen=True)

    prompt: str = Field(..., min_length=1, description="Image generation prompt")
    source: Optional[ImagePayload] = Field(None, description="Source image for edit requests")
    model: ResolvedModel = Field(..., description="Resolved model")
    aspect: str = Field(DEFAULT_ASPECT, description="Aspect ratio token")
    size: str = Field(DEFAULT_SIZE, description="Size token")
    count: int = Field(1, ge=1, le=MAX_IMAGES, description="Number of images to generate (1-8)")

    @property
    def is_edit(self) -> bool:
        return self.source is not None

    @property
    def uses_default_options(self) -> bool:
        return self.aspect == DEFAULT_ASPECT and self.size == DEFAULT_SIZE
