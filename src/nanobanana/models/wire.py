"""Wire format models for the generateContent endpoint."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    """Base for wire models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class InlineData(WireModel):
    """Binary payload carried as base64 plus a declared mime type."""

    mime_type: Optional[str] = Field(None, alias="mimeType")
    data: Optional[str] = None


class Part(WireModel):
    text: Optional[str] = None
    inline_data: Optional[InlineData] = Field(None, alias="inlineData")


class Content(WireModel):
    parts: Optional[list[Part]] = None
    role: Optional[str] = None


class ImageConfig(WireModel):
    aspect_ratio: str = Field(..., alias="aspectRatio")
    image_size: str = Field(..., alias="imageSize")


class GenerationConfig(WireModel):
    image_config: ImageConfig = Field(..., alias="imageConfig")


class WireRequest(WireModel):
    contents: list[Content]
    generation_config: Optional[GenerationConfig] = Field(None, alias="generationConfig")

    def to_body(self) -> dict:
        """Serialise to the JSON body, omitting absent optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Candidate(WireModel):
    content: Optional[Content] = None


class ErrorBody(WireModel):
    code: Optional[int] = None
    message: str = ""
    status: Optional[str] = None


class WireResponse(WireModel):
    candidates: Optional[list[Candidate]] = None
    error: Optional[ErrorBody] = None
