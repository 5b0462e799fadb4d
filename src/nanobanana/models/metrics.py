"""Metrics models for nanobanana."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class GenerationMetrics(BaseModel):
    """Tracking data for a generation operation."""

    duration_ms: int = Field(..., ge=0, description="Total generation time in milliseconds")
    model_used: Optional[str] = Field(None, description="AI model identifier")
    image_count: int = Field(0, ge=0, description="Number of images returned")
    failure_count: int = Field(0, ge=0, description="Number of batch items that failed")
    timestamp: Optional[datetime] = Field(None, description="When the generation completed (UTC)")
