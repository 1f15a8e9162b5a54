"""
Pydantic schemas for the short video render endpoint.

The wire format is the contract used by the upstream short video worker:
camelCase keys, scene durations in milliseconds.

Example usage:
    from shortvideo.schemas.render import RenderRequest

    request = RenderRequest.model_validate(json_data)
"""

import math
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Known values (other strings are passed through to the renderer unchanged)
# =============================================================================

KNOWN_TONES = ("STOIC", "EPIC", "PLAYFUL", "NEUTRAL")

KNOWN_PLATFORMS = ("TIKTOK", "INSTAGRAM", "X")


# =============================================================================
# Request Schemas
# =============================================================================


class Scene(BaseModel):
    """One spoken segment of the video."""

    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(..., description="Spoken text for this scene")
    duration_ms: int = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("duration", "durationMs", "duration_ms"),
        serialization_alias="durationMs",
        description="Duration in milliseconds",
    )
    search_terms: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("searchTerms", "search_terms"),
        serialization_alias="searchTerms",
        description="Search terms derived from the narration",
    )

    @field_validator("duration_ms", mode="before")
    @classmethod
    def _whole_milliseconds(cls, value):
        # Fractional milliseconds round up so a positive duration never becomes 0
        if isinstance(value, float) and not value.is_integer():
            return math.ceil(value)
        return value


class AssetRef(BaseModel):
    """Pre-selected stock footage for the scene at the same position."""

    model_config = ConfigDict(populate_by_name=True)

    search_terms: str = Field(
        default="",
        validation_alias=AliasChoices("searchTerms", "search_terms"),
        serialization_alias="searchTerms",
        description="Query used to find the footage",
    )
    video_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("videoUrl", "video_url"),
        serialization_alias="videoUrl",
        description="Stock video URL (null means no asset)",
    )


class RenderConfig(BaseModel):
    """Render-wide settings."""

    model_config = ConfigDict(populate_by_name=True)

    resolution: str = Field(..., description='Video resolution, e.g. "1080x1920"')
    tone: str = Field(default="NEUTRAL", description="STOIC | EPIC | PLAYFUL | NEUTRAL | other")
    platform: str = Field(default="TIKTOK", description="TIKTOK | INSTAGRAM | X | other")
    tts_url: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("ttsUrl", "tts_url"),
        serialization_alias="ttsUrl",
        description="URL of the narrated audio",
    )
    assets: List[AssetRef] = Field(default_factory=list, description="Stock footage by scene position")


class Narrative(BaseModel):
    """Opaque metadata passed through to the renderer."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    summary_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("summaryId", "summary_id"),
        serialization_alias="summaryId",
    )
    style_pack_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("stylePackId", "style_pack_id"),
        serialization_alias="stylePackId",
    )


class RenderRequest(BaseModel):
    """Request body of POST /api/short-video/render."""

    scenes: List[Scene] = Field(..., min_length=1)
    config: RenderConfig
    narrative: Optional[Narrative] = None


# =============================================================================
# Response Schemas
# =============================================================================


class VideoUrlResponse(BaseModel):
    """Response in url mode."""

    model_config = ConfigDict(populate_by_name=True)

    video_url: str = Field(..., serialization_alias="videoUrl", validation_alias="videoUrl")


class ErrorResponse(BaseModel):
    """Failure response; the correlation id locates the detailed log."""

    model_config = ConfigDict(populate_by_name=True)

    error: str = Field(..., description="User-facing error message")
    correlation_id: str = Field(
        ..., serialization_alias="correlationId", validation_alias="correlationId"
    )
    details: Optional[str] = Field(default=None, description="Failure cause, e.g. timeout or http-status")


class HealthResponse(BaseModel):
    status: str = "ok"
