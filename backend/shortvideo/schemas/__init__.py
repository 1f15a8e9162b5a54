"""
Schemas for the short video render service.
"""

from .plan import (
    BinaryResult,
    PlanMeta,
    RenderJobState,
    RenderPlan,
    ResolvedAsset,
    ScenePlan,
    UrlResult,
)
from .render import (
    KNOWN_PLATFORMS,
    KNOWN_TONES,
    AssetRef,
    ErrorResponse,
    HealthResponse,
    Narrative,
    RenderConfig,
    RenderRequest,
    Scene,
    VideoUrlResponse,
)

__all__ = [
    # Wire schemas
    "KNOWN_PLATFORMS",
    "KNOWN_TONES",
    "AssetRef",
    "ErrorResponse",
    "HealthResponse",
    "Narrative",
    "RenderConfig",
    "RenderRequest",
    "Scene",
    "VideoUrlResponse",
    # Pipeline types
    "BinaryResult",
    "PlanMeta",
    "RenderJobState",
    "RenderPlan",
    "ResolvedAsset",
    "ScenePlan",
    "UrlResult",
]
