"""
Internal render pipeline types.

These never cross the HTTP boundary. They are plain frozen dataclasses so a
plan built twice from the same inputs compares equal.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


# ============================================================================
# Asset resolution
# ============================================================================


@dataclass(frozen=True)
class ResolvedAsset:
    """Stock footage for one scene position, downloaded or explicitly absent."""

    search_terms: str
    source_url: Optional[str] = None
    local_path: Optional[Path] = None

    @property
    def has_asset(self) -> bool:
        return self.local_path is not None

    @classmethod
    def missing(cls, search_terms: str) -> "ResolvedAsset":
        """The "no asset" fallback marker."""
        return cls(search_terms=search_terms)


# ============================================================================
# Render plan
# ============================================================================


@dataclass(frozen=True)
class PlanMeta:
    """Narrative identifiers forwarded to the renderer untouched."""

    summary_id: Optional[str] = None
    style_pack_id: Optional[str] = None


@dataclass(frozen=True)
class ScenePlan:
    """One scene placed on the frame timeline."""

    id: str
    start_frame: int
    duration_in_frames: int
    duration_ms: int
    text: str
    asset_path: Optional[Path] = None
    search_terms: Tuple[str, ...] = ()

    @property
    def end_frame(self) -> int:
        return self.start_frame + self.duration_in_frames


@dataclass(frozen=True)
class RenderPlan:
    """
    Frame-accurate description of the video handed to the render collaborator.

    Scenes are contiguous: each scene starts on the frame the previous one ends.
    """

    width: int
    height: int
    fps: int
    scenes: Tuple[ScenePlan, ...]
    audio: bytes = field(repr=False)
    tone: str
    platform: str
    meta: PlanMeta = field(default_factory=PlanMeta)

    @property
    def total_frames(self) -> int:
        return sum(scene.duration_in_frames for scene in self.scenes)

    def to_payload(self) -> Dict[str, Any]:
        """
        JSON-serializable job description (audio excluded).

        Keys follow the renderer's composition props (camelCase).
        """
        return {
            "width": self.width,
            "height": self.height,
            "fps": self.fps,
            "durationInFrames": self.total_frames,
            "scenes": [
                {
                    "id": scene.id,
                    "startFrame": scene.start_frame,
                    "durationInFrames": scene.duration_in_frames,
                    "durationMs": scene.duration_ms,
                    "text": scene.text,
                    "assetPath": str(scene.asset_path) if scene.asset_path else None,
                    "searchTerms": list(scene.search_terms),
                }
                for scene in self.scenes
            ],
            "style": {"tone": self.tone, "platform": self.platform},
            "meta": {
                "summaryId": self.meta.summary_id,
                "stylePackId": self.meta.style_pack_id,
            },
        }


# ============================================================================
# Render jobs
# ============================================================================


class RenderJobState(str, Enum):
    """State of a job in the render collaborator, as observed by polling."""

    QUEUED = "queued"
    RENDERING = "rendering"
    READY = "ready"
    FAILED = "failed"


# ============================================================================
# Dispatch results
# ============================================================================


@dataclass(frozen=True)
class BinaryResult:
    content: bytes = field(repr=False)
    media_type: str = "video/mp4"


@dataclass(frozen=True)
class UrlResult:
    video_url: str
