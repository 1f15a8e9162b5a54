"""
Render plan construction.

Converts millisecond scene durations into a gapless frame timeline and binds
each scene to its narration text and background asset. Pure: no I/O, and the
same inputs always produce an equal plan.
"""

from typing import Optional, Sequence

from shortvideo.schemas.plan import PlanMeta, RenderPlan, ResolvedAsset, ScenePlan
from shortvideo.schemas.render import RenderRequest
from shortvideo.services.request_validator import parse_resolution
from shortvideo.services.text import sanitize_text

DEFAULT_FPS = 30


def ms_to_frames(duration_ms: int, fps: int = DEFAULT_FPS) -> int:
    """
    Number of frames covering ``duration_ms``, rounded up.

    Integer arithmetic, so a positive duration is never zero frames.

    Example:
        >>> ms_to_frames(1000)
        30
        >>> ms_to_frames(1)
        1
    """
    return -(-duration_ms * fps // 1000)


def _asset_at(resolved_assets: Sequence[ResolvedAsset], idx: int) -> Optional[ResolvedAsset]:
    if idx < len(resolved_assets):
        return resolved_assets[idx]
    return None


def build_render_plan(
    request: RenderRequest,
    audio: bytes,
    resolved_assets: Sequence[ResolvedAsset],
    fps: int = DEFAULT_FPS,
) -> RenderPlan:
    """
    Build the frame-accurate render plan for a validated request.

    Asset i backs scene i. Scenes beyond the asset list get no asset, and
    assets beyond the scene list are ignored.

    Args:
        request: Validated render request
        audio: Narrated audio bytes
        resolved_assets: Output of AssetResolver.resolve, by scene position
        fps: Frames per second

    Returns:
        RenderPlan whose scenes start at frame 0 and are contiguous
    """
    width, height = parse_resolution(request.config.resolution)

    scenes = []
    current_frame = 0
    for idx, scene in enumerate(request.scenes):
        duration_frames = ms_to_frames(scene.duration_ms, fps)
        asset = _asset_at(resolved_assets, idx)

        scenes.append(
            ScenePlan(
                id=f"scene-{idx}",
                start_frame=current_frame,
                duration_in_frames=duration_frames,
                duration_ms=scene.duration_ms,
                text=sanitize_text(scene.text),
                asset_path=asset.local_path if asset else None,
                search_terms=tuple(scene.search_terms),
            )
        )
        current_frame += duration_frames

    narrative = request.narrative
    meta = PlanMeta(
        summary_id=narrative.summary_id if narrative else None,
        style_pack_id=narrative.style_pack_id if narrative else None,
    )

    return RenderPlan(
        width=width,
        height=height,
        fps=fps,
        scenes=tuple(scenes),
        audio=audio,
        tone=request.config.tone,
        platform=request.config.platform,
        meta=meta,
    )
