"""
Short video render services.

Contains the render pipeline and its stages.
"""

from .asset_resolver import AssetResolver
from .dispatcher import ResponseDispatcher, VideoStorage
from .fetcher import ResourceFetcher
from .orchestrator import RenderOrchestrator
from .plan_builder import build_render_plan, ms_to_frames
from .render_engine import RenderEngine, RQRenderEngine
from .render_service import ShortVideoRenderService
from .request_validator import RequestValidator, parse_resolution
from .text import sanitize_text

__all__ = [
    "AssetResolver",
    "RenderEngine",
    "RenderOrchestrator",
    "RequestValidator",
    "ResourceFetcher",
    "ResponseDispatcher",
    "RQRenderEngine",
    "ShortVideoRenderService",
    "VideoStorage",
    "build_render_plan",
    "ms_to_frames",
    "parse_resolution",
    "sanitize_text",
]
