"""
Common dependencies for the API endpoints.

The render service and its collaborators are built once per process from
the frozen settings.
"""

from functools import lru_cache

from shortvideo.core.config import get_settings
from shortvideo.core.storage import LocalVideoStorage
from shortvideo.services.fetcher import ResourceFetcher
from shortvideo.services.render_engine import RQRenderEngine
from shortvideo.services.render_service import ShortVideoRenderService


@lru_cache()
def get_render_service() -> ShortVideoRenderService:
    """
    Render service dependency.

    Usage:
        @router.post("/render")
        async def render(service: ShortVideoRenderService = Depends(get_render_service)):
            ...
    """
    settings = get_settings()
    return ShortVideoRenderService(
        settings=settings,
        fetcher=ResourceFetcher(max_bytes=settings.max_download_bytes),
        engine=RQRenderEngine(
            redis_url=settings.redis_url,
            task=settings.render_task,
            storage_root=settings.storage_root,
        ),
        storage=LocalVideoStorage(settings.storage_root, settings.storage_base_url),
    )


async def close_render_service() -> None:
    """Release the shared HTTP client, if the service was ever built."""
    if get_render_service.cache_info().currsize:
        await get_render_service().fetcher.aclose()
        get_render_service.cache_clear()


__all__ = [
    "get_render_service",
    "close_render_service",
]
