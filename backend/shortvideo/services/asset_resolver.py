"""
Stock footage resolution.

Turns each requested asset into either a downloaded local file or the
explicit "no asset" marker. A failed asset never fails the render: the
renderer falls back to a generated background for that scene.
"""

import asyncio
from typing import List, Sequence

from shortvideo.core.errors import ShortVideoError
from shortvideo.core.logging import CorrelationContext, get_logger
from shortvideo.core.storage import TempWorkspace
from shortvideo.schemas.plan import ResolvedAsset
from shortvideo.schemas.render import AssetRef
from shortvideo.services.fetcher import ResourceFetcher


class AssetResolver:
    """
    Downloads stock footage for a request, concurrently and in input order.

    Args:
        fetcher: Shared ResourceFetcher
        workspace: The request's temp workspace (files are removed with it)
        timeout_ms: Per-asset download timeout
        concurrency: Maximum downloads in flight
    """

    def __init__(
        self,
        fetcher: ResourceFetcher,
        workspace: TempWorkspace,
        timeout_ms: int,
        concurrency: int = 4,
    ):
        self.fetcher = fetcher
        self.workspace = workspace
        self.timeout_ms = timeout_ms
        self._semaphore = asyncio.Semaphore(max(1, concurrency))

    async def resolve(
        self,
        assets: Sequence[AssetRef],
        correlation: CorrelationContext,
    ) -> List[ResolvedAsset]:
        """
        Resolve every asset; never raises for download or disk failures.

        The result has the same length and order as ``assets``.
        """
        log = get_logger(__name__, correlation)

        resolved = await asyncio.gather(
            *(self._resolve_one(asset, correlation) for asset in assets)
        )

        valid_count = sum(1 for asset in resolved if asset.has_asset)
        log.info(
            "Asset resolution complete",
            extra={
                "valid_assets": valid_count,
                "fallback_assets": len(resolved) - valid_count,
            },
        )
        return list(resolved)

    async def _resolve_one(
        self,
        asset: AssetRef,
        correlation: CorrelationContext,
    ) -> ResolvedAsset:
        if not asset.video_url:
            return ResolvedAsset.missing(asset.search_terms)

        async with self._semaphore:
            try:
                data = await self.fetcher.fetch(
                    asset.video_url,
                    self.timeout_ms,
                    label="Asset download",
                )
                local_path = await self.workspace.write_file("asset", ".mp4", data)
            except Exception as e:
                get_logger(__name__, correlation).warning(
                    "Failed to download asset, using fallback",
                    extra={
                        "search_terms": asset.search_terms,
                        "error": e.message if isinstance(e, ShortVideoError) else str(e),
                        "cause": e.cause if isinstance(e, ShortVideoError) else type(e).__name__,
                    },
                )
                return ResolvedAsset.missing(asset.search_terms)

        return ResolvedAsset(
            search_terms=asset.search_terms,
            source_url=asset.video_url,
            local_path=local_path,
        )
