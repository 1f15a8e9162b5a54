"""
Timeout-bounded retrieval of remote binary resources.

Each fetch races a streaming GET against a timer. When the timer fires the
in-flight request is cancelled and the failure is classified as a timeout.
There are no retries here; callers decide what a failure means.
"""

import asyncio
import logging
from typing import Optional

import httpx

from shortvideo.core.errors import DownloadError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class ResourceFetcher:
    """
    Downloads remote resources into memory.

    Failures raise DownloadError with ``cause`` set to:
    - ``timeout``: the timer expired (message includes the configured ms)
    - ``http-status``: non-2xx response (``status_code`` is set)
    - ``network``: any other transport failure

    Usage:
        async with ResourceFetcher() as fetcher:
            audio = await fetcher.fetch(url, timeout_ms=15000, label="TTS download")
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        max_bytes: Optional[int] = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(follow_redirects=True)
        self.max_bytes = max_bytes

    async def __aenter__(self) -> "ResourceFetcher":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch(self, url: str, timeout_ms: int, label: str = "Download") -> bytes:
        """
        Download ``url`` within ``timeout_ms`` milliseconds.

        Raises:
            DownloadError: On timeout, non-2xx status or transport failure
        """
        timeout_s = timeout_ms / 1000
        try:
            async with asyncio.timeout(timeout_s):
                return await self._download(url, timeout_s, label)
        except (TimeoutError, httpx.TimeoutException) as e:
            raise DownloadError(
                f"{label} failed: Timed out after {timeout_ms}ms",
                DownloadError.TIMEOUT,
                url=url,
            ) from e

    async def _download(self, url: str, timeout_s: float, label: str) -> bytes:
        try:
            async with self._client.stream("GET", url, timeout=timeout_s) as response:
                if not response.is_success:
                    raise DownloadError(
                        f"{label} failed: HTTP {response.status_code}",
                        DownloadError.HTTP_STATUS,
                        status_code=response.status_code,
                        url=url,
                    )

                buffer = bytearray()
                async for chunk in response.aiter_bytes(CHUNK_SIZE):
                    buffer.extend(chunk)
                    if self.max_bytes is not None and len(buffer) > self.max_bytes:
                        raise DownloadError(
                            f"{label} failed: response exceeds {self.max_bytes} bytes",
                            DownloadError.NETWORK,
                            url=url,
                        )
                logger.debug(f"{label}: fetched {len(buffer)} bytes from {url}")
                return bytes(buffer)

        except httpx.TimeoutException:
            raise
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
            raise DownloadError(
                f"{label} failed: {type(e).__name__}: {e}",
                DownloadError.NETWORK,
                url=url,
            ) from e
