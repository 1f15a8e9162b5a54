"""
Unit tests for the timeout-bounded resource fetcher.
"""

import asyncio

import httpx
import pytest

from shortvideo.core.errors import DownloadError
from shortvideo.services.fetcher import ResourceFetcher


def fetcher_for(handler, max_bytes=None) -> ResourceFetcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ResourceFetcher(client=client, max_bytes=max_bytes)


class TestResourceFetcher:
    """Test downloads and their failure classification."""

    @pytest.mark.asyncio
    async def test_returns_body_bytes(self):
        fetcher = fetcher_for(lambda request: httpx.Response(200, content=b"narration"))

        data = await fetcher.fetch("https://media.test/tts.mp3", timeout_ms=1000)

        assert data == b"narration"
        await fetcher._client.aclose()

    @pytest.mark.asyncio
    async def test_non_success_status(self):
        fetcher = fetcher_for(lambda request: httpx.Response(404))

        with pytest.raises(DownloadError) as exc_info:
            await fetcher.fetch("https://media.test/missing.mp3", timeout_ms=1000, label="TTS download")

        error = exc_info.value
        assert error.cause == DownloadError.HTTP_STATUS
        assert error.status_code == 404
        assert error.message == "TTS download failed: HTTP 404"
        assert error.url == "https://media.test/missing.mp3"

    @pytest.mark.asyncio
    async def test_server_error_status(self):
        fetcher = fetcher_for(lambda request: httpx.Response(503))

        with pytest.raises(DownloadError) as exc_info:
            await fetcher.fetch("https://media.test/a.mp4", timeout_ms=1000)

        assert exc_info.value.status_code == 503
        assert exc_info.value.http_status == 502

    @pytest.mark.asyncio
    async def test_timeout_cancels_slow_download(self):
        """A server slower than the timer fails as a timeout with the configured ms."""

        async def slow_handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, content=b"too late")

        fetcher = fetcher_for(slow_handler)

        with pytest.raises(DownloadError) as exc_info:
            await fetcher.fetch("https://media.test/slow.mp3", timeout_ms=50, label="TTS download")

        assert exc_info.value.cause == DownloadError.TIMEOUT
        assert exc_info.value.message == "TTS download failed: Timed out after 50ms"

    @pytest.mark.asyncio
    async def test_transport_timeout_classified_as_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        fetcher = fetcher_for(handler)

        with pytest.raises(DownloadError) as exc_info:
            await fetcher.fetch("https://media.test/a.mp4", timeout_ms=2000)

        assert exc_info.value.cause == DownloadError.TIMEOUT
        assert "Timed out after 2000ms" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_connection_failure_is_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        fetcher = fetcher_for(handler)

        with pytest.raises(DownloadError) as exc_info:
            await fetcher.fetch("https://media.test/a.mp4", timeout_ms=1000, label="Asset download")

        assert exc_info.value.cause == DownloadError.NETWORK
        assert exc_info.value.message.startswith("Asset download failed: ConnectError")

    @pytest.mark.asyncio
    async def test_oversized_response_rejected(self):
        fetcher = fetcher_for(lambda request: httpx.Response(200, content=b"x" * 100), max_bytes=10)

        with pytest.raises(DownloadError) as exc_info:
            await fetcher.fetch("https://media.test/huge.mp4", timeout_ms=1000)

        assert exc_info.value.cause == DownloadError.NETWORK
        assert "exceeds 10 bytes" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_owned_client_closed_on_exit(self):
        async with ResourceFetcher() as fetcher:
            client = fetcher._client

        assert client.is_closed

    @pytest.mark.asyncio
    async def test_injected_client_left_open(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))

        async with ResourceFetcher(client=client):
            pass

        assert not client.is_closed
        await client.aclose()
