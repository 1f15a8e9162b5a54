"""
Integration tests for the short video render API.

Tests:
- POST /api/short-video/render (binary and url modes, failures)
- GET /health
- GET /health/ready
- Request body size limit
"""

from unittest.mock import patch

import pytest
from httpx import AsyncClient

from shortvideo.core.redis import RedisHealthStatus
from shortvideo.main import app
from shortvideo.schemas.plan import RenderJobState

from conftest import FAKE_VIDEO, TTS_URL

RENDER_URL = "/api/short-video/render"


# =============================================================================
# Render Endpoint Tests
# =============================================================================


class TestRenderEndpoint:
    @pytest.mark.asyncio
    async def test_binary_response(self, async_client: AsyncClient, render_payload: dict):
        response = await async_client.post(RENDER_URL, json=render_payload)

        assert response.status_code == 200
        assert response.headers["content-type"] == "video/mp4"
        assert response.headers["x-correlation-id"].startswith("render-")
        assert response.content == FAKE_VIDEO

    @pytest.mark.asyncio
    async def test_url_response(self, url_client: AsyncClient, render_payload: dict):
        response = await url_client.post(RENDER_URL, json=render_payload)

        assert response.status_code == 200
        assert response.json() == {"videoUrl": "https://cdn.test/videos/video-1.mp4"}
        assert "x-correlation-id" in response.headers

    @pytest.mark.asyncio
    async def test_validation_error(self, async_client: AsyncClient, render_payload: dict):
        render_payload["config"]["resolution"] = "wide"

        response = await async_client.post(RENDER_URL, json=render_payload)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == 'Rendering failed: Invalid resolution format: wide. Expected "WxH"'
        assert data["correlationId"] == response.headers["x-correlation-id"]
        assert "details" not in data

    @pytest.mark.asyncio
    async def test_malformed_json(self, async_client: AsyncClient):
        response = await async_client.post(
            RENDER_URL,
            content=b"{not json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Rendering failed: Request body must be valid JSON"

    @pytest.mark.asyncio
    async def test_non_object_body(self, async_client: AsyncClient):
        response = await async_client.post(RENDER_URL, json=[1, 2, 3])

        assert response.status_code == 400
        assert response.json()["error"] == "Rendering failed: Request body must be a JSON object"

    @pytest.mark.asyncio
    async def test_tts_download_failure(self, async_client: AsyncClient, render_payload: dict, remote_files: dict):
        remote_files[TTS_URL] = 500

        response = await async_client.post(RENDER_URL, json=render_payload)

        assert response.status_code == 502
        data = response.json()
        assert data["error"] == "Rendering failed: TTS download failed: HTTP 500"
        assert data["details"] == "http-status"

    @pytest.mark.asyncio
    async def test_failed_render_job(self, async_client: AsyncClient, render_payload: dict, fake_engine):
        fake_engine.states = [RenderJobState.RENDERING, RenderJobState.FAILED]

        response = await async_client.post(RENDER_URL, json=render_payload)

        assert response.status_code == 502
        assert response.json()["details"] == "collaborator-failure"

    @pytest.mark.asyncio
    async def test_render_timeout(self, async_client: AsyncClient, render_service, render_payload: dict, fake_engine):
        fake_engine.states = [RenderJobState.QUEUED]
        render_service.orchestrator.timeout_ms = 20

        response = await async_client.post(RENDER_URL, json=render_payload)

        assert response.status_code == 504
        data = response.json()
        assert data["error"] == "Rendering failed: Render timed out after 20ms"
        assert data["details"] == "timeout"

    @pytest.mark.asyncio
    async def test_every_request_gets_new_correlation_id(self, async_client: AsyncClient, render_payload: dict):
        first = await async_client.post(RENDER_URL, json=render_payload)
        second = await async_client.post(RENDER_URL, json=render_payload)

        assert first.headers["x-correlation-id"] != second.headers["x-correlation-id"]

    @pytest.mark.asyncio
    async def test_body_too_large(self, async_client: AsyncClient):
        response = await async_client.post(
            RENDER_URL,
            content=b" " * (1024 * 1024 + 1),
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 413
        data = response.json()
        assert data["error"].startswith("Request body too large")
        assert data["correlationId"] == response.headers["x-correlation-id"]


# =============================================================================
# Health Endpoint Tests
# =============================================================================


class TestHealthEndpoints:
    @pytest.mark.asyncio
    async def test_health(self, async_client: AsyncClient):
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_ready_when_redis_up(self, async_client: AsyncClient):
        with patch(
            "shortvideo.main.check_redis_health",
            return_value=RedisHealthStatus(healthy=True, latency_ms=0.4),
        ):
            response = await async_client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["checks"]["redis"] == {"status": "healthy", "latency_ms": 0.4}

    @pytest.mark.asyncio
    async def test_degraded_when_redis_down(self, async_client: AsyncClient):
        with patch(
            "shortvideo.main.check_redis_health",
            return_value=RedisHealthStatus(healthy=False, error="Connection failed: refused"),
        ):
            response = await async_client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_root_info(self, async_client: AsyncClient):
        response = await async_client.get("/")

        assert response.status_code == 200
        assert response.json()["name"] == app.title
