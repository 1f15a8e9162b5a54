"""
Shared test fixtures for the short video render service tests.

Provides:
- Test settings rooted in a temporary storage directory
- A ResourceFetcher backed by an in-memory HTTP transport
- Fake render engine and storage collaborators
- A deterministic clock for deadline tests
- Test client (httpx AsyncClient over ASGITransport)
"""

import os
import tempfile
from pathlib import Path
from typing import AsyncGenerator, Dict, List, Optional, Union

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing app modules
os.environ["REDIS_URL"] = "redis://localhost:6379/0"
os.environ["RESPONSE_MODE"] = "binary"
os.environ["MAX_REQUEST_SIZE"] = str(1024 * 1024)

# Create a temporary directory for test storage
_test_storage_dir = tempfile.mkdtemp(prefix="shortvideo_test_")
os.environ["STORAGE_PATH"] = _test_storage_dir

from shortvideo.api.deps import get_render_service
from shortvideo.core.config import Settings
from shortvideo.core.errors import UploadError
from shortvideo.core.logging import CorrelationContext
from shortvideo.main import app
from shortvideo.schemas.plan import RenderJobState, RenderPlan
from shortvideo.services.fetcher import ResourceFetcher
from shortvideo.services.render_service import ShortVideoRenderService


TTS_URL = "https://media.test/narration/tts.mp3"
OCEAN_URL = "https://media.test/stock/ocean.mp4"
CITY_URL = "https://media.test/stock/city.mp4"

FAKE_VIDEO = b"\x00\x00\x00\x18ftypmp42fake-rendered-video"


# =============================================================================
# Collaborator Fakes
# =============================================================================


class FakeRenderEngine:
    """
    In-memory render engine.

    ``states`` is consumed one entry per status call; the last entry repeats.
    """

    def __init__(
        self,
        states: Optional[List[RenderJobState]] = None,
        video: bytes = FAKE_VIDEO,
    ):
        self.states = list(states or [RenderJobState.RENDERING, RenderJobState.READY])
        self.video = video
        self.plans: List[RenderPlan] = []
        self.asset_files_present: List[bool] = []
        self.status_calls = 0
        self.fetched: List[str] = []
        self.discarded: List[str] = []

    async def submit(self, plan: RenderPlan) -> str:
        self.plans.append(plan)
        self.asset_files_present.extend(
            scene.asset_path.exists() for scene in plan.scenes if scene.asset_path
        )
        return f"job-{len(self.plans)}"

    async def status(self, job_id: str) -> RenderJobState:
        self.status_calls += 1
        if len(self.states) > 1:
            return self.states.pop(0)
        return self.states[0]

    async def fetch_result(self, job_id: str) -> bytes:
        self.fetched.append(job_id)
        return self.video

    async def discard(self, job_id: str) -> None:
        self.discarded.append(job_id)


class FakeVideoStorage:
    """Records uploads; raises ``error`` instead when set."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.uploads: List[bytes] = []

    async def upload(self, data: bytes) -> str:
        if self.error is not None:
            raise self.error
        self.uploads.append(data)
        return f"https://cdn.test/videos/video-{len(self.uploads)}.mp4"


class FakeClock:
    """Monotonic clock that only moves when ``sleep`` is awaited."""

    def __init__(self, now: float = 0.0):
        self.now = now
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


RemoteFile = Union[bytes, int, Exception]


def make_handler(remote_files: Dict[str, RemoteFile], requested: List[str]):
    """
    Build an httpx MockTransport handler serving ``remote_files``.

    Values are response bodies, HTTP status codes, or exceptions to raise.
    Unknown URLs answer 404.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        requested.append(url)
        entry = remote_files.get(url, 404)
        if isinstance(entry, Exception):
            raise entry
        if isinstance(entry, int):
            return httpx.Response(entry)
        return httpx.Response(200, content=entry)

    return handler


# =============================================================================
# Core Fixtures
# =============================================================================


@pytest.fixture
def correlation() -> CorrelationContext:
    return CorrelationContext(id="render-test-correlation")


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Binary-mode settings rooted in a per-test storage directory."""
    return Settings(
        storage_path=str(tmp_path / "storage"),
        storage_base_url="https://cdn.test/videos",
        response_mode="binary",
        render_poll_interval_ms=1,
    )


@pytest.fixture
def url_settings(test_settings: Settings) -> Settings:
    return test_settings.model_copy(update={"response_mode": "url"})


@pytest.fixture
def remote_files() -> Dict[str, RemoteFile]:
    """Remote resources served by the mock transport (mutable per test)."""
    return {
        TTS_URL: b"ID3\x03\x00fake-narration",
        OCEAN_URL: b"ocean-stock-footage",
        CITY_URL: b"city-stock-footage",
    }


@pytest.fixture
def requested_urls() -> List[str]:
    return []


@pytest_asyncio.fixture
async def http_fetcher(
    remote_files: Dict[str, RemoteFile],
    requested_urls: List[str],
) -> AsyncGenerator[ResourceFetcher, None]:
    """ResourceFetcher whose HTTP client never leaves the process."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(make_handler(remote_files, requested_urls)))
    fetcher = ResourceFetcher(client=client)
    yield fetcher
    await client.aclose()


@pytest.fixture
def fake_engine() -> FakeRenderEngine:
    return FakeRenderEngine()


@pytest.fixture
def fake_storage() -> FakeVideoStorage:
    return FakeVideoStorage()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def render_service(
    test_settings: Settings,
    http_fetcher: ResourceFetcher,
    fake_engine: FakeRenderEngine,
    fake_storage: FakeVideoStorage,
) -> ShortVideoRenderService:
    return ShortVideoRenderService(
        settings=test_settings,
        fetcher=http_fetcher,
        engine=fake_engine,
        storage=fake_storage,
    )


@pytest.fixture
def url_render_service(
    url_settings: Settings,
    http_fetcher: ResourceFetcher,
    fake_engine: FakeRenderEngine,
    fake_storage: FakeVideoStorage,
) -> ShortVideoRenderService:
    return ShortVideoRenderService(
        settings=url_settings,
        fetcher=http_fetcher,
        engine=fake_engine,
        storage=fake_storage,
    )


@pytest.fixture
def failing_storage() -> FakeVideoStorage:
    return FakeVideoStorage(error=UploadError("Failed to store video: disk full"))


# =============================================================================
# Request Fixtures
# =============================================================================


@pytest.fixture
def render_payload() -> dict:
    """Valid two-scene render request as sent by the upstream worker."""
    return {
        "scenes": [
            {"text": "The sea never sleeps.", "duration": 1000, "searchTerms": ["ocean"]},
            {"text": "Neither does the city.", "duration": 2000, "searchTerms": ["city", "night"]},
        ],
        "config": {
            "resolution": "1080x1920",
            "tone": "STOIC",
            "platform": "TIKTOK",
            "ttsUrl": TTS_URL,
            "assets": [
                {"searchTerms": "ocean", "videoUrl": OCEAN_URL},
                {"searchTerms": "city", "videoUrl": CITY_URL},
            ],
        },
        "narrative": {"summaryId": "summary-42", "stylePackId": "stoic-dark"},
    }


# =============================================================================
# Test Client Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def async_client(
    render_service: ShortVideoRenderService,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Provide an async HTTP client for testing the FastAPI application.

    Overrides the render service dependency with the fake-backed service.
    """
    app.dependency_overrides[get_render_service] = lambda: render_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    # Clean up
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def url_client(
    url_render_service: ShortVideoRenderService,
) -> AsyncGenerator[AsyncClient, None]:
    """Same as async_client, with the service in url response mode."""
    app.dependency_overrides[get_render_service] = lambda: url_render_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
