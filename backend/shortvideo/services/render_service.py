"""
Short video render pipeline.

Runs one render request through its stages in strict order:

    validate -> download narration -> resolve assets -> build plan
             -> render job -> dispatch response

Each stage either produces the next stage's input or fails the request with
a classified error. Asset download failures are the exception: they are
absorbed by the asset resolver. Temporary files live in a per-request
workspace that is removed on every exit path.
"""

import time
from typing import Any, Optional, Union

from shortvideo.core.config import Settings
from shortvideo.core.errors import (
    RenderPipelineError,
    RequestValidationError,
    ShortVideoError,
)
from shortvideo.core.logging import CorrelationContext, get_logger
from shortvideo.core.storage import TempWorkspace
from shortvideo.schemas.plan import BinaryResult, UrlResult
from shortvideo.services.asset_resolver import AssetResolver
from shortvideo.services.dispatcher import ResponseDispatcher, VideoStorage
from shortvideo.services.fetcher import ResourceFetcher
from shortvideo.services.orchestrator import RenderOrchestrator
from shortvideo.services.plan_builder import DEFAULT_FPS, build_render_plan
from shortvideo.services.render_engine import RenderEngine
from shortvideo.services.request_validator import RequestValidator

RenderResult = Union[BinaryResult, UrlResult]


class ShortVideoRenderService:
    """
    Entry point of the render pipeline.

    Components are constructed once per process from the frozen settings and
    shared by all requests; no per-request state is kept on the instance.
    """

    def __init__(
        self,
        settings: Settings,
        fetcher: ResourceFetcher,
        engine: RenderEngine,
        storage: VideoStorage,
        orchestrator: Optional[RenderOrchestrator] = None,
    ):
        self.settings = settings
        self.fetcher = fetcher
        self.validator = RequestValidator()
        self.orchestrator = orchestrator or RenderOrchestrator(
            engine,
            timeout_ms=settings.render_timeout_ms,
            poll_interval_ms=settings.render_poll_interval_ms,
        )
        self.dispatcher = ResponseDispatcher(settings.response_mode, storage)

    async def render(
        self,
        payload: Any,
        correlation: CorrelationContext,
    ) -> RenderResult:
        """
        Render the video described by the raw request ``payload``.

        Raises:
            RenderPipelineError: Wrapping the classified error of the failed
                stage; its message is "Rendering failed: <cause>"
        """
        log = get_logger(__name__, correlation)
        start_time = time.perf_counter()

        log.info(
            "Starting video render",
            extra={
                "scene_count": _scene_count(payload),
                "response_mode": self.settings.response_mode,
            },
        )

        try:
            result = await self._run(payload, correlation)
        except RequestValidationError as e:
            log.warning("Render request rejected", extra={"error": e.message})
            raise RenderPipelineError(e, correlation.id) from e
        except ShortVideoError as e:
            log.error(
                "Video render failed",
                exc_info=True,
                extra={"kind": e.kind, "cause": e.cause, "error": e.message},
            )
            raise RenderPipelineError(e, correlation.id) from e
        except Exception as e:
            log.exception("Video render failed with unexpected error")
            raise RenderPipelineError(ShortVideoError(str(e) or type(e).__name__), correlation.id) from e

        log.info(
            "Video render complete",
            extra={
                "response_mode": self.settings.response_mode,
                "duration_ms": int((time.perf_counter() - start_time) * 1000),
            },
        )
        return result

    async def _run(self, payload: Any, correlation: CorrelationContext) -> RenderResult:
        log = get_logger(__name__, correlation)

        # 1. Validate request
        request = self.validator.validate(payload, correlation)

        # 2. Download narration (no retry; failure is fatal)
        log.info("Downloading TTS audio")
        audio = await self.fetcher.fetch(
            request.config.tts_url,
            self.settings.audio_download_timeout_ms,
            label="TTS download",
        )
        log.info("TTS audio downloaded", extra={"size_bytes": len(audio)})

        async with TempWorkspace(self.settings.temp_root) as workspace:
            # 3. Resolve assets (never fails)
            log.info("Resolving assets", extra={"asset_count": len(request.config.assets)})
            resolver = AssetResolver(
                self.fetcher,
                workspace,
                timeout_ms=self.settings.asset_download_timeout_ms,
                concurrency=self.settings.asset_download_concurrency,
            )
            resolved_assets = await resolver.resolve(request.config.assets, correlation)

            # 4. Build render plan
            plan = build_render_plan(request, audio, resolved_assets, fps=DEFAULT_FPS)
            log.info(
                "Render plan built",
                extra={
                    "scene_count": len(plan.scenes),
                    "total_frames": plan.total_frames,
                    "resolution": f"{plan.width}x{plan.height}",
                },
            )

            # 5. Render
            video = await self.orchestrator.render(plan, correlation)
            log.info("Video rendered", extra={"size_bytes": len(video)})

        # 6. Respond
        return await self.dispatcher.dispatch(video, correlation)


def _scene_count(payload: Any) -> Optional[int]:
    scenes = payload.get("scenes") if isinstance(payload, dict) else None
    return len(scenes) if isinstance(scenes, list) else None
