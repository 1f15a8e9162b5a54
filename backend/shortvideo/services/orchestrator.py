"""
Render job orchestration.

Submits exactly one job per render and polls its state at a fixed interval
until it reaches a terminal state or an absolute deadline passes. The job is
never cancelled: on timeout the orchestrator stops watching and reports a
failure, and the collaborator reaps the job on its own.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, TypeVar

from shortvideo.core.errors import RenderError
from shortvideo.core.logging import CorrelationContext, get_logger
from shortvideo.schemas.plan import RenderJobState, RenderPlan
from shortvideo.services.render_engine import RenderEngine

DEFAULT_RENDER_TIMEOUT_MS = 180000  # 3 minutes
DEFAULT_POLL_INTERVAL_MS = 1000

T = TypeVar("T")


class RenderOrchestrator:
    """
    Drives one render job from submission to result.

    Args:
        engine: Render collaborator
        timeout_ms: Deadline measured from submission
        poll_interval_ms: Delay between status queries
        clock: Monotonic clock in seconds
        sleep: Coroutine used to wait between polls
    """

    def __init__(
        self,
        engine: RenderEngine,
        timeout_ms: int = DEFAULT_RENDER_TIMEOUT_MS,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.engine = engine
        self.timeout_ms = timeout_ms
        self.poll_interval_ms = poll_interval_ms
        self._clock = clock
        self._sleep = sleep

    async def render(self, plan: RenderPlan, correlation: CorrelationContext) -> bytes:
        """
        Render ``plan`` and return the video bytes.

        Every collaborator call is bounded by the deadline, so a stalled
        submit, status or fetch cannot outlive it.

        Raises:
            RenderError: ``collaborator-failure`` if the job fails or the
                collaborator errors, ``timeout`` if the deadline passes
        """
        log = get_logger(__name__, correlation)

        job_id = await self._bounded(
            self.engine.submit(plan),
            self._clock() + self.timeout_ms / 1000,
            "Failed to submit render job",
            log,
        )

        deadline = self._clock() + self.timeout_ms / 1000
        log.info("Render job submitted", extra={"job_id": job_id})

        last_state = RenderJobState.QUEUED
        while True:
            state = await self._bounded(
                self.engine.status(job_id),
                deadline,
                f"Failed to query render job {job_id}",
                log,
                job_id=job_id,
            )

            if state != last_state:
                log.info("Render job state changed", extra={"job_id": job_id, "state": state.value})
                last_state = state

            if state == RenderJobState.READY:
                return await self._bounded(
                    self.engine.fetch_result(job_id),
                    deadline,
                    f"Failed to fetch result of render job {job_id}",
                    log,
                    job_id=job_id,
                )
            if state == RenderJobState.FAILED:
                await self._discard(job_id, log)
                raise RenderError(
                    f"Render job {job_id} failed",
                    RenderError.COLLABORATOR_FAILURE,
                    job_id=job_id,
                )

            remaining = deadline - self._clock()
            if remaining <= 0:
                raise self._timed_out(job_id, log)

            await self._sleep(min(self.poll_interval_ms / 1000, remaining))

    async def _bounded(
        self,
        call: Awaitable[T],
        deadline: float,
        failure: str,
        log: logging.LoggerAdapter,
        job_id: Optional[str] = None,
    ) -> T:
        """Await one collaborator call, giving up once ``deadline`` passes."""
        scope = asyncio.timeout(max(deadline - self._clock(), 0))
        try:
            async with scope:
                return await call
        except Exception as e:
            if isinstance(e, TimeoutError) and scope.expired():
                raise self._timed_out(job_id, log) from e
            if job_id is not None:
                await self._discard(job_id, log)
            raise RenderError(
                f"{failure}: {e}",
                RenderError.COLLABORATOR_FAILURE,
                job_id=job_id,
            ) from e

    def _timed_out(self, job_id: Optional[str], log: logging.LoggerAdapter) -> RenderError:
        # The job is left for the collaborator to reap
        log.warning("Render job abandoned at deadline", extra={"job_id": job_id})
        return RenderError(
            f"Render timed out after {self.timeout_ms}ms",
            RenderError.TIMEOUT,
            job_id=job_id,
        )

    async def _discard(self, job_id: str, log: logging.LoggerAdapter) -> None:
        try:
            await self.engine.discard(job_id)
        except Exception as e:
            log.warning("Failed to discard render job", extra={"job_id": job_id, "error": str(e)})
