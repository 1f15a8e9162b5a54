"""
Render collaborator interface and its RQ-backed implementation.

The render engine owns job state; this service only submits jobs, observes
their state and fetches results. The RQ implementation hands jobs to a
separate worker process through Redis and a shared storage volume:

    <storage_root>/jobs/<job id>/plan.json   render plan (camelCase props)
    <storage_root>/jobs/<job id>/audio.mp3   narrated audio
    <storage_root>/jobs/<job id>/output.mp4  written by the worker

The worker task returns the path of the rendered file.
"""

import asyncio
import json
import logging
import shutil
from pathlib import Path
from typing import Dict, Optional, Protocol

import aiofiles
from redis import Redis

from shortvideo.core.logging import unique_token
from shortvideo.core.queue import enqueue_render_job, get_job_result, get_job_status
from shortvideo.core.redis import get_redis_connection
from shortvideo.core.storage import ensure_shared_dir
from shortvideo.schemas.plan import RenderJobState, RenderPlan

logger = logging.getLogger(__name__)


class RenderEngine(Protocol):
    """Contract of the rendering collaborator."""

    async def submit(self, plan: RenderPlan) -> str:
        """Start a render job and return its id."""
        ...

    async def status(self, job_id: str) -> RenderJobState:
        """Current state of the job."""
        ...

    async def fetch_result(self, job_id: str) -> bytes:
        """Rendered video of a job in state ``ready``."""
        ...

    async def discard(self, job_id: str) -> None:
        """Release what the job left behind once it is known to be finished."""
        ...


# RQ job statuses mapped onto render job states
RQ_STATUS_MAP: Dict[str, RenderJobState] = {
    "queued": RenderJobState.QUEUED,
    "deferred": RenderJobState.QUEUED,
    "scheduled": RenderJobState.QUEUED,
    "started": RenderJobState.RENDERING,
    "finished": RenderJobState.READY,
    "failed": RenderJobState.FAILED,
    "stopped": RenderJobState.FAILED,
    "canceled": RenderJobState.FAILED,
}


def map_rq_status(status: Optional[str]) -> RenderJobState:
    """
    Translate an RQ status string; unknown or vanished jobs count as failed.
    """
    if status is None:
        return RenderJobState.FAILED
    return RQ_STATUS_MAP.get(status, RenderJobState.FAILED)


class RQRenderEngine:
    """
    Render engine that delegates to an RQ worker.

    RQ and Redis calls are blocking, so they run in a worker thread.

    Args:
        redis_url: Redis connection URL
        task: Import path of the worker's render task
        storage_root: Shared storage root (the worker must see the same path)
        connection: Optional pre-built Redis connection (tests)
    """

    def __init__(
        self,
        redis_url: str,
        task: str,
        storage_root: Path,
        connection: Optional[Redis] = None,
    ):
        self.redis_url = redis_url
        self.task = task
        self.jobs_root = Path(storage_root) / "jobs"
        self._connection = connection

    @property
    def connection(self) -> Redis:
        if self._connection is None:
            self._connection = get_redis_connection(self.redis_url)
        return self._connection

    def job_dir(self, job_id: str) -> Path:
        return self.jobs_root / job_id

    async def submit(self, plan: RenderPlan) -> str:
        job_id = unique_token("job")
        job_dir = self.job_dir(job_id)

        try:
            await asyncio.to_thread(self._write_job_files, job_dir, plan)
            await asyncio.to_thread(
                enqueue_render_job,
                self.connection,
                self.task,
                job_id,
                job_dir=str(job_dir),
                output_path=str(job_dir / "output.mp4"),
            )
        except BaseException:
            await asyncio.shield(self.discard(job_id))
            raise

        logger.info(f"Enqueued render job {job_id} ({plan.total_frames} frames)")
        return job_id

    async def status(self, job_id: str) -> RenderJobState:
        rq_status = await asyncio.to_thread(get_job_status, job_id, self.connection)
        return map_rq_status(rq_status)

    async def fetch_result(self, job_id: str) -> bytes:
        try:
            result_path = await asyncio.to_thread(get_job_result, job_id, self.connection)
            async with aiofiles.open(result_path, "rb") as f:
                return await f.read()
        finally:
            await asyncio.shield(self.discard(job_id))

    async def discard(self, job_id: str) -> None:
        await asyncio.to_thread(self._remove_job_dir, job_id)

    def _write_job_files(self, job_dir: Path, plan: RenderPlan) -> None:
        ensure_shared_dir(job_dir)
        payload = plan.to_payload()
        payload["audioPath"] = str(job_dir / "audio.mp3")
        (job_dir / "audio.mp3").write_bytes(plan.audio)
        (job_dir / "plan.json").write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def _remove_job_dir(self, job_id: str) -> None:
        try:
            shutil.rmtree(self.job_dir(job_id))
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to remove render job directory for {job_id}: {e}")
