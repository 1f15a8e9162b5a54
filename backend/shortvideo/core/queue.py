"""
Job Queue Utilities

Functions for enqueueing render jobs and reading their status.
Uses RQ (Redis Queue) for job management; the render task itself runs in a
separate worker process and is referenced by its import path.
"""

from typing import Any, Dict, Optional

from redis import Redis
from rq import Queue
from rq.exceptions import NoSuchJobError
from rq.job import Job

# Job timeout constants in seconds
JOB_TIMEOUTS: Dict[str, int] = {
    "render_short_video": 600,  # 10 minutes
}

# Queue names mapped to their Redis keys
QUEUE_NAMES: Dict[str, str] = {
    "render": "shortvideo:render",
}

# How long finished job results are kept in Redis (1 hour)
RESULT_TTL_SECONDS = 3600


def get_queue(queue_name: str, connection: Redis) -> Queue:
    """
    Get an RQ Queue instance by name.

    Args:
        queue_name: Short queue name (e.g., "render") or
                   full queue name (e.g., "shortvideo:render")
        connection: Redis connection

    Raises:
        ValueError: If queue name is not recognized
    """
    if queue_name in QUEUE_NAMES:
        full_name = QUEUE_NAMES[queue_name]
    elif queue_name.startswith("shortvideo:"):
        full_name = queue_name
    else:
        raise ValueError(f"Unknown queue name: {queue_name}")

    return Queue(full_name, connection=connection)


def enqueue_render_job(
    connection: Redis,
    task: str,
    job_id: str,
    **kwargs: Any,
) -> Job:
    """
    Enqueue a short video render job.

    Args:
        connection: Redis connection
        task: Import path of the worker task (e.g. "worker.tasks.render.render_short_video")
        job_id: Job ID, also used as the job's directory name in shared storage
        **kwargs: Keyword arguments for the task

    Returns:
        Job: The enqueued RQ job
    """
    queue = get_queue("render", connection)
    return queue.enqueue(
        task,
        job_id=job_id,
        job_timeout=JOB_TIMEOUTS["render_short_video"],
        result_ttl=RESULT_TTL_SECONDS,
        failure_ttl=RESULT_TTL_SECONDS,
        kwargs=kwargs,
    )


def fetch_job(job_id: str, connection: Redis) -> Optional[Job]:
    """Fetch an RQ job, or None if Redis no longer knows it."""
    try:
        return Job.fetch(job_id, connection=connection)
    except NoSuchJobError:
        return None


def get_job_status(job_id: str, connection: Redis) -> Optional[str]:
    """
    Get the RQ status string of a job.

    Returns:
        One of RQ's statuses (queued, started, deferred, scheduled, finished,
        failed, stopped, canceled) or None if the job does not exist
    """
    job = fetch_job(job_id, connection)
    if job is None:
        return None
    status = job.get_status()
    return getattr(status, "value", status)


def get_job_result(job_id: str, connection: Redis) -> Any:
    """
    Return the value returned by a finished job.

    Raises:
        LookupError: If the job does not exist or has no result
    """
    job = fetch_job(job_id, connection)
    if job is None:
        raise LookupError(f"Render job {job_id} not found")
    result = job.return_value()
    if result is None:
        raise LookupError(f"Render job {job_id} has no result")
    return result
