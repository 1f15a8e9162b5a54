# Core modules for the short video render service
from .config import Settings, get_settings
from .errors import (
    DownloadError,
    RenderError,
    RenderPipelineError,
    RequestValidationError,
    ShortVideoError,
    UploadError,
)
from .logging import (
    CorrelationContext,
    configure_logging,
    get_logger,
    new_correlation_id,
    unique_token,
)
from .queue import (
    JOB_TIMEOUTS,
    QUEUE_NAMES,
    enqueue_render_job,
    get_job_result,
    get_job_status,
)
from .redis import (
    RedisHealthStatus,
    check_redis_health,
    get_redis_connection,
)
from .storage import LocalVideoStorage, TempWorkspace

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "ShortVideoError",
    "RequestValidationError",
    "DownloadError",
    "RenderError",
    "UploadError",
    "RenderPipelineError",
    # Logging
    "CorrelationContext",
    "configure_logging",
    "get_logger",
    "new_correlation_id",
    "unique_token",
    # Queue
    "JOB_TIMEOUTS",
    "QUEUE_NAMES",
    "enqueue_render_job",
    "get_job_status",
    "get_job_result",
    # Redis
    "RedisHealthStatus",
    "check_redis_health",
    "get_redis_connection",
    # Storage
    "LocalVideoStorage",
    "TempWorkspace",
]
