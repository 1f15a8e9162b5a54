"""
Short Video Render API

Main FastAPI application entry point.
"""

import asyncio
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shortvideo.api import api_router
from shortvideo.api.deps import close_render_service
from shortvideo.core.config import get_settings
from shortvideo.core.logging import configure_logging, get_logger, new_correlation_id
from shortvideo.core.redis import check_redis_health, close_connection_pools
from shortvideo.schemas.render import ErrorResponse, HealthResponse

# Load settings
settings = get_settings()
configure_logging(settings.log_level)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Short video render API starting",
        extra={"port": settings.port, "response_mode": settings.response_mode},
    )
    yield
    await close_render_service()
    close_connection_pools()
    logger.info("Short video render API stopped")


app = FastAPI(
    title=settings.app_name,
    description="Synchronous renderer for short vertical videos",
    version=settings.version,
    lifespan=lifespan,
)


# Request body size limit middleware
@app.middleware("http")
async def limit_request_body_size(request: Request, call_next):
    """
    Middleware to enforce maximum request body size.

    Rejects bodies larger than MAX_REQUEST_SIZE (default 10MB) before they
    reach the render pipeline.
    """
    content_length = request.headers.get("content-length")

    if content_length and content_length.isdigit():
        if int(content_length) > settings.max_request_size:
            correlation_id = new_correlation_id()
            body = ErrorResponse(
                error=f"Request body too large. Maximum size: {settings.max_request_size} bytes",
                correlation_id=correlation_id,
            )
            return JSONResponse(
                status_code=413,
                content=body.model_dump(by_alias=True, exclude_none=True),
                headers={"X-Correlation-ID": correlation_id},
            )

    return await call_next(request)


# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint - API info."""
    return {
        "name": settings.app_name,
        "version": settings.version,
        "status": "running",
        "responseMode": settings.response_mode,
    }


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Liveness probe. Reports ok whenever the process is serving requests."""
    return HealthResponse()


@app.get("/health/ready")
async def readiness_check():
    """
    Readiness probe for Docker/orchestration.

    Checks the Redis connection used to hand render jobs to the workers.
    Always answers 200; the body says whether rendering can proceed.
    """
    redis_status = await asyncio.to_thread(check_redis_health, settings.redis_url)
    if redis_status.healthy:
        checks = {"redis": {"status": "healthy", "latency_ms": redis_status.latency_ms}}
    else:
        checks = {"redis": {"status": "unhealthy", "error": redis_status.error}}

    return {
        "status": "ok" if redis_status.healthy else "degraded",
        "checks": checks,
        "version": settings.version,
    }


def run() -> None:
    """Serve the API on the configured port."""
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())
