"""
Render API endpoint.

POST /api/short-video/render renders a short vertical video synchronously and
returns either the MP4 bytes or the URL of the uploaded file, depending on
the process-wide response mode. Every response carries X-Correlation-ID.
"""

from typing import Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from shortvideo.api.deps import get_render_service
from shortvideo.core.errors import RenderPipelineError, RequestValidationError
from shortvideo.core.logging import CorrelationContext, get_logger
from shortvideo.schemas.plan import UrlResult
from shortvideo.schemas.render import ErrorResponse, VideoUrlResponse
from shortvideo.services.render_service import ShortVideoRenderService

router = APIRouter()

CORRELATION_HEADER = "X-Correlation-ID"


def error_response(
    error: RenderPipelineError,
    headers: Dict[str, str],
) -> JSONResponse:
    """Build the JSON failure body for a failed render."""
    details = None if error.kind == "validation" else error.cause
    body = ErrorResponse(
        error=error.message,
        correlation_id=error.correlation_id,
        details=details,
    )
    return JSONResponse(
        status_code=error.http_status,
        content=body.model_dump(by_alias=True, exclude_none=True),
        headers=headers,
    )


@router.post(
    "/short-video/render",
    name="render_short_video",
    summary="Render a short video",
    description="Render a vertical short video from scenes, narration and stock footage.",
    responses={
        200: {
            "description": "Rendered video (binary mode) or its URL (url mode)",
            "content": {
                "video/mp4": {},
                "application/json": {"schema": VideoUrlResponse.model_json_schema(by_alias=True)},
            },
        },
        400: {"model": ErrorResponse, "description": "Invalid render request"},
        502: {"model": ErrorResponse, "description": "Download, render or upload failed"},
        504: {"model": ErrorResponse, "description": "Render timed out"},
    },
)
async def render_short_video(
    request: Request,
    service: ShortVideoRenderService = Depends(get_render_service),
):
    """
    Render a short video.

    The body is read as raw JSON so that malformed input is reported in the
    same format (and with the same correlation id) as every other failure.
    """
    correlation = CorrelationContext.new()
    headers = {CORRELATION_HEADER: correlation.id}

    try:
        payload = await request.json()
    except ValueError:
        error = RenderPipelineError(
            RequestValidationError("Request body must be valid JSON"),
            correlation.id,
        )
        get_logger(__name__, correlation).warning("Render request rejected: body is not JSON")
        return error_response(error, headers)

    try:
        result = await service.render(payload, correlation)
    except RenderPipelineError as e:
        return error_response(e, headers)

    if isinstance(result, UrlResult):
        body = VideoUrlResponse(video_url=result.video_url)
        return JSONResponse(content=body.model_dump(by_alias=True), headers=headers)

    return Response(content=result.content, media_type=result.media_type, headers=headers)
