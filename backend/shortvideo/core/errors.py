"""
Error taxonomy for the render pipeline.

Every error carries a ``kind`` (which stage failed), a ``cause`` (how it
failed) and the HTTP status the API maps it to.
"""

from typing import Optional


class ShortVideoError(Exception):
    """Base class for all classified pipeline failures."""

    kind: str = "internal"
    http_status: int = 500

    def __init__(self, message: str, cause: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause or self.kind


class RequestValidationError(ShortVideoError):
    """Raised when the inbound render request is malformed or incomplete."""

    kind = "validation"
    http_status = 400


class DownloadError(ShortVideoError):
    """Raised when a remote resource cannot be retrieved.

    ``cause`` is one of ``timeout``, ``http-status`` or ``network``.
    """

    kind = "download"
    http_status = 502

    TIMEOUT = "timeout"
    HTTP_STATUS = "http-status"
    NETWORK = "network"

    def __init__(
        self,
        message: str,
        cause: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
    ):
        super().__init__(message, cause)
        self.status_code = status_code
        self.url = url


class RenderError(ShortVideoError):
    """Raised when the render job fails or does not finish before the deadline.

    ``cause`` is one of ``timeout`` or ``collaborator-failure``.
    """

    kind = "render"

    TIMEOUT = "timeout"
    COLLABORATOR_FAILURE = "collaborator-failure"

    def __init__(self, message: str, cause: str, job_id: Optional[str] = None):
        super().__init__(message, cause)
        self.job_id = job_id

    @property
    def http_status(self) -> int:  # type: ignore[override]
        return 504 if self.cause == self.TIMEOUT else 502


class UploadError(ShortVideoError):
    """Raised when the rendered video cannot be persisted in url mode."""

    kind = "upload"
    cause_default = "upload-failure"
    http_status = 502

    def __init__(self, message: str):
        super().__init__(message, self.cause_default)


class RenderPipelineError(ShortVideoError):
    """
    Top-level failure of one render request.

    The public message is always ``"Rendering failed: <cause message>"``; the
    classified error that caused it is kept in ``original`` for logging and
    status mapping.
    """

    def __init__(self, original: ShortVideoError, correlation_id: str):
        super().__init__(f"Rendering failed: {original.message}", original.cause)
        self.original = original
        self.correlation_id = correlation_id
        self.kind = original.kind

    @property
    def http_status(self) -> int:  # type: ignore[override]
        return self.original.http_status
