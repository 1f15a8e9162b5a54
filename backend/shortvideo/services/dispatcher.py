"""
Response dispatch: raw video bytes or an uploaded file's URL.
"""

from typing import Protocol, Union

from shortvideo.core.config import ResponseMode
from shortvideo.core.errors import ShortVideoError, UploadError
from shortvideo.core.logging import CorrelationContext, get_logger
from shortvideo.schemas.plan import BinaryResult, UrlResult


class VideoStorage(Protocol):
    """Contract of the storage collaborator."""

    async def upload(self, data: bytes) -> str:
        """Persist ``data`` and return a URL referencing it."""
        ...


class ResponseDispatcher:
    """
    Shapes the rendered video according to the configured response mode.

    Upload failures surface as UploadError; url mode never falls back to
    returning bytes.
    """

    def __init__(self, mode: ResponseMode, storage: VideoStorage):
        self.mode = mode
        self.storage = storage

    async def dispatch(
        self,
        video: bytes,
        correlation: CorrelationContext,
    ) -> Union[BinaryResult, UrlResult]:
        if self.mode == "binary":
            return BinaryResult(content=video)

        log = get_logger(__name__, correlation)
        log.info("Uploading video for URL response", extra={"size_bytes": len(video)})
        try:
            video_url = await self.storage.upload(video)
        except UploadError:
            raise
        except ShortVideoError as e:
            raise UploadError(e.message) from e
        except Exception as e:
            raise UploadError(f"Video upload failed: {e}") from e

        log.info("Video uploaded", extra={"video_url": video_url})
        return UrlResult(video_url=video_url)
