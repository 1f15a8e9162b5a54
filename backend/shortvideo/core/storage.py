"""
File Storage

Provides:
- Per-request temporary workspaces with guaranteed cleanup
- Collision-resistant file naming for the shared temp namespace
- Local output storage that publishes rendered videos under a base URL

Directories are created world-writable because the render worker runs in a
separate container (as a different uid) and shares the storage volume.
"""

import asyncio
import logging
import os
import shutil
from pathlib import Path
from typing import Optional

import aiofiles

from .errors import UploadError
from .logging import unique_token

logger = logging.getLogger(__name__)


def ensure_shared_dir(path: Path) -> None:
    """
    Create a directory (and all parents) with world-writable permissions (0o777).
    Required for multi-container setups where the API creates dirs and the worker reads them.
    """
    path.mkdir(parents=True, exist_ok=True)
    os.chmod(path, 0o777)


async def _write_bytes(path: Path, data: bytes) -> None:
    async with aiofiles.open(path, "wb") as f:
        await f.write(data)


class TempWorkspace:
    """
    Scoped temporary directory owned by one render request.

    The directory is created on entry and removed on every exit path,
    including failures and cancellation. Removal is best effort: errors are
    logged and never replace the request's own outcome.

    Usage:
        async with TempWorkspace(settings.temp_root) as workspace:
            path = await workspace.write_file("asset", ".mp4", data)
    """

    def __init__(self, root: Path, name: Optional[str] = None):
        self.root = Path(root)
        self.path = self.root / (name or unique_token("request"))
        self._files: list[Path] = []

    async def __aenter__(self) -> "TempWorkspace":
        ensure_shared_dir(self.root)
        ensure_shared_dir(self.path)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await asyncio.to_thread(self.cleanup)

    @property
    def files(self) -> list[Path]:
        return list(self._files)

    async def write_file(self, prefix: str, suffix: str, data: bytes) -> Path:
        """Persist ``data`` under a unique ``<prefix>-<ms>-<rand><suffix>`` name."""
        path = self.path / f"{unique_token(prefix)}{suffix}"
        await _write_bytes(path, data)
        self._files.append(path)
        return path

    def cleanup(self) -> None:
        try:
            shutil.rmtree(self.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to remove temp workspace {self.path}: {e}")


class LocalVideoStorage:
    """
    Storage collaborator that publishes rendered videos from the local
    outputs directory.

    Files are written to ``<storage_root>/outputs/<video id>.mp4`` and served
    by whatever fronts that directory at ``base_url``.
    """

    def __init__(self, storage_root: Path, base_url: Optional[str]):
        self.output_dir = Path(storage_root) / "outputs"
        self.base_url = base_url.rstrip("/") if base_url else None

    async def upload(self, data: bytes) -> str:
        """
        Store ``data`` and return its public URL.

        Raises:
            UploadError: If no base URL is configured or the write fails
        """
        if not self.base_url:
            raise UploadError("STORAGE_BASE_URL is not configured for url response mode")

        filename = f"{unique_token('video')}.mp4"
        path = self.output_dir / filename
        try:
            ensure_shared_dir(self.output_dir)
            await _write_bytes(path, data)
        except OSError as e:
            raise UploadError(f"Failed to store video {filename}: {e}") from e

        return f"{self.base_url}/{filename}"
