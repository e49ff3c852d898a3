"""Temporary upload spooling.

Learn: Multipart files are first written to settings.temp_dir, then handed
to the media host by path. Temp files must never outlive the request —
whether it succeeds, fails validation, or blows up half-way through a
two-file upload. TempUploads is an async context manager that tracks every
file it writes and removes them all on exit:

    async with TempUploads() as temp:
        avatar_path = await temp.save(avatar)
        cover_path = await temp.save(cover_image)
        user = await svc.register(..., avatar_path, cover_path)
    # both temp files are gone here, no matter what happened above
"""

import os
import uuid
from pathlib import Path
from typing import Optional

import structlog
from fastapi import UploadFile

from vidtube.config import settings
from vidtube.errors import ValidationFailed

logger = structlog.get_logger()

ALLOWED_TYPES = {
    "image/jpeg",
    "image/png",
    "image/webp",
    "video/mp4",
    "video/quicktime",
    "video/x-matroska",
    "application/pdf",
    "audio/mpeg",
    "audio/wav",
    "audio/x-wav",
}
CHUNK_SIZE = 1024 * 1024  # 1MB chunks


def delete_temp_file(path: Optional[str]) -> None:
    """Remove a temp file, logging (not raising) on failure."""
    if not path:
        return
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("uploads.temp_delete_failed", path=path, error=str(e))


class TempUploads:
    """Spools UploadFiles to disk and cleans them up on exit."""

    def __init__(
        self,
        temp_dir: Optional[str] = None,
        max_bytes: Optional[int] = None,
    ):
        self.temp_dir = Path(temp_dir or settings.temp_dir)
        self.max_bytes = max_bytes or settings.max_upload_bytes
        self.paths: list[str] = []

    async def __aenter__(self) -> "TempUploads":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def cleanup(self) -> None:
        for path in self.paths:
            delete_temp_file(path)
        self.paths.clear()

    async def save(self, upload: Optional[UploadFile]) -> Optional[str]:
        """Write an upload to the temp dir and return its path.

        Returns None when no file was sent. Raises ValidationFailed for
        disallowed content types or files over the size limit.
        """
        if upload is None or not upload.filename:
            return None

        if upload.content_type not in ALLOWED_TYPES:
            raise ValidationFailed(
                "Only image, video, PDF, and audio files are allowed"
            )

        self.temp_dir.mkdir(parents=True, exist_ok=True)
        safe_name = Path(upload.filename).name
        path = self.temp_dir / f"{uuid.uuid4().hex[:12]}-{safe_name}"
        # Track before writing so a partial file is cleaned up too
        self.paths.append(str(path))

        total_bytes = 0
        with open(path, "wb") as dest:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                total_bytes += len(chunk)
                if total_bytes > self.max_bytes:
                    raise ValidationFailed(
                        f"File {safe_name} exceeds the {self.max_bytes} byte limit"
                    )
                dest.write(chunk)

        return str(path)
