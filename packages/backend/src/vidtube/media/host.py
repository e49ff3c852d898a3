"""Media host abstraction.

Learn: Video files, thumbnails, avatars and cover images don't live in the
database. They're handed to a media host, which returns a durable URL and an
opaque public_id. We store both; the public_id is what we use to delete.

Two guarantees every host implementation must keep:
1. upload() either returns a MediaAsset or raises MediaUploadError
2. delete() is idempotent — deleting an already-gone asset is a no-op

LocalMediaHost keeps files under settings.media_root, which is enough for
development and tests. Swapping in a hosted provider is a matter of
implementing MediaHost and returning it from get_media_host().
"""

import asyncio
import shutil
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import structlog

from vidtube.config import settings

logger = structlog.get_logger()

IMAGE = "image"
VIDEO = "video"
RAW = "raw"

_VIDEO_SUFFIXES = {".mp4", ".mov", ".mkv", ".webm", ".avi"}
_IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".webp", ".gif"}


class MediaUploadError(Exception):
    """Raised when the media host cannot store a file."""


@dataclass
class MediaAsset:
    """A file stored on the media host."""

    url: str
    public_id: str
    resource_type: str
    duration: Optional[float] = None  # seconds, for video/audio when known


def detect_resource_type(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in _VIDEO_SUFFIXES:
        return VIDEO
    if suffix in _IMAGE_SUFFIXES:
        return IMAGE
    return RAW


class MediaHost(ABC):
    """Abstract media host."""

    @abstractmethod
    async def upload(self, local_path: str, resource_type: str = "auto") -> MediaAsset:
        """Store the file at local_path and return where it lives."""

    @abstractmethod
    async def delete(self, public_id: str, resource_type: str = IMAGE) -> None:
        """Remove an asset. Must not fail if it's already gone."""


class LocalMediaHost(MediaHost):
    """Stores assets on local disk under <root>/<resource_type>/."""

    def __init__(self, root: str, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    async def upload(self, local_path: str, resource_type: str = "auto") -> MediaAsset:
        source = Path(local_path)
        if not source.is_file():
            raise MediaUploadError(f"File not found: {local_path}")

        if resource_type == "auto":
            resource_type = detect_resource_type(source)

        public_id = f"{resource_type}/{uuid.uuid4().hex}{source.suffix.lower()}"
        target = self.root / public_id
        try:
            await asyncio.to_thread(self._copy, source, target)
        except OSError as e:
            logger.warning("media.upload_failed", path=local_path, error=str(e))
            raise MediaUploadError(str(e)) from e

        logger.info("media.uploaded", public_id=public_id, resource_type=resource_type)
        return MediaAsset(
            url=f"{self.base_url}/{public_id}",
            public_id=public_id,
            resource_type=resource_type,
        )

    async def delete(self, public_id: str, resource_type: str = IMAGE) -> None:
        if not public_id:
            return
        target = (self.root / public_id).resolve()
        # public_id comes from our own upload(); never follow it outside root
        if self.root.resolve() not in target.parents:
            logger.warning("media.delete_outside_root", public_id=public_id)
            return
        await asyncio.to_thread(target.unlink, missing_ok=True)
        logger.info("media.deleted", public_id=public_id, resource_type=resource_type)

    @staticmethod
    def _copy(source: Path, target: Path) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)


async def discard_assets(media: MediaHost, *assets: Optional[MediaAsset]) -> None:
    """Compensate for a failed multi-step operation by deleting uploaded assets.

    Runs while another error is already propagating. A failure here is
    logged, not raised, so the caller still sees the first error.
    """
    for asset in assets:
        if asset is None:
            continue
        try:
            await media.delete(asset.public_id, asset.resource_type)
        except Exception:
            logger.exception("media.compensation_failed", public_id=asset.public_id)


async def release_media(media: MediaHost, public_id: str, resource_type: str) -> None:
    """Delete an asset whose database row is already gone or replaced.

    The write it belongs to has committed, so a failed delete only leaves an
    orphaned file behind. It is logged and the request still succeeds.
    """
    try:
        await media.delete(public_id, resource_type)
    except Exception:
        logger.exception("media.release_failed", public_id=public_id)


_media_host: Optional[MediaHost] = None


def get_media_host() -> MediaHost:
    """FastAPI dependency — returns the configured media host."""
    global _media_host
    if _media_host is None:
        _media_host = LocalMediaHost(settings.media_root, settings.media_base_url)
    return _media_host
