"""Filesystem storage for uploaded media and profile images."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from creator_stage.core.settings import settings
from creator_stage.db.ids import new_id

logger = logging.getLogger(__name__)

MEDIA_FOLDER = "content/media"
THUMBNAIL_FOLDER = "content/thumbnail"
PROFILE_FOLDER = "profile"

ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})
ALLOWED_VIDEO_TYPES = frozenset({"video/mp4", "video/quicktime", "video/x-msvideo", "video/webm"})


@dataclass(frozen=True)
class UploadedFile:
    """An upload already read into memory, detached from the web framework."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def family(self) -> str:
        """Return the MIME family, e.g. ``image`` for ``image/png``."""
        return self.content_type.split("/", 1)[0].lower()


class MediaStorage:
    """Stores files under ``<root>/uploads/<folder>`` and hands out relative paths.

    Relative paths (``uploads/content/media/<name>``) are what the database
    keeps; :meth:`public_url` turns them into client-facing URLs.
    """

    def __init__(self, root: Path | None = None, public_base_url: str | None = None) -> None:
        self.root = Path(root if root is not None else settings.upload_root)
        self.public_base_url = (public_base_url or settings.public_base_url).rstrip("/")

    def save(self, folder: str, upload: UploadedFile) -> str:
        """Write ``upload`` into ``folder`` under a fresh name and return its relative path."""
        suffix = Path(upload.filename).suffix.lower()
        relative = PurePosixPath("uploads", folder, f"{new_id()}{suffix}")
        target = self.root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(upload.data)
        logger.debug("Stored %d bytes at %s", upload.size, relative)
        return str(relative)

    def delete(self, relative_path: str | None) -> bool:
        """Remove a stored file; failures are logged, never raised."""
        if not relative_path:
            return False
        target = self.root / relative_path
        try:
            target.unlink()
        except FileNotFoundError:
            logger.warning("File %s was already gone", relative_path)
            return False
        except OSError:
            logger.warning("Could not delete %s", relative_path, exc_info=True)
            return False
        return True

    def public_url(self, relative_path: str | None, folder: str) -> str | None:
        if not relative_path:
            return None
        basename = PurePosixPath(relative_path.replace("\\", "/")).name
        return f"{self.public_base_url}/uploads/{folder}/{basename}"


def get_media_storage() -> MediaStorage:
    """Return a storage bound to the configured upload root."""
    return MediaStorage()
