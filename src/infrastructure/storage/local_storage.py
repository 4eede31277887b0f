"""Local filesystem storage for uploaded avatar images."""

import asyncio
import logging
import mimetypes
import uuid
from dataclasses import dataclass
from pathlib import Path

from core.exceptions import StorageFailureError

logger = logging.getLogger(__name__)

AVATAR_DIR = "avatars"


@dataclass(frozen=True)
class StoredAsset:
    """A persisted asset: storage key plus its public reference."""

    key: str
    url: str


class LocalAvatarStorage:
    """Writes avatars under ``<root>/avatars`` and serves them from ``/uploads``."""

    def __init__(self, root: str | Path, public_base_url: str) -> None:
        self._root = Path(root)
        self._public_base_url = public_base_url.rstrip("/")

    def _path(self, key: str) -> Path:
        return self._root / key

    def url_for(self, key: str) -> str:
        return f"{self._public_base_url}/uploads/{key}"

    async def save(self, content: bytes, content_type: str) -> StoredAsset:
        """Persist an image and return its reference.

        Raises:
            StorageFailureError: The file could not be written
        """
        extension = mimetypes.guess_extension(content_type) or ".bin"
        key = f"{AVATAR_DIR}/avatar-{uuid.uuid4().hex}{extension}"
        path = self._path(key)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            logger.exception("Failed to store avatar %s", key)
            raise StorageFailureError() from e

        return StoredAsset(key=key, url=self.url_for(key))

    async def delete(self, key: str) -> None:
        """Remove an asset; a missing file is already deleted."""
        await asyncio.to_thread(self._path(key).unlink, missing_ok=True)

    async def exists(self, key: str) -> bool:
        return await asyncio.to_thread(self._path(key).is_file)
