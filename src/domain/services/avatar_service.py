"""Avatar update transaction."""

import asyncio
from typing import Callable, Protocol
from uuid import UUID

import structlog

from core.exceptions import (
    ConcurrencyConflictError,
    PayloadTooLargeError,
    ProfileNotFoundError,
    UnsupportedMediaTypeError,
)
from domain.entities.profile import UserProfile
from domain.repositories.unit_of_work import IUnitOfWork
from infrastructure.storage.local_storage import StoredAsset

logger = structlog.get_logger()

MAX_AVATAR_BYTES = 5 * 1024 * 1024


class IAssetStorage(Protocol):
    """Asset storage boundary used by the avatar transaction."""

    async def save(self, content: bytes, content_type: str) -> StoredAsset: ...

    async def delete(self, key: str) -> None: ...


class AvatarService:
    """Stores a new avatar and rebinds the unified profile to it atomically.

    If rebinding fails for any reason, the freshly stored asset is deleted
    before the error propagates. The previous avatar is never deleted here.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        storage: IAssetStorage,
        max_bytes: int = MAX_AVATAR_BYTES,
    ) -> None:
        self._uow_factory = uow_factory
        self._storage = storage
        self._max_bytes = max_bytes

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    def validate(self, content: bytes, content_type: str | None) -> str:
        """
        Reject non-images and oversized payloads.

        Raises:
            UnsupportedMediaTypeError: Content type is not ``image/*``
            PayloadTooLargeError: Content exceeds the size ceiling
        """
        if not content_type or not content_type.lower().startswith("image/"):
            raise UnsupportedMediaTypeError(content_type)
        if len(content) > self._max_bytes:
            raise PayloadTooLargeError(self._max_bytes)
        return content_type

    async def update_avatar(
        self,
        user_id: UUID,
        content: bytes,
        content_type: str | None,
        expected_version: int | None = None,
    ) -> UserProfile:
        """
        Replace a user's avatar.

        Args:
            user_id: Owner of the unified profile
            content: Image bytes
            content_type: MIME type declared by the client
            expected_version: Profile version the client last saw; defaults
                to the version read when the transaction starts

        Returns:
            The updated unified profile

        Raises:
            UploadError subclasses: Invalid payload or storage failure
            ProfileNotFoundError: No unified profile for the user
            ConcurrencyConflictError: Profile changed since it was read
        """
        content_type = self.validate(content, content_type)

        async with self._uow_factory() as uow:
            profile = await uow.profiles.get_unified(user_id)
        if profile is None:
            raise ProfileNotFoundError(str(user_id))

        version = expected_version if expected_version is not None else profile.version

        # Shielded so a client disconnect cannot strand a stored asset
        return await asyncio.shield(
            self._store_and_rebind(user_id, content, content_type, version)
        )

    async def _store_and_rebind(
        self,
        user_id: UUID,
        content: bytes,
        content_type: str,
        version: int,
    ) -> UserProfile:
        asset = await self._storage.save(content, content_type)

        try:
            async with self._uow_factory() as uow:
                updated = await uow.profiles.update_avatar_ref(user_id, asset.url, version)
                if updated is None:
                    raise ConcurrencyConflictError(str(user_id))
                await uow.commit()
        except Exception:
            try:
                await self._storage.delete(asset.key)
            except OSError:
                # The rebind error still propagates; the asset is orphaned
                logger.exception(
                    "avatar_orphan_cleanup_failed",
                    user_id=str(user_id),
                    asset_key=asset.key,
                )
            logger.warning(
                "avatar_rebind_failed",
                user_id=str(user_id),
                asset_key=asset.key,
                expected_version=version,
            )
            raise

        logger.info(
            "avatar_updated",
            user_id=str(user_id),
            asset_key=asset.key,
            version=updated.version,
        )
        return updated
