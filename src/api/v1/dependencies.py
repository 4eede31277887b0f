"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from api.dependencies.auth import get_credential_codec
from core.config import settings
from domain.services.avatar_service import AvatarService
from domain.services.login_service import LoginService
from domain.services.profile_service import ProfileService
from domain.services.reconciliation_service import ReconciliationService
from infrastructure.auth.providers.base import IIdentityProvider
from infrastructure.auth.providers.github import GitHubProvider
from infrastructure.auth.providers.google import GoogleProvider
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.storage.local_storage import LocalAvatarStorage


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


def get_identity_providers() -> dict[str, IIdentityProvider]:
    """Providers with configured client credentials."""
    providers: dict[str, IIdentityProvider] = {}
    if settings.google_enabled:
        providers["google"] = GoogleProvider(
            settings.google_client_id,
            settings.google_client_secret,
            timeout=settings.provider_timeout_seconds,
        )
    if settings.github_enabled:
        providers["github"] = GitHubProvider(
            settings.github_client_id,
            settings.github_client_secret,
            timeout=settings.provider_timeout_seconds,
        )
    return providers


@lru_cache
def get_login_service() -> LoginService:
    """Get Login service instance."""
    return LoginService(
        get_uow_factory(),
        codec=get_credential_codec(),
        providers=get_identity_providers(),
    )


@lru_cache
def get_reconciliation_service() -> ReconciliationService:
    """Get Reconciliation service instance."""
    return ReconciliationService(get_uow_factory())


@lru_cache
def get_profile_service() -> ProfileService:
    """Get Profile service instance."""
    return ProfileService(
        get_uow_factory(),
        reconciliation_service=get_reconciliation_service(),
    )


@lru_cache
def get_avatar_storage() -> LocalAvatarStorage:
    """Get the avatar storage backend."""
    return LocalAvatarStorage(settings.storage_root, settings.public_base_url)


@lru_cache
def get_avatar_service() -> AvatarService:
    """Get Avatar service instance."""
    return AvatarService(
        get_uow_factory(),
        storage=get_avatar_storage(),
        max_bytes=settings.max_upload_bytes,
    )
