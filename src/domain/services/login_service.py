"""Provider login: exchange, identity resolution and credential issue."""

from collections.abc import Mapping
from typing import Callable

import structlog

from core.exceptions import UnknownProviderError
from domain.entities.identity import (
    IssuedCredential,
    ProviderIdentity,
    SessionIdentity,
    canonical_user_id,
)
from domain.entities.profile import UserProfile
from domain.repositories.unit_of_work import IUnitOfWork
from infrastructure.auth.credential_codec import CredentialCodec
from infrastructure.auth.providers.base import IIdentityProvider, ProviderCallback

logger = structlog.get_logger()


class LoginService:
    """Turns a successful provider callback into a session credential."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        codec: CredentialCodec,
        providers: Mapping[str, IIdentityProvider],
    ) -> None:
        self._uow_factory = uow_factory
        self._codec = codec
        self._providers = dict(providers)

    @property
    def provider_names(self) -> list[str]:
        return sorted(self._providers)

    def get_provider(self, name: str) -> IIdentityProvider:
        """Look up a configured provider by name."""
        provider = self._providers.get(name)
        if provider is None:
            raise UnknownProviderError(name)
        return provider

    async def complete_login(
        self, provider_name: str, callback: ProviderCallback
    ) -> IssuedCredential:
        """
        Complete a provider login and issue a credential.

        Ensures a unified profile stub exists for the identity so that
        reconciliation always has at least a partial target.

        Raises:
            UnknownProviderError: Provider is not configured
            ProviderRejectedError: Provider denied or expired the exchange
            ProviderUnreachableError: Provider could not be reached
        """
        provider = self.get_provider(provider_name)
        identity = await provider.exchange(callback)
        profile = await self._ensure_profile_stub(identity)

        credential = self._codec.issue(
            SessionIdentity(
                subject_id=profile.user_id,
                email=identity.email,
                display_name=identity.display_name or profile.full_name,
                provider=identity.provider,
            )
        )
        logger.info(
            "login_completed",
            provider=identity.provider,
            user_id=str(profile.user_id),
        )
        return credential

    async def _ensure_profile_stub(self, identity: ProviderIdentity) -> UserProfile:
        """Create a minimal unified profile if none exists, else leave it untouched."""
        async with self._uow_factory() as uow:
            existing = await uow.profiles.get_unified_by_email(identity.email)
            if existing:
                return existing

            stub = UserProfile(
                user_id=canonical_user_id(identity.provider, identity.provider_subject),
                email=identity.email,
                full_name=identity.display_name,
                avatar_url=identity.avatar_url,
            )
            await uow.profiles.upsert_unified(stub)
            await uow.commit()

            stored = await uow.profiles.get_unified(stub.user_id)
            logger.info("profile_stub_ensured", user_id=str(stub.user_id))
            return stored or stub
