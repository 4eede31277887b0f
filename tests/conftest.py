"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import AsyncGenerator, Callable
from datetime import timedelta
from pathlib import Path
from uuid import UUID

# Settings are read at import time; configure the test environment first
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["GOOGLE_CLIENT_ID"] = ""
os.environ["GITHUB_CLIENT_ID"] = ""
os.environ["STORAGE_ROOT"] = str(Path(tempfile.gettempdir()) / "freelance-identity-test-uploads")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from domain.entities.identity import IssuedCredential, SessionIdentity
from infrastructure.auth.credential_codec import CredentialCodec
from infrastructure.auth.providers.base import IIdentityProvider
from infrastructure.database.models import Base, UserProfileModel
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork

# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_SECRET = "test-secret-key"

# Fixed test user ID for consistency
TEST_USER_ID = UUID("0c9a4f2e-5b1d-4e7a-9c3f-2d8e6b1a7f40")


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a per-test in-memory database with all tables."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], SQLAlchemyUnitOfWork]:
    """Unit of Work factory bound to the test database."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return factory


@pytest.fixture
def codec() -> CredentialCodec:
    """Codec signing with the test secret."""
    return CredentialCodec(secret_key=TEST_SECRET, lifetime=timedelta(minutes=30))


@pytest.fixture
def test_identity() -> SessionIdentity:
    """Identity of the test user."""
    return SessionIdentity(
        subject_id=TEST_USER_ID,
        email="test@example.com",
        provider="google",
        display_name="Test User",
    )


@pytest.fixture
def issued(codec: CredentialCodec, test_identity: SessionIdentity) -> IssuedCredential:
    """A fresh credential for the test user."""
    return codec.issue(test_identity)


@pytest.fixture
def auth_headers(issued: IssuedCredential) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {issued.token}"}


async def seed_unified_profile(
    session_factory: async_sessionmaker[AsyncSession],
    user_id: UUID,
    email: str,
    **fields: object,
) -> None:
    """Insert a unified profile row directly."""
    async with session_factory() as session:
        session.add(UserProfileModel(user_id=user_id, email=email, **fields))
        await session.commit()


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth) on the test database."""
    from infrastructure.database.session import get_async_session
    from main import create_app

    app = create_app()

    async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_async_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def providers() -> dict[str, IIdentityProvider]:
    """Identity providers the API client logs in through; empty by default."""
    return {}


@pytest.fixture
async def api_client(
    uow_factory: Callable[[], SQLAlchemyUnitOfWork],
    codec: CredentialCodec,
    providers: dict[str, IIdentityProvider],
    tmp_path: Path,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with database, codec and storage overrides.

    This client:
    - Uses an in-memory SQLite database
    - Verifies credentials with the test codec
    - Stores avatars under a temporary directory
    - Logs in through the ``providers`` fixture
    """
    from api.dependencies.auth import get_credential_codec
    from api.v1.dependencies import (
        get_avatar_service,
        get_login_service,
        get_profile_service,
        get_reconciliation_service,
    )
    from domain.services.avatar_service import AvatarService
    from domain.services.login_service import LoginService
    from domain.services.profile_service import ProfileService
    from domain.services.reconciliation_service import ReconciliationService
    from infrastructure.storage.local_storage import LocalAvatarStorage
    from main import create_app

    app = create_app()

    reconciliation = ReconciliationService(uow_factory)
    storage = LocalAvatarStorage(tmp_path, "http://test")

    def override_get_login_service() -> LoginService:
        return LoginService(uow_factory, codec=codec, providers=providers)

    app.dependency_overrides[get_credential_codec] = lambda: codec
    app.dependency_overrides[get_login_service] = override_get_login_service
    app.dependency_overrides[get_reconciliation_service] = lambda: reconciliation
    app.dependency_overrides[get_profile_service] = lambda: ProfileService(
        uow_factory, reconciliation_service=reconciliation
    )
    app.dependency_overrides[get_avatar_service] = lambda: AvatarService(
        uow_factory, storage=storage, max_bytes=1024
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
