"""Shared fixtures for unit tests."""

import dataclasses
from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from domain.entities.profile import FreelancerProfile, UserProfile, UserType


class FakeUnitOfWork:
    """Fake Unit of Work with a mocked profile repository for unit testing."""

    def __init__(self, profiles: Any = None) -> None:
        self.profiles = profiles if profiles is not None else AsyncMock()
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


class InMemoryProfileRepository:
    """Dict-backed profile repository with the real conditional-write semantics."""

    def __init__(self) -> None:
        self.unified: dict[UUID, UserProfile] = {}
        self.roles: dict[UUID, FreelancerProfile] = {}

    async def get_role(self, user_id: UUID) -> FreelancerProfile | None:
        return self.roles.get(user_id)

    async def list_roles(self, limit: int = 50, offset: int = 0) -> list[FreelancerProfile]:
        ordered = sorted(self.roles.values(), key=lambda r: r.created_at, reverse=True)
        return ordered[offset : offset + limit]

    async def get_unified(self, user_id: UUID) -> UserProfile | None:
        profile = self.unified.get(user_id)
        return dataclasses.replace(profile) if profile else None

    async def get_unified_by_email(self, email: str) -> UserProfile | None:
        matches = [p for p in self.unified.values() if p.email == email]
        return dataclasses.replace(matches[0]) if matches else None

    async def list_unified(
        self, limit: int = 50, offset: int = 0, user_type: UserType | None = None
    ) -> list[UserProfile]:
        matches = [
            p for p in self.unified.values() if user_type is None or p.user_type == user_type
        ]
        ordered = sorted(matches, key=lambda p: p.created_at, reverse=True)
        return [dataclasses.replace(p) for p in ordered[offset : offset + limit]]

    async def upsert_unified(self, profile: UserProfile) -> None:
        self.unified.setdefault(profile.user_id, dataclasses.replace(profile))

    async def update_avatar_ref(
        self, user_id: UUID, avatar_url: str, expected_version: int
    ) -> UserProfile | None:
        current = self.unified.get(user_id)
        if current is None or current.version != expected_version:
            return None
        updated = dataclasses.replace(
            current,
            avatar_url=avatar_url,
            version=current.version + 1,
            updated_at=datetime.utcnow(),
        )
        self.unified[user_id] = updated
        return dataclasses.replace(updated)


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def repo() -> InMemoryProfileRepository:
    """Create an empty in-memory profile repository."""
    return InMemoryProfileRepository()


@pytest.fixture
def memory_uow(repo: InMemoryProfileRepository) -> FakeUnitOfWork:
    """FakeUnitOfWork backed by the in-memory repository."""
    return FakeUnitOfWork(profiles=repo)


@pytest.fixture
def user_id() -> UUID:
    """A random user ID."""
    return uuid4()
