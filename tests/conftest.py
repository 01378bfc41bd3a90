"""
Shared pytest fixtures and configuration for all tests.
"""

import os
from collections.abc import AsyncIterator, Generator
from datetime import UTC, datetime
from typing import Any
from unittest.mock import MagicMock
from uuid import UUID

import pytest
import pytest_asyncio
import strawberry

from talawa.auth.adapters.base import Principal
from talawa.auth.context import AuthContext
from talawa.storage.base import ObjectNotFound, StorageException, StorageProvider


class InMemoryStorageProvider(StorageProvider):
    """Dictionary-backed storage provider for tests."""

    def __init__(self, fail_on_upload: int | None = None):
        self.objects: dict[str, tuple[bytes, str, dict[str, Any]]] = {}
        self.deleted: list[str] = []
        self.fail_on_upload = fail_on_upload
        self._uploads = 0

    async def upload(self, key, content, content_type, metadata=None) -> str:
        self._uploads += 1
        if self.fail_on_upload is not None and self._uploads == self.fail_on_upload:
            raise StorageException("simulated upload failure")
        self.objects[key] = (bytes(content), content_type, dict(metadata or {}))
        return f"memory://{key}"

    async def download(self, key: str) -> bytes:
        if key not in self.objects:
            raise ObjectNotFound(key)
        return self.objects[key][0]

    async def delete(self, key: str) -> bool:
        self.deleted.append(key)
        return self.objects.pop(key, None) is not None

    async def exists(self, key: str) -> bool:
        return key in self.objects

    async def get_metadata(self, key: str) -> dict[str, Any]:
        if key not in self.objects:
            raise ObjectNotFound(key)
        content, content_type, metadata = self.objects[key]
        return {"size": len(content), "content_type": content_type, **metadata}


class FakeUpload:
    """Stand-in for the uploaded file objects Strawberry passes to resolvers."""

    def __init__(self, filename: str, content_type: str, content: bytes = b"\x89PNG data"):
        self.filename = filename
        self.content_type = content_type
        self._content = content

    async def read(self) -> bytes:
        return self._content


def make_auth_context(user_id: UUID | None) -> AuthContext:
    if user_id is None:
        return AuthContext(user_id=None, principal=None, token=None)
    return AuthContext(
        user_id=user_id,
        principal=Principal(provider="jwt", subject=str(user_id)),
        token="test-token",
    )


@pytest.fixture
def mock_info():
    """Create a mock GraphQL info object with request context."""
    info = MagicMock(spec=strawberry.Info)
    info.context = {
        "request": MagicMock(
            headers=MagicMock(
                get=MagicMock(
                    side_effect=lambda key: {"authorization": "Bearer test-token"}.get(key)
                )
            )
        )
    }
    return info


@pytest.fixture
def upload_factory():
    """Build fake uploads: ``upload_factory(filename, content_type, content)``."""
    return FakeUpload


@pytest.fixture
def auth_context_for():
    """Build an auth context for a user id (None for an anonymous caller)."""
    return make_auth_context


@pytest.fixture
def memory_storage() -> InMemoryStorageProvider:
    return InMemoryStorageProvider()


@pytest_asyncio.fixture(scope="function")
async def sqlite_database(tmp_path) -> AsyncIterator[str]:
    """Initialise the shared engine against a fresh on-disk SQLite database.

    A file is used rather than ``:memory:`` because resolvers open several
    sessions concurrently and each one needs to see the same tables.
    """
    from talawa.database.connection import (
        dispose_database,
        get_async_engine,
        init_database,
        reset_database,
    )
    from talawa.dbmodels import Base

    url = f"sqlite+aiosqlite:///{tmp_path / 'talawa.db'}"

    reset_database()
    init_database(url, force_reinit=True)

    async with get_async_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield url

    await dispose_database()


@pytest.fixture
def seed(sqlite_database):
    """Helpers that insert rows through the shared session factory."""
    from talawa.database.connection import get_async_session
    from talawa.dbmodels import OrganizationMemberships, Organizations, Users, Venues
    from talawa.ids import uuid7

    class Seeder:
        async def user(self, role: str = "member", name: str = "User") -> UUID:
            user_id = uuid7()
            async with get_async_session() as session:
                session.add(
                    Users(
                        id=user_id,
                        name=name,
                        email_address=f"{user_id}@example.com",
                        role=role,
                        created_at=datetime.now(UTC),
                    )
                )
            return user_id

        async def organization(self, name: str = "Org") -> UUID:
            organization_id = uuid7()
            async with get_async_session() as session:
                session.add(
                    Organizations(
                        id=organization_id,
                        name=f"{name} {organization_id}",
                        user_registration_required=False,
                        created_at=datetime.now(UTC),
                    )
                )
            return organization_id

        async def membership(self, member_id: UUID, organization_id: UUID, role: str) -> None:
            async with get_async_session() as session:
                session.add(
                    OrganizationMemberships(
                        member_id=member_id,
                        organization_id=organization_id,
                        role=role,
                        created_at=datetime.now(UTC),
                    )
                )

        async def venue(self, organization_id: UUID, name: str) -> UUID:
            venue_id = uuid7()
            async with get_async_session() as session:
                session.add(
                    Venues(
                        id=venue_id,
                        organization_id=organization_id,
                        name=name,
                        created_at=datetime.now(UTC),
                    )
                )
            return venue_id

    return Seeder()


@pytest.fixture(autouse=True)
def reset_cached_providers() -> Generator[None, None, None]:
    """Drop process-wide adapters so each test sees its own configuration."""
    from talawa.auth.factory import get_auth_adapter_cached
    from talawa.storage.factory import get_storage_provider

    get_auth_adapter_cached.cache_clear()
    get_storage_provider.cache_clear()
    yield
    get_auth_adapter_cached.cache_clear()
    get_storage_provider.cache_clear()


@pytest.fixture(autouse=True)
def reset_environment() -> Generator[None, None, None]:
    """Reset environment variables for each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")
