# tests/conftest.py
from __future__ import annotations

import os
import time
from collections.abc import AsyncIterator, Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncEngine

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("NEWS_ENABLED", "false")

from hottakes.core.errors import STORAGE_FAILURE, DataServiceError
from hottakes.core.settings import Settings
from hottakes.db.data_service import SqlDataService
from hottakes.db.session import create_engine_for, create_tables
from hottakes.main import create_app
from hottakes.repositories import PostRepository, ProfileRepository, VoteLedger
from hottakes.schemas.news import NewsItem
from hottakes.services import BlobStore, NewsSource
from hottakes.services.container import Services, build_services

TEST_SECRET = "test-secret"
TEST_AUDIENCE = "authenticated"


class InMemoryBlobStore(BlobStore):
    """Blob store double that records every upload."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.uploads: list[tuple[str, str, str]] = []

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        *,
        content_type: str,
        overwrite: bool = False,
    ) -> None:
        key = (bucket, path)
        if key in self.objects and not overwrite:
            raise DataServiceError(STORAGE_FAILURE, "The resource already exists")
        self.objects[key] = data
        self.uploads.append((bucket, path, content_type))

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"https://blobs.test/{bucket}/{path}"


class StubNewsSource(NewsSource):
    """News source returning canned headlines, or raising when told to."""

    def __init__(self, items: list[NewsItem] | None = None, error: Exception | None = None) -> None:
        self.items = items or []
        self.error = error
        self.calls = 0

    async def fetch_items(self) -> list[NewsItem]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.items)


def make_settings(tmp_path: Path, **overrides: Any) -> Settings:
    """Settings pointing at a throwaway SQLite file and media root."""
    values: dict[str, Any] = {
        "jwt_secret": TEST_SECRET,
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'hottakes-test.db'}",
        "media_root": str(tmp_path / "media"),
        "news_enabled": False,
        "submission_min_interval_seconds": 0.0,
    }
    values.update(overrides)
    return Settings(**values)


def make_token(
    user_id: str,
    email: str | None = None,
    *,
    secret: str = TEST_SECRET,
    audience: str | None = TEST_AUDIENCE,
    expires_in: int = 3600,
) -> str:
    """Issue a token shaped like the identity provider's access tokens."""
    claims: dict[str, Any] = {"sub": user_id, "exp": int(time.time()) + expires_in}
    if email is not None:
        claims["email"] = email
    if audience is not None:
        claims["aud"] = audience
    return jwt.encode(claims, secret, algorithm="HS256")


@pytest.fixture()
def test_settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest_asyncio.fixture()
async def engine(test_settings: Settings) -> AsyncIterator[AsyncEngine]:
    engine = create_engine_for(test_settings.database_url)
    await create_tables(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
def data(engine: AsyncEngine) -> SqlDataService:
    return SqlDataService(engine)


@pytest.fixture()
def blobs() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture()
def services(test_settings: Settings, data: SqlDataService, blobs: InMemoryBlobStore) -> Services:
    return build_services(test_settings, data=data, blobs=blobs)


@pytest.fixture()
def profiles(services: Services) -> ProfileRepository:
    return services.profiles


@pytest.fixture()
def posts(services: Services) -> PostRepository:
    return services.posts


@pytest.fixture()
def votes(services: Services) -> VoteLedger:
    return services.votes


@pytest.fixture()
def token_factory() -> Callable[..., str]:
    return make_token


@pytest.fixture()
def news_factory() -> type[StubNewsSource]:
    return StubNewsSource


@pytest.fixture()
def api_services(tmp_path: Path, blobs: InMemoryBlobStore) -> Services:
    """Services for API tests; tables are created by the app's startup hook."""
    return build_services(make_settings(tmp_path), blobs=blobs)


@pytest.fixture()
def client(api_services: Services) -> Iterator[TestClient]:
    app = create_app(api_services.settings, api_services)
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def auth_headers() -> Callable[..., dict[str, str]]:
    """Return a builder of Authorization headers for a given user."""

    def _headers(user_id: str = "user-1", email: str | None = "alice@example.com") -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user_id, email)}"}

    return _headers
