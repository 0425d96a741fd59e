"""Shared fixtures for integration tests.

The application is built with ``create_app`` and driven in-process through
``httpx.ASGITransport``. ASGITransport does not run the lifespan, so the
upstream client and the user repository are supplied with dependency
overrides: the upstream is mocked with respx and users live in memory.
"""

import base64
import os
from collections.abc import AsyncGenerator, Generator
from datetime import UTC, datetime
from itertools import count

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pytest_mock import MockerFixture
from sqlalchemy.exc import IntegrityError

from src.api.dependencies import (
    get_password_hasher,
    get_rick_morty_client,
    get_user_repository,
)
from src.api.main import create_app
from src.core.config import ObservabilityConfig, Settings, UpstreamConfig, get_settings
from src.core.context import RequestContext
from src.domain.users import ADMIN_ROLE, BASELINE_ROLE, User
from src.infrastructure.security import PasswordHasher
from src.infrastructure.upstream import RickMortyClient

UPSTREAM_BASE_URL = "https://upstream.test/api"

ADMIN_EMAIL = "admin@rickmorty.com"
ADMIN_PASSWORD = "admin123"
USER_EMAIL = "morty@rickmorty.com"
USER_PASSWORD = "morty123"


class InMemoryUserRepository:
    """Stand-in for UserRepository keeping users in a dict.

    Implements the subset of the repository API that UserService uses.
    """

    def __init__(self) -> None:
        self.users: dict[int, User] = {}
        self._ids = count(1)

    async def get_by_id(self, entity_id: int) -> User | None:
        return self.users.get(entity_id)

    async def get_by_email(self, email: str) -> User | None:
        return next((u for u in self.users.values() if u.email == email), None)

    async def get_all(self, skip: int = 0, limit: int = 100) -> list[User]:
        return sorted(self.users.values(), key=lambda u: u.id)[skip : skip + limit]

    async def create(self, obj: User) -> User:
        if await self.get_by_email(obj.email) is not None:
            raise IntegrityError("INSERT", {}, Exception("duplicate email"))
        obj.id = next(self._ids)
        obj.created_at = obj.updated_at = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)
        self.users[obj.id] = obj
        return obj

    async def update(self, instance: User, data: dict[str, object]) -> User:
        for key, value in data.items():
            setattr(instance, key, value)
        return instance

    async def delete(self, instance: User) -> None:
        self.users.pop(instance.id, None)


def basic_auth(email: str, password: str) -> dict[str, str]:
    token = base64.b64encode(f"{email}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture(autouse=True)
def clean_state() -> Generator[None]:
    """Reset cached settings and request context around every test."""
    original_env = os.environ.copy()
    get_settings.cache_clear()
    RequestContext.clear()
    yield
    get_settings.cache_clear()
    RequestContext.clear()
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        environment="development",
        debug=False,
        observability_config=ObservabilityConfig(enable_tracing=False),
        upstream_config=UpstreamConfig(base_url=UPSTREAM_BASE_URL),
    )


@pytest.fixture
async def user_repository() -> InMemoryUserRepository:
    """Repository pre-loaded with one admin and one regular user."""
    repository = InMemoryUserRepository()
    hasher = get_password_hasher()
    for email, password, roles in (
        (ADMIN_EMAIL, ADMIN_PASSWORD, [ADMIN_ROLE, BASELINE_ROLE]),
        (USER_EMAIL, USER_PASSWORD, [BASELINE_ROLE]),
    ):
        await repository.create(
            User(
                email=email,
                hashed_password=hasher.hash(password),
                first_name=email.split("@")[0].title(),
                last_name="Smith",
                roles=roles,
            )
        )
    return repository


@pytest.fixture
async def upstream_http_client() -> AsyncGenerator[httpx.AsyncClient]:
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture
def app(
    test_settings: Settings,
    user_repository: InMemoryUserRepository,
    upstream_http_client: httpx.AsyncClient,
    mocker: MockerFixture,
) -> FastAPI:
    """Application with the database and upstream replaced by test doubles."""
    mocker.patch(
        "src.api.main.check_database_connection", return_value=(True, None)
    )
    application = create_app(test_settings)
    application.dependency_overrides[get_settings] = lambda: test_settings
    application.dependency_overrides[get_rick_morty_client] = lambda: RickMortyClient(
        upstream_http_client, UPSTREAM_BASE_URL
    )
    application.dependency_overrides[get_user_repository] = lambda: user_repository
    application.dependency_overrides[get_password_hasher] = PasswordHasher
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Client that returns 500 responses instead of raising app exceptions."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return basic_auth(ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def user_headers() -> dict[str, str]:
    return basic_auth(USER_EMAIL, USER_PASSWORD)
