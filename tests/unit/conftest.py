"""Shared fixtures for unit tests."""

import os
from collections.abc import AsyncGenerator, Generator
from typing import Any

import httpx
import pytest
from pytest_mock import MockerFixture, MockType
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_password_hasher
from src.core.config import LogConfig, Settings, get_settings
from src.core.context import RequestContext
from src.core.error_context import _get_sensitive_fields
from src.infrastructure.upstream import RickMortyClient

UPSTREAM_BASE_URL = "https://upstream.test/api"


@pytest.fixture
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Provide a real Settings object built from test environment values.

    Returns:
        Settings: Settings with test defaults.
    """
    monkeypatch.setenv("APP_NAME", "TestApp")
    monkeypatch.setenv("APP_VERSION", "1.0.0")
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("API_HOST", "127.0.0.1")
    monkeypatch.setenv("API_PORT", "3000")
    monkeypatch.setenv("UPSTREAM_CONFIG__BASE_URL", UPSTREAM_BASE_URL)

    return Settings()


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Clear cached settings and derived values before and after each test."""
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()
    get_password_hasher.cache_clear()
    yield
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()
    get_password_hasher.cache_clear()


@pytest.fixture(autouse=True)
def clean_env(
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[pytest.MonkeyPatch]:
    """Remove app-specific environment variables and restore them afterwards.

    Cloud detection variables are left alone; tests set them explicitly.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        pytest.MonkeyPatch: The monkeypatch instance for env manipulation.
    """
    original_env = os.environ.copy()

    env_prefixes = [
        "APP_",
        "API_",
        "ENVIRONMENT",
        "DEBUG",
        "LOG_CONFIG__",
        "OBSERVABILITY_CONFIG__",
        "DATABASE_CONFIG__",
        "UPSTREAM_CONFIG__",
    ]
    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in env_prefixes):
            monkeypatch.delenv(key, raising=False)

    yield monkeypatch

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def clean_context() -> Generator[None]:
    """Clear the request context before and after each test."""
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture
def mock_cloud_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, Any]:
    """Helpers that simulate GCP or AWS runtime environments.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        dict[str, Any]: Setter functions keyed by environment.
    """

    def set_gcp() -> None:
        monkeypatch.setenv("K_SERVICE", "test-service")

    def set_aws() -> None:
        monkeypatch.setenv("AWS_EXECUTION_ENV", "AWS_ECS_FARGATE")

    def clear_all() -> None:
        for key in ["K_SERVICE", "AWS_EXECUTION_ENV", "WEBSITE_INSTANCE_ID"]:
            monkeypatch.delenv(key, raising=False)

    clear_all()
    return {"set_gcp": set_gcp, "set_aws": set_aws, "clear_all": clear_all}


@pytest.fixture
def mock_get_settings(mocker: MockerFixture) -> MockType:
    """Patch error_context.get_settings with custom sensitive fields.

    Args:
        mocker: Pytest mocker fixture.

    Returns:
        MockType: Mock get_settings function.
    """
    mock_settings = mocker.Mock(spec=Settings)
    mock_log_config = mocker.Mock(spec=LogConfig)
    mock_log_config.sensitive_fields = ["custom_secret", "my_password", "api_token"]
    mock_settings.log_config = mock_log_config

    mock_get_settings_fn = mocker.patch("src.core.error_context.get_settings")
    mock_get_settings_fn.return_value = mock_settings
    _get_sensitive_fields.cache_clear()
    return mock_get_settings_fn


@pytest.fixture
def mock_session(mocker: MockerFixture) -> MockType:
    """Provide a mocked AsyncSession for repository tests.

    Args:
        mocker: Pytest mocker fixture.

    Returns:
        MockType: AsyncSession mock with async execute/flush/refresh/delete.
    """
    session = mocker.AsyncMock(spec=AsyncSession)
    session.add = mocker.Mock()
    return session


@pytest.fixture
def upstream_base_url() -> str:
    return UPSTREAM_BASE_URL


@pytest.fixture
async def rick_morty_client() -> AsyncGenerator[RickMortyClient]:
    """Upstream client backed by a real httpx client, for respx mocking."""
    async with httpx.AsyncClient() as http_client:
        yield RickMortyClient(http_client, UPSTREAM_BASE_URL)
