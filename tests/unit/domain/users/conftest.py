"""Fixtures for user domain tests."""

from collections.abc import Callable
from datetime import UTC, datetime

import pytest
from pytest_mock import MockerFixture, MockType

from src.domain.users import User, UserRepository
from src.infrastructure.security import PasswordHasher


def make_user(
    user_id: int = 1,
    email: str = "rick@rickmorty.com",
    roles: list[str] | None = None,
    hashed_password: str = "hashed",
) -> User:
    """Build a detached User with server-side fields already filled in."""
    user = User(
        email=email,
        hashed_password=hashed_password,
        first_name="Rick",
        last_name="Sanchez",
        roles=roles if roles is not None else ["ROLE_USER"],
    )
    user.id = user_id
    user.created_at = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
    user.updated_at = user.created_at
    return user


@pytest.fixture
def user_factory() -> Callable[..., User]:
    """Build detached users with id and timestamps set."""
    return make_user


@pytest.fixture
def mock_repository(mocker: MockerFixture) -> MockType:
    """UserRepository mock; every query method is async."""
    repository = mocker.AsyncMock(spec=UserRepository)
    repository.get_by_email.return_value = None
    repository.create.side_effect = lambda user: user
    repository.update.side_effect = lambda user, changes: user
    return repository


@pytest.fixture
def mock_hasher(mocker: MockerFixture) -> MockType:
    """Password hasher mock producing predictable hashes."""
    hasher = mocker.Mock(spec=PasswordHasher)
    hasher.hash.side_effect = lambda password: f"hashed:{password}"
    hasher.verify.side_effect = lambda hashed, password: hashed == f"hashed:{password}"
    return hasher
