"""Unit tests for the generic repository and the user repository."""

from datetime import UTC, datetime

import pytest
from pytest_mock import MockerFixture, MockType

from src.domain.users import User, UserRepository


def _user(user_id: int = 1) -> User:
    user = User(
        email="beth@rickmorty.com",
        hashed_password="hashed",
        first_name="Beth",
        last_name="Smith",
        roles=["ROLE_USER"],
    )
    user.id = user_id
    user.created_at = datetime(2024, 1, 1, tzinfo=UTC)
    return user


@pytest.fixture
def repository(mock_session: MockType) -> UserRepository:
    return UserRepository(mock_session)


@pytest.mark.unit
class TestBaseRepository:
    """CRUD operations flush but never commit."""

    async def test_get_by_id_returns_scalar(
        self,
        repository: UserRepository,
        mock_session: MockType,
        mocker: MockerFixture,
    ) -> None:
        """The single matching row is returned."""
        user = _user()
        result = mocker.Mock()
        result.scalar_one_or_none.return_value = user
        mock_session.execute.return_value = result

        assert await repository.get_by_id(1) is user
        mock_session.execute.assert_awaited_once()

    async def test_get_all_returns_list(
        self,
        repository: UserRepository,
        mock_session: MockType,
        mocker: MockerFixture,
    ) -> None:
        """Scalars are materialized into a list."""
        users = [_user(1), _user(2)]
        result = mocker.Mock()
        result.scalars.return_value.all.return_value = users
        mock_session.execute.return_value = result

        assert await repository.get_all(skip=0, limit=10) == users

    async def test_create_adds_flushes_and_refreshes(
        self, repository: UserRepository, mock_session: MockType
    ) -> None:
        """New rows get their server-side values without a commit."""
        user = _user()

        created = await repository.create(user)

        assert created is user
        mock_session.add.assert_called_once_with(user)
        mock_session.flush.assert_awaited_once()
        mock_session.refresh.assert_awaited_once_with(user)
        mock_session.commit.assert_not_called()

    async def test_update_sets_known_fields_only(
        self, repository: UserRepository, mock_session: MockType
    ) -> None:
        """Unknown attributes are ignored instead of being set."""
        user = _user()

        await repository.update(user, {"first_name": "Beth", "nope": 1})

        assert user.first_name == "Beth"
        assert not hasattr(user, "nope")
        mock_session.flush.assert_awaited_once()

    async def test_delete_removes_and_flushes(
        self, repository: UserRepository, mock_session: MockType
    ) -> None:
        """Deletes are flushed in the caller's transaction."""
        user = _user()

        await repository.delete(user)

        mock_session.delete.assert_awaited_once_with(user)
        mock_session.flush.assert_awaited_once()
        mock_session.commit.assert_not_called()

    async def test_get_by_email_returns_match(
        self,
        repository: UserRepository,
        mock_session: MockType,
        mocker: MockerFixture,
    ) -> None:
        """Lookups by email go through find_one_by."""
        user = _user()
        result = mocker.Mock()
        result.scalar_one_or_none.return_value = user
        mock_session.execute.return_value = result

        assert await repository.get_by_email("beth@rickmorty.com") is user
