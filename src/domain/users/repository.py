"""Repository for user accounts."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.users.models import User
from src.infrastructure.database.repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """User-specific queries on top of the generic CRUD repository."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> User | None:
        """Find a user by login email.

        Args:
            email: Email address, compared exactly.

        Returns:
            User | None: The matching user, if any.
        """
        return await self.find_one_by(email=email)
