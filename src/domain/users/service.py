"""Registration, administration and authentication rules for user accounts.

The service receives its repository and password hasher explicitly; it never
reaches for global state. Failures are raised as gateway exceptions and
translated to HTTP responses by the global exception handlers.
"""

from collections.abc import Sequence

from loguru import logger
from sqlalchemy.exc import IntegrityError

from src.core.exceptions import ConflictError, ResourceNotFound
from src.domain.users.models import BASELINE_ROLE, User
from src.domain.users.repository import UserRepository
from src.infrastructure.database.repository import DEFAULT_PAGINATION_LIMIT
from src.infrastructure.security import PasswordHasher

USER_EXISTS_MESSAGE = "User already exists"
USER_NOT_FOUND_MESSAGE = "User not found"


class UserService:
    """Use cases for the user store.

    Args:
        repository: Repository bound to the request's database session.
        hasher: Password hasher used for new and changed passwords.
    """

    def __init__(self, repository: UserRepository, hasher: PasswordHasher) -> None:
        self.repository = repository
        self.hasher = hasher

    async def register(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        roles: Sequence[str] | None = None,
    ) -> User:
        """Create a new account.

        Args:
            email: Unique login email.
            password: Plaintext password, hashed before storage.
            first_name: Given name.
            last_name: Family name.
            roles: Roles to grant; defaults to the baseline role.

        Returns:
            User: The persisted user.

        Raises:
            ConflictError: If the email is already registered. Nothing is
                persisted in that case.
        """
        if await self.repository.get_by_email(email) is not None:
            logger.info("Registration rejected for existing email")
            raise ConflictError(USER_EXISTS_MESSAGE, context={"email": email})

        user = User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            roles=list(roles) if roles is not None else [BASELINE_ROLE],
            hashed_password=self.hasher.hash(password),
        )

        try:
            return await self.repository.create(user)
        except IntegrityError as exc:
            # Lost a race with a concurrent registration of the same email
            raise ConflictError(
                USER_EXISTS_MESSAGE, context={"email": email}, cause=exc
            ) from exc

    async def list_users(
        self, skip: int = 0, limit: int = DEFAULT_PAGINATION_LIMIT
    ) -> list[User]:
        """Return users ordered by id."""
        return await self.repository.get_all(skip=skip, limit=limit)

    async def get_user(self, user_id: int) -> User:
        """Load a user or fail.

        Raises:
            ResourceNotFound: If no user has this id.
        """
        user = await self.repository.get_by_id(user_id)
        if user is None:
            raise ResourceNotFound(USER_NOT_FOUND_MESSAGE, context={"user_id": user_id})
        return user

    async def update_user(
        self,
        user_id: int,
        *,
        email: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        roles: Sequence[str] | None = None,
        password: str | None = None,
    ) -> User:
        """Apply a partial update; ``None`` means "leave unchanged".

        Raises:
            ResourceNotFound: If no user has this id.
            ConflictError: If ``email`` already belongs to another user.
        """
        user = await self.get_user(user_id)

        changes: dict[str, object] = {}
        if email is not None and email != user.email:
            existing = await self.repository.get_by_email(email)
            if existing is not None and existing.id != user.id:
                raise ConflictError(USER_EXISTS_MESSAGE, context={"email": email})
            changes["email"] = email
        if first_name is not None:
            changes["first_name"] = first_name
        if last_name is not None:
            changes["last_name"] = last_name
        if roles is not None:
            changes["roles"] = list(roles)
        if password is not None:
            changes["hashed_password"] = self.hasher.hash(password)

        if not changes:
            return user

        try:
            return await self.repository.update(user, changes)
        except IntegrityError as exc:
            raise ConflictError(
                USER_EXISTS_MESSAGE, context={"email": email}, cause=exc
            ) from exc

    async def delete_user(self, user_id: int) -> None:
        """Hard-delete a user.

        Raises:
            ResourceNotFound: If no user has this id.
        """
        user = await self.get_user(user_id)
        await self.repository.delete(user)

    async def authenticate(self, email: str, password: str) -> User | None:
        """Return the user owning these credentials, or None."""
        user = await self.repository.get_by_email(email)
        if user is None or not self.hasher.verify(user.hashed_password, password):
            return None
        return user
