"""FastAPI dependencies shared by the routers.

Collaborators are wired here so route handlers receive them as arguments:
the upstream client lives on ``app.state`` (opened by the lifespan), and the
user service is built per request around the request's database session.
"""

from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from loguru import logger

from src.domain.users import User, UserRepository, UserService
from src.infrastructure.database.dependencies import DatabaseSession
from src.infrastructure.security import PasswordHasher
from src.infrastructure.upstream import RickMortyClient

basic_auth = HTTPBasic(realm="Rick and Morty API Gateway")


def get_rick_morty_client(request: Request) -> RickMortyClient:
    """Return the upstream client opened by the application lifespan."""
    client: RickMortyClient = request.app.state.rick_morty_client
    return client


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Return the process-wide password hasher."""
    return PasswordHasher()


def get_user_repository(session: DatabaseSession) -> UserRepository:
    return UserRepository(session)


def get_user_service(
    repository: Annotated[UserRepository, Depends(get_user_repository)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> UserService:
    return UserService(repository, hasher)


RickMortyClientDep = Annotated[RickMortyClient, Depends(get_rick_morty_client)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]


async def get_current_user(
    credentials: Annotated[HTTPBasicCredentials, Depends(basic_auth)],
    service: UserServiceDep,
) -> User:
    """Authenticate the request's Basic credentials against the user store.

    Args:
        credentials: Email and password from the ``Authorization`` header.
        service: User service bound to the request session.

    Returns:
        User: The authenticated user.

    Raises:
        HTTPException: 401 with ``WWW-Authenticate: Basic`` when the
            credentials do not match a user.
    """
    user = await service.authenticate(credentials.username, credentials.password)
    if user is None:
        logger.info("Rejected Basic credentials")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_roles(*roles: str) -> Callable[[User], Awaitable[User]]:
    """Build a dependency that admits only users holding every role in ``roles``.

    Args:
        *roles: Required role names, e.g. ``"ROLE_ADMIN"``.

    Returns:
        Callable: A FastAPI dependency returning the authenticated user.
    """

    async def dependency(user: CurrentUser) -> User:
        if not user.has_roles(roles):
            logger.info("Access denied, missing roles {}", roles, user_id=user.id)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied",
            )
        return user

    return dependency
