"""Demo accounts for local development.

Run with ``python main.py seed``. Existing accounts are left untouched, so
seeding twice is harmless.
"""

from typing import NamedTuple

from loguru import logger

from src.core.exceptions import ConflictError
from src.domain.users.models import ADMIN_ROLE, BASELINE_ROLE, User
from src.domain.users.service import UserService


class SeedUser(NamedTuple):
    first_name: str
    last_name: str
    email: str
    password: str
    roles: tuple[str, ...] = (BASELINE_ROLE,)


DEFAULT_USERS: tuple[SeedUser, ...] = (
    SeedUser("Admin", "User", "admin@rickmorty.com", "admin123", (ADMIN_ROLE, BASELINE_ROLE)),
    SeedUser("Rick", "Sanchez", "rick@rickmorty.com", "rick123"),
    SeedUser("Morty", "Smith", "morty@rickmorty.com", "morty123"),
    SeedUser("Summer", "Smith", "summer@rickmorty.com", "summer123"),
    SeedUser("Beth", "Smith", "beth@rickmorty.com", "beth123"),
    SeedUser("Jerry", "Smith", "jerry@rickmorty.com", "jerry123"),
)


async def seed_default_users(
    service: UserService, users: tuple[SeedUser, ...] = DEFAULT_USERS
) -> list[User]:
    """Register every seed account that does not exist yet.

    Args:
        service: User service bound to an open session.
        users: Accounts to create.

    Returns:
        list[User]: The accounts created by this call.
    """
    created: list[User] = []
    for seed in users:
        try:
            user = await service.register(
                email=seed.email,
                password=seed.password,
                first_name=seed.first_name,
                last_name=seed.last_name,
                roles=list(seed.roles),
            )
        except ConflictError:
            logger.info("Seed user {} already exists, skipping", seed.email)
            continue
        created.append(user)

    logger.info("Seeded {} of {} default users", len(created), len(users))
    return created
