"""User accounts: persistence model, repository, service and demo seed data."""

from src.domain.users.models import ADMIN_ROLE, BASELINE_ROLE, User, effective_roles
from src.domain.users.repository import UserRepository
from src.domain.users.service import UserService

__all__ = [
    "ADMIN_ROLE",
    "BASELINE_ROLE",
    "User",
    "UserRepository",
    "UserService",
    "effective_roles",
]
