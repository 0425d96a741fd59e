"""User account model."""

from collections.abc import Iterable

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.base import BaseModel

BASELINE_ROLE = "ROLE_USER"
ADMIN_ROLE = "ROLE_ADMIN"

EMAIL_MAX_LENGTH = 180
NAME_MAX_LENGTH = 100


def effective_roles(roles: Iterable[str]) -> list[str]:
    """Return ``roles`` deduplicated in order, with the baseline role appended.

    Args:
        roles: Roles as stored on the account.

    Returns:
        list[str]: Roles always containing ``ROLE_USER``.
    """
    return list(dict.fromkeys([*roles, BASELINE_ROLE]))


class User(BaseModel):
    """A registered account; ``email`` is the login identifier."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(EMAIL_MAX_LENGTH), unique=True, nullable=False
    )
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    last_name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    roles: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    @property
    def effective_roles(self) -> list[str]:
        """Stored roles plus the baseline role every user holds."""
        return effective_roles(self.roles or [])

    def has_roles(self, required: Iterable[str]) -> bool:
        """Check that the user holds every role in ``required``."""
        return set(required).issubset(self.effective_roles)
