"""Request and response bodies for registration and user administration.

Field names are camelCase on the wire (``firstName``) and snake_case in
Python; both spellings are accepted on input.
"""

from datetime import datetime
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from src.domain.users.models import EMAIL_MAX_LENGTH, NAME_MAX_LENGTH, User

CREATED_AT_FORMAT = "%Y-%m-%d %H:%M:%S"

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"

Email = Annotated[
    str, Field(min_length=3, max_length=EMAIL_MAX_LENGTH, pattern=EMAIL_PATTERN)
]
Name = Annotated[str, Field(min_length=1, max_length=NAME_MAX_LENGTH)]
Password = Annotated[str, Field(min_length=1)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    """Body of ``POST /api/auth/register``."""

    email: Email
    password: Password
    first_name: Name
    last_name: Name
    roles: list[str] | None = Field(
        default=None, description="Roles to grant; defaults to ROLE_USER"
    )


class UserUpdateRequest(CamelModel):
    """Body of ``PUT|PATCH /api/users/{id}``; omitted fields stay unchanged."""

    email: Email | None = None
    password: Password | None = None
    first_name: Name | None = None
    last_name: Name | None = None
    roles: list[str] | None = None


class UserResponse(CamelModel):
    """Public view of a user; the password hash is never exposed."""

    id: int
    email: str
    first_name: str
    last_name: str
    roles: list[str]
    created_at: datetime

    @field_serializer("created_at", when_used="json")
    def format_created_at(self, value: datetime) -> str:
        return value.strftime(CREATED_AT_FORMAT)

    @classmethod
    def from_user(cls, user: User) -> Self:
        """Build the public view, reporting effective roles."""
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            roles=user.effective_roles,
            created_at=user.created_at,
        )


class UserEnvelope(BaseModel):
    """``{"message": ..., "user": ...}`` returned by register and update."""

    message: str
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
