"""User administration, restricted to ``ROLE_ADMIN``."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import UserServiceDep, require_roles
from src.api.schemas.users import (
    MessageResponse,
    UserEnvelope,
    UserResponse,
    UserUpdateRequest,
)
from src.domain.users import ADMIN_ROLE
from src.infrastructure.database.repository import DEFAULT_PAGINATION_LIMIT

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
    dependencies=[Depends(require_roles(ADMIN_ROLE))],
)

USER_UPDATED_MESSAGE = "User updated successfully"
USER_DELETED_MESSAGE = "User deleted successfully"


@router.get("", response_model=list[UserResponse])
async def list_users(
    service: UserServiceDep,
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=1000)] = DEFAULT_PAGINATION_LIMIT,
) -> list[UserResponse]:
    """List users ordered by id."""
    users = await service.list_users(skip=skip, limit=limit)
    return [UserResponse.from_user(user) for user in users]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, service: UserServiceDep) -> UserResponse:
    return UserResponse.from_user(await service.get_user(user_id))


@router.api_route("/{user_id}", methods=["PUT", "PATCH"], response_model=UserEnvelope)
async def update_user(
    user_id: int, payload: UserUpdateRequest, service: UserServiceDep
) -> UserEnvelope:
    """Update any subset of email, names, roles and password."""
    user = await service.update_user(
        user_id,
        email=payload.email,
        first_name=payload.first_name,
        last_name=payload.last_name,
        roles=payload.roles,
        password=payload.password,
    )
    return UserEnvelope(message=USER_UPDATED_MESSAGE, user=UserResponse.from_user(user))


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: int, service: UserServiceDep) -> MessageResponse:
    await service.delete_user(user_id)
    return MessageResponse(message=USER_DELETED_MESSAGE)
