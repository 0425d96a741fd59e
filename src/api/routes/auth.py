"""Self-service registration."""

from fastapi import APIRouter, status

from src.api.dependencies import UserServiceDep
from src.api.schemas.users import RegisterRequest, UserEnvelope, UserResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])

USER_CREATED_MESSAGE = "User created successfully"


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=UserEnvelope,
)
async def register(payload: RegisterRequest, service: UserServiceDep) -> UserEnvelope:
    """Create an account.

    Missing fields give 400 and an already registered email gives 409.
    """
    user = await service.register(
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        roles=payload.roles,
    )
    return UserEnvelope(message=USER_CREATED_MESSAGE, user=UserResponse.from_user(user))
