"""FastAPI dependency providing a request-scoped database session."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.session import get_async_session


async def get_db() -> AsyncGenerator[AsyncSession]:
    """Yield a session committed after the handler succeeds.

    Yields:
        AsyncSession: Session rolled back if the handler raises.
    """
    async with get_async_session() as session:
        yield session


DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
