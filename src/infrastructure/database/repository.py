"""Generic async repository with the CRUD operations the gateway needs."""

from collections.abc import Mapping

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.base import BaseModel

DEFAULT_PAGINATION_LIMIT = 100


class BaseRepository[T: BaseModel]:
    """Repository providing CRUD operations for one model class.

    Writes are flushed, never committed: the session owner (the request-scoped
    ``get_db`` dependency) commits on success and rolls back on error.

    Args:
        session: The async SQLAlchemy session to use for operations.
        model_class: The SQLAlchemy model class this repository manages.

    Example:
        class UserRepository(BaseRepository[User]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, User)
    """

    def __init__(self, session: AsyncSession, model_class: type[T]) -> None:
        self.session = session
        self.model_class = model_class

    @property
    def _model_name(self) -> str:
        return self.model_class.__name__

    async def get_by_id(self, entity_id: int) -> T | None:
        """Retrieve a model instance by its ID.

        Args:
            entity_id: The primary key ID of the model to retrieve.

        Returns:
            T | None: The model instance if found, None otherwise.
        """
        stmt = select(self.model_class).where(self.model_class.id == entity_id)
        result = await self.session.execute(stmt)
        instance = result.scalar_one_or_none()

        logger.debug(
            "{} lookup by ID {}: {}",
            self._model_name,
            entity_id,
            "found" if instance else "not found",
        )
        return instance

    async def get_all(
        self, skip: int = 0, limit: int = DEFAULT_PAGINATION_LIMIT
    ) -> list[T]:
        """Retrieve model instances ordered by ID.

        Args:
            skip: Number of records to skip.
            limit: Maximum number of records to return.

        Returns:
            list[T]: List of model instances.
        """
        stmt = (
            select(self.model_class)
            .order_by(self.model_class.id)
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        instances = list(result.scalars().all())

        logger.debug("Retrieved {} {} instances", len(instances), self._model_name)
        return instances

    async def create(self, obj: T) -> T:
        """Persist a new model instance.

        Args:
            obj: The model instance to create.

        Returns:
            T: The instance with server-generated ID and timestamps.
        """
        self.session.add(obj)
        await self.session.flush()
        await self.session.refresh(obj)

        logger.info("Created {} instance with ID: {}", self._model_name, obj.id)
        return obj

    async def update(self, instance: T, data: Mapping[str, object]) -> T:
        """Apply a partial update to an already loaded instance.

        Args:
            instance: The instance to update.
            data: Field values to set; unknown fields are skipped with a warning.

        Returns:
            T: The refreshed instance.
        """
        for key, value in data.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
            else:
                logger.warning(
                    "Attempted to update non-existent field '{}' on {}",
                    key,
                    self._model_name,
                )

        await self.session.flush()
        await self.session.refresh(instance)

        logger.info(
            "Updated {} instance ID {} - fields: {}",
            self._model_name,
            instance.id,
            list(data.keys()),
        )
        return instance

    async def delete(self, instance: T) -> None:
        """Delete an already loaded instance.

        Args:
            instance: The instance to delete.
        """
        await self.session.delete(instance)
        await self.session.flush()

        logger.info("Deleted {} instance with ID: {}", self._model_name, instance.id)

    async def find_one_by(self, **kwargs: object) -> T | None:
        """Find the first instance matching all field/value conditions.

        Args:
            **kwargs: Field-value pairs to filter by.

        Returns:
            T | None: The first matching instance if found, None otherwise.
        """
        stmt = select(self.model_class)
        for field, value in kwargs.items():
            stmt = stmt.where(getattr(self.model_class, field) == value)
        stmt = stmt.order_by(self.model_class.id).limit(1)

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
