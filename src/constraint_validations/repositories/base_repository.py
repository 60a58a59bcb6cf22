"""
Base repository providing insert/update operations whose constraint violations are
converted into validation failures.

The conversion is composed in, not inherited: every repository gets a TableBinding
(built once at start-up with `TableBinding.bind`/`bind_async`) and wraps its writes
in `constraint_error_handler(binding)`.

    binding = await TableBinding.for_model(Album).bind_async(engine)
    repo = BaseRepository(Album, session, binding)
    try:
        await repo.create(name="Blue Train", artist_id=42)
    except ValidationFailedError as e:
        e.errors.on("artist_id")   # ["is invalid"]
"""
import time
import logging
from typing import TypeVar, Generic, Type, Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from constraint_validations.config.settings import get_settings, message_table
from constraint_validations.constraints.binding import TableBinding
from constraint_validations.database.base import Base
from constraint_validations.exceptions.base import NotFoundError
from constraint_validations.exceptions.mapper import constraint_error_handler

ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository.

    Type Parameters:
        ModelType: The SQLAlchemy model class this repository manages.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession, binding: TableBinding | None = None):
        """
        Args:
            model: The SQLAlchemy model class (not an instance)
            db: The async database session
            binding: Table binding for `model`. Without one, an unbound binding with the
                configured CONSTRAINT_MESSAGES is used; an unbound binding lets
                violations propagate unchanged.
        """
        self.model = model
        self.db = db
        if binding is None:
            binding = TableBinding.for_model(model, messages=message_table(get_settings()))
        self.binding = binding

    # =================================================================================================================
    # Create
    # =================================================================================================================

    async def create(self, **kwargs) -> ModelType:
        """
        Insert a new entity and return it refreshed from the database.

        Raises:
            ValidationFailedError: the INSERT violated a constraint that maps onto fields.
            IntegrityError: any other constraint violation, unchanged.
        """
        logger.debug(
            "repo.create.start",
            extra={"model": self.model.__name__, "provided_keys": sorted(kwargs.keys())},
        )
        start = time.perf_counter()

        async with constraint_error_handler(self.binding):
            entity = self.model(**kwargs)
            self.db.add(entity)
            await self.db.flush()

        await self.db.refresh(entity)

        logger.info(
            "repo.create.success",
            extra={
                "model": self.model.__name__,
                "id": getattr(entity, "id", None),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return entity

    # =================================================================================================================
    # Read
    # =================================================================================================================

    async def get_by_id(self, entity_id: Any) -> ModelType | None:
        result = await self.db.execute(select(self.model).where(self.model.id == entity_id))
        return result.scalar_one_or_none()

    async def get_by_id_or_raise(self, entity_id: Any) -> ModelType:
        entity = await self.get_by_id(entity_id)
        if entity is None:
            raise NotFoundError(f"{self.model.__name__} with ID {entity_id} not found")
        return entity

    # =================================================================================================================
    # Update
    # =================================================================================================================

    async def update(self, entity_id: Any, **kwargs) -> ModelType | None:
        """
        Update an entity by its ID.

        Returns:
            The updated entity, or None when no row has that ID.

        Raises:
            ValidationFailedError: the UPDATE violated a constraint that maps onto fields,
                including foreign keys of other tables that reference the changed columns.
            IntegrityError: any other constraint violation, unchanged.
        """
        if not kwargs:
            logger.warning("repo.update.empty", extra={"model": self.model.__name__})
            return await self.get_by_id(entity_id)

        stmt = (
            update(self.model)
            .where(self.model.id == entity_id)
            .values(**kwargs)
            .execution_options(synchronize_session="fetch")
        )

        async with constraint_error_handler(self.binding):
            result = await self.db.execute(stmt)

        if result.rowcount == 0:
            logger.info("repo.update.not_found", extra={"model": self.model.__name__, "id": entity_id})
            return None

        logger.debug("repo.update.success", extra={"model": self.model.__name__, "id": entity_id})
        # a primary key change moves the row; look it up under its new id
        return await self.get_by_id(kwargs.get("id", entity_id))
