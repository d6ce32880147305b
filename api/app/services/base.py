from typing import Any, Generic, TypeVar, Type, Optional, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.exceptions import NotFoundException
from app.schemas.common import AdvancedResults
from app.services.query_translator import ListResource, advanced_results

ModelType = TypeVar("ModelType")
UpdateSchemaType = TypeVar("UpdateSchemaType")


class BaseCRUDService(Generic[ModelType, UpdateSchemaType]):
    """Base class for CRUD operations on SQLModel models."""

    def __init__(self, model: Type[ModelType], resource: Optional[ListResource] = None):
        self.model = model
        self.resource = resource

    async def get_by_id(
        self,
        session: AsyncSession,
        id: int,
        relationships: Optional[List[str]] = None,
    ) -> ModelType:
        """Get a single record by ID with optional relationship loading.

        Args:
            session: Database session
            id: Record ID
            relationships: List of relationship attribute names to eager load

        Returns:
            Model instance

        Raises:
            NotFoundException: If record not found
        """
        query = select(self.model).where(self.model.id == id)

        if relationships:
            for rel in relationships:
                query = query.options(selectinload(getattr(self.model, rel)))
            query = query.execution_options(populate_existing=True)

        result = await session.execute(query)
        item = result.scalar_one_or_none()

        if not item:
            raise NotFoundException(f"{self.model.__name__} not found with id of {id}")

        return item

    async def list_advanced(
        self,
        session: AsyncSession,
        params: dict[str, Any],
    ) -> AdvancedResults:
        """Filter, sort, project and paginate records from query parameters.

        Args:
            session: Database session
            params: Nested query parameters from the request

        Returns:
            Paginated result envelope
        """
        if self.resource is None:
            raise TypeError(f"{type(self).__name__} has no list resource configured")
        return await advanced_results(session, self.resource, params)

    async def create(
        self,
        session: AsyncSession,
        obj_in: ModelType,
    ) -> ModelType:
        """Create a new record.

        Args:
            session: Database session
            obj_in: Model instance to create

        Returns:
            Created model instance
        """
        session.add(obj_in)
        await self._commit(session)
        await session.refresh(obj_in)
        return obj_in

    def _settable(self, update_data: dict) -> dict:
        """Drop explicit nulls sent for columns that cannot hold them."""
        columns = self.model.__table__.columns
        return {
            field: value
            for field, value in update_data.items()
            if value is not None or field not in columns or columns[field].nullable
        }

    async def update(
        self,
        session: AsyncSession,
        id: int,
        obj_in: UpdateSchemaType,
    ) -> ModelType:
        """Update an existing record with partial data.

        Args:
            session: Database session
            id: Record ID
            obj_in: Update schema with partial data

        Returns:
            Updated model instance

        Raises:
            NotFoundException: If record not found
        """
        db_obj = await self.get_by_id(session, id)

        update_data = self._settable(obj_in.model_dump(exclude_unset=True))
        for field, value in update_data.items():
            setattr(db_obj, field, value)

        session.add(db_obj)
        await self._commit(session)
        await session.refresh(db_obj)
        return db_obj

    async def delete(
        self,
        session: AsyncSession,
        id: int,
    ) -> None:
        """Delete a record by ID.

        Raises:
            NotFoundException: If record not found
        """
        db_obj = await self.get_by_id(session, id)
        await session.delete(db_obj)
        await self._commit(session)

    @staticmethod
    async def _ensure_exists(session: AsyncSession, model: Type[Any], id: int) -> None:
        """Raise NotFoundException unless a row of ``model`` with ``id`` exists."""
        if await session.get(model, id) is None:
            raise NotFoundException(f"{model.__name__} not found with id of {id}")

    @staticmethod
    async def _commit(session: AsyncSession) -> None:
        """Commit, rolling back first if the database rejects the write."""
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise
