# ==============================================================================
# BASE REPOSITORY - Transaction-scoped Data Access
# ==============================================================================
# Repository Pattern over a single SQLAlchemy model
# Every instance is bound to one transaction handed out by a unit of work
# ==============================================================================

from __future__ import annotations

from typing import (
    Any,
    ClassVar,
    Dict,
    Generic,
    List,
    Mapping,
    Optional,
    Type,
    TypeVar,
    Union,
)

from pydantic import BaseModel
from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from uow_coordinator.database.adapters.sqlalchemy_adapter import SQLAlchemyTransaction
from uow_coordinator.domain_models.base import SQLBase

ModelType = TypeVar("ModelType", bound=SQLBase)

# Input accepted by create/update
EntityData = Union[BaseModel, Mapping[str, Any]]


class BaseRepository(Generic[ModelType]):
    """
    Base repository providing standard CRUD operations for one model.

    The constructor takes the transaction handle, so a repository class
    is itself a repository factory and can be registered directly on a
    unit of work. Writes are flushed inside the transaction; committing
    or rolling back is left to the unit of work.

    Generic Parameters:
        ModelType: SQLAlchemy model handled by the repository

    Attributes:
        model: Model class (set by subclasses)
        _transaction: Transaction the repository is bound to

    Example:
        >>> class UserRepository(BaseRepository[User]):
        ...     model = User
        ...
        >>> uow.register("users", UserRepository)
        >>> async def work(uow):
        ...     return await uow.get_repository("users").create({"email": "a@b.c"})
    """

    model: ClassVar[Type[SQLBase]]

    def __init__(self, transaction: SQLAlchemyTransaction) -> None:
        """
        Initialize repository.

        Args:
            transaction: Open transaction handle from a unit of work
        """
        self._transaction = transaction

    @property
    def session(self) -> AsyncSession:
        """Session of the bound transaction."""
        return self._transaction.session

    # ==========================================================================
    # HELPERS
    # ==========================================================================

    @staticmethod
    def _to_dict(data: EntityData) -> Dict[str, Any]:
        """Normalize a pydantic model or mapping into column values."""
        if isinstance(data, BaseModel):
            return data.model_dump(exclude_unset=True)
        return dict(data)

    def _conditions(self, filters: Optional[Dict[str, Any]]) -> List[Any]:
        if not filters:
            return []
        return [
            getattr(self.model, key) == value
            for key, value in filters.items()
            if hasattr(self.model, key)
        ]

    # ==========================================================================
    # CRUD OPERATIONS
    # ==========================================================================

    async def create(self, data: EntityData) -> ModelType:
        """
        Create a new entity.

        Args:
            data: Pydantic schema or mapping with column values

        Returns:
            Created entity with generated ID
        """
        instance = self.model(**self._to_dict(data))
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def add(self, entity: ModelType) -> ModelType:
        """Add an already built entity and flush it."""
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def get_by_id(self, id: Any) -> Optional[ModelType]:
        """
        Retrieve entity by ID.

        Args:
            id: Primary key value

        Returns:
            Entity if found, None otherwise
        """
        return await self.session.get(self.model, id)

    async def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[Dict[str, Any]] = None,
        sort_by: Optional[str] = None,
        sort_order: str = "asc",
    ) -> List[ModelType]:
        """
        Retrieve multiple entities with pagination.

        Args:
            skip: Number of records to skip
            limit: Maximum records to return
            filters: Field-value pairs for filtering
            sort_by: Field to sort by
            sort_order: Sort direction ("asc" or "desc")

        Returns:
            List of matching entities
        """
        query = select(self.model)

        conditions = self._conditions(filters)
        if conditions:
            query = query.where(and_(*conditions))

        if sort_by and hasattr(self.model, sort_by):
            order_column = getattr(self.model, sort_by)
            if sort_order.lower() == "desc":
                order_column = order_column.desc()
            query = query.order_by(order_column)

        query = query.offset(skip).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def find_one(self, filters: Dict[str, Any]) -> Optional[ModelType]:
        """Find the first entity matching filters."""
        results = await self.get_all(skip=0, limit=1, filters=filters)
        return results[0] if results else None

    async def update(self, id: Any, data: EntityData) -> Optional[ModelType]:
        """
        Update an existing entity.

        Args:
            id: Primary key of entity to update
            data: Fields to update

        Returns:
            Updated entity if found, None otherwise
        """
        instance = await self.session.get(self.model, id)
        if instance is None:
            return None

        for key, value in self._to_dict(data).items():
            if hasattr(instance, key):
                setattr(instance, key, value)

        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def delete(self, id: Any) -> bool:
        """
        Delete an entity by ID.

        Returns:
            True if deleted, False if not found
        """
        instance = await self.session.get(self.model, id)
        if instance is None:
            return False

        await self.session.delete(instance)
        await self.session.flush()
        return True

    # ==========================================================================
    # QUERY OPERATIONS
    # ==========================================================================

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count entities matching filters."""
        query = select(func.count()).select_from(self.model)

        conditions = self._conditions(filters)
        if conditions:
            query = query.where(and_(*conditions))

        result = await self.session.execute(query)
        return result.scalar() or 0

    async def exists(self, id: Any) -> bool:
        """Check if entity exists by ID."""
        return await self.get_by_id(id) is not None

    async def bulk_create(self, items: List[EntityData]) -> List[ModelType]:
        """Create several entities in one flush."""
        instances = [self.model(**self._to_dict(item)) for item in items]
        self.session.add_all(instances)
        await self.session.flush()
        return instances
