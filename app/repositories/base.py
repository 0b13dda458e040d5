"""
Base repository.

Generic CRUD operations for all repositories.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import Column, func, inspect, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import Base
from app.utils.datetime_utils import utc_now

# Generic type for model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with generic CRUD operations.

    Provides async database operations for any SQLAlchemy model.
    Nothing is ever deleted through a repository: corrections are new rows.

    Type Parameters:
        ModelType: SQLAlchemy model class

    Example:
        class CommissionRepository(BaseRepository[Commission]):
            def __init__(self, session: AsyncSession):
                super().__init__(Commission, session)
    """

    def __init__(
        self, model: type[ModelType], session: AsyncSession
    ) -> None:
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    async def get_by_id(self, id: int | str) -> ModelType | None:
        """
        Get entity by ID.

        Args:
            id: Entity ID

        Returns:
            Entity or None if not found
        """
        return await self.session.get(self.model, id)

    async def get_by(
        self, **filters: Any
    ) -> ModelType | None:
        """
        Get single entity by filters.

        Args:
            **filters: Column filters

        Returns:
            First matching entity or None
        """
        stmt = select(self.model).filter_by(**filters)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, **data: Any) -> ModelType:
        """
        Create new entity.

        Args:
            **data: Entity data

        Returns:
            Created entity
        """
        entity = self.model(**data)
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def count(self, **filters: Any) -> int:
        """
        Count entities matching filters.

        Args:
            **filters: Column filters

        Returns:
            Count of matching entities
        """
        stmt = select(func.count()).select_from(self.model)

        if filters:
            stmt = stmt.filter_by(**filters)

        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def upsert(
        self,
        conflict_columns: list[str],
        update_exclude: tuple[str, ...] = ("id", "created_at"),
        **data: Any,
    ) -> ModelType:
        """
        Insert entity or update it in place when the unique key exists.

        Single INSERT ... ON CONFLICT DO UPDATE ... RETURNING statement,
        so two concurrent syncs of the same key never create two rows.

        Args:
            conflict_columns: Attribute names of the unique key
            update_exclude: Attributes never overwritten on conflict
            **data: Entity data

        Returns:
            Inserted or updated entity
        """
        values = self._column_values(data)
        stmt = self._dialect_insert().values(values)

        excluded_keys = set(update_exclude) | set(conflict_columns)
        set_ = {
            column: stmt.excluded[column.key]
            for column in values
            if self._attr_name(column) not in excluded_keys
        }
        if "updated_at" in self._mapper().columns and "updated_at" not in data:
            set_[self._mapper().columns["updated_at"]] = utc_now()

        stmt = stmt.on_conflict_do_update(
            index_elements=[self._mapper().columns[c] for c in conflict_columns],
            set_=set_,
        ).returning(self.model)

        result = await self.session.execute(
            stmt, execution_options={"populate_existing": True}
        )
        return result.scalar_one()

    async def insert_or_skip(
        self, conflict_columns: list[str], **data: Any
    ) -> ModelType | None:
        """
        Insert entity unless the unique key already exists.

        Args:
            conflict_columns: Attribute names of the unique key
            **data: Entity data

        Returns:
            Created entity, or None if the key was already taken
        """
        stmt = (
            self._dialect_insert()
            .values(self._column_values(data))
            .on_conflict_do_nothing(
                index_elements=[
                    self._mapper().columns[c] for c in conflict_columns
                ],
            )
            .returning(self.model)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    def _dialect_insert(self):
        """INSERT construct with ON CONFLICT support for the bound dialect."""
        dialect = self.session.bind.dialect.name
        if dialect == "postgresql":
            return postgresql.insert(self.model)
        if dialect == "sqlite":
            return sqlite.insert(self.model)
        raise NotImplementedError(f"Upsert is not supported for {dialect}")

    def _mapper(self):
        return inspect(self.model)

    def _column_values(self, data: dict[str, Any]) -> dict[Column, Any]:
        """Translate attribute names into table columns."""
        columns = self._mapper().columns
        values: dict[Column, Any] = {}
        for key, value in data.items():
            values[columns[key]] = value
        return values

    def _attr_name(self, column: Column) -> str:
        for key, mapped in self._mapper().columns.items():
            if mapped is column:
                return key
        return column.key
