"""
SQLite implementation of app repository.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select

from portal.core.exceptions import NotFoundError
from portal.infrastructure.local.database import AppORM, get_session_factory
from portal.interfaces.app_repository import IAppRepository
from portal.models.app import App, AppCreate, AppUpdate
from portal.utils.datetime_utils import storage_now


class SqliteAppRepository(IAppRepository):
    """SQLite implementation of app repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: AppORM) -> App:
        """Convert ORM object to Pydantic model."""
        return App.model_validate(orm, from_attributes=True)

    async def create(self, data: AppCreate) -> App:
        async with self._session_factory() as session:
            orm = AppORM(
                id=str(uuid4()),
                title=data.title,
                description=data.description,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, app_id: UUID) -> Optional[App]:
        async with self._session_factory() as session:
            result = await session.execute(select(AppORM).where(AppORM.id == str(app_id)))
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def list(self, limit: int = 100, offset: int = 0) -> list[App]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(AppORM).order_by(AppORM.created_at.asc()).limit(limit).offset(offset)
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def update(self, app_id: UUID, update: AppUpdate) -> App:
        async with self._session_factory() as session:
            result = await session.execute(select(AppORM).where(AppORM.id == str(app_id)))
            orm = result.scalar_one_or_none()
            if not orm:
                raise NotFoundError(f"App {app_id} not found")

            for field, value in update.model_dump(exclude_unset=True).items():
                if value is not None:
                    setattr(orm, field, value)

            orm.updated_at = storage_now()
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def delete(self, app_id: UUID) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(select(AppORM).where(AppORM.id == str(app_id)))
            orm = result.scalar_one_or_none()
            if not orm:
                return False
            await session.delete(orm)
            await session.commit()
            return True
