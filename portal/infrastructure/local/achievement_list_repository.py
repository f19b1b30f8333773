"""
SQLite implementation of achievement list repository.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import delete, select

from portal.core.exceptions import NotFoundError
from portal.infrastructure.local.database import (
    AchievementListORM,
    AchievementORM,
    ApiKeyORM,
    AppORM,
    PlayerProgressORM,
    get_session_factory,
)
from portal.interfaces.achievement_list_repository import IAchievementListRepository
from portal.models.achievement_list import (
    AchievementList,
    AchievementListCreate,
    AchievementListUpdate,
)
from portal.utils.datetime_utils import storage_now


class SqliteAchievementListRepository(IAchievementListRepository):
    """SQLite implementation of achievement list repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: AchievementListORM) -> AchievementList:
        """Convert ORM object to Pydantic model."""
        return AchievementList.model_validate(orm, from_attributes=True)

    async def create(self, data: AchievementListCreate) -> AchievementList:
        async with self._session_factory() as session:
            app = await session.execute(select(AppORM.id).where(AppORM.id == str(data.app_id)))
            if app.scalar_one_or_none() is None:
                raise NotFoundError(f"App {data.app_id} not found")

            orm = AchievementListORM(
                id=str(uuid4()),
                app_id=str(data.app_id),
                title=data.title,
                description=data.description,
                achievement_ids=[],
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, list_id: UUID) -> Optional[AchievementList]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(AchievementListORM).where(AchievementListORM.id == str(list_id))
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def update(self, list_id: UUID, update: AchievementListUpdate) -> AchievementList:
        async with self._session_factory() as session:
            result = await session.execute(
                select(AchievementListORM).where(AchievementListORM.id == str(list_id))
            )
            orm = result.scalar_one_or_none()
            if not orm:
                raise NotFoundError(f"AchievementList {list_id} not found")

            for field, value in update.model_dump(exclude_unset=True).items():
                if value is not None:
                    setattr(orm, field, value)

            orm.updated_at = storage_now()
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def delete(self, list_id: UUID) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                select(AchievementListORM).where(AchievementListORM.id == str(list_id))
            )
            orm = result.scalar_one_or_none()
            if not orm:
                return False

            member_ids = select(AchievementORM.id).where(AchievementORM.list_id == orm.id)
            await session.execute(
                delete(PlayerProgressORM).where(PlayerProgressORM.achievement_id.in_(member_ids))
                .execution_options(synchronize_session=False)
            )
            await session.execute(delete(AchievementORM).where(AchievementORM.list_id == orm.id))
            await session.execute(delete(ApiKeyORM).where(ApiKeyORM.list_id == orm.id))
            await session.delete(orm)
            await session.commit()
            return True
