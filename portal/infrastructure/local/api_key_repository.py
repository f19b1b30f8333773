"""
SQLite implementation of API key repository.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from portal.core.exceptions import DuplicateError
from portal.infrastructure.local.database import ApiKeyORM, get_session_factory
from portal.interfaces.api_key_repository import IApiKeyRepository
from portal.models.api_key import ApiKey
from portal.utils.datetime_utils import to_storage


class SqliteApiKeyRepository(IApiKeyRepository):
    """SQLite implementation of API key repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: ApiKeyORM) -> ApiKey:
        """Convert ORM object to Pydantic model."""
        return ApiKey.model_validate(orm, from_attributes=True)

    async def create(
        self,
        key: str,
        list_id: UUID,
        app_id: UUID,
        exp_date: datetime,
    ) -> ApiKey:
        async with self._session_factory() as session:
            orm = ApiKeyORM(
                id=str(uuid4()),
                key=key,
                list_id=str(list_id),
                app_id=str(app_id),
                exp_date=to_storage(exp_date),
            )
            session.add(orm)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateError("API key already exists") from e
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get_by_key(self, key: str) -> Optional[ApiKey]:
        async with self._session_factory() as session:
            result = await session.execute(select(ApiKeyORM).where(ApiKeyORM.key == key))
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def list_by_list(self, list_id: UUID) -> list[ApiKey]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ApiKeyORM)
                .where(ApiKeyORM.list_id == str(list_id))
                .order_by(ApiKeyORM.created_at.asc())
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def delete(self, api_key_id: UUID) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(select(ApiKeyORM).where(ApiKeyORM.id == str(api_key_id)))
            orm = result.scalar_one_or_none()
            if not orm:
                return False
            await session.delete(orm)
            await session.commit()
            return True
