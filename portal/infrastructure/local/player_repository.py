"""
SQLite implementation of player repository.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, case, delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import TransientStoreError
from portal.core.logger import logger
from portal.infrastructure.local.database import PlayerORM, PlayerProgressORM, get_session_factory
from portal.interfaces.player_repository import IPlayerRepository
from portal.models.player import AchievementProgress, Player
from portal.utils.datetime_utils import storage_now


class SqlitePlayerRepository(IPlayerRepository):
    """SQLite implementation of player repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    async def _to_model(self, session: AsyncSession, orm: PlayerORM) -> Player:
        result = await session.execute(
            select(PlayerProgressORM)
            .where(PlayerProgressORM.player_ref == orm.id)
            .order_by(PlayerProgressORM.created_at.asc())
        )
        progress = [
            AchievementProgress.model_validate(row, from_attributes=True)
            for row in result.scalars().all()
        ]
        return Player(
            id=orm.id,
            app_id=orm.app_id,
            player_id=orm.player_id,
            achievements_progress=progress,
            created_at=orm.created_at,
            updated_at=orm.updated_at,
        )

    async def _find(self, session: AsyncSession, app_id: UUID, player_id: str) -> Optional[PlayerORM]:
        result = await session.execute(
            select(PlayerORM).where(
                and_(PlayerORM.app_id == str(app_id), PlayerORM.player_id == player_id)
            )
        )
        return result.scalar_one_or_none()

    async def _get_or_create(self, session: AsyncSession, app_id: UUID, player_id: str) -> PlayerORM:
        orm = await self._find(session, app_id, player_id)
        if orm:
            return orm

        orm = PlayerORM(id=str(uuid4()), app_id=str(app_id), player_id=player_id)
        session.add(orm)
        try:
            await session.commit()
        except IntegrityError:
            # Another request created the same (app, player) first
            await session.rollback()
            orm = await self._find(session, app_id, player_id)
        return orm

    async def get_or_create(self, app_id: UUID, player_id: str) -> Player:
        async with self._session_factory() as session:
            orm = await self._get_or_create(session, app_id, player_id)
            return await self._to_model(session, orm)

    async def get(self, app_id: UUID, player_id: str) -> Optional[Player]:
        async with self._session_factory() as session:
            orm = await self._find(session, app_id, player_id)
            return await self._to_model(session, orm) if orm else None

    async def list_by_app(self, app_id: UUID, limit: int = 100, offset: int = 0) -> list[Player]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(PlayerORM)
                .where(PlayerORM.app_id == str(app_id))
                .order_by(PlayerORM.created_at.asc())
                .limit(limit)
                .offset(offset)
            )
            return [await self._to_model(session, orm) for orm in result.scalars().all()]

    async def delete(self, app_id: UUID, player_id: str) -> bool:
        async with self._session_factory() as session:
            orm = await self._find(session, app_id, player_id)
            if not orm:
                return False
            await session.execute(
                delete(PlayerProgressORM).where(PlayerProgressORM.player_ref == orm.id)
            )
            await session.delete(orm)
            await session.commit()
            return True

    async def _ensure_progress_record(
        self, session: AsyncSession, player_ref: str, achievement_id: UUID
    ) -> None:
        result = await session.execute(
            select(PlayerProgressORM.id).where(
                and_(
                    PlayerProgressORM.player_ref == player_ref,
                    PlayerProgressORM.achievement_id == str(achievement_id),
                )
            )
        )
        if result.scalar_one_or_none():
            return

        session.add(
            PlayerProgressORM(
                id=str(uuid4()),
                player_ref=player_ref,
                achievement_id=str(achievement_id),
                progress=0,
                date_unlocked=None,
            )
        )
        try:
            await session.commit()
        except IntegrityError:
            # A concurrent first update created the record
            await session.rollback()

    async def apply_progress(
        self,
        app_id: UUID,
        player_id: str,
        achievement_id: UUID,
        delta: int,
        goal: int,
    ) -> Player:
        """
        Add ``delta`` inside a single UPDATE so concurrent deltas accumulate.

        Both the clamp and the unlock stamp are evaluated against the row's
        current value by the database, never against a value read earlier.
        """
        async with self._session_factory() as session:
            try:
                player = await self._get_or_create(session, app_id, player_id)
                player_ref = player.id
                await self._ensure_progress_record(session, player_ref, achievement_id)

                now = storage_now()
                new_progress = func.max(0, func.min(goal, PlayerProgressORM.progress + delta))
                await session.execute(
                    update(PlayerProgressORM)
                    .where(
                        and_(
                            PlayerProgressORM.player_ref == player_ref,
                            PlayerProgressORM.achievement_id == str(achievement_id),
                        )
                    )
                    .values(
                        progress=new_progress,
                        date_unlocked=case(
                            (
                                new_progress >= goal,
                                func.coalesce(PlayerProgressORM.date_unlocked, now),
                            ),
                            else_=None,
                        ),
                    )
                    .execution_options(synchronize_session=False)
                )
                await session.execute(
                    update(PlayerORM)
                    .where(PlayerORM.id == player_ref)
                    .values(updated_at=now)
                    .execution_options(synchronize_session=False)
                )
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Progress update failed for player {player_id}: {e}")
                raise TransientStoreError(f"Failed to update progress: {e}") from e

            # Rows changed behind the identity map; reload them.
            session.expire_all()
            player = await self._find(session, app_id, player_id)
            return await self._to_model(session, player)

    async def reset_progress(self, achievement_id: UUID) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                update(PlayerProgressORM)
                .where(PlayerProgressORM.achievement_id == str(achievement_id))
                .values(progress=0, date_unlocked=None)
            )
            await session.commit()
            return result.rowcount or 0
