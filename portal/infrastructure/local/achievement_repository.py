"""
SQLite implementation of achievement repository.

Multi-record writes for one list run under a per-list lock and inside a
single session transaction, so concurrent moves on the same list never
interleave at the row level.
"""

from __future__ import annotations

import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.exceptions import NotFoundError, TransientStoreError, ValidationError
from portal.core.logger import logger
from portal.infrastructure.local.database import (
    AchievementListORM,
    AchievementORM,
    PlayerProgressORM,
    get_session_factory,
)
from portal.interfaces.achievement_repository import IAchievementRepository
from portal.models.achievement import (
    Achievement,
    AchievementCreate,
    AchievementUpdate,
    BulkAchievementItem,
    resolve_progress_goal,
)
from portal.models.enums import AchievementType
from portal.services.ordering import is_dense, shift_window, validate_permutation
from portal.utils.datetime_utils import storage_now

# Rank held by an item while its neighbours shift; outside any valid 1..N.
_PARKED_ORDER = 0


class SqliteAchievementRepository(IAchievementRepository):
    """SQLite implementation of achievement repository."""

    def __init__(self, session_factory=None):
        """
        Initialize repository.

        Args:
            session_factory: Optional session factory (for testing)
        """
        self._session_factory = session_factory or get_session_factory()
        # Entries live only while some writer holds or awaits the lock
        self._list_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _orm_to_model(self, orm: AchievementORM) -> Achievement:
        """Convert ORM object to Pydantic model."""
        return Achievement.model_validate(orm, from_attributes=True)

    def _lock_for(self, list_id: UUID) -> asyncio.Lock:
        lock = self._list_locks.get(str(list_id))
        if lock is None:
            lock = asyncio.Lock()
            self._list_locks[str(list_id)] = lock
        return lock

    @asynccontextmanager
    async def _list_transaction(
        self, list_id: UUID
    ) -> AsyncIterator[tuple[AsyncSession, AchievementListORM]]:
        """Serialize writers of one list and run them in one transaction."""
        async with self._lock_for(list_id):
            async with self._session_factory() as session:
                try:
                    list_orm = await self._get_list_orm(session, list_id)
                    yield session, list_orm
                    await session.commit()
                except SQLAlchemyError as e:
                    await session.rollback()
                    logger.error(f"Store failure on list {list_id}: {e}")
                    raise TransientStoreError(f"Failed to write achievements: {e}") from e

    # ===========================================
    # Queries
    # ===========================================

    async def _get_list_orm(self, session: AsyncSession, list_id: UUID) -> AchievementListORM:
        result = await session.execute(
            select(AchievementListORM).where(AchievementListORM.id == str(list_id))
        )
        list_orm = result.scalar_one_or_none()
        if not list_orm:
            raise NotFoundError(f"AchievementList {list_id} not found")
        return list_orm

    async def _members(self, session: AsyncSession, list_id: UUID) -> list[AchievementORM]:
        result = await session.execute(
            select(AchievementORM)
            .where(AchievementORM.list_id == str(list_id))
            .order_by(AchievementORM.order, AchievementORM.created_at, AchievementORM.id)
        )
        return list(result.scalars().all())

    async def _find_member(
        self, session: AsyncSession, list_id: UUID, achievement_id: UUID
    ) -> Optional[AchievementORM]:
        result = await session.execute(
            select(AchievementORM).where(
                and_(
                    AchievementORM.id == str(achievement_id),
                    AchievementORM.list_id == str(list_id),
                )
            )
        )
        return result.scalar_one_or_none()

    async def _get_member(
        self, session: AsyncSession, list_id: UUID, achievement_id: UUID
    ) -> AchievementORM:
        orm = await self._find_member(session, list_id, achievement_id)
        if not orm:
            raise NotFoundError(f"Achievement {achievement_id} not found in list {list_id}")
        return orm

    async def _max_order(self, session: AsyncSession, list_id: UUID) -> int:
        result = await session.execute(
            select(func.max(AchievementORM.order)).where(AchievementORM.list_id == str(list_id))
        )
        return result.scalar() or 0

    # ===========================================
    # Order maintenance
    # ===========================================

    def _sync_membership(self, list_orm: AchievementListORM, members: list[AchievementORM]) -> None:
        """Rewrite the list's id array from the authoritative order field."""
        ids = [m.id for m in sorted(members, key=lambda m: m.order)]
        if list_orm.achievement_ids != ids:
            list_orm.achievement_ids = ids
            list_orm.updated_at = storage_now()

    async def _normalize(
        self, session: AsyncSession, list_orm: AchievementListORM
    ) -> tuple[list[AchievementORM], int]:
        """Reassign order 1..N in current order. Returns (members, changed count)."""
        members = await self._members(session, list_orm.id)
        changed = 0
        for index, orm in enumerate(members, start=1):
            if orm.order != index:
                orm.order = index
                orm.updated_at = storage_now()
                changed += 1
        self._sync_membership(list_orm, members)
        await session.flush()
        return members, changed

    def _apply_fields(self, orm: AchievementORM, changes: dict) -> None:
        if "title" in changes and not str(changes["title"]).strip():
            raise ValidationError("Title must not be empty.")

        for field, value in changes.items():
            if field == "progress_goal":
                continue
            if hasattr(value, "value"):  # Enum
                value = value.value
            setattr(orm, field, value)

        orm.progress_goal = resolve_progress_goal(
            AchievementType(orm.type),
            changes.get("progress_goal", orm.progress_goal),
        )
        orm.updated_at = storage_now()

    def _new_orm(self, list_id: UUID, data: AchievementCreate, order: int) -> AchievementORM:
        if not data.title or not data.title.strip() or data.type is None:
            raise ValidationError("Title and type are required.")
        return AchievementORM(
            id=str(uuid4()),
            list_id=str(list_id),
            title=data.title,
            description=data.description or "",
            type=data.type.value,
            progress_goal=resolve_progress_goal(data.type, data.progress_goal),
            is_hidden=bool(data.is_hidden),
            image_url=data.image_url or "",
            order=order,
        )

    # ===========================================
    # Operations
    # ===========================================

    async def create(self, list_id: UUID, data: AchievementCreate) -> Achievement:
        """Create an achievement at the end of the list."""
        async with self._list_transaction(list_id) as (session, list_orm):
            orm = self._new_orm(list_id, data, await self._max_order(session, list_id) + 1)
            session.add(orm)
            await session.flush()
            self._sync_membership(list_orm, await self._members(session, list_id))
        return self._orm_to_model(orm)

    async def get(self, list_id: UUID, achievement_id: UUID) -> Optional[Achievement]:
        async with self._session_factory() as session:
            orm = await self._find_member(session, list_id, achievement_id)
            return self._orm_to_model(orm) if orm else None

    async def get_by_id(self, achievement_id: UUID) -> Optional[Achievement]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(AchievementORM).where(AchievementORM.id == str(achievement_id))
            )
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def list_by_list(self, list_id: UUID) -> list[Achievement]:
        """List achievements in order, repairing a non-dense list on read."""
        async with self._session_factory() as session:
            await self._get_list_orm(session, list_id)
            members = await self._members(session, list_id)

        if not is_dense(m.order for m in members):
            logger.warning(f"AchievementList {list_id} had non-dense order; normalizing")
            return await self.normalize(list_id)

        return [self._orm_to_model(orm) for orm in members]

    async def update_fields(
        self,
        list_id: UUID,
        achievement_id: UUID,
        update: AchievementUpdate,
    ) -> Achievement:
        """Apply title/description/type/goal/visibility/image changes."""
        async with self._list_transaction(list_id) as (session, _list_orm):
            orm = await self._get_member(session, list_id, achievement_id)
            self._apply_fields(orm, update.field_changes())
        return self._orm_to_model(orm)

    async def update_order(
        self,
        list_id: UUID,
        achievement_id: UUID,
        new_order: int,
    ) -> Achievement:
        """
        Move one achievement within its list.

        The target is parked outside 1..N while the others shift, so no two
        rows ever share a rank in between.
        """
        async with self._list_transaction(list_id) as (session, list_orm):
            target = await self._get_member(session, list_id, achievement_id)
            members = await self._members(session, list_id)
            if not 1 <= new_order <= len(members):
                raise ValidationError(
                    f"Order must be between 1 and {len(members)}, got {new_order}."
                )

            if not is_dense(m.order for m in members):
                await self._normalize(session, list_orm)

            old_order = target.order
            if new_order != old_order:
                low, high, delta = shift_window(old_order, new_order)
                now = storage_now()
                target.order = _PARKED_ORDER
                await session.flush()
                await session.execute(
                    update(AchievementORM)
                    .where(
                        and_(
                            AchievementORM.list_id == str(list_id),
                            AchievementORM.id != target.id,
                            AchievementORM.order >= low,
                            AchievementORM.order <= high,
                        )
                    )
                    .values(order=AchievementORM.order + delta, updated_at=now)
                    .execution_options(synchronize_session="fetch")
                )
                target.order = new_order
                target.updated_at = now
                await session.flush()
                self._sync_membership(list_orm, await self._members(session, list_id))
        return self._orm_to_model(target)

    async def delete(self, list_id: UUID, achievement_id: UUID) -> bool:
        """Delete an achievement with its progress records and close the gap it leaves."""
        async with self._list_transaction(list_id) as (session, list_orm):
            orm = await self._find_member(session, list_id, achievement_id)
            if not orm:
                return False

            deleted_order = orm.order
            await session.execute(
                delete(PlayerProgressORM).where(PlayerProgressORM.achievement_id == orm.id)
                .execution_options(synchronize_session=False)
            )
            await session.delete(orm)
            await session.flush()
            await session.execute(
                update(AchievementORM)
                .where(
                    and_(
                        AchievementORM.list_id == str(list_id),
                        AchievementORM.order > deleted_order,
                    )
                )
                .values(order=AchievementORM.order - 1, updated_at=storage_now())
                .execution_options(synchronize_session="fetch")
            )
            self._sync_membership(list_orm, await self._members(session, list_id))
        return True

    async def bulk_replace(
        self,
        list_id: UUID,
        items: list[BulkAchievementItem],
    ) -> list[Achievement]:
        """
        Apply a desired end-state, then normalize the whole list.

        Entries with an id are updated in place (including ``order`` when
        given); entries without one are appended. Achievements missing from
        ``items`` are left untouched.
        """
        async with self._list_transaction(list_id) as (session, list_orm):
            for item in items:
                if item.id:
                    orm = await self._get_member(session, list_id, item.id)
                    self._apply_fields(orm, item.field_changes())
                    if item.order is not None:
                        orm.order = item.order
                else:
                    data = AchievementCreate.model_validate(
                        item.model_dump(exclude={"id", "order"}, exclude_none=True)
                    )
                    order = item.order or await self._max_order(session, list_id) + 1
                    orm = self._new_orm(list_id, data, order)
                    session.add(orm)
                await session.flush()

            members, _ = await self._normalize(session, list_orm)
        return [self._orm_to_model(orm) for orm in members]

    async def reorder_all(self, list_id: UUID, ordered_ids: list[UUID]) -> list[Achievement]:
        """Assign order = position + 1 for a full permutation of the list."""
        async with self._list_transaction(list_id) as (session, list_orm):
            members = await self._members(session, list_id)
            by_id = {m.id: m for m in members}
            requested = [str(item_id) for item_id in ordered_ids]
            validate_permutation(list(by_id), requested)

            now = storage_now()
            for index, item_id in enumerate(requested, start=1):
                orm = by_id[item_id]
                if orm.order != index:
                    orm.order = index
                    orm.updated_at = now
            await session.flush()
            self._sync_membership(list_orm, members)
            members.sort(key=lambda m: m.order)
        return [self._orm_to_model(orm) for orm in members]

    async def normalize(self, list_id: UUID) -> list[Achievement]:
        async with self._list_transaction(list_id) as (session, list_orm):
            members, changed = await self._normalize(session, list_orm)
            if changed:
                logger.info(f"Normalized {changed} achievement(s) in list {list_id}")
        return [self._orm_to_model(orm) for orm in members]
