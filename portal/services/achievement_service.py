"""
Achievement service.

Wraps the ordering repository with the cross-entity rules: a type change
invalidates player progress, and image uploads land in storage before the
achievement's ``imageUrl`` is rewritten.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Optional
from uuid import UUID

from portal.core.exceptions import InfrastructureError, NotFoundError, ValidationError
from portal.core.logger import logger
from portal.interfaces.achievement_repository import IAchievementRepository
from portal.interfaces.player_repository import IPlayerRepository
from portal.interfaces.storage_provider import IStorageProvider
from portal.models.achievement import (
    Achievement,
    AchievementCreate,
    AchievementUpdate,
    BulkAchievementItem,
)
from portal.models.enums import AchievementType
from portal.utils.datetime_utils import now_utc

DEFAULT_MAX_IMAGE_BYTES = 5 * 1024 * 1024


def parse_achievement_ids(raw_ids: list[str]) -> list[UUID]:
    """Parse ids from a reorder request; anything unparsable is foreign to the list."""
    parsed: list[UUID] = []
    for raw in raw_ids:
        try:
            parsed.append(UUID(str(raw)))
        except ValueError as e:
            raise ValidationError(f"Achievement ID {raw} does not exist in this list.") from e
    return parsed


class AchievementService:
    """Achievement operations scoped to one list."""

    def __init__(
        self,
        achievement_repo: IAchievementRepository,
        player_repo: IPlayerRepository,
        storage: Optional[IStorageProvider] = None,
        max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
    ):
        self._achievements = achievement_repo
        self._players = player_repo
        self._storage = storage
        self._max_image_bytes = max_image_bytes

    async def _get_or_404(self, list_id: UUID, achievement_id: UUID) -> Achievement:
        achievement = await self._achievements.get(list_id, achievement_id)
        if not achievement:
            raise NotFoundError(f"Achievement {achievement_id} not found in list {list_id}")
        return achievement

    async def _reset_if_type_changed(
        self,
        achievement_id: UUID,
        old_type: AchievementType,
        new_type: AchievementType,
    ) -> None:
        if old_type == new_type:
            return
        reset = await self._players.reset_progress(achievement_id)
        logger.info(
            f"Achievement {achievement_id} changed type {old_type.value} -> {new_type.value}; "
            f"reset progress for {reset} player(s)"
        )

    async def create(self, list_id: UUID, data: AchievementCreate) -> Achievement:
        return await self._achievements.create(list_id, data)

    async def list(self, list_id: UUID) -> list[Achievement]:
        return await self._achievements.list_by_list(list_id)

    async def update(
        self,
        list_id: UUID,
        achievement_id: UUID,
        update: AchievementUpdate,
    ) -> Achievement:
        """
        Apply a partial update.

        ``order`` (when present) is applied first, as a move; field edits
        follow. Changing ``type`` resets every player's progress for this
        achievement.
        """
        current = await self._get_or_404(list_id, achievement_id)
        changes = update.field_changes()
        if "title" in changes and not changes["title"].strip():
            raise ValidationError("Title must not be empty.")

        result = current
        if update.order is not None and update.order != current.order:
            result = await self._achievements.update_order(list_id, achievement_id, update.order)
        if changes:
            result = await self._achievements.update_fields(list_id, achievement_id, update)
            await self._reset_if_type_changed(achievement_id, current.type, result.type)
        return result

    async def delete(self, list_id: UUID, achievement_id: UUID) -> None:
        deleted = await self._achievements.delete(list_id, achievement_id)
        if not deleted:
            raise NotFoundError(f"Achievement {achievement_id} not found in list {list_id}")

    async def bulk_replace(
        self,
        list_id: UUID,
        items: list[BulkAchievementItem],
    ) -> list[Achievement]:
        before = {a.id: a.type for a in await self._achievements.list_by_list(list_id)}
        result = await self._achievements.bulk_replace(list_id, items)
        for achievement in result:
            old_type = before.get(achievement.id)
            if old_type is not None:
                await self._reset_if_type_changed(achievement.id, old_type, achievement.type)
        return result

    async def reorder_all(self, list_id: UUID, ordered_ids: list[str]) -> list[Achievement]:
        return await self._achievements.reorder_all(list_id, parse_achievement_ids(ordered_ids))

    async def upload_image(
        self,
        list_id: UUID,
        achievement_id: UUID,
        filename: Optional[str],
        data: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """Store an image for the achievement and point ``imageUrl`` at it."""
        if self._storage is None:
            raise ValidationError("Image storage is not configured.")
        current = await self._get_or_404(list_id, achievement_id)

        if not data:
            raise ValidationError("No image file provided.")
        if len(data) > self._max_image_bytes:
            raise ValidationError(
                f"Image is too large ({len(data)} bytes, limit {self._max_image_bytes})."
            )

        suffix = PurePosixPath(filename or "").suffix.lower()
        timestamp = int(now_utc().timestamp() * 1000)
        path = f"achievements/{achievement_id}_{timestamp}{suffix}"

        await self._storage.upload(path, data, content_type=content_type)
        image_url = self._storage.get_public_url(path)
        await self._achievements.update_fields(
            list_id, achievement_id, AchievementUpdate(image_url=image_url)
        )
        logger.info(f"Uploaded image for achievement {achievement_id}: {path} ({len(data)} bytes)")

        previous = self._storage.path_for_url(current.image_url)
        if previous and previous != path:
            await self._remove_image(achievement_id, previous)
        return image_url

    async def _remove_image(self, achievement_id: UUID, path: str) -> None:
        """Remove a replaced image; the new one is already in place."""
        try:
            await self._storage.delete(path)
        except (InfrastructureError, ValidationError) as e:
            logger.warning(
                f"Could not remove old image {path} of achievement {achievement_id}: {e}"
            )
