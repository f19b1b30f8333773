"""
Achievement repository interface.

The repository owns the canonical ordering of a list's achievements: after
every mutating call the ``order`` values of the list are exactly 1..N.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from portal.models.achievement import (
    Achievement,
    AchievementCreate,
    AchievementUpdate,
    BulkAchievementItem,
)


class IAchievementRepository(ABC):
    """Interface for achievement persistence and ordering."""

    @abstractmethod
    async def create(self, list_id: UUID, data: AchievementCreate) -> Achievement:
        """Append a new achievement at order N+1."""
        pass

    @abstractmethod
    async def get(self, list_id: UUID, achievement_id: UUID) -> Optional[Achievement]:
        """Get an achievement if it belongs to the list."""
        pass

    @abstractmethod
    async def get_by_id(self, achievement_id: UUID) -> Optional[Achievement]:
        """Get an achievement by id regardless of its list."""
        pass

    @abstractmethod
    async def list_by_list(self, list_id: UUID) -> list[Achievement]:
        """List a list's achievements ordered by ``order``."""
        pass

    @abstractmethod
    async def update_fields(
        self,
        list_id: UUID,
        achievement_id: UUID,
        update: AchievementUpdate,
    ) -> Achievement:
        """Apply non-order field changes."""
        pass

    @abstractmethod
    async def update_order(
        self,
        list_id: UUID,
        achievement_id: UUID,
        new_order: int,
    ) -> Achievement:
        """Move an achievement to ``new_order``, shifting the ones in between."""
        pass

    @abstractmethod
    async def delete(self, list_id: UUID, achievement_id: UUID) -> bool:
        """Delete an achievement with its progress records and close the gap it leaves."""
        pass

    @abstractmethod
    async def bulk_replace(
        self,
        list_id: UUID,
        items: list[BulkAchievementItem],
    ) -> list[Achievement]:
        """Update/create from a desired end-state, then normalize."""
        pass

    @abstractmethod
    async def reorder_all(self, list_id: UUID, ordered_ids: list[UUID]) -> list[Achievement]:
        """Assign order 1..N following a full permutation of the list's ids."""
        pass

    @abstractmethod
    async def normalize(self, list_id: UUID) -> list[Achievement]:
        """Resort by current order and reassign contiguous ranks."""
        pass
