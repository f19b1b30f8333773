"""
AchievementList repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from portal.models.achievement_list import (
    AchievementList,
    AchievementListCreate,
    AchievementListUpdate,
)


class IAchievementListRepository(ABC):
    """Interface for achievement list repository."""

    @abstractmethod
    async def create(self, data: AchievementListCreate) -> AchievementList:
        """Create a list for an existing app."""
        pass

    @abstractmethod
    async def get(self, list_id: UUID) -> Optional[AchievementList]:
        """Get a list by ID."""
        pass

    @abstractmethod
    async def update(self, list_id: UUID, update: AchievementListUpdate) -> AchievementList:
        """Update list metadata."""
        pass

    @abstractmethod
    async def delete(self, list_id: UUID) -> bool:
        """Delete a list together with its achievements, their progress records and API keys."""
        pass
