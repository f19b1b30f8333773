"""
Player repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from portal.models.player import Player


class IPlayerRepository(ABC):
    """Interface for player repository."""

    @abstractmethod
    async def get_or_create(self, app_id: UUID, player_id: str) -> Player:
        """Return the player, creating it on first reference."""
        pass

    @abstractmethod
    async def get(self, app_id: UUID, player_id: str) -> Optional[Player]:
        pass

    @abstractmethod
    async def list_by_app(self, app_id: UUID, limit: int = 100, offset: int = 0) -> list[Player]:
        pass

    @abstractmethod
    async def delete(self, app_id: UUID, player_id: str) -> bool:
        pass

    @abstractmethod
    async def apply_progress(
        self,
        app_id: UUID,
        player_id: str,
        achievement_id: UUID,
        delta: int,
        goal: int,
    ) -> Player:
        """Add ``delta`` to the player's progress, clamped to 0..goal.

        The progress record is created on first update. ``dateUnlocked`` is
        stamped when progress first reaches ``goal``.
        """
        pass

    @abstractmethod
    async def reset_progress(self, achievement_id: UUID) -> int:
        """Reset every player's progress for one achievement to (0, null).

        Returns the number of progress records touched.
        """
        pass
