"""
Player progress service.
"""

from __future__ import annotations

from uuid import UUID

from portal.core.exceptions import NotFoundError
from portal.interfaces.achievement_list_repository import IAchievementListRepository
from portal.interfaces.achievement_repository import IAchievementRepository
from portal.interfaces.player_repository import IPlayerRepository
from portal.models.achievement_list import PlayerAchievement, PlayerAchievementListView
from portal.models.player import Player, ProgressUpdate


class PlayerService:
    def __init__(
        self,
        player_repo: IPlayerRepository,
        achievement_repo: IAchievementRepository,
        list_repo: IAchievementListRepository,
    ):
        self._players = player_repo
        self._achievements = achievement_repo
        self._lists = list_repo

    async def apply_progress(self, app_id: UUID, player_id: str, update: ProgressUpdate) -> Player:
        """
        Add ``progress_delta`` to the player's progress on one achievement.

        The achievement must belong to a list of the same app. Progress is
        clamped to the achievement's goal.
        """
        achievement = await self._achievements.get_by_id(update.achievement_id)
        if achievement:
            owner = await self._lists.get(achievement.list_id)
            if not owner or owner.app_id != app_id:
                achievement = None
        if not achievement:
            raise NotFoundError(f"Achievement {update.achievement_id} not found in app {app_id}")

        return await self._players.apply_progress(
            app_id,
            player_id,
            achievement.id,
            update.progress_delta,
            achievement.progress_goal,
        )

    async def list_view(self, list_id: UUID, player_id: str) -> PlayerAchievementListView:
        """A list's achievements merged with one player's progress."""
        achievement_list = await self._lists.get(list_id)
        if not achievement_list:
            raise NotFoundError(f"AchievementList {list_id} not found")

        achievements = await self._achievements.list_by_list(list_id)
        player = await self._players.get(achievement_list.app_id, player_id)
        progress = {p.achievement_id: p for p in player.achievements_progress} if player else {}

        merged = []
        for achievement in achievements:
            record = progress.get(achievement.id)
            merged.append(
                PlayerAchievement(
                    **achievement.model_dump(),
                    current_progress=record.progress if record else 0,
                    date_unlocked=record.date_unlocked if record else None,
                )
            )
        return PlayerAchievementListView(
            id=achievement_list.id,
            title=achievement_list.title,
            player_id=player_id,
            achievements=merged,
        )
