"""Pydantic models (schemas) for the application."""

from portal.models.enums import AchievementType
from portal.models.achievement import (
    Achievement,
    AchievementCreate,
    AchievementUpdate,
    BulkAchievementItem,
    BulkReplaceRequest,
    ReorderRequest,
)
from portal.models.achievement_list import (
    AchievementList,
    AchievementListCreate,
    AchievementListUpdate,
    PlayerAchievement,
    PlayerAchievementListView,
)
from portal.models.api_key import ApiKey, ApiKeyCreate, ApiKeyScopeResponse
from portal.models.app import App, AppCreate, AppUpdate
from portal.models.player import AchievementProgress, Player, PlayerCreate, ProgressUpdate

__all__ = [
    # Enums
    "AchievementType",
    # Achievement
    "Achievement",
    "AchievementCreate",
    "AchievementUpdate",
    "BulkAchievementItem",
    "BulkReplaceRequest",
    "ReorderRequest",
    # AchievementList
    "AchievementList",
    "AchievementListCreate",
    "AchievementListUpdate",
    "PlayerAchievement",
    "PlayerAchievementListView",
    # ApiKey
    "ApiKey",
    "ApiKeyCreate",
    "ApiKeyScopeResponse",
    # App
    "App",
    "AppCreate",
    "AppUpdate",
    # Player
    "AchievementProgress",
    "Player",
    "PlayerCreate",
    "ProgressUpdate",
]
