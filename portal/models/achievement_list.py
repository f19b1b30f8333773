"""
AchievementList model definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from portal.models.achievement import Achievement


class AchievementListCreate(BaseModel):
    """Schema for creating a list."""

    model_config = ConfigDict(populate_by_name=True)

    app_id: UUID = Field(..., alias="appId")
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=2000)


class AchievementListUpdate(BaseModel):
    """Schema for updating list metadata."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)


class AchievementList(BaseModel):
    """Complete list model.

    ``achievement_ids`` mirrors the members' ``order`` field; the field on
    each achievement is the source of truth.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    app_id: UUID = Field(..., alias="appId")
    title: str
    description: str = ""
    achievement_ids: list[UUID] = Field(default_factory=list, alias="achievementIds")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")


class PlayerAchievement(Achievement):
    """An achievement merged with one player's progress."""

    current_progress: int = Field(0, ge=0, alias="currentProgress")
    date_unlocked: Optional[datetime] = Field(None, alias="dateUnlocked")


class PlayerAchievementListView(BaseModel):
    """A list as seen by one player."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    title: str
    player_id: str = Field(..., alias="playerId")
    achievements: list[PlayerAchievement]
