"""
Player model definitions.

Players are identified by a caller-supplied ``player_id`` that is unique
within an app.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AchievementProgress(BaseModel):
    """A player's progress against one achievement."""

    model_config = ConfigDict(populate_by_name=True)

    achievement_id: UUID = Field(..., alias="achievementId")
    progress: int = Field(0, ge=0)
    date_unlocked: Optional[datetime] = Field(None, alias="dateUnlocked")


class PlayerCreate(BaseModel):
    """Create-or-fetch request."""

    model_config = ConfigDict(populate_by_name=True)

    player_id: str = Field(..., min_length=1, max_length=255, alias="playerId")


class ProgressUpdate(BaseModel):
    """Increment a player's progress by a delta."""

    model_config = ConfigDict(populate_by_name=True)

    achievement_id: UUID = Field(..., alias="achievementId")
    progress_delta: int = Field(..., alias="progressDelta")


class Player(BaseModel):
    """Complete player model."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    app_id: UUID = Field(..., alias="appId")
    player_id: str = Field(..., alias="playerId")
    achievements_progress: list[AchievementProgress] = Field(
        default_factory=list, alias="achievementsProgress"
    )
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")
