"""
Achievement model definitions.

Achievements belong to exactly one AchievementList and carry a dense,
1-based ``order`` within it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from portal.models.enums import AchievementType

# Fields that can be edited directly; ``order`` goes through reordering.
EDITABLE_FIELDS = (
    "title",
    "description",
    "type",
    "progress_goal",
    "is_hidden",
    "image_url",
)


def resolve_progress_goal(
    achievement_type: AchievementType,
    progress_goal: Optional[int],
) -> int:
    """Goal stored for an achievement: milestones always store 1."""
    if achievement_type == AchievementType.MILESTONE:
        return 1
    return progress_goal or 1


class AchievementFields(BaseModel):
    """Camel-case wire format shared by achievement schemas."""

    model_config = ConfigDict(populate_by_name=True)


class AchievementCreate(AchievementFields):
    """Create a new achievement.

    ``title`` and ``type`` are checked by the service so that a missing value
    is reported as a validation error rather than a schema error.
    """

    title: Optional[str] = Field(None, max_length=200)
    description: str = Field("", max_length=2000)
    type: Optional[AchievementType] = None
    progress_goal: Optional[int] = Field(None, ge=1, alias="progressGoal")
    is_hidden: bool = Field(False, alias="isHidden")
    image_url: str = Field("", alias="imageUrl")
    # Accepted for compatibility with clients that send it; creation always appends.
    order: Optional[int] = None


class AchievementUpdate(AchievementFields):
    """Partial update. A present ``order`` moves the achievement."""

    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    type: Optional[AchievementType] = None
    progress_goal: Optional[int] = Field(None, ge=1, alias="progressGoal")
    is_hidden: Optional[bool] = Field(None, alias="isHidden")
    image_url: Optional[str] = Field(None, alias="imageUrl")
    order: Optional[int] = None

    def field_changes(self) -> dict:
        """Explicitly set editable fields, excluding ``order``."""
        data = self.model_dump(exclude_unset=True)
        return {
            key: value
            for key, value in data.items()
            if key in EDITABLE_FIELDS and value is not None
        }


class BulkAchievementItem(AchievementUpdate):
    """One entry of a bulk replace: with ``id`` it updates, without it creates."""

    id: Optional[UUID] = None


class BulkReplaceRequest(BaseModel):
    """Desired end-state of a list's achievements."""

    achievements: list[BulkAchievementItem]


class ReorderRequest(AchievementFields):
    """A full permutation of the list's achievement ids."""

    ordered_ids: list[str] = Field(..., alias="orderedIds")


class Achievement(AchievementFields):
    """Complete achievement model."""

    id: UUID
    list_id: UUID = Field(..., alias="listId")
    title: str
    description: str = ""
    type: AchievementType
    progress_goal: int = Field(1, ge=1, alias="progressGoal")
    is_hidden: bool = Field(False, alias="isHidden")
    image_url: str = Field("", alias="imageUrl")
    order: int = Field(..., ge=1)
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")


class ImageUploadResponse(BaseModel):
    """Response of an achievement image upload."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    image_url: str = Field(..., alias="imageUrl")
