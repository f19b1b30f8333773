"""
AchievementList API endpoints.
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from portal.api.deps import AchievementListRepo, PlayerSvc
from portal.api.errors import to_http_exception
from portal.api.permissions import ListScope
from portal.core.exceptions import PortalError
from portal.models.achievement_list import (
    AchievementList,
    AchievementListCreate,
    AchievementListUpdate,
    PlayerAchievementListView,
)

router = APIRouter(prefix="/lists", tags=["lists"])


@router.post("", response_model=AchievementList, status_code=status.HTTP_201_CREATED)
async def create_list(
    achievement_list: AchievementListCreate,
    repo: AchievementListRepo,
) -> AchievementList:
    """Create an empty achievement list for an app."""
    try:
        return await repo.create(achievement_list)
    except PortalError as e:
        raise to_http_exception(e) from e


@router.get("/{list_id}", response_model=AchievementList)
async def get_list(list_id: UUID, repo: AchievementListRepo) -> AchievementList:
    achievement_list = await repo.get(list_id)
    if not achievement_list:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"AchievementList {list_id} not found",
        )
    return achievement_list


@router.patch("/{list_id}", response_model=AchievementList)
async def update_list(
    list_id: UUID,
    update: AchievementListUpdate,
    scope: ListScope,
    repo: AchievementListRepo,
) -> AchievementList:
    try:
        return await repo.update(list_id, update)
    except PortalError as e:
        raise to_http_exception(e) from e


@router.delete("/{list_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_list(
    list_id: UUID,
    scope: ListScope,
    repo: AchievementListRepo,
) -> None:
    """Delete a list together with its achievements and API keys."""
    deleted = await repo.delete(list_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"AchievementList {list_id} not found",
        )


@router.get("/{list_id}/players/{player_id}", response_model=PlayerAchievementListView)
async def get_list_for_player(
    list_id: UUID,
    player_id: str,
    service: PlayerSvc,
) -> PlayerAchievementListView:
    """The list's achievements merged with one player's progress."""
    try:
        return await service.list_view(list_id, player_id)
    except PortalError as e:
        raise to_http_exception(e) from e
