"""
Achievement API endpoints.

Every route is scoped to one list and requires an API key issued for it.
"""

from uuid import UUID

from fastapi import APIRouter, File, UploadFile, status

from portal.api.deps import AchievementSvc
from portal.api.errors import to_http_exception
from portal.api.permissions import ListScope
from portal.core.exceptions import PortalError
from portal.models.achievement import (
    Achievement,
    AchievementCreate,
    AchievementUpdate,
    BulkReplaceRequest,
    ImageUploadResponse,
    ReorderRequest,
)

router = APIRouter(prefix="/lists/{list_id}/achievements", tags=["achievements"])


@router.post("", response_model=Achievement, status_code=status.HTTP_201_CREATED)
async def create_achievement(
    list_id: UUID,
    achievement: AchievementCreate,
    scope: ListScope,
    service: AchievementSvc,
) -> Achievement:
    """Create an achievement at the end of the list."""
    try:
        return await service.create(list_id, achievement)
    except PortalError as e:
        raise to_http_exception(e) from e


@router.get("", response_model=list[Achievement])
async def list_achievements(
    list_id: UUID,
    scope: ListScope,
    service: AchievementSvc,
) -> list[Achievement]:
    """List achievements ordered by ``order``."""
    try:
        return await service.list(list_id)
    except PortalError as e:
        raise to_http_exception(e) from e


@router.put("", response_model=list[Achievement])
async def bulk_replace_achievements(
    list_id: UUID,
    request: BulkReplaceRequest,
    scope: ListScope,
    service: AchievementSvc,
) -> list[Achievement]:
    """
    Apply a desired end-state for the list.

    Entries with an id are updated, entries without one are created; the
    list is then renumbered 1..N. Achievements not mentioned are kept.
    """
    try:
        return await service.bulk_replace(list_id, request.achievements)
    except PortalError as e:
        raise to_http_exception(e) from e


# Declared before "/{achievement_id}" so "reorder" is not parsed as an id.
@router.patch("/reorder", response_model=list[Achievement])
async def reorder_achievements(
    list_id: UUID,
    request: ReorderRequest,
    scope: ListScope,
    service: AchievementSvc,
) -> list[Achievement]:
    """Reorder the whole list from a full permutation of its ids."""
    try:
        return await service.reorder_all(list_id, request.ordered_ids)
    except PortalError as e:
        raise to_http_exception(e) from e


@router.patch("/{achievement_id}", response_model=Achievement)
async def update_achievement(
    list_id: UUID,
    achievement_id: UUID,
    update: AchievementUpdate,
    scope: ListScope,
    service: AchievementSvc,
) -> Achievement:
    """Update fields; a present ``order`` moves the achievement."""
    try:
        return await service.update(list_id, achievement_id, update)
    except PortalError as e:
        raise to_http_exception(e) from e


@router.delete("/{achievement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_achievement(
    list_id: UUID,
    achievement_id: UUID,
    scope: ListScope,
    service: AchievementSvc,
) -> None:
    """Delete an achievement and close the gap it leaves."""
    try:
        await service.delete(list_id, achievement_id)
    except PortalError as e:
        raise to_http_exception(e) from e


@router.post("/{achievement_id}/uploadImage", response_model=ImageUploadResponse)
async def upload_achievement_image(
    list_id: UUID,
    achievement_id: UUID,
    scope: ListScope,
    service: AchievementSvc,
    image: UploadFile = File(...),
) -> ImageUploadResponse:
    """Upload an image and set it as the achievement's ``imageUrl``."""
    data = await image.read()
    try:
        image_url = await service.upload_image(
            list_id,
            achievement_id,
            image.filename,
            data,
            content_type=image.content_type,
        )
    except PortalError as e:
        raise to_http_exception(e) from e
    return ImageUploadResponse(message="Image uploaded successfully", image_url=image_url)
