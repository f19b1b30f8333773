"""
Player API endpoints.

Players are created on first reference, either explicitly or by a
progress update.
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from portal.api.deps import AppRepo, PlayerRepo, PlayerSvc
from portal.api.errors import to_http_exception
from portal.core.exceptions import PortalError
from portal.models.player import Player, PlayerCreate, ProgressUpdate

router = APIRouter(prefix="/apps/{app_id}/players", tags=["players"])


async def _ensure_app(app_id: UUID, app_repo: AppRepo) -> None:
    if not await app_repo.get(app_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"App {app_id} not found",
        )


@router.post("", response_model=Player, status_code=status.HTTP_201_CREATED)
async def create_player(
    app_id: UUID,
    player: PlayerCreate,
    app_repo: AppRepo,
    repo: PlayerRepo,
) -> Player:
    """Create a player, or return the existing one with the same id."""
    await _ensure_app(app_id, app_repo)
    return await repo.get_or_create(app_id, player.player_id)


@router.get("", response_model=list[Player])
async def list_players(
    app_id: UUID,
    repo: PlayerRepo,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> list[Player]:
    return await repo.list_by_app(app_id, limit=limit, offset=offset)


@router.get("/{player_id}", response_model=Player)
async def get_player(app_id: UUID, player_id: str, repo: PlayerRepo) -> Player:
    player = await repo.get(app_id, player_id)
    if not player:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Player {player_id} not found",
        )
    return player


@router.delete("/{player_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_player(app_id: UUID, player_id: str, repo: PlayerRepo) -> None:
    deleted = await repo.delete(app_id, player_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Player {player_id} not found",
        )


@router.patch("/{player_id}/progress", response_model=Player)
async def update_progress(
    app_id: UUID,
    player_id: str,
    update: ProgressUpdate,
    app_repo: AppRepo,
    service: PlayerSvc,
) -> Player:
    """Add ``progressDelta`` to the player's progress on one achievement."""
    await _ensure_app(app_id, app_repo)
    try:
        return await service.apply_progress(app_id, player_id, update)
    except PortalError as e:
        raise to_http_exception(e) from e
