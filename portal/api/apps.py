"""
App API endpoints.
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from portal.api.deps import AppRepo
from portal.api.errors import to_http_exception
from portal.core.exceptions import PortalError
from portal.models.app import App, AppCreate, AppUpdate

router = APIRouter(prefix="/apps", tags=["apps"])


def _not_found(app_id: UUID) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"App {app_id} not found",
    )


@router.post("", response_model=App, status_code=status.HTTP_201_CREATED)
async def register_app(app: AppCreate, repo: AppRepo) -> App:
    return await repo.create(app)


@router.get("", response_model=list[App])
async def list_apps(
    repo: AppRepo,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> list[App]:
    return await repo.list(limit=limit, offset=offset)


@router.get("/{app_id}", response_model=App)
async def get_app(app_id: UUID, repo: AppRepo) -> App:
    app = await repo.get(app_id)
    if not app:
        raise _not_found(app_id)
    return app


@router.patch("/{app_id}", response_model=App)
async def update_app(app_id: UUID, update: AppUpdate, repo: AppRepo) -> App:
    try:
        return await repo.update(app_id, update)
    except PortalError as e:
        raise to_http_exception(e) from e


@router.delete("/{app_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_app(app_id: UUID, repo: AppRepo) -> None:
    deleted = await repo.delete(app_id)
    if not deleted:
        raise _not_found(app_id)
