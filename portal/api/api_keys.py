"""
API key endpoints.
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from portal.api.deps import AchievementListRepo, ApiKeyRepo
from portal.api.errors import to_http_exception
from portal.core.config import get_settings
from portal.core.exceptions import PortalError
from portal.models.api_key import ApiKey, ApiKeyCreate, ApiKeyScopeResponse
from portal.services.api_key_permissions import issue_api_key

router = APIRouter(prefix="/apikeys", tags=["apikeys"])


@router.get("", response_model=ApiKeyScopeResponse)
async def resolve_key(
    repo: ApiKeyRepo,
    key: str = Query(..., min_length=1),
) -> ApiKeyScopeResponse:
    """Resolve a key to the list and app it grants access to."""
    api_key = await repo.get_by_key(key)
    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="API key not found",
        )
    return ApiKeyScopeResponse(list_id=api_key.list_id, app_id=api_key.app_id)


@router.get("/list/{list_id}", response_model=list[ApiKey])
async def list_keys(list_id: UUID, repo: ApiKeyRepo) -> list[ApiKey]:
    return await repo.list_by_list(list_id)


@router.post("/{list_id}", response_model=ApiKey, status_code=status.HTTP_201_CREATED)
async def create_key(
    list_id: UUID,
    data: ApiKeyCreate,
    repo: ApiKeyRepo,
    list_repo: AchievementListRepo,
) -> ApiKey:
    """Issue a key for a list. Key and expiry are generated when omitted."""
    try:
        return await issue_api_key(
            list_id, data, repo, list_repo, ttl_days=get_settings().API_KEY_TTL_DAYS
        )
    except PortalError as e:
        raise to_http_exception(e) from e


@router.delete("/{api_key_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_key(api_key_id: UUID, repo: ApiKeyRepo) -> None:
    deleted = await repo.delete(api_key_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="API key not found",
        )
