from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status

from portal.api.deps import ApiKeyHeader, ApiKeyRepo
from portal.core.exceptions import AuthenticationError, ForbiddenError
from portal.services.api_key_permissions import ApiKeyScope, ensure_list_scope, resolve_api_key


async def require_api_key(key: ApiKeyHeader, key_repo: ApiKeyRepo) -> ApiKeyScope:
    try:
        return await resolve_api_key(key, key_repo)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc
    except ForbiddenError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(exc),
        ) from exc


async def require_list_scope(
    list_id: UUID,
    scope: Annotated[ApiKeyScope, Depends(require_api_key)],
) -> ApiKeyScope:
    try:
        return ensure_list_scope(scope, list_id)
    except ForbiddenError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(exc),
        ) from exc


ListScope = Annotated[ApiKeyScope, Depends(require_list_scope)]
