from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from uuid import UUID

from portal.core.exceptions import AuthenticationError, ForbiddenError, NotFoundError
from portal.core.logger import logger
from portal.interfaces.achievement_list_repository import IAchievementListRepository
from portal.interfaces.api_key_repository import IApiKeyRepository
from portal.models.api_key import ApiKey, ApiKeyCreate
from portal.utils.datetime_utils import ensure_utc, now_utc


@dataclass(frozen=True)
class ApiKeyScope:
    list_id: UUID
    app_id: UUID
    key_id: UUID


def _mask(key: str) -> str:
    return f"{key[:4]}..." if len(key) > 4 else "..."


async def resolve_api_key(key: Optional[str], key_repo: IApiKeyRepository) -> ApiKeyScope:
    if not key:
        raise AuthenticationError("API key required")

    api_key = await key_repo.get_by_key(key)
    if not api_key:
        logger.info(f"Rejected unknown API key {_mask(key)}")
        raise ForbiddenError("Invalid API key")
    if ensure_utc(api_key.exp_date) <= now_utc():
        logger.info(f"Rejected expired API key {_mask(key)} for list {api_key.list_id}")
        raise ForbiddenError("API key expired")

    return ApiKeyScope(list_id=api_key.list_id, app_id=api_key.app_id, key_id=api_key.id)


def ensure_list_scope(scope: ApiKeyScope, list_id: UUID) -> ApiKeyScope:
    if scope.list_id != list_id:
        raise ForbiddenError("API key does not grant access to this list")
    return scope


async def issue_api_key(
    list_id: UUID,
    data: ApiKeyCreate,
    key_repo: IApiKeyRepository,
    list_repo: IAchievementListRepository,
    ttl_days: int,
) -> ApiKey:
    achievement_list = await list_repo.get(list_id)
    if not achievement_list:
        raise NotFoundError(f"AchievementList {list_id} not found")

    return await key_repo.create(
        key=data.key or secrets.token_urlsafe(32),
        list_id=list_id,
        app_id=achievement_list.app_id,
        exp_date=data.exp_date or now_utc() + timedelta(days=ttl_days),
    )
