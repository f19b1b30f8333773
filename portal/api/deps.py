"""
Dependency injection for API endpoints.

Providers are cached per process; tests swap any of them through
``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Request

from portal.core.config import get_settings
from portal.interfaces.achievement_list_repository import IAchievementListRepository
from portal.interfaces.achievement_repository import IAchievementRepository
from portal.interfaces.api_key_repository import IApiKeyRepository
from portal.interfaces.app_repository import IAppRepository
from portal.interfaces.player_repository import IPlayerRepository
from portal.interfaces.storage_provider import IStorageProvider
from portal.services.achievement_service import AchievementService
from portal.services.player_service import PlayerService


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_app_repository() -> IAppRepository:
    """Get app repository instance."""
    from portal.infrastructure.local.app_repository import SqliteAppRepository
    return SqliteAppRepository()


@lru_cache()
def get_achievement_list_repository() -> IAchievementListRepository:
    """Get achievement list repository instance."""
    from portal.infrastructure.local.achievement_list_repository import (
        SqliteAchievementListRepository,
    )
    return SqliteAchievementListRepository()


@lru_cache()
def get_achievement_repository() -> IAchievementRepository:
    """Get achievement repository instance."""
    from portal.infrastructure.local.achievement_repository import SqliteAchievementRepository
    return SqliteAchievementRepository()


@lru_cache()
def get_api_key_repository() -> IApiKeyRepository:
    """Get API key repository instance."""
    from portal.infrastructure.local.api_key_repository import SqliteApiKeyRepository
    return SqliteApiKeyRepository()


@lru_cache()
def get_player_repository() -> IPlayerRepository:
    """Get player repository instance."""
    from portal.infrastructure.local.player_repository import SqlitePlayerRepository
    return SqlitePlayerRepository()


@lru_cache()
def get_storage_provider() -> IStorageProvider:
    """Get storage provider instance."""
    settings = get_settings()
    from portal.infrastructure.local.storage_provider import LocalStorageProvider
    return LocalStorageProvider(settings.STORAGE_BASE_PATH, settings.BASE_URL)


# ===========================================
# Service Dependencies
# ===========================================


def get_achievement_service(
    achievement_repo: IAchievementRepository = Depends(get_achievement_repository),
    player_repo: IPlayerRepository = Depends(get_player_repository),
    storage: IStorageProvider = Depends(get_storage_provider),
) -> AchievementService:
    return AchievementService(
        achievement_repo,
        player_repo,
        storage,
        max_image_bytes=get_settings().MAX_IMAGE_BYTES,
    )


def get_player_service(
    player_repo: IPlayerRepository = Depends(get_player_repository),
    achievement_repo: IAchievementRepository = Depends(get_achievement_repository),
    list_repo: IAchievementListRepository = Depends(get_achievement_list_repository),
) -> PlayerService:
    return PlayerService(player_repo, achievement_repo, list_repo)


# ===========================================
# API Key
# ===========================================


async def get_api_key(request: Request) -> Optional[str]:
    """Read the caller's key from the configured header."""
    return request.headers.get(get_settings().API_KEY_HEADER)


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

AppRepo = Annotated[IAppRepository, Depends(get_app_repository)]
AchievementListRepo = Annotated[IAchievementListRepository, Depends(get_achievement_list_repository)]
ApiKeyRepo = Annotated[IApiKeyRepository, Depends(get_api_key_repository)]
PlayerRepo = Annotated[IPlayerRepository, Depends(get_player_repository)]
AchievementSvc = Annotated[AchievementService, Depends(get_achievement_service)]
PlayerSvc = Annotated[PlayerService, Depends(get_player_service)]
ApiKeyHeader = Annotated[Optional[str], Depends(get_api_key)]
