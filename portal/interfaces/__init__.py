"""Abstract interfaces for infrastructure abstraction."""

from portal.interfaces.achievement_list_repository import IAchievementListRepository
from portal.interfaces.achievement_repository import IAchievementRepository
from portal.interfaces.api_key_repository import IApiKeyRepository
from portal.interfaces.app_repository import IAppRepository
from portal.interfaces.player_repository import IPlayerRepository
from portal.interfaces.storage_provider import IStorageProvider

__all__ = [
    "IAchievementListRepository",
    "IAchievementRepository",
    "IApiKeyRepository",
    "IAppRepository",
    "IPlayerRepository",
    "IStorageProvider",
]
