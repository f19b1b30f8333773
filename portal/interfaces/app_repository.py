"""
App repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from portal.models.app import App, AppCreate, AppUpdate


class IAppRepository(ABC):
    """Interface for app repository."""

    @abstractmethod
    async def create(self, data: AppCreate) -> App:
        pass

    @abstractmethod
    async def get(self, app_id: UUID) -> Optional[App]:
        pass

    @abstractmethod
    async def list(self, limit: int = 100, offset: int = 0) -> list[App]:
        pass

    @abstractmethod
    async def update(self, app_id: UUID, update: AppUpdate) -> App:
        pass

    @abstractmethod
    async def delete(self, app_id: UUID) -> bool:
        pass
