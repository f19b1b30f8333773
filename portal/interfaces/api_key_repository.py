"""
API key repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from portal.models.api_key import ApiKey


class IApiKeyRepository(ABC):
    """Interface for API key repository."""

    @abstractmethod
    async def create(
        self,
        key: str,
        list_id: UUID,
        app_id: UUID,
        exp_date: datetime,
    ) -> ApiKey:
        """Store a key. Raises DuplicateError if the token is taken."""
        pass

    @abstractmethod
    async def get_by_key(self, key: str) -> Optional[ApiKey]:
        """Look up a key by its token."""
        pass

    @abstractmethod
    async def list_by_list(self, list_id: UUID) -> list[ApiKey]:
        pass

    @abstractmethod
    async def delete(self, api_key_id: UUID) -> bool:
        pass
