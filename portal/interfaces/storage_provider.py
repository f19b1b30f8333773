"""
Storage provider interface.
"""

from abc import ABC, abstractmethod
from typing import Optional


class IStorageProvider(ABC):
    """Interface for binary object storage."""

    @abstractmethod
    async def upload(
        self,
        path: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """Upload data and return its storage location."""
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        pass

    @abstractmethod
    def get_public_url(self, path: str) -> str:
        """Get a URL clients can fetch the object from."""
        pass

    @abstractmethod
    def path_for_url(self, url: str) -> Optional[str]:
        """Inverse of ``get_public_url``; None for URLs this storage did not issue."""
        pass
