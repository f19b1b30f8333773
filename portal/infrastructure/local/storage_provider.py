"""
Local file system storage provider.
"""

from pathlib import Path
from typing import Optional

from portal.core.config import get_settings
from portal.core.exceptions import InfrastructureError, ValidationError
from portal.interfaces.storage_provider import IStorageProvider


class LocalStorageProvider(IStorageProvider):
    """
    Local file system storage implementation.

    Files live under ``base_path`` and are served by the app at ``/storage``.
    """

    def __init__(self, base_path: Optional[str] = None, base_url: Optional[str] = None):
        """
        Initialize local storage provider.

        Args:
            base_path: Base directory for file storage (default: ./storage)
            base_url: Public URL of the service (default: BASE_URL setting)
        """
        self.base_path = Path(base_path or "./storage").resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.base_url = (base_url or get_settings().BASE_URL).rstrip("/")

    async def upload(
        self,
        path: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """Write bytes under the base path and return the absolute file path."""
        try:
            file_path = self._resolve_path(path)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(data)
            return str(file_path.absolute())
        except OSError as e:
            raise InfrastructureError(f"Failed to upload file: {e}") from e

    async def delete(self, path: str) -> bool:
        file_path = self._resolve_path(path)
        if not file_path.exists():
            return False
        try:
            file_path.unlink()
        except OSError as e:
            raise InfrastructureError(f"Failed to delete file: {e}") from e
        return True

    def get_public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/{path}"

    def path_for_url(self, url: str) -> Optional[str]:
        prefix = f"{self.base_url}/storage/"
        if not url or not url.startswith(prefix):
            return None
        return url[len(prefix):]

    def _resolve_path(self, path: str) -> Path:
        """Map a storage key to a file under the base path."""
        file_path = (self.base_path / path).resolve()
        if not file_path.is_relative_to(self.base_path):
            raise ValidationError(f"Storage path escapes the storage root: {path}")
        return file_path
