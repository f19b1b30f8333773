"""
Transport used by the draft reconciler to reach the achievement REST API.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional
from uuid import UUID

import httpx

from portal.models.achievement import Achievement, AchievementCreate, AchievementUpdate


class TransportError(Exception):
    """A call failed: non-2xx response (``status_code`` set) or network error (``None``)."""

    def __init__(self, status_code: Optional[int], message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}" if status_code else message)


class IAchievementTransport(ABC):
    """Remote operations on one list's achievements."""

    @abstractmethod
    async def list_achievements(self, list_id: UUID) -> list[Achievement]:
        pass

    @abstractmethod
    async def create_achievement(self, list_id: UUID, data: AchievementCreate) -> Achievement:
        pass

    @abstractmethod
    async def update_achievement(
        self,
        list_id: UUID,
        achievement_id: UUID,
        update: AchievementUpdate,
    ) -> Achievement:
        pass

    @abstractmethod
    async def delete_achievement(self, list_id: UUID, achievement_id: UUID) -> None:
        pass

    @abstractmethod
    async def reorder_achievements(self, list_id: UUID, ordered_ids: list[UUID]) -> list[Achievement]:
        pass

    @abstractmethod
    async def upload_image(
        self,
        list_id: UUID,
        achievement_id: UUID,
        filename: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """Upload an image and return the achievement's new ``imageUrl``."""
        pass


class HttpAchievementTransport(IAchievementTransport):
    """httpx implementation talking to the portal's ``/api`` routes."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "http://localhost:8000",
        client: Optional[httpx.AsyncClient] = None,
        header_name: str = "x-api-key",
        api_prefix: str = "/api",
        timeout: float = 10.0,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/") + api_prefix
        self._header_name = header_name
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpAchievementTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _url(self, list_id: UUID, suffix: str = "") -> str:
        return f"{self._base_url}/lists/{list_id}/achievements{suffix}"

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = {self._header_name: self._api_key}
        try:
            response = await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(None, f"{method} {url} failed: {e}") from e

        if response.is_error:
            try:
                detail = response.json().get("detail", response.text)
            except ValueError:
                detail = response.text
            raise TransportError(response.status_code, str(detail))
        return response

    async def list_achievements(self, list_id: UUID) -> list[Achievement]:
        response = await self._request("GET", self._url(list_id))
        return [Achievement.model_validate(item) for item in response.json()]

    async def create_achievement(self, list_id: UUID, data: AchievementCreate) -> Achievement:
        body = data.model_dump(mode="json", by_alias=True, exclude_none=True)
        response = await self._request("POST", self._url(list_id), json=body)
        return Achievement.model_validate(response.json())

    async def update_achievement(
        self,
        list_id: UUID,
        achievement_id: UUID,
        update: AchievementUpdate,
    ) -> Achievement:
        body = update.model_dump(mode="json", by_alias=True, exclude_none=True)
        response = await self._request("PATCH", self._url(list_id, f"/{achievement_id}"), json=body)
        return Achievement.model_validate(response.json())

    async def delete_achievement(self, list_id: UUID, achievement_id: UUID) -> None:
        await self._request("DELETE", self._url(list_id, f"/{achievement_id}"))

    async def reorder_achievements(self, list_id: UUID, ordered_ids: list[UUID]) -> list[Achievement]:
        body = {"orderedIds": [str(item_id) for item_id in ordered_ids]}
        response = await self._request("PATCH", self._url(list_id, "/reorder"), json=body)
        return [Achievement.model_validate(item) for item in response.json()]

    async def upload_image(
        self,
        list_id: UUID,
        achievement_id: UUID,
        filename: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        files = {"image": (filename, data, content_type or "application/octet-stream")}
        response = await self._request(
            "POST", self._url(list_id, f"/{achievement_id}/uploadImage"), files=files
        )
        return response.json()["imageUrl"]
