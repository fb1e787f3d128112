"""Content store adapters: an in-process store and the HTTP content service."""

from __future__ import annotations

import asyncio
from urllib.parse import quote

import httpx

from reclamation.domain.value_objects import ContentId
from reclamation.ports.exceptions import StorageError
from shared_kernel.identifiers import GroupId


class InMemoryContentStore:
    """Content kept in process memory, keyed by id, with its group audience.

    Used when no content service is configured, and by tests.
    """

    def __init__(self) -> None:
        self._content: dict[ContentId, list[GroupId]] = {}
        self._lock = asyncio.Lock()

    async def put(self, content_id: ContentId, group_ids: list[GroupId]) -> None:
        """Create or overwrite a content item."""
        async with self._lock:
            self._content[content_id] = list(group_ids)

    async def exists(self, content_id: ContentId) -> bool:
        """Check whether the content exists."""
        async with self._lock:
            return content_id in self._content

    async def delete(self, content_id: ContentId) -> bool:
        """Delete content."""
        async with self._lock:
            return self._content.pop(content_id, None) is not None

    async def set_references(
        self, content_id: ContentId, group_ids: list[GroupId]
    ) -> bool:
        """Overwrite the content's audience."""
        async with self._lock:
            if content_id not in self._content:
                return False
            self._content[content_id] = list(group_ids)
            return True

    async def references(self, content_id: ContentId) -> list[GroupId] | None:
        """Return the stored audience, or None if the content does not exist."""
        async with self._lock:
            groups = self._content.get(content_id)
            return list(groups) if groups is not None else None


class HttpContentStore:
    """Client for the external content service.

    Endpoints:
        GET    {base_url}/content/{id}           200 exists, 404 absent
        DELETE {base_url}/content/{id}           2xx deleted, 404 absent
        PUT    {base_url}/content/{id}/audience  body {"group_ids": [...]}

    Transport failures and unexpected status codes raise StorageError.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Base URL of the content service
            timeout: Request timeout in seconds
            client: Optional preconfigured client; one is created otherwise
        """
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def exists(self, content_id: ContentId) -> bool:
        """Check whether the content exists."""
        response = await self._request("GET", self._path(content_id))
        return response.status_code != 404

    async def delete(self, content_id: ContentId) -> bool:
        """Delete content."""
        response = await self._request("DELETE", self._path(content_id))
        return response.status_code != 404

    async def set_references(
        self, content_id: ContentId, group_ids: list[GroupId]
    ) -> bool:
        """Overwrite the content's audience."""
        response = await self._request(
            "PUT",
            f"{self._path(content_id)}/audience",
            json={"group_ids": [group_id.value for group_id in group_ids]},
        )
        return response.status_code != 404

    @staticmethod
    def _path(content_id: ContentId) -> str:
        return f"/content/{quote(content_id.value, safe='')}"

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Send a request; 404 is returned to the caller, other errors raise."""
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise StorageError(f"Content service {method} {path} failed: {e}") from e

        if response.status_code == 404 or response.is_success:
            return response
        raise StorageError(
            f"Content service {method} {path} returned HTTP {response.status_code}"
        )
