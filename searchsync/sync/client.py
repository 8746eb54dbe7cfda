"""
Contentful sync API client for searchsync.

This module wraps the CMS delivery API calls the sync engine and the indexing
pipeline depend on: the delta-sync endpoint, content type listing and locale
listing.
"""

import httpx
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, urlparse

from ..config import config
from ..errors import SyncFailed
from ..models import Entry, DeletedEntry, Locale, SyncResult


class BaseSyncClient(ABC):
    """
    Abstract interface of the delta-sync collaborator.

    Implementations must support a type-scoped initial mode and a
    cursor-resuming delta mode.
    """

    @abstractmethod
    async def sync(
        self,
        initial: bool = False,
        content_type: Optional[str] = None,
        next_sync_token: Optional[str] = None,
        resolve_links: bool = False
    ) -> SyncResult:
        """
        Fetch entries changed since the given cursor.

        Args:
            initial: Request a full initial sync instead of a delta
            content_type: Restrict an initial sync to one content type
            next_sync_token: Cursor to resume from for a delta sync
            resolve_links: Whether the transport should inline linked entries

        Returns:
            The changed and deleted entries and the next cursor
        """
        pass


class ContentfulSyncClient(BaseSyncClient):
    """
    Talks to the Contentful Content Delivery API over HTTP.
    """

    def __init__(
        self,
        space: Optional[str] = None,
        token: Optional[str] = None,
        host: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the client.

        Args:
            space: Contentful space id (defaults to config value)
            token: Content delivery access token (defaults to config value)
            host: API host (defaults to config value)
            timeout: Request timeout in seconds (defaults to config value)
            transport: Optional httpx transport, used to stub the API in tests
        """
        self.space = space or config.space
        self.token = token or config.access_token
        if not self.space or not self.token:
            raise ValueError("'space' and 'token' parameters are required")

        self.host = host or config.contentful_host
        base_url = self.host if self.host.startswith("http") else f"https://{self.host}"
        self.client = httpx.AsyncClient(
            base_url=f"{base_url}/spaces/{self.space}",
            headers={"Authorization": f"Bearer {self.token}"},
            timeout=timeout or config.contentful_timeout,
            transport=transport
        )

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self.client.aclose()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = await self.client.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.RequestError as e:
            raise SyncFailed(f"Failed to connect to Contentful: {e}") from e
        except httpx.HTTPStatusError as e:
            raise SyncFailed(f"Contentful request failed: {e}") from e
        except ValueError as e:
            raise SyncFailed(f"Contentful returned invalid JSON: {e}") from e

    async def sync(
        self,
        initial: bool = False,
        content_type: Optional[str] = None,
        next_sync_token: Optional[str] = None,
        resolve_links: bool = False
    ) -> SyncResult:
        """
        Run a sync request, following result pages until the next sync URL.

        The delivery API never inlines links on the sync endpoint, so only
        resolve_links=False is supported.
        """
        if resolve_links:
            raise ValueError("Link resolution is not performed by the sync client")

        if initial:
            params: Dict[str, Any] = {"initial": "true", "type": "Entry"}
            if content_type:
                params["content_type"] = content_type
        elif next_sync_token:
            params = {"sync_token": next_sync_token}
        else:
            raise ValueError("Either 'initial' or 'next_sync_token' is required")

        result = SyncResult()
        while True:
            page = await self._get("/sync", params=params)
            self._collect_items(page.get("items", []), result)

            if page.get("nextPageUrl"):
                params = {"sync_token": self._extract_sync_token(page["nextPageUrl"])}
                continue

            if not page.get("nextSyncUrl"):
                raise SyncFailed("Sync response carries neither nextPageUrl nor nextSyncUrl")
            result.next_sync_token = self._extract_sync_token(page["nextSyncUrl"])
            break

        logging.debug(
            f"Sync returned {len(result.entries)} entries and "
            f"{len(result.deleted_entries)} deleted entries"
        )
        return result

    @staticmethod
    def _collect_items(items: List[Dict[str, Any]], result: SyncResult) -> None:
        for item in items:
            item_type = item.get("sys", {}).get("type")
            if item_type == "Entry":
                result.entries.append(Entry.from_api(item))
            elif item_type == "DeletedEntry":
                result.deleted_entries.append(DeletedEntry.from_api(item))

    @staticmethod
    def _extract_sync_token(url: str) -> str:
        tokens = parse_qs(urlparse(url).query).get("sync_token")
        if not tokens:
            raise SyncFailed(f"No sync_token in sync URL: {url}")
        return tokens[0]

    async def get_content_types(self) -> List[Dict[str, Any]]:
        """
        List the raw content type schemas of the space.

        Returns:
            Records of the form {"sys": {"id"}, "displayField", "fields": [{"id", "type"}]}
        """
        data = await self._get("/content_types", params={"limit": 1000})
        return data.get("items", [])

    async def get_locales(self) -> List[Locale]:
        """List the locales configured in the space, in API order."""
        data = await self._get("/locales")
        return [
            Locale(code=item["code"], name=item.get("name"), default=item.get("default", False))
            for item in data.get("items", [])
        ]
