"""
Elasticsearch client for searchsync.

This module performs the writes the pipeline prepares: bulk payloads,
index recreation and clearing. Every request fails fast; there is no retry
layer.
"""

import httpx
import json
import logging
from typing import Any, Dict, Optional, Tuple

from ..config import config
from ..errors import SearchIndexError
from ..models import BulkPayload


class ElasticsearchClient:
    """
    Writes documents to Elasticsearch over its REST API.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        auth: Optional[Tuple[str, str]] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the client.

        Args:
            host: Elasticsearch URL (defaults to config value)
            auth: Basic-auth (user, password) pair (defaults to config credentials)
            timeout: Request timeout in seconds (defaults to config value)
            transport: Optional httpx transport, used to stub the server in tests
        """
        self.host = (host or config.elasticsearch_host).rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.host,
            auth=auth or config.get_credentials(),
            timeout=timeout or config.elasticsearch_timeout,
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

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()
            return response
        except httpx.RequestError as e:
            raise SearchIndexError(f"Failed to connect to Elasticsearch: {e}") from e
        except httpx.HTTPStatusError as e:
            raise SearchIndexError(f"Elasticsearch request failed: {e}") from e

    async def bulk(self, payload: BulkPayload) -> Dict[str, Any]:
        """
        Send a bulk payload.

        Returns:
            The bulk API response, or an empty dict if the payload was empty

        Raises:
            SearchIndexError: If the request fails or any item was rejected
        """
        if not payload.body:
            logging.debug(f"Nothing to send to index {payload.index}")
            return {}

        ndjson = "\n".join(json.dumps(line) for line in payload.body) + "\n"
        response = await self._request(
            "POST",
            f"/{payload.index}/_bulk",
            content=ndjson.encode("utf-8"),
            headers={"Content-Type": "application/x-ndjson"}
        )
        result = response.json()

        if result.get("errors"):
            failures = [
                item for item in result.get("items", [])
                if any("error" in operation for operation in item.values())
            ]
            raise SearchIndexError(
                f"Bulk write to {payload.index} rejected {len(failures)} items: {failures[:3]}"
            )

        logging.info(f"Wrote {len(payload.body) // 2} documents to index {payload.index}")
        return result

    async def recreate_index(self, name: str, index_config: Optional[Dict[str, Any]] = None) -> None:
        """Delete an index if it exists and create it again."""
        try:
            await self._request("DELETE", f"/{name}")
        except SearchIndexError:
            # The index doesn't exist yet
            logging.debug(f"Index {name} did not exist")
        await self._request("PUT", f"/{name}", json=index_config or {})
        logging.info(f"Recreated index {name}")

    async def clear_index(self, name: str) -> None:
        """Remove all the content in an index."""
        await self._request(
            "POST",
            f"/{name}/_delete_by_query",
            json={"query": {"match_all": {}}}
        )
        logging.info(f"Cleared index {name}")
