"""
Sync engine for searchsync.

Drives the sync client and the cursor store: the first run performs an
initial sync scoped to the configured content type (every type when none is
configured), later runs fetch deltas from the stored cursor. The cursor is
persisted before a result is handed back.
"""

import logging
from typing import List, Optional, TYPE_CHECKING

from ..errors import PersistenceError, SyncFailed
from ..models import Entry, ResolvedEntry, SyncResult
from .client import BaseSyncClient
from .cursor import CursorStore

if TYPE_CHECKING:
    from ..resolver import ReferenceResolver


class SyncEngine:
    """
    Owns the sync cursor and advances it once per successful sync.

    The cursor is read from the store on the first sync of the process and
    kept in memory afterwards. A failed write is logged and does not fail
    the sync: the next run simply re-processes the same window.
    """

    def __init__(self, client: BaseSyncClient, cursor_store: CursorStore, content_type: str = ""):
        """
        Initialize the sync engine.

        Args:
            client: The delta-sync collaborator
            cursor_store: Where the cursor is persisted
            content_type: Content type the initial sync is scoped to
        """
        self.client = client
        self.cursor_store = cursor_store
        self.content_type = content_type
        self._cursor: Optional[str] = None
        self._cursor_loaded = False

    @property
    def cursor(self) -> Optional[str]:
        """The current sync cursor, loading it from the store if needed."""
        if not self._cursor_loaded:
            try:
                self._cursor = self.cursor_store.load()
            except PersistenceError as e:
                logging.warning(f"{e}; starting with an initial sync")
                self._cursor = None
            self._cursor_loaded = True
        return self._cursor

    async def sync(self) -> Optional[SyncResult]:
        """
        Fetch everything that changed since the stored cursor.

        Returns:
            The sync result, or None if nothing changed upstream

        Raises:
            SyncFailed: If the sync request fails; the cursor is left as it was
        """
        logging.debug("Syncing")
        cursor = self.cursor
        if cursor:
            logging.debug(f"Sync token found, syncing content from {cursor}")
            query = {"next_sync_token": cursor}
        else:
            # Type filtering is only supported on initial syncs
            if not self.content_type:
                logging.warning("No content type configured; the initial sync covers every content type")
            query = {"initial": True, "content_type": self.content_type or None}

        try:
            response = await self.client.sync(resolve_links=False, **query)
        except SyncFailed as e:
            logging.error(f"Error syncing contentful: {e}")
            raise
        except Exception as e:
            logging.error(f"Error syncing contentful: {e}")
            raise SyncFailed(str(e)) from e

        if response.next_sync_token == cursor:
            logging.info("No updates since last sync")
            return None

        logging.info(
            f"Sync updates found: {len(response.entries)} entries, "
            f"{len(response.deleted_entries)} deleted"
        )
        logging.debug(f"Sync token set to {response.next_sync_token}")
        self._cursor = response.next_sync_token
        if self._cursor:
            try:
                self.cursor_store.save(self._cursor)
            except PersistenceError as e:
                logging.warning(f"{e}; the next run will re-process this window")

        return response

    async def get_entries(self) -> List[Entry]:
        """
        Sync and return the new or updated entries.

        Deleted entries are not reported here; use sync() to see them.
        Sync failures propagate to the caller.
        """
        logging.debug("Getting entries")
        result = await self.sync()
        if result is None:
            return []
        return result.entries

    async def get_resolved_entries(self, resolver: "ReferenceResolver") -> List[ResolvedEntry]:
        """Sync, then resolve the returned entries with the given resolver."""
        entries = await self.get_entries()
        return resolver.resolve_references(entries)

    def reset(self) -> None:
        """Forget the cursor so the next sync is an initial one."""
        self.cursor_store.clear()
        self._cursor = None
        self._cursor_loaded = True
        logging.info("Sync cursor cleared")
