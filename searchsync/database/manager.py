"""
Database manager for searchsync.

This module keeps a DuckDB cache of every entry seen by the sync engine.
Delta syncs only return what changed, so the cache is what lets links from a
changed entry to an unchanged one be resolved.
"""

import duckdb
import hashlib
import json
import logging
from typing import Iterable, List, Optional
from datetime import datetime

from ..models import Entry


class DatabaseManager:
    """
    Manages the DuckDB database holding the synced entries.
    """

    def __init__(self, db_path: str = "searchsync.db"):
        """
        Initialize the database manager.

        Args:
            db_path: Path to the DuckDB database file (":memory:" for a throwaway cache)
        """
        self.db_path = db_path
        self.connection = None

    def connect(self):
        """Establish connection to the database."""
        self.connection = duckdb.connect(self.db_path)

    def disconnect(self):
        """Close the database connection."""
        if self.connection:
            self.connection.close()
            self.connection = None

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()

    def _require_connection(self):
        if not self.connection:
            raise RuntimeError("Database connection not established")
        return self.connection

    def initialize_database(self):
        """
        Create all necessary tables if they don't exist.
        """
        connection = self._require_connection()
        connection.execute("""
            CREATE TABLE IF NOT EXISTS entries (
                entry_id VARCHAR PRIMARY KEY,
                content_type_id VARCHAR NOT NULL,
                entry_json TEXT NOT NULL,
                content_hash VARCHAR NOT NULL,
                synced_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Set while cached changes have not all reached the search index
        connection.execute("""
            CREATE TABLE IF NOT EXISTS index_state (
                name VARCHAR PRIMARY KEY,
                pending BOOLEAN NOT NULL,
                marked_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        connection.execute("""
            CREATE TABLE IF NOT EXISTS pending_deletes (
                entry_id VARCHAR PRIMARY KEY
            )
        """)

    def calculate_content_hash(self, entry: Entry) -> str:
        """
        Calculate SHA-256 hash of an entry's canonical JSON representation.

        Args:
            entry: The entry to hash

        Returns:
            The SHA-256 hash as a hex string
        """
        json_str = json.dumps(entry.to_api(), sort_keys=True, ensure_ascii=True)
        return hashlib.sha256(json_str.encode('utf-8')).hexdigest()

    def store_entries(self, entries: Iterable[Entry]) -> int:
        """
        Insert new entries and replace updated ones.

        Args:
            entries: Entries returned by a sync

        Returns:
            The number of entries that were new or whose content changed
        """
        connection = self._require_connection()
        changed = 0
        for entry in entries:
            content_hash = self.calculate_content_hash(entry)
            result = connection.execute("""
                SELECT content_hash FROM entries WHERE entry_id = ?
            """, [entry.id]).fetchone()
            if result and result[0] == content_hash:
                continue

            connection.execute("""
                INSERT OR REPLACE INTO entries (entry_id, content_type_id, entry_json, content_hash, synced_at)
                VALUES (?, ?, ?, ?, ?)
            """, [
                entry.id,
                entry.content_type_id,
                json.dumps(entry.to_api()),
                content_hash,
                datetime.now()
            ])
            changed += 1

        logging.debug(f"Stored {changed} new or changed entries")
        return changed

    def remove_entries(self, entry_ids: Iterable[str]) -> int:
        """
        Remove deleted entries from the cache.

        Returns:
            The number of entries that were present and removed
        """
        connection = self._require_connection()
        removed = 0
        for entry_id in entry_ids:
            if connection.execute("SELECT 1 FROM entries WHERE entry_id = ?", [entry_id]).fetchone():
                connection.execute("DELETE FROM entries WHERE entry_id = ?", [entry_id])
                removed += 1
        return removed

    def get_entry(self, entry_id: str) -> Optional[Entry]:
        """
        Retrieve a cached entry by id.

        Returns:
            The entry if cached, None otherwise
        """
        connection = self._require_connection()
        result = connection.execute("""
            SELECT entry_json FROM entries WHERE entry_id = ?
        """, [entry_id]).fetchone()

        if result:
            return Entry.from_api(json.loads(result[0]))
        return None

    def list_entries(self, content_type_id: Optional[str] = None) -> List[Entry]:
        """
        List cached entries ordered by id, optionally filtered by content type.
        """
        connection = self._require_connection()
        if content_type_id:
            results = connection.execute("""
                SELECT entry_json FROM entries
                WHERE content_type_id = ?
                ORDER BY entry_id
            """, [content_type_id]).fetchall()
        else:
            results = connection.execute("""
                SELECT entry_json FROM entries
                ORDER BY entry_id
            """).fetchall()

        return [Entry.from_api(json.loads(row[0])) for row in results]

    def clear_entries(self):
        """Remove every cached entry."""
        connection = self._require_connection()
        connection.execute("DELETE FROM entries")
        logging.info("Entry cache cleared")

    def mark_index_pending(self, deleted_ids: Iterable[str] = ()):
        """
        Record that the search index is behind the cache.

        Args:
            deleted_ids: Deleted entries whose delete operations still have to be sent
        """
        connection = self._require_connection()
        connection.execute("""
            INSERT OR REPLACE INTO index_state (name, pending, marked_at)
            VALUES ('search', TRUE, ?)
        """, [datetime.now()])
        for entry_id in deleted_ids:
            connection.execute("""
                INSERT OR REPLACE INTO pending_deletes (entry_id) VALUES (?)
            """, [entry_id])

    def index_write_pending(self) -> bool:
        """Check whether an earlier index write was started but never completed."""
        connection = self._require_connection()
        result = connection.execute("""
            SELECT pending FROM index_state WHERE name = 'search'
        """).fetchone()
        return bool(result and result[0])

    def get_pending_deletes(self) -> List[str]:
        """List the deleted entry ids not yet removed from the search index."""
        connection = self._require_connection()
        results = connection.execute("""
            SELECT entry_id FROM pending_deletes ORDER BY entry_id
        """).fetchall()
        return [row[0] for row in results]

    def clear_index_pending(self):
        """Record that the search index caught up with the cache."""
        connection = self._require_connection()
        connection.execute("DELETE FROM pending_deletes")
        connection.execute("DELETE FROM index_state WHERE name = 'search'")
