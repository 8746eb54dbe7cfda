"""Delta sync against the CMS."""

from .client import BaseSyncClient, ContentfulSyncClient
from .cursor import CursorStore
from .engine import SyncEngine

__all__ = ["BaseSyncClient", "ContentfulSyncClient", "CursorStore", "SyncEngine"]
