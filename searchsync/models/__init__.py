"""Data models for searchsync."""

from .entries import Link, Entry, DeletedEntry, ResolvedEntry, SyncResult
from .documents import FlatDocument, FieldKind, ContentTypeDescriptor, Locale, BulkPayload

__all__ = [
    "Link",
    "Entry",
    "DeletedEntry",
    "ResolvedEntry",
    "SyncResult",
    "FlatDocument",
    "FieldKind",
    "ContentTypeDescriptor",
    "Locale",
    "BulkPayload"
]
