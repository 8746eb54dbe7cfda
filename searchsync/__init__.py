"""
searchsync: incremental CMS to search index mirroring.

Pulls entries through the Contentful delta-sync API, resolves links between
entries, flattens them into per-locale documents and writes them to
Elasticsearch in bulk.
"""

__version__ = "0.1.0"
__author__ = "searchsync Project"

# Import main components
from .database import DatabaseManager
from .models import Entry, Link, ResolvedEntry, ContentTypeDescriptor, Locale, BulkPayload
from .resolver import ReferenceResolver
from .search import ElasticsearchClient
from .sync import ContentfulSyncClient, CursorStore, SyncEngine
from .transform import reformat_entries, reduce_content_types, generate_payload

__all__ = [
    "DatabaseManager",
    "Entry",
    "Link",
    "ResolvedEntry",
    "ContentTypeDescriptor",
    "Locale",
    "BulkPayload",
    "ReferenceResolver",
    "ElasticsearchClient",
    "ContentfulSyncClient",
    "CursorStore",
    "SyncEngine",
    "reformat_entries",
    "reduce_content_types",
    "generate_payload"
]
