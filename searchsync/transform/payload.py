"""Bulk payload generation for the search index."""

from typing import Iterable, Sequence

from ..models import BulkPayload, FlatDocument


def generate_payload(documents: Sequence[FlatDocument], locale: str, index: str) -> BulkPayload:
    """
    Generate a payload for uploading documents to the index in bulk.

    Each document with content for the locale contributes an index header
    carrying its type and id, followed by its fields for that locale.
    Documents without content for the locale are skipped. The documents
    themselves are left untouched.

    Args:
        documents: Flat documents from reformat_entries
        locale: Locale code whose fields are indexed, e.g. 'en-US'
        index: Name of the target index
    """
    body = []
    for document in documents:
        fields = document.get(locale)
        if not fields:
            continue
        body.append({"index": {"_type": document["type"], "_id": document["id"]}})
        body.append(dict(fields))
    return BulkPayload(index=index, body=body)


def generate_delete_payload(entry_ids: Iterable[str], index: str) -> BulkPayload:
    """Generate a bulk payload removing the given entries from an index."""
    return BulkPayload(index=index, body=[{"delete": {"_id": entry_id}} for entry_id in entry_ids])


def index_name_for_locale(prefix: str, locale: str) -> str:
    """One index per locale, e.g. ('contentful', 'en-US') -> 'contentful-en-us'."""
    return f"{prefix}-{locale}".lower()
