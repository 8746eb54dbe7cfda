"""
Entry models for searchsync.

This module defines the structures that content records take on their way
from the CMS sync API to the resolver: raw entries with unresolved links,
deleted entry markers, and resolved entries grouped by locale.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class Link(BaseModel):
    """
    A placeholder value referencing another record by id.
    """

    target_id: str = Field(
        ...,
        description="The id of the referenced record"
    )

    link_kind: str = Field(
        default="Entry",
        description="The kind of record referenced; only 'Entry' links are resolved"
    )

    @classmethod
    def is_link(cls, value: Any) -> bool:
        """Check whether a raw API value is a link object."""
        if not isinstance(value, dict):
            return False
        sys = value.get("sys")
        return isinstance(sys, dict) and sys.get("type") == "Link"

    @classmethod
    def from_api(cls, value: Dict[str, Any]) -> "Link":
        """Build a Link from the API's {"sys": {"type": "Link", ...}} shape."""
        sys = value["sys"]
        return cls(target_id=sys["id"], link_kind=sys.get("linkType", "Entry"))

    def to_api(self) -> Dict[str, Any]:
        """Convert back to the API's link object."""
        return {"sys": {"type": "Link", "linkType": self.link_kind, "id": self.target_id}}


def _parse_value(value: Any) -> Any:
    """Turn raw link objects into Link models, descending into lists."""
    if isinstance(value, list):
        return [_parse_value(item) for item in value]
    if Link.is_link(value):
        return Link.from_api(value)
    return value


def _dump_value(value: Any) -> Any:
    if isinstance(value, list):
        return [_dump_value(item) for item in value]
    if isinstance(value, Link):
        return value.to_api()
    return value


class Entry(BaseModel):
    """
    A CMS content record as delivered by the sync API.

    Fields are keyed by field name, then by locale code. Values may be scalars,
    lists, mappings or Links to other entries.
    """

    id: str = Field(
        ...,
        description="Globally unique id of the entry within a sync session"
    )

    content_type_id: str = Field(
        ...,
        description="Id of the content type this entry is an instance of"
    )

    sys: Dict[str, Any] = Field(
        default_factory=dict,
        description="Raw system metadata from the API"
    )

    fields: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict,
        description="Field name -> locale code -> raw value"
    )

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "Entry":
        """
        Parse an entry from the CMS wire format.

        Args:
            raw: A {"sys": {...}, "fields": {...}} record

        Returns:
            The Entry, with every link object converted to a Link
        """
        sys = raw.get("sys", {})
        content_type = sys.get("contentType", {}).get("sys", {})
        fields = {
            field_name: {locale: _parse_value(value) for locale, value in localized.items()}
            for field_name, localized in (raw.get("fields") or {}).items()
        }
        return cls(
            id=sys["id"],
            content_type_id=content_type.get("id", ""),
            sys=sys,
            fields=fields,
        )

    def to_api(self) -> Dict[str, Any]:
        """Convert back to the wire format accepted by from_api."""
        sys = dict(self.sys)
        sys.setdefault("type", "Entry")
        sys["id"] = self.id
        sys["contentType"] = {"sys": {"type": "Link", "linkType": "ContentType", "id": self.content_type_id}}
        fields = {
            field_name: {locale: _dump_value(value) for locale, value in localized.items()}
            for field_name, localized in self.fields.items()
        }
        return {"sys": sys, "fields": fields}


class DeletedEntry(BaseModel):
    """
    An entry that was removed upstream since the previous sync.
    """

    id: str = Field(
        ...,
        description="Id of the deleted entry"
    )

    sys: Dict[str, Any] = Field(
        default_factory=dict,
        description="Raw system metadata from the API"
    )

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "DeletedEntry":
        """Parse a DeletedEntry item from the sync API."""
        sys = raw.get("sys", {})
        return cls(id=sys["id"], sys=sys)


class ResolvedEntry(BaseModel):
    """
    An entry whose fields were regrouped by locale and whose links were inlined.

    Values are scalars, lists, nested ResolvedEntry objects, an empty dict where
    a link could not be followed, or non-Entry Links that are passed through.
    """

    id: str
    content_type_id: str
    sys: Dict[str, Any] = Field(default_factory=dict)
    fields: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict,
        description="Locale code -> field name -> resolved value"
    )


class SyncResult(BaseModel):
    """
    The outcome of one sync request that reported changes.
    """

    entries: List[Entry] = Field(
        default_factory=list,
        description="New or updated entries"
    )

    deleted_entries: List[DeletedEntry] = Field(
        default_factory=list,
        description="Entries removed since the previous sync"
    )

    next_sync_token: Optional[str] = Field(
        None,
        description="Cursor to resume from on the next delta sync"
    )
