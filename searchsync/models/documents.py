"""
Indexing models for searchsync.

This module defines the content type schema, locale and bulk payload
structures used when turning resolved entries into search documents.
"""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


# A flattened per-locale document: {"id": ..., "type": ..., "<locale>": {field: value}}
FlatDocument = Dict[str, Any]


class FieldKind(str, Enum):
    """
    Field kinds that matter for indexing.
    """

    LONG_TEXT = "Text"
    SHORT_TEXT = "Symbol"
    OTHER = "Other"

    @classmethod
    def from_type(cls, field_type: Optional[str]) -> "FieldKind":
        """Map a declared CMS field type onto a FieldKind; unknown types are OTHER."""
        for kind in (cls.LONG_TEXT, cls.SHORT_TEXT):
            if kind.value == field_type:
                return kind
        return cls.OTHER


class ContentTypeDescriptor(BaseModel):
    """
    The parts of a content type schema needed to build documents.
    """

    name: str = Field(
        ...,
        description="The content type id"
    )

    title_field_name: Optional[str] = Field(
        None,
        description="The field whose value becomes the document title"
    )

    fields: Dict[str, str] = Field(
        default_factory=dict,
        description="Field name -> declared field type"
    )

    def field_kind(self, field_name: str) -> Optional[FieldKind]:
        """Return the kind of a declared field, or None if it is not declared."""
        if field_name not in self.fields:
            return None
        return FieldKind.from_type(self.fields[field_name])


class Locale(BaseModel):
    """
    A locale configured in the CMS space.
    """

    code: str = Field(
        ...,
        description="Locale code, e.g. 'en-US'"
    )

    name: Optional[str] = None

    default: bool = False


class BulkPayload(BaseModel):
    """
    A batch write for the search index: alternating header and document objects.
    """

    index: str = Field(
        ...,
        description="Name of the target index"
    )

    body: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Alternating operation headers and document bodies"
    )
