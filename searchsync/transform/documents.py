"""
Document transformation for searchsync.

Turns resolved, locale-grouped entries into flat per-locale documents ready
for indexing, and reduces raw content type schemas to the descriptors the
transformation needs.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..models import ContentTypeDescriptor, FieldKind, FlatDocument, Locale, ResolvedEntry
from .markdown import markdown_to_text


def _keep(value: Any) -> Any:
    return value


# Transform per indexed field kind; kinds missing here are not indexed
FIELD_TRANSFORMS: Dict[FieldKind, Callable[[Any], Any]] = {
    FieldKind.LONG_TEXT: markdown_to_text,
    FieldKind.SHORT_TEXT: _keep,
}


def reformat_entries(
    entries: Sequence[ResolvedEntry],
    content_types: Dict[str, ContentTypeDescriptor],
    locales: Sequence[Locale]
) -> List[FlatDocument]:
    """
    Format resolved entries so they are ready to be turned into a payload.

    Args:
        entries: Resolved entries
        content_types: Content type descriptors by name
        locales: The locales to emit, in order

    Returns:
        Flat documents; entries without indexable content are left out
    """
    return format_entries(reduce_entries(entries), content_types, locales)


def reduce_entries(entries: Sequence[ResolvedEntry]) -> List[FlatDocument]:
    """
    Strip resolved entries down to the barebones info.

    Id and content type move to the top level, the system metadata is dropped
    and sequence-valued fields are removed, e.g.

        {"sys": {...}, "fields": {"en-US": {...}, "de-DE": {...}}}

    becomes

        {"id": "xxx", "type": "post", "en-US": {...}, "de-DE": {...}}
    """
    reduced = []
    for entry in entries:
        new_entry: FlatDocument = {"id": entry.id, "type": entry.content_type_id}
        for locale, localised_fields in entry.fields.items():
            new_entry[locale] = {
                field_name: value
                for field_name, value in localised_fields.items()
                if not isinstance(value, (list, tuple))
            }
        reduced.append(new_entry)
    return reduced


def format_entries(
    entries: Sequence[FlatDocument],
    content_types: Dict[str, ContentTypeDescriptor],
    locales: Sequence[Locale]
) -> List[FlatDocument]:
    """
    Reformat fields where needed and drop documents with nothing to index.

    The title field is renamed to 'title', long text is converted from
    markdown to plain text, short text is kept verbatim and every other
    field is omitted. Entries whose content type is not described are
    skipped, which filters unscoped delta syncs down to the wanted types.
    """
    documents = []
    for entry in entries:
        content_type = content_types.get(entry["type"])
        if content_type is None:
            logging.debug(f"Skipping entry {entry['id']} of undescribed content type {entry['type']}")
            continue

        document: FlatDocument = {"id": entry["id"], "type": entry["type"]}
        for locale in locales:
            fields = entry.get(locale.code)
            if not fields:
                continue
            formatted = _format_fields(fields, content_type)
            if formatted:
                document[locale.code] = formatted

        # Only id and type means there is no content to index
        if len(document) > 2:
            documents.append(document)

    return documents


def _format_fields(fields: Dict[str, Any], content_type: ContentTypeDescriptor) -> Dict[str, Any]:
    formatted: Dict[str, Any] = {}
    for field_name, value in fields.items():
        if field_name == content_type.title_field_name:
            formatted["title"] = value
            continue

        kind = content_type.field_kind(field_name)
        transform = FIELD_TRANSFORMS.get(kind) if kind else None
        if transform is not None:
            formatted[field_name] = transform(value)
    return formatted


def reduce_content_types(
    content_types: Sequence[Dict[str, Any]],
    filter_content_type: str = ""
) -> Dict[str, ContentTypeDescriptor]:
    """
    Strip raw content type schemas down to descriptors keyed by name.

    Args:
        content_types: Schemas of the form {"sys": {"id"}, "displayField", "fields": [{"id", "type"}]}
        filter_content_type: Only keep this content type; "" keeps all of them

    Returns:
        Mapping from content type name to descriptor
    """
    descriptors: Dict[str, ContentTypeDescriptor] = {}
    for content_type in content_types:
        name = content_type["sys"]["id"]
        if filter_content_type and name != filter_content_type:
            continue

        fields = {field["id"]: field.get("type", "") for field in content_type.get("fields", [])}
        descriptors[name] = ContentTypeDescriptor(
            name=name,
            title_field_name=get_title_field(list(fields), content_type.get("displayField")),
            fields=fields
        )
    return descriptors


def get_title_field(field_names: Sequence[str], display_field: Optional[str]) -> Optional[str]:
    """A field literally named 'title' wins over the content type's display field."""
    if "title" in field_names:
        return "title"
    return display_field
