"""
Reference resolution for searchsync.

Turns a flat list of entries whose fields may hold links to other entries
into resolved entries: every Entry link is replaced by the fully resolved
target, and fields are regrouped from field -> locale -> value into
locale -> field -> value.

For example, the fields of an entry

    {"title": {"en-US": "value"}, "subtitle": {"en-US": "value"}}

are regrouped as

    {"en-US": {"title": "value", "subtitle": "value"}}
"""

import hashlib
import json
import logging
from typing import Any, Dict, FrozenSet, List, Optional, Sequence

from pydantic import BaseModel, ValidationError

from .errors import InvalidInput, ResolutionError
from .models import Entry, Link, ResolvedEntry


class ReferenceResolver:
    """
    Resolves links between entries and memoizes the last result.

    The memo holds a single slot: the key of the most recent input and the
    output computed for it. Resolving a different input overwrites it.
    """

    def __init__(self):
        """Initialize the resolver with an empty memo."""
        self._memo_key: Optional[str] = None
        self._memo_resolved: Optional[List[ResolvedEntry]] = None

    def resolve_references(self, entries: Sequence[Any]) -> List[ResolvedEntry]:
        """
        Resolve entries, reusing the previous result if the input is unchanged.

        Args:
            entries: Entry objects, or raw entries in the API wire format

        Returns:
            The resolved entries, in input order

        Raises:
            InvalidInput: If the entries are malformed
        """
        key = self.calculate_input_key(entries)
        if key == self._memo_key and self._memo_resolved is not None:
            logging.debug("Resolved entries found in cache")
            return self._memo_resolved

        logging.debug(f"Resolving {len(entries)} entries...")
        resolved = self.resolve(entries)
        self._memo_key = key
        self._memo_resolved = resolved
        return resolved

    def resolve(self, entries: Sequence[Any]) -> List[ResolvedEntry]:
        """
        Resolve entries without consulting the memo.

        Raises:
            InvalidInput: If the entries are malformed
        """
        parsed = [self._coerce_entry(entry) for entry in entries]
        entries_map = self.create_entries_map(parsed)
        return self._resolve_node(parsed, entries_map, frozenset())

    @staticmethod
    def calculate_input_key(entries: Sequence[Any]) -> str:
        """Calculate a stable SHA-256 key over the canonical JSON of the input."""
        def encode(obj: Any) -> Any:
            if isinstance(obj, (Entry, Link)):
                return obj.to_api()
            if isinstance(obj, BaseModel):
                return obj.model_dump()
            raise TypeError(f"Object of type {type(obj).__name__} is not serializable")

        try:
            serialized = json.dumps(list(entries), sort_keys=True, separators=(',', ':'), default=encode)
        except (TypeError, ValueError) as e:
            raise InvalidInput(f"Entries cannot be serialized: {e}") from e
        return hashlib.sha256(serialized.encode('utf-8')).hexdigest()

    @staticmethod
    def create_entries_map(entries: Sequence[Entry]) -> Dict[str, Entry]:
        """
        Index entries by id.

        Raises:
            InvalidInput: If an item is not an Entry
        """
        entries_map: Dict[str, Entry] = {}
        for entry in entries:
            if not isinstance(entry, Entry):
                raise InvalidInput(f"Expected an Entry, got {type(entry).__name__}")
            entries_map[entry.id] = entry
        return entries_map

    @staticmethod
    def _coerce_entry(entry: Any) -> Entry:
        if isinstance(entry, Entry):
            return entry
        if isinstance(entry, dict):
            try:
                return Entry.from_api(entry)
            except (KeyError, TypeError, AttributeError, ValidationError) as e:
                raise InvalidInput(f"Malformed entry {entry!r}: {e}") from e
        raise InvalidInput(f"Expected an entry, got {type(entry).__name__}")

    def _resolve_node(self, content: Any, entries_map: Dict[str, Entry], path: FrozenSet[str]) -> Any:
        """
        Resolve one node of the content tree.

        Args:
            content: A list, an Entry, a Link or a plain value
            entries_map: All known entries by id
            path: Ids of the entries currently being resolved above this node
        """
        if isinstance(content, list):
            return [self._resolve_node(item, entries_map, path) for item in content]

        if isinstance(content, Entry):
            return self.group_fields_by_locale(content, entries_map, path | {content.id})

        if isinstance(content, Link) and content.link_kind == "Entry":
            try:
                target = self._lookup_target(content, entries_map, path)
            except ResolutionError as e:
                # A missing entry is better than failing the whole batch
                logging.warning(f"Could not resolve content: {e}")
                return {}
            return self._resolve_node(target, entries_map, path)

        return content

    @staticmethod
    def _lookup_target(link: Link, entries_map: Dict[str, Entry], path: FrozenSet[str]) -> Entry:
        target = entries_map.get(link.target_id)
        if target is None:
            raise ResolutionError(f"linked entry {link.target_id} is missing")
        if target.id in path:
            raise ResolutionError(f"circular reference to entry {link.target_id}")
        return target

    def group_fields_by_locale(
        self,
        entry: Entry,
        entries_map: Dict[str, Entry],
        path: FrozenSet[str] = frozenset()
    ) -> ResolvedEntry:
        """
        Regroup an entry's fields by locale, resolving every value.

        One locale bucket is created per locale present in any field.
        """
        grouped: Dict[str, Dict[str, Any]] = {}
        for field_name, localized in entry.fields.items():
            for locale, value in localized.items():
                grouped.setdefault(locale, {})[field_name] = self._resolve_node(value, entries_map, path)

        return ResolvedEntry(
            id=entry.id,
            content_type_id=entry.content_type_id,
            sys=entry.sys,
            fields=grouped
        )
