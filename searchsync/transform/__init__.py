"""Turning resolved entries into search documents and bulk payloads."""

from .documents import reformat_entries, reduce_entries, format_entries, reduce_content_types
from .markdown import markdown_to_text
from .payload import generate_payload, generate_delete_payload, index_name_for_locale

__all__ = [
    "reformat_entries",
    "reduce_entries",
    "format_entries",
    "reduce_content_types",
    "markdown_to_text",
    "generate_payload",
    "generate_delete_payload",
    "index_name_for_locale"
]
