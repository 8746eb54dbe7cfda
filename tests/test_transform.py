"""
Tests for document formatting, content type reduction and bulk payloads.
"""

import copy
import unittest

from searchsync.models import ContentTypeDescriptor, Link, Locale, ResolvedEntry
from searchsync.transform import (
    format_entries, generate_delete_payload, generate_payload, index_name_for_locale,
    markdown_to_text, reduce_content_types, reduce_entries, reformat_entries,
)


def make_resolved(entry_id, fields, content_type_id="post"):
    return ResolvedEntry(id=entry_id, content_type_id=content_type_id, sys={"id": entry_id}, fields=fields)


class TestMarkdownToText(unittest.TestCase):
    """Test markdown to plain text conversion."""

    def test_markup_is_stripped(self):
        """Test that syntax disappears and the words stay."""
        text = markdown_to_text("# Hello\n\nThis is **bold** and [a link](http://example.com).")
        self.assertEqual(text, "Hello\nThis is bold and a link.")

    def test_lists_and_code(self):
        """Test list markers and inline code."""
        text = markdown_to_text("* one\n* two\n\nRun `make`")
        self.assertNotIn("*", text)
        self.assertNotIn("`", text)
        self.assertIn("one", text)
        self.assertIn("two", text)
        self.assertIn("Run make", text)

    def test_empty_input(self):
        """Test that empty sources give empty text."""
        self.assertEqual(markdown_to_text(""), "")


class TestReduceEntries(unittest.TestCase):
    """Test stripping resolved entries to barebones documents."""

    def test_reduce_moves_id_and_type_to_top_level(self):
        """Test the reduced shape."""
        entry = make_resolved("1", {"en": {"title": "X"}, "fr": {"title": "Y"}})

        self.assertEqual(reduce_entries([entry]), [
            {"id": "1", "type": "post", "en": {"title": "X"}, "fr": {"title": "Y"}}
        ])

    def test_array_fields_are_excluded(self):
        """Test that sequence-valued fields are not kept."""
        entry = make_resolved("1", {"en": {"title": "X", "tags": ["a", "b"], "related": []}})

        reduced = reduce_entries([entry])[0]

        self.assertEqual(reduced["en"], {"title": "X"})


class TestFormatEntries(unittest.TestCase):
    """Test formatting reduced entries into flat documents."""

    def setUp(self):
        self.content_types = {
            "post": ContentTypeDescriptor(
                name="post",
                title_field_name="headline",
                fields={
                    "headline": "Symbol",
                    "slug": "Symbol",
                    "body": "Text",
                    "views": "Integer",
                    "author": "Link",
                }
            )
        }
        self.locales = [Locale(code="en"), Locale(code="fr")]

    def test_title_field_is_renamed(self):
        """Test that the designated title field becomes 'title'."""
        entry = make_resolved("1", {"en": {"headline": "X"}})

        documents = reformat_entries([entry], self.content_types, self.locales)

        self.assertEqual(documents, [{"id": "1", "type": "post", "en": {"title": "X"}}])

    def test_fields_are_dispatched_by_kind(self):
        """Test long text conversion, short text pass-through and omission of others."""
        author = make_resolved("p", {"en": {"name": "Ada"}}, content_type_id="person")
        entry = make_resolved("1", {"en": {
            "headline": "X",
            "slug": "**kept-as-is**",
            "body": "Some *emphasis* here",
            "views": 10,
            "author": author,
            "undeclared": "ignored",
        }})

        bucket = reformat_entries([entry], self.content_types, self.locales)[0]["en"]

        self.assertEqual(bucket, {
            "title": "X",
            "slug": "**kept-as-is**",
            "body": "Some emphasis here",
        })

    def test_only_configured_locales_are_emitted(self):
        """Test that locales outside the configured list are dropped."""
        entry = make_resolved("1", {"en": {"headline": "X"}, "de": {"headline": "Z"}})

        document = reformat_entries([entry], self.content_types, self.locales)[0]

        self.assertEqual(set(document), {"id", "type", "en"})

    def test_documents_without_content_are_dropped(self):
        """Test empty-document elision."""
        entries = [
            make_resolved("1", {}),
            make_resolved("2", {"de": {"headline": "only german"}}),
            make_resolved("3", {"en": {"views": 3, "tags": ["x"]}}),
            make_resolved("4", {"fr": {"headline": "Bonjour"}}),
        ]

        documents = reformat_entries(entries, self.content_types, self.locales)

        self.assertEqual(documents, [{"id": "4", "type": "post", "fr": {"title": "Bonjour"}}])

    def test_undescribed_content_types_are_skipped(self):
        """Test the post-hoc content type filter."""
        entry = make_resolved("1", {"en": {"name": "Ada"}}, content_type_id="person")

        self.assertEqual(reformat_entries([entry], self.content_types, self.locales), [])

    def test_format_accepts_reduced_documents(self):
        """Test the format stage on its own."""
        reduced = [{"id": "1", "type": "post", "en": {"headline": "X", "body": "plain"}}]

        documents = format_entries(reduced, self.content_types, self.locales)

        self.assertEqual(documents[0]["en"], {"title": "X", "body": "plain"})

    def test_asset_links_are_not_indexed(self):
        """Test that unresolved links in declared Link fields are omitted."""
        entry = make_resolved("1", {"en": {"headline": "X", "author": Link(target_id="img", link_kind="Asset")}})

        self.assertEqual(reformat_entries([entry], self.content_types, self.locales)[0]["en"], {"title": "X"})


class TestReduceContentTypes(unittest.TestCase):
    """Test content type schema reduction."""

    def setUp(self):
        self.schema = [
            {
                "sys": {"id": "post"},
                "displayField": "headline",
                "fields": [
                    {"id": "headline", "type": "Symbol"},
                    {"id": "body", "type": "Text"},
                ]
            },
            {
                "sys": {"id": "page"},
                "displayField": "name",
                "fields": [
                    {"id": "name", "type": "Symbol"},
                    {"id": "title", "type": "Symbol"},
                ]
            },
        ]

    def test_reduce_without_filter(self):
        """Test that an empty filter keeps every content type."""
        content_types = reduce_content_types(self.schema, "")

        self.assertEqual(set(content_types), {"post", "page"})
        self.assertEqual(content_types["post"], ContentTypeDescriptor(
            name="post",
            title_field_name="headline",
            fields={"headline": "Symbol", "body": "Text"}
        ))

    def test_field_named_title_wins(self):
        """Test that a 'title' field overrides the display field."""
        self.assertEqual(reduce_content_types(self.schema)["page"].title_field_name, "title")

    def test_filter_by_name(self):
        """Test keeping a single content type."""
        self.assertEqual(list(reduce_content_types(self.schema, "page")), ["page"])
        self.assertEqual(reduce_content_types(self.schema, "missing"), {})


class TestPayload(unittest.TestCase):
    """Test bulk payload generation."""

    def test_payload_shape(self):
        """Test the header/body pairs of an index payload."""
        payload = generate_payload([{"type": "post", "id": "1", "en": {"title": "X"}}], "en", "posts")

        self.assertEqual(payload.model_dump(), {
            "index": "posts",
            "body": [{"index": {"_type": "post", "_id": "1"}}, {"title": "X"}],
        })

    def test_documents_without_locale_are_skipped(self):
        """Test that only documents with content for the locale are emitted, in order."""
        documents = [
            {"type": "post", "id": "1", "en": {"title": "A"}},
            {"type": "post", "id": "2", "fr": {"title": "B"}},
            {"type": "page", "id": "3", "en": {"title": "C"}},
        ]

        payload = generate_payload(documents, "en", "site-en")

        self.assertEqual([line["index"]["_id"] for line in payload.body[::2]], ["1", "3"])
        self.assertEqual(payload.body[3], {"title": "C"})

    def test_documents_are_not_mutated(self):
        """Test that the same documents can feed one payload per locale."""
        documents = [{"type": "post", "id": "1", "en": {"title": "A"}, "fr": {"title": "B"}}]
        original = copy.deepcopy(documents)

        generate_payload(documents, "en", "site-en")
        french = generate_payload(documents, "fr", "site-fr")

        self.assertEqual(documents, original)
        self.assertEqual(french.body[0], {"index": {"_type": "post", "_id": "1"}})

    def test_delete_payload(self):
        """Test delete operations for removed entries."""
        payload = generate_delete_payload(["1", "2"], "site-en")

        self.assertEqual(payload.body, [{"delete": {"_id": "1"}}, {"delete": {"_id": "2"}}])

    def test_index_name_for_locale(self):
        """Test per-locale index naming."""
        self.assertEqual(index_name_for_locale("Contentful", "en-US"), "contentful-en-us")


if __name__ == '__main__':
    unittest.main()
