#!/usr/bin/env python3
"""
searchsync - CMS to search index mirroring

Main entry point for searchsync. This orchestrator coordinates the pipeline
from the Contentful delta sync through reference resolution and document
formatting to the bulk write into Elasticsearch.
"""

import asyncio
import logging
import sys
import argparse
from typing import List, Optional

from searchsync import __version__
from searchsync.config import ConfigManager, config
from searchsync.database import DatabaseManager
from searchsync.errors import SearchSyncError, SyncFailed
from searchsync.models import Locale
from searchsync.resolver import ReferenceResolver
from searchsync.search import ElasticsearchClient
from searchsync.sync import ContentfulSyncClient, CursorStore, SyncEngine
from searchsync.transform import (
    reformat_entries, reduce_content_types, generate_payload,
    generate_delete_payload, index_name_for_locale,
)


def setup_logging(settings: ConfigManager):
    """Configure logging for the application."""
    level = getattr(logging, settings.get("logging.level", "INFO").upper())
    format_str = settings.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(settings.log_filename)
        ]
    )


async def recreate_indices(es: ElasticsearchClient, locales: List[Locale], settings: ConfigManager):
    """Delete and recreate one index per locale."""
    for locale in locales:
        await es.recreate_index(
            index_name_for_locale(settings.index_prefix, locale.code),
            settings.index_settings
        )


async def run_sync_pipeline(settings: ConfigManager, reindex: bool = False, content_type: str = "",
                            resolver: Optional[ReferenceResolver] = None):
    """
    Sync the CMS and push the changes to the search index.

    The index is marked as pending in the entry cache before the cursor can
    advance and cleared only after every bulk write went through, so a run
    that fails while writing is repeated by the next one even when nothing
    changed upstream.

    Args:
        settings: Loaded configuration
        reindex: Forget the sync cursor and cached entries and rebuild the indices
        content_type: Content type to index ("" indexes every type)
        resolver: Resolver to reuse across runs; its memo only lives as long as it does
    """
    logging.info("Starting searchsync pipeline...")
    resolver = resolver or ReferenceResolver()

    async with ContentfulSyncClient(
        space=settings.space,
        token=settings.access_token,
        host=settings.contentful_host,
        timeout=settings.contentful_timeout
    ) as cms, ElasticsearchClient(
        host=settings.elasticsearch_host,
        auth=settings.get_credentials(),
        timeout=settings.elasticsearch_timeout
    ) as es:
        engine = SyncEngine(cms, CursorStore(settings.cursor_filename), content_type)
        locales = await cms.get_locales()
        logging.info(f"Locales: {', '.join(locale.code for locale in locales)}")

        with DatabaseManager(settings.database_filename) as db:
            db.initialize_database()

            if reindex:
                logging.info("Reindex requested: clearing sync state and recreating indices")
                engine.reset()
                db.clear_entries()
                db.clear_index_pending()
                await recreate_indices(es, locales, settings)

            retrying = db.index_write_pending()
            if retrying:
                logging.warning("The previous run did not finish writing to the search index; rewriting it")

            db.mark_index_pending()
            try:
                result = await engine.sync()
            except SyncFailed:
                if not retrying:
                    db.clear_index_pending()
                raise

            if result is None and not retrying:
                db.clear_index_pending()
                logging.info("No changes detected. The search index is up to date.")
                return

            if result is not None:
                changed = db.store_entries(result.entries)
                removed_ids = [entry.id for entry in result.deleted_entries]
                removed = db.remove_entries(removed_ids)
                db.mark_index_pending(removed_ids)
                logging.info(f"Entry cache: {changed} stored, {removed} removed")

            deleted_ids = db.get_pending_deletes()
            # Linked entries may live outside this delta, so resolve against the whole cache
            entries = db.list_entries()
            resolved = resolver.resolve_references(entries)

            content_types = reduce_content_types(await cms.get_content_types(), content_type)
            documents = reformat_entries(resolved, content_types, locales)
            logging.info(f"Formatted {len(documents)} documents from {len(resolved)} entries")

            for locale in locales:
                index = index_name_for_locale(settings.index_prefix, locale.code)
                if deleted_ids:
                    await es.bulk(generate_delete_payload(deleted_ids, index))
                await es.bulk(generate_payload(documents, locale.code, index))

            db.clear_index_pending()

    logging.info("searchsync pipeline completed.")


def parse_arguments():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="searchsync - mirror Contentful entries into Elasticsearch",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                          # Sync changes since the last run
  python main.py --reindex                # Rebuild the indices from an initial sync
  python main.py --content-type post      # Only index entries of type 'post'
  python main.py --config prod.yaml       # Use another configuration file
        """
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to the configuration file (default: config.yaml)"
    )

    parser.add_argument(
        "--reindex",
        action="store_true",
        help="Forget the sync cursor, recreate the indices and index everything"
    )

    parser.add_argument(
        "--content-type",
        type=str,
        help="Content type to sync and index (default: contentful.content_type from config)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"searchsync {__version__}"
    )

    return parser.parse_args()


def main():
    """Main entry point."""
    args = parse_arguments()
    settings = ConfigManager(args.config) if args.config else config
    setup_logging(settings)

    content_type = args.content_type if args.content_type is not None else settings.content_type

    try:
        asyncio.run(run_sync_pipeline(settings, reindex=args.reindex, content_type=content_type))
    except SearchSyncError as e:
        logging.error(f"Sync failed: {e}")
        sys.exit(1)
    except ValueError as e:
        logging.error(f"Invalid configuration: {e}")
        sys.exit(2)


if __name__ == "__main__":
    main()
