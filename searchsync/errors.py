"""Exceptions raised by searchsync."""


class SearchSyncError(Exception):
    """Base class for all searchsync errors."""


class SyncFailed(SearchSyncError):
    """A delta-sync request failed. The sync cursor was not advanced."""


class ResolutionError(SearchSyncError):
    """A node of the content tree could not be resolved."""


class InvalidInput(ResolutionError):
    """The entries handed to the resolver are malformed."""


class PersistenceError(SearchSyncError):
    """The sync cursor could not be read from or written to disk."""


class SearchIndexError(SearchSyncError):
    """A request to the search engine failed or reported item errors."""
