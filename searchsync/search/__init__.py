"""Search engine collaborator."""

from .client import ElasticsearchClient

__all__ = ["ElasticsearchClient"]
