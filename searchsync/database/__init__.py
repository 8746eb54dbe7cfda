"""DuckDB-backed entry cache."""

from .manager import DatabaseManager

__all__ = ["DatabaseManager"]
