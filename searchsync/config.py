"""
Configuration management for searchsync.

This module handles loading and accessing configuration values from config.yaml.
It provides a centralized way to manage CMS credentials, search engine settings
and sync state locations without changing code.
"""

import yaml
from pathlib import Path
from typing import Any, Dict, Optional
import logging


class ConfigManager:
    """
    Manages configuration loading and access for searchsync.
    """

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r', encoding='utf-8') as f:
                self._config = yaml.safe_load(f) or {}

            logging.info(f"Configuration loaded from {self.config_path}")

        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Failed to load configuration: {e}")
            # Fall back to default configuration
            self._config = self._get_default_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return {
            "contentful": {
                "space": "",
                "access_token": "",
                "host": "cdn.contentful.com",
                "content_type": "",
                "timeout": 30.0
            },
            "elasticsearch": {
                "host": "http://localhost:9200",
                "user": "elastic",
                "password": "",
                "index_prefix": "contentful",
                "index_settings": {},
                "timeout": 30.0
            },
            "sync": {
                "cursor_file": ".contentful"
            },
            "database": {
                "filename": "searchsync.db"
            },
            "paths": {
                "log_file": "searchsync.log"
            },
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "contentful.space")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("contentful.host")  # Returns "cdn.contentful.com"
            config.get("elasticsearch.index_prefix")  # Returns "contentful"
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    # Convenience properties for commonly used values

    @property
    def space(self) -> str:
        """Get the Contentful space id."""
        return self.get("contentful.space", "")

    @property
    def access_token(self) -> str:
        """Get the Contentful delivery API token."""
        return self.get("contentful.access_token", "")

    @property
    def contentful_host(self) -> str:
        """Get the Contentful API host."""
        return self.get("contentful.host", "cdn.contentful.com")

    @property
    def content_type(self) -> str:
        """Get the content type the initial sync is scoped to ("" for all)."""
        return self.get("contentful.content_type", "")

    @property
    def contentful_timeout(self) -> float:
        """Get Contentful request timeout."""
        return self.get("contentful.timeout", 30.0)

    @property
    def elasticsearch_host(self) -> str:
        """Get Elasticsearch host URL."""
        return self.get("elasticsearch.host", "http://localhost:9200")

    @property
    def elasticsearch_timeout(self) -> float:
        """Get Elasticsearch request timeout."""
        return self.get("elasticsearch.timeout", 30.0)

    @property
    def index_prefix(self) -> str:
        """Get the prefix of the per-locale index names."""
        return self.get("elasticsearch.index_prefix", "contentful")

    @property
    def index_settings(self) -> Dict[str, Any]:
        """Get the body used when (re)creating an index."""
        return self.get("elasticsearch.index_settings", {}) or {}

    @property
    def cursor_filename(self) -> str:
        """Get sync cursor file name."""
        return self.get("sync.cursor_file", ".contentful")

    @property
    def database_filename(self) -> str:
        """Get database filename."""
        return self.get("database.filename", "searchsync.db")

    @property
    def log_filename(self) -> str:
        """Get log file name."""
        return self.get("paths.log_file", "searchsync.log")

    def get_credentials(self) -> Optional[tuple]:
        """
        Get basic-auth credentials for Elasticsearch.

        Returns:
            A (user, password) tuple, or None when no password is configured
        """
        password = self.get("elasticsearch.password", "")
        if not password:
            return None
        return (self.get("elasticsearch.user", "elastic") or "elastic", password)


# Global configuration instance
config = ConfigManager()


def get_config() -> ConfigManager:
    """
    Get the global configuration instance.

    Returns:
        The global ConfigManager instance
    """
    return config
