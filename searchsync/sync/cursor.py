"""
Sync cursor persistence.

The cursor is an opaque token written to a single file relative to the
working directory. A missing file means no sync has happened yet.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..errors import PersistenceError


DEFAULT_CURSOR_FILE = ".contentful"


class CursorStore:
    """
    Reads and writes the sync cursor file.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        """
        Initialize the cursor store.

        Args:
            path: Location of the cursor file. Relative paths are anchored at
                the current working directory when the store is created.
        """
        path = Path(path) if path else Path(DEFAULT_CURSOR_FILE)
        self.path = path if path.is_absolute() else Path.cwd() / path

    def load(self) -> Optional[str]:
        """
        Read the stored cursor.

        Returns:
            The cursor, or None if no sync has been recorded

        Raises:
            PersistenceError: If the file exists but cannot be read
        """
        if not self.path.exists():
            return None
        try:
            token = self.path.read_text(encoding='utf-8').strip()
        except OSError as e:
            raise PersistenceError(f"Could not read sync cursor from {self.path}: {e}") from e

        logging.debug(f"Loaded sync cursor from {self.path}")
        return token or None

    def save(self, token: str) -> None:
        """
        Write the cursor, replacing any previous one.

        Raises:
            PersistenceError: If the file cannot be written
        """
        try:
            self.path.write_text(token, encoding='utf-8')
        except OSError as e:
            raise PersistenceError(f"Could not write sync cursor to {self.path}: {e}") from e

        logging.debug(f"{self.path.name} file saved")

    def clear(self) -> None:
        """Remove the stored cursor so the next sync starts from scratch."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Could not remove sync cursor {self.path}: {e}") from e
