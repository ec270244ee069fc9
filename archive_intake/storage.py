"""
Durable key-value storage for project state.

Values are stored as JSON text in a single SQLite table. Known keys:

- ``sheet``: the serialized Sheet
- ``images``: path of the image directory
- ``project-name``: project name
- ``ai-results``: mapping of filename to AI response
"""

import json
import os
import sqlite3
from contextlib import contextmanager
from typing import Any, Optional

from .config import AppConfig
from .logging_setup import get_logger
from .models import Sheet

logger = get_logger(__name__)

SHEET_KEY = "sheet"
IMAGES_KEY = "images"
PROJECT_NAME_KEY = "project-name"
AI_RESULTS_KEY = "ai-results"


class KeyValueStore:
    """SQLite-backed key-value store holding JSON values."""

    def __init__(self, db_path: str, config: Optional[AppConfig] = None):
        """
        Initialize the store, creating the table if needed.

        Args:
            db_path: Path to the SQLite database file
            config: Application configuration
        """
        self.db_path = os.path.abspath(os.path.expanduser(db_path))
        self.config = config

        db_dir = os.path.dirname(self.db_path)
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir, exist_ok=True)

        with self._connect() as conn:
            conn.execute(
                "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )

    @contextmanager
    def _connect(self):
        # One connection per call; autosave writes come from the timer thread
        conn = sqlite3.connect(self.db_path)
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def get(self, key: str, default: Any = None) -> Any:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        if row is None:
            return default
        return json.loads(row[0])

    def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value)
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO kv (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, payload),
            )

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))

    def __contains__(self, key: str) -> bool:
        with self._connect() as conn:
            row = conn.execute("SELECT 1 FROM kv WHERE key = ?", (key,)).fetchone()
        return row is not None


def get_stored_spreadsheet(store: KeyValueStore) -> Optional[Sheet]:
    """Load the stored sheet, or None if there is none."""
    data = store.get(SHEET_KEY)
    if not data:
        return None
    return Sheet.from_dict(data)


def set_stored_spreadsheet(store: KeyValueStore, sheet: Sheet) -> None:
    """Write a sheet snapshot under the ``sheet`` key."""
    store.set(SHEET_KEY, sheet.to_dict())
