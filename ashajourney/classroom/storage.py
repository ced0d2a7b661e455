"""
SnapshotStorage - Durable single-record storage in ~/.ashajourney/progress.db.

Each record is a JSON payload under a fixed application key. The store is a
passive serialization target: it never interprets the payload.
"""

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ashajourney.config import DEFAULT_PROGRESS_DB
from ashajourney.errors import StorageUnavailable

logger = logging.getLogger(__name__)

STORAGE_KEY = "ashaJourneyUserData"


class SnapshotStorage:
    """
    Key/value storage for serialized progress snapshots.

    Every write is a single UPSERT committed in its own transaction, so a
    reader never observes a partial record.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize storage.

        Args:
            db_path: Path to progress.db (default: ~/.ashajourney/progress.db)
        """
        self.db_path = Path(db_path) if db_path else DEFAULT_PROGRESS_DB
        self._ready = False

    def _ensure_database(self):
        """Create database and table if they don't exist."""
        if self._ready:
            return
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path))
            try:
                conn.executescript("""
                    CREATE TABLE IF NOT EXISTS snapshots (
                        key TEXT PRIMARY KEY,
                        payload TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    );
                """)
                conn.commit()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            raise StorageUnavailable(f"Cannot open progress database {self.db_path}: {e}") from e
        self._ready = True

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        self._ensure_database()
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def read(self, key: str = STORAGE_KEY) -> Optional[str]:
        """Return the stored payload, or None if absent."""
        try:
            conn = self._get_connection()
            try:
                row = conn.execute(
                    "SELECT payload FROM snapshots WHERE key = ?", (key,)
                ).fetchone()
                return row["payload"] if row else None
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageUnavailable(f"Cannot read {key} from {self.db_path}: {e}") from e

    def write(self, key: str, payload: str):
        """Store a payload, replacing any previous one."""
        now = datetime.now(timezone.utc).isoformat()
        try:
            conn = self._get_connection()
            try:
                with conn:
                    conn.execute(
                        """INSERT INTO snapshots (key, payload, updated_at)
                           VALUES (?, ?, ?)
                           ON CONFLICT(key) DO UPDATE SET
                             payload = excluded.payload,
                             updated_at = excluded.updated_at""",
                        (key, payload, now)
                    )
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageUnavailable(f"Cannot write {key} to {self.db_path}: {e}") from e
