"""
SQLite-based run state store.
"""

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from ..core.models import RunState
from ..core.state_store import RunStateStore


logger = logging.getLogger(__name__)


class SqliteRunStateStore(RunStateStore):
    """
    Keeps one run state row per ingest job name in a local SQLite file.
    """

    def __init__(self, db_path: Union[str, Path]):
        """
        Initialize the SQLite run state store.

        Args:
            db_path: Path to the SQLite database file (":memory:" allowed)
        """
        self.db_path = db_path if str(db_path) == ":memory:" else Path(db_path)
        self.conn = None
        self._connect()
        self._init_schema()

    def _connect(self) -> None:
        """Establish database connection."""
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.db_path))
        self.conn.row_factory = sqlite3.Row
        logger.debug(f"Connected to SQLite run state store: {self.db_path}")

    def _init_schema(self) -> None:
        """Initialize database schema."""
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS run_state (
                name TEXT PRIMARY KEY,
                last_cursor INTEGER NOT NULL,
                last_run_at TEXT NOT NULL
            )
        """)
        self.conn.commit()

    def load(self, name: str) -> Optional[RunState]:
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT last_cursor, last_run_at FROM run_state WHERE name = ?",
            (name,),
        )
        row = cursor.fetchone()
        if row is None:
            return None

        last_run_at = datetime.fromisoformat(row["last_run_at"])
        if last_run_at.tzinfo is None:
            last_run_at = last_run_at.replace(tzinfo=timezone.utc)
        return RunState(last_cursor=row["last_cursor"], last_run_at=last_run_at)

    def save(self, name: str, state: RunState) -> None:
        try:
            with self.conn:
                self.conn.execute("""
                    INSERT INTO run_state (name, last_cursor, last_run_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(name) DO UPDATE SET
                        last_cursor = excluded.last_cursor,
                        last_run_at = excluded.last_run_at
                """, (name, state.last_cursor, state.last_run_at.isoformat()))
        except sqlite3.Error as e:
            logger.error(f"Failed to save run state for {name}: {e}")
            raise
        logger.debug(f"Saved run state for {name}: cursor={state.last_cursor}")

    def close(self) -> None:
        """Close the database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.debug("Closed SQLite run state store connection")
