"""
SQLite document store for local runs and tests.

Each event is stored as a JSON document next to its raw timestamp string
and the numeric instant parsed from it, so ordering never depends on the
string format.
"""

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence, Union

from ..core.errors import CursorParseError, StoreReadError, StoreWriteError
from ..core.models import EventDocument
from ..core.storage import DocumentStore
from ..core.timestamps import parse_event_timestamp


logger = logging.getLogger(__name__)


class SqliteDocumentStore(DocumentStore):
    """
    SQLite-based implementation of the document store.

    Ordering key is `created_ts` (epoch microseconds). Rows whose timestamp
    could not be parsed keep a NULL key and sort after every parsed row,
    then by the raw string.
    """

    def __init__(
        self,
        db_path: Union[str, Path],
        timestamp_field: str = "created_date",
    ):
        """
        Initialize the SQLite document store.

        Args:
            db_path: Path to the SQLite database file (":memory:" allowed)
            timestamp_field: Document field holding the event timestamp
        """
        self.db_path = db_path if str(db_path) == ":memory:" else Path(db_path)
        self.timestamp_field = timestamp_field
        self.conn = None
        self._connect()
        self._init_schema()

    def _connect(self) -> None:
        """Establish database connection."""
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.db_path))
        self.conn.row_factory = sqlite3.Row
        logger.debug(f"Connected to SQLite document store: {self.db_path}")

    def _init_schema(self) -> None:
        """Initialize database schema."""
        cursor = self.conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS documents (
                doc_id INTEGER PRIMARY KEY AUTOINCREMENT,
                body TEXT NOT NULL,
                raw_timestamp TEXT,
                created_ts INTEGER,
                inserted_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS ix_documents_created
            ON documents (created_ts, raw_timestamp)
        """)

        self.conn.commit()
        logger.debug("Initialized document store schema")

    def _ordering_key(self, raw: object) -> Optional[int]:
        """Epoch microseconds for a timestamp value, or None if unparseable."""
        if raw is None:
            return None
        try:
            parsed = parse_event_timestamp(raw)
        except CursorParseError:
            logger.debug(f"Storing document with unparseable timestamp: {raw!r}")
            return None
        delta = parsed - datetime(1970, 1, 1, tzinfo=timezone.utc)
        return (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds

    def insert_many(self, documents: Sequence[EventDocument]) -> int:
        """
        Insert a batch of documents in a single transaction.

        Returns:
            Number of documents inserted
        """
        if not documents:
            return 0

        inserted_at = datetime.now(timezone.utc).isoformat()
        try:
            rows = []
            for doc in documents:
                raw = doc.get(self.timestamp_field)
                rows.append((
                    json.dumps(doc, ensure_ascii=False),
                    raw if isinstance(raw, str) else None,
                    self._ordering_key(raw),
                    inserted_at,
                ))
        except (TypeError, ValueError) as e:
            raise StoreWriteError(f"Document is not JSON serializable: {e}") from e

        try:
            with self.conn:
                self.conn.executemany("""
                    INSERT INTO documents (body, raw_timestamp, created_ts, inserted_at)
                    VALUES (?, ?, ?, ?)
                """, rows)
        except (sqlite3.Error, UnicodeEncodeError) as e:
            logger.error(f"Failed to insert {len(rows)} documents: {e}")
            raise StoreWriteError(f"SQLite insert failed: {e}") from e

        logger.debug(f"Inserted {len(rows)} documents")
        return len(rows)

    def find_earliest(self, field: str) -> Optional[EventDocument]:
        """Return the document with the earliest parsed timestamp."""
        if field != self.timestamp_field:
            raise StoreReadError(
                f"Store indexes '{self.timestamp_field}', not '{field}'"
            )

        try:
            cursor = self.conn.cursor()
            cursor.execute("""
                SELECT body FROM documents
                ORDER BY created_ts IS NULL, created_ts ASC, raw_timestamp ASC
                LIMIT 1
            """)
            row = cursor.fetchone()
        except sqlite3.Error as e:
            logger.error(f"Failed to query earliest document: {e}")
            raise StoreReadError(f"SQLite query failed: {e}") from e

        if row is None:
            return None
        return json.loads(row["body"])

    def count(self) -> int:
        """Return the number of stored documents."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT COUNT(*) AS n FROM documents")
        return cursor.fetchone()["n"]

    def get_name(self) -> str:
        """Return the store name."""
        return "sqlite"

    def close(self) -> None:
        """Close the database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.debug("Closed SQLite document store connection")
