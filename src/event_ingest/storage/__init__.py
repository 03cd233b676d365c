"""
Document store implementations for persisting fetched events.

The production backend is MongoDB (MongoDocumentStore). SQLite
(SqliteDocumentStore) keeps everything in a local file and is used for
dry runs and tests.

To select backend, set the INGEST_STORE_BACKEND environment variable:
    - INGEST_STORE_BACKEND=mongo (default)
    - INGEST_STORE_BACKEND=sqlite
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from ..core.storage import DocumentStore
from .sqlite_store import SqliteDocumentStore


logger = logging.getLogger(__name__)


# Lazy import so the SQLite backend works without a MongoDB driver loaded
def _get_mongo_store():
    from .mongo_store import MongoDocumentStore
    return MongoDocumentStore


def create_document_store(
    backend: Optional[str] = None,
    # MongoDB options
    uri: Optional[str] = None,
    database: Optional[str] = None,
    collection: Optional[str] = None,
    # SQLite options
    db_path: Optional[Union[str, Path]] = None,
    timestamp_field: str = "created_date",
) -> DocumentStore:
    """
    Factory function to create the document store for a backend.

    Args:
        backend: 'mongo' or 'sqlite'. Defaults to INGEST_STORE_BACKEND or 'mongo'.

        MongoDB options:
            uri: Connection URI
            database: Database name
            collection: Collection name

        SQLite options:
            db_path: Path to SQLite database file
            timestamp_field: Document field holding the event timestamp

    Returns:
        DocumentStore instance

    Raises:
        ValueError: If backend is not recognized
    """
    if backend is None:
        backend = os.environ.get("INGEST_STORE_BACKEND", "mongo")
    backend = backend.lower()

    if backend == "mongo":
        MongoDocumentStore = _get_mongo_store()
        logger.info(f"Using MongoDB store: {database}.{collection}")
        return MongoDocumentStore(uri=uri, database=database, collection=collection)

    elif backend == "sqlite":
        if db_path is None:
            db_path = Path("local/store/events.db")
        logger.info(f"Using SQLite store: {db_path}")
        return SqliteDocumentStore(db_path=db_path, timestamp_field=timestamp_field)

    else:
        raise ValueError(
            f"Unknown backend: {backend}. "
            "Supported backends: 'mongo' (default), 'sqlite'"
        )


__all__ = ["SqliteDocumentStore", "create_document_store"]
