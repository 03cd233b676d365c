"""
MongoDB document store for fetched events.
"""

import logging
from typing import Optional, Sequence

from bson.errors import BSONError
from pymongo import ASCENDING, MongoClient
from pymongo.errors import PyMongoError

from ..core.errors import StoreReadError, StoreWriteError
from ..core.models import EventDocument
from ..core.storage import DocumentStore


logger = logging.getLogger(__name__)


class MongoDocumentStore(DocumentStore):
    """
    Stores events as documents in a single MongoDB collection.

    The client is created once and released by close(). Inserted documents
    are copied first, since pymongo adds an `_id` to the dicts it inserts.
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        database: Optional[str] = None,
        collection: Optional[str] = None,
        client: Optional[MongoClient] = None,
        server_selection_timeout_ms: int = 10000,
    ):
        """
        Initialize the MongoDB store.

        Args:
            uri: MongoDB connection URI
            database: Database name
            collection: Collection name
            client: Optional pre-built client (the store will close it)
            server_selection_timeout_ms: Timeout for finding a server
        """
        if not database or not collection:
            raise ValueError("MongoDB database and collection names are required")

        self.database_name = database
        self.collection_name = collection
        self.client = client or MongoClient(
            uri,
            serverSelectionTimeoutMS=server_selection_timeout_ms,
        )
        self.collection = self.client[database][collection]
        logger.debug(f"Using MongoDB collection {database}.{collection}")

    def insert_many(self, documents: Sequence[EventDocument]) -> int:
        """
        Insert a batch of documents in order.

        Returns:
            Number of documents inserted
        """
        if not documents:
            return 0

        try:
            result = self.collection.insert_many(
                [dict(doc) for doc in documents],
                ordered=True,
            )
        except (PyMongoError, BSONError, OverflowError) as e:
            logger.error(f"Failed to insert {len(documents)} documents: {e}")
            raise StoreWriteError(f"MongoDB insert failed: {e}") from e

        inserted = len(result.inserted_ids)
        logger.debug(f"Inserted {inserted} documents into {self.collection_name}")
        return inserted

    def find_earliest(self, field: str) -> Optional[EventDocument]:
        """Return the document with the smallest `field`, sorted server-side."""
        try:
            return self.collection.find_one({}, sort=[(field, ASCENDING)])
        except PyMongoError as e:
            logger.error(f"Failed to query earliest document: {e}")
            raise StoreReadError(f"MongoDB query failed: {e}") from e

    def get_name(self) -> str:
        """Return the store name."""
        return "mongo"

    def close(self) -> None:
        """Close the client connection."""
        if self.client:
            self.client.close()
            self.client = None
            logger.debug("Closed MongoDB connection")
