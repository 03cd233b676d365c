"""
Document store interface for persisting fetched events.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from .models import EventDocument


class DocumentStore(ABC):
    """
    Abstract base class for document stores.

    Stores are append-only during a run: documents are added in batches and
    never updated or deleted. A store is a context manager so that the
    connection is released on every exit path.
    """

    @abstractmethod
    def insert_many(self, documents: Sequence[EventDocument]) -> int:
        """
        Insert a batch of documents.

        Args:
            documents: Documents to insert, in order

        Returns:
            Number of documents inserted

        Raises:
            StoreWriteError if the insert fails
        """
        pass

    @abstractmethod
    def find_earliest(self, field: str) -> Optional[EventDocument]:
        """
        Return the single document with the earliest value of `field`.

        Args:
            field: Name of the timestamp field

        Returns:
            The document, or None if the store is empty

        Raises:
            StoreReadError if the query fails
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Return the store name/identifier."""
        pass

    def close(self) -> None:
        """Close any open resources. Optional."""
        pass

    def __enter__(self) -> "DocumentStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
