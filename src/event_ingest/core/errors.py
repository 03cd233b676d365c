"""
Exception hierarchy for the event ingester.
"""


class IngestError(Exception):
    """Base class for ingester errors."""


class ConfigError(IngestError):
    """Configuration is missing or invalid."""


class StoreWriteError(IngestError):
    """A batch insert into the document store failed. Fatal for a run."""


class StoreReadError(IngestError):
    """A query against the document store failed."""


class EmptyStoreError(StoreReadError):
    """The store holds no documents to derive a cursor from."""


class CursorParseError(IngestError, ValueError):
    """A stored timestamp string does not match the expected format."""

    def __init__(self, raw_timestamp: str, message: str = ""):
        self.raw_timestamp = raw_timestamp
        super().__init__(message or f"Unparseable timestamp: {raw_timestamp!r}")
