"""
Core abstractions and interfaces for the event ingester.
"""

from .models import (
    EventDocument, PageRequest, PageResult, PageStatus, StopReason,
    CursorResult, RunState, RunResult, DEFAULT_PAGE_SIZE,
)
from .connector import Connector, ConnectorRequest, ConnectorResponse, PageFetcher
from .storage import DocumentStore
from .state_store import RunStateStore
from .errors import (
    IngestError, ConfigError, StoreWriteError, StoreReadError,
    EmptyStoreError, CursorParseError,
)

__all__ = [
    "EventDocument",
    "PageRequest",
    "PageResult",
    "PageStatus",
    "StopReason",
    "CursorResult",
    "RunState",
    "RunResult",
    "DEFAULT_PAGE_SIZE",
    "Connector",
    "ConnectorRequest",
    "ConnectorResponse",
    "PageFetcher",
    "DocumentStore",
    "RunStateStore",
    "IngestError",
    "ConfigError",
    "StoreWriteError",
    "StoreReadError",
    "EmptyStoreError",
    "CursorParseError",
]
