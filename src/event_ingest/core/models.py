"""
Core data models for the event ingester.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
import uuid


# Upstream events are opaque JSON objects; only the timestamp field is read
EventDocument = Dict[str, Any]

DEFAULT_PAGE_SIZE = 50


class PageStatus(str, Enum):
    """Outcome of a single page fetch."""
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


class StopReason(str, Enum):
    """Why the ingestion loop stopped."""
    EXHAUSTED = "exhausted"
    FETCH_FAILED = "fetch_failed"
    CEILING_REACHED = "ceiling_reached"


@dataclass(frozen=True)
class PageRequest:
    """
    Request for one logical page of upstream events.

    Attributes:
        page_index: Zero-based page number
        before_timestamp: Upper bound (unix seconds) for event time
        page_size: Number of events per page
    """
    page_index: int
    before_timestamp: int
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self):
        if self.page_index < 0:
            raise ValueError(f"page_index must be >= 0, got {self.page_index}")
        if self.page_size <= 0:
            raise ValueError(f"page_size must be > 0, got {self.page_size}")

    @property
    def offset(self) -> int:
        return self.page_index * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


@dataclass
class PageResult:
    """
    Decoded result of a page fetch.

    Attributes:
        status: OK, EMPTY or FAILED
        documents: Decoded event documents in upstream order
        error_message: Failure description when status is FAILED
        status_code: HTTP status code if a response was received
        duration_ms: Time taken for the request in milliseconds
    """
    status: PageStatus
    documents: List[EventDocument] = field(default_factory=list)
    error_message: Optional[str] = None
    status_code: Optional[int] = None
    duration_ms: Optional[int] = None

    @classmethod
    def ok(cls, documents: List[EventDocument], **kwargs) -> "PageResult":
        """Build a result from decoded documents; zero documents means EMPTY."""
        status = PageStatus.OK if documents else PageStatus.EMPTY
        return cls(status=status, documents=list(documents), **kwargs)

    @classmethod
    def failed(cls, error_message: str, **kwargs) -> "PageResult":
        return cls(status=PageStatus.FAILED, error_message=error_message, **kwargs)

    @property
    def has_documents(self) -> bool:
        return self.status == PageStatus.OK and len(self.documents) > 0

    def __len__(self) -> int:
        return len(self.documents)


@dataclass
class CursorResult:
    """
    Resumption point derived from the earliest stored event.

    Attributes:
        raw_timestamp: Timestamp string as stored
        cursor: Unix seconds, or None if the string could not be parsed
        error_message: Parse failure description
    """
    raw_timestamp: str
    cursor: Optional[int] = None
    error_message: Optional[str] = None

    @property
    def is_usable(self) -> bool:
        return self.cursor is not None


@dataclass
class RunState:
    """Persisted hand-off between runs."""
    last_cursor: int
    last_run_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class RunResult:
    """Aggregate metrics for a run."""
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    before_timestamp: Optional[int] = None
    pages_fetched: int = 0
    pages_written: int = 0
    documents_written: int = 0
    stop_reason: Optional[StopReason] = None
    cursor: Optional[CursorResult] = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    ended_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "before_timestamp": self.before_timestamp,
            "pages_fetched": self.pages_fetched,
            "pages_written": self.pages_written,
            "documents_written": self.documents_written,
            "stop_reason": self.stop_reason.value if self.stop_reason else None,
            "raw_timestamp": self.cursor.raw_timestamp if self.cursor else None,
            "cursor": self.cursor.cursor if self.cursor else None,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
        }
