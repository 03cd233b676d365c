"""
Synthetic page fetcher for tests and dry runs.

Serves a fixed, in-memory list of pages without any network access.
Every request is recorded so callers can assert on pagination.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence

from ..core.connector import PageFetcher
from ..core.models import EventDocument, PageRequest, PageResult


logger = logging.getLogger(__name__)


def make_events(
    count: int,
    start: datetime = datetime(2021, 3, 14, 12, 0, 0, tzinfo=timezone.utc),
    step_seconds: int = 60,
    field: str = "created_date",
) -> List[EventDocument]:
    """
    Build synthetic sale events with descending timestamps.

    Timestamps use the upstream format (no zone, fractional seconds).
    """
    events = []
    for i in range(count):
        ts = start - timedelta(seconds=i * step_seconds)
        events.append({
            "id": i,
            "event_type": "successful",
            field: ts.strftime("%Y-%m-%dT%H:%M:%S.%f"),
            "total_price": str(10 ** 18 + i),
        })
    return events


class SyntheticPageFetcher(PageFetcher):
    """
    Deterministic page fetcher backed by a list of pages.

    Pages past the end of the list are returned as EMPTY. Indexes listed in
    `failing_pages` return FAILED.
    """

    def __init__(
        self,
        pages: Optional[Sequence[Sequence[EventDocument]]] = None,
        failing_pages: Optional[Sequence[int]] = None,
    ):
        self.pages = [list(p) for p in (pages or [])]
        self.failing_pages = set(failing_pages or [])
        self.requests: List[PageRequest] = []

    def fetch_page(self, request: PageRequest) -> PageResult:
        self.requests.append(request)

        if request.page_index in self.failing_pages:
            logger.debug(f"Simulated failure for page {request.page_index}")
            return PageResult.failed(f"Simulated failure for page {request.page_index}")

        if request.page_index >= len(self.pages):
            return PageResult.ok([])

        return PageResult.ok(self.pages[request.page_index])

    def get_request_history(self) -> List[Dict[str, int]]:
        """Return the offset/limit of every request made so far."""
        return [
            {
                "page_index": r.page_index,
                "offset": r.offset,
                "limit": r.limit,
                "before_timestamp": r.before_timestamp,
            }
            for r in self.requests
        ]
