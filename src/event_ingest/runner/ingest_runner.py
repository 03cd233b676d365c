"""
Main execution runner for the paginated ingestion loop.
"""

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from ..core.connector import PageFetcher
from ..core.errors import StoreWriteError
from ..core.models import (
    DEFAULT_PAGE_SIZE, PageRequest, PageResult, PageStatus, RunResult, StopReason,
)
from ..core.storage import DocumentStore
from .cursor import derive_cursor


logger = logging.getLogger(__name__)


# OpenSea documents a cap of 200 pages per query window
DEFAULT_MAX_PAGE_INDEX = 200


@dataclass
class RunnerConfig:
    """
    Configuration for the ingest runner.

    Attributes:
        max_page_index: Highest page index to fetch (inclusive)
        page_size: Events per page
        timestamp_field: Document field used for cursor derivation
    """
    max_page_index: int = DEFAULT_MAX_PAGE_INDEX
    page_size: int = DEFAULT_PAGE_SIZE
    timestamp_field: str = "created_date"

    def __post_init__(self):
        if self.max_page_index < 0:
            raise ValueError(f"max_page_index must be >= 0, got {self.max_page_index}")


class IngestRunner:
    """
    Orchestrates one bounded ingestion run.

    Manages the workflow:
    1. Fetch page i with the run's fixed before_timestamp
    2. Stop on an empty or failed page
    3. Write the page to the store as one batch
    4. Repeat up to the page ceiling
    5. Derive the cursor from the earliest stored event

    The runner does not own the fetcher or the store; callers close them.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        store: DocumentStore,
        config: Optional[RunnerConfig] = None,
        on_page: Optional[Callable[[int, PageResult], None]] = None,
    ):
        """
        Initialize the ingest runner.

        Args:
            fetcher: Page fetcher for the upstream API
            store: Document store receiving each page
            config: Runner configuration (uses defaults if not provided)
            on_page: Called with (page_index, result) after each successful write
        """
        self.fetcher = fetcher
        self.store = store
        self.config = config or RunnerConfig()
        self.on_page = on_page

    def run(self, before_timestamp: int, run_id: Optional[str] = None) -> RunResult:
        """
        Run the ingestion loop and derive the next cursor.

        Args:
            before_timestamp: Upper time bound (unix seconds), fixed for the run
            run_id: Optional run identifier

        Returns:
            RunResult with counters, stop reason and cursor

        Raises:
            StoreWriteError if a batch write fails (no cursor is derived)
            EmptyStoreError if the store is empty after the loop
        """
        result = RunResult(run_id=run_id or str(uuid.uuid4()), before_timestamp=before_timestamp)

        logger.info(f"Starting ingestion run: {result.run_id}")
        logger.info(
            f"occurred_before={before_timestamp}, "
            f"pages 0..{self.config.max_page_index}, page size {self.config.page_size}"
        )

        result.stop_reason = self._ingest_pages(before_timestamp, result)

        logger.info(
            f"Loop finished ({result.stop_reason.value}): "
            f"{result.pages_written} pages, {result.documents_written} documents written"
        )

        result.cursor = derive_cursor(self.store, self.config.timestamp_field)
        result.ended_at = datetime.now(timezone.utc)

        logger.info(f"Run complete: {result.run_id}")
        logger.info(f"Metrics: {json.dumps(result.to_dict(), indent=2)}")

        return result

    def _ingest_pages(self, before_timestamp: int, result: RunResult) -> StopReason:
        """Fetch and write pages until exhaustion, failure or the ceiling."""
        for page_index in range(self.config.max_page_index + 1):
            request = PageRequest(
                page_index=page_index,
                before_timestamp=before_timestamp,
                page_size=self.config.page_size,
            )

            page = self.fetcher.fetch_page(request)
            result.pages_fetched += 1

            if page.status == PageStatus.FAILED:
                logger.warning(f"Page {page_index} failed, stopping: {page.error_message}")
                return StopReason.FETCH_FAILED

            if not page.has_documents:
                logger.info(f"Page {page_index} returned no events, stopping")
                return StopReason.EXHAUSTED

            self._write_page(page_index, page, result)

        logger.info(f"Reached page ceiling {self.config.max_page_index}")
        return StopReason.CEILING_REACHED

    def _write_page(self, page_index: int, page: PageResult, result: RunResult) -> None:
        """Write one page as a single batch; failures abort the run."""
        try:
            written = self.store.insert_many(page.documents)
        except StoreWriteError:
            logger.error(
                f"Write failed for page {page_index} after "
                f"{result.pages_written} committed pages; aborting run"
            )
            raise

        result.pages_written += 1
        result.documents_written += written
        logger.debug(f"Wrote page {page_index}: {written} documents to {self.store.get_name()}")

        if self.on_page:
            self.on_page(page_index, page)
