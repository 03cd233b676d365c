"""
Shared test fixtures and configuration for pytest.
"""

import logging
import sys
from pathlib import Path

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from event_ingest.connectors.synthetic import SyntheticPageFetcher, make_events
from event_ingest.storage.sqlite_store import SqliteDocumentStore


logger = logging.getLogger(__name__)


ENV_VARS = [
    "MONGO_URI",
    "MONGO_DATABASE",
    "MONGO_COLLECTION",
    "INGEST_STORE_BACKEND",
    "INGEST_SQLITE_PATH",
    "INGEST_STATE_PATH",
    "INGEST_BEFORE_TIMESTAMP",
    "INGEST_MAX_PAGE_INDEX",
    "OPENSEA_API_KEY",
    "OPENSEA_BASE_URL",
]


# ============================================================================
# Pytest hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host environment variables out of config resolution."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sqlite_store(tmp_path):
    """SQLite document store in a temporary directory."""
    store = SqliteDocumentStore(db_path=tmp_path / "events.db")
    yield store
    store.close()


@pytest.fixture
def fetcher_factory():
    """Build a synthetic fetcher from a list of page sizes."""
    def _build(page_sizes, failing_pages=None):
        pages = []
        offset = 0
        for size in page_sizes:
            events = make_events(size, step_seconds=60)
            # Shift ids so events are unique across pages
            for event in events:
                event["id"] += offset
            pages.append(events)
            offset += size
        return SyntheticPageFetcher(pages=pages, failing_pages=failing_pages)

    return _build
