"""
Runner module for orchestrating the ingestion loop.
"""

from .ingest_runner import IngestRunner, RunnerConfig, DEFAULT_MAX_PAGE_INDEX
from .cursor import derive_cursor

__all__ = ["IngestRunner", "RunnerConfig", "DEFAULT_MAX_PAGE_INDEX", "derive_cursor"]
