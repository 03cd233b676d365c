"""
Run state store implementations for cursor hand-off between runs.
"""

from .sqlite_store import SqliteRunStateStore

__all__ = ["SqliteRunStateStore"]
