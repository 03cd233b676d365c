"""
Event Ingest: bounded batch ingestion of marketplace sale events.
"""

__version__ = "0.1.0"
