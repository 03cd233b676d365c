"""
Configuration loading for the event ingester.
"""

from .config_loader import IngestConfig

__all__ = ["IngestConfig"]
