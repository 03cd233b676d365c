"""
Connectors package for upstream event sources.
"""

from .http import HttpConnector
from .opensea import OpenSeaEventsConnector
from .synthetic import SyntheticPageFetcher, make_events

__all__ = [
    "HttpConnector",
    "OpenSeaEventsConnector",
    "SyntheticPageFetcher",
    "make_events",
]
