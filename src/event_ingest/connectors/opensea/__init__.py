from .events_connector import OpenSeaEventsConnector

__all__ = ["OpenSeaEventsConnector"]
