"""
Connector interfaces for fetching data from the upstream API.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .models import PageRequest, PageResult


@dataclass
class ConnectorRequest:
    """
    Request to be sent by a connector.

    Attributes:
        uri: The URI to fetch
        method: HTTP method (GET, POST, etc.)
        headers: Optional request headers
        params: Optional query parameters
    """
    uri: str
    method: str = "GET"
    headers: Optional[Dict[str, str]] = None
    params: Optional[Dict[str, Any]] = None


@dataclass
class ConnectorResponse:
    """
    Response from a connector.

    Attributes:
        status_code: HTTP status code (0 if no response was received)
        payload: Parsed JSON body, or None if the body was not JSON
        headers: Response headers
        duration_ms: Time taken for the request in milliseconds
        error_message: Error message if the request or decode failed
    """
    status_code: int
    payload: Any = None
    headers: Optional[Dict[str, str]] = None
    duration_ms: Optional[int] = None
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_message is None and 200 <= self.status_code < 300


class Connector(ABC):
    """
    Abstract base class for connectors.

    Connectors perform a request against an external source and return
    a structured response. They never raise for transport errors.
    """

    @abstractmethod
    def fetch(self, request: ConnectorRequest) -> ConnectorResponse:
        """
        Fetch data from the external source.

        Args:
            request: The request to execute

        Returns:
            ConnectorResponse with the result
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Return the connector name/identifier."""
        pass

    def close(self) -> None:
        """Close any open resources. Optional."""
        pass


class PageFetcher(ABC):
    """
    Fetches one logical page of events per call.

    Implementations must not raise for transport or decode problems; those
    are reported as a FAILED PageResult so the caller can stop cleanly.
    """

    @abstractmethod
    def fetch_page(self, request: PageRequest) -> PageResult:
        pass

    def close(self) -> None:
        pass
