"""
HTTP connector for single-attempt JSON requests.
"""

import json
import logging
import time
from typing import Optional
from urllib.parse import urlencode

import requests

from ...core.connector import Connector, ConnectorRequest, ConnectorResponse


logger = logging.getLogger(__name__)


class HttpConnector(Connector):
    """
    Generic HTTP connector for JSON APIs.

    Supports:
    - GET requests with query parameters
    - Custom headers
    - Pacing between requests (minimum delay)

    Each fetch performs exactly one network call. Transport and decode
    failures are returned as a response with error_message set.
    """

    def __init__(
        self,
        name: str = "http",
        rate_limit_delay: float = 0.0,
        timeout: int = 30,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the HTTP connector.

        Args:
            name: Connector name
            rate_limit_delay: Minimum seconds between requests
            timeout: Request timeout in seconds
            user_agent: Custom User-Agent header
            session: Optional pre-built requests session
        """
        self.name = name
        self.rate_limit_delay = rate_limit_delay
        self.timeout = timeout
        self.user_agent = user_agent or "EventIngest/1.0"
        self.last_request_time = 0.0
        self.session = session or requests.Session()

    def fetch(self, request: ConnectorRequest) -> ConnectorResponse:
        """
        Fetch and decode a JSON response.

        Args:
            request: The request to execute

        Returns:
            ConnectorResponse with the result
        """
        if request.method.upper() != "GET":
            raise ValueError(f"Unsupported HTTP method: {request.method}")

        self._wait_for_rate_limit()

        headers = dict(request.headers or {})
        if "User-Agent" not in headers:
            headers["User-Agent"] = self.user_agent

        url = request.uri
        if request.params:
            url = f"{url}?{urlencode(request.params)}"

        start_time = time.time()
        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
            # Reading .content consumes the full body
            body = response.content
        except requests.exceptions.RequestException as e:
            logger.warning(f"Request failed: {e}")
            return ConnectorResponse(
                status_code=0,
                error_message=f"Request failed: {e}",
            )
        duration_ms = int((time.time() - start_time) * 1000)

        try:
            payload = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as e:
            logger.warning(f"Response from {request.uri} is not valid JSON: {e}")
            return ConnectorResponse(
                status_code=response.status_code,
                headers=dict(response.headers),
                duration_ms=duration_ms,
                error_message=f"Decode failed: {e}",
            )

        return ConnectorResponse(
            status_code=response.status_code,
            payload=payload,
            headers=dict(response.headers),
            duration_ms=duration_ms,
        )

    def _wait_for_rate_limit(self) -> None:
        """Enforce a minimum delay between requests."""
        if self.rate_limit_delay > 0:
            elapsed = time.time() - self.last_request_time
            if elapsed < self.rate_limit_delay:
                time.sleep(self.rate_limit_delay - elapsed)
        self.last_request_time = time.time()

    def get_name(self) -> str:
        """Return the connector name."""
        return self.name

    def close(self) -> None:
        """Close the session."""
        if self.session:
            self.session.close()
