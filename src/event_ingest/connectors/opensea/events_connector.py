"""
OpenSea events API connector.

Fetches completed sale events page by page using the offset/limit scheme
of the v1 events endpoint.
"""

import logging
from typing import Optional

from ...connectors.http.http_connector import HttpConnector
from ...core.connector import ConnectorRequest, PageFetcher
from ...core.models import PageRequest, PageResult


logger = logging.getLogger(__name__)


class OpenSeaEventsConnector(HttpConnector, PageFetcher):
    """
    Page fetcher for the OpenSea events API.

    The response envelope is a JSON object whose `asset_events` field holds
    an array of event objects. Events are passed through untouched.
    """

    BASE_URL = "https://api.opensea.io/api/v1/events"
    EVENTS_FIELD = "asset_events"

    # Only successful sales, from every marketplace source
    FIXED_PARAMS = {
        "only_opensea": "false",
        "event_type": "successful",
    }

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        rate_limit_delay: float = 0.0,
        timeout: int = 30,
        user_agent: Optional[str] = None,
        session=None,
    ):
        """
        Initialize the OpenSea events connector.

        Args:
            base_url: Events endpoint (defaults to the public v1 endpoint)
            api_key: Optional API key sent as X-API-KEY
            rate_limit_delay: Minimum seconds between requests
            timeout: Request timeout in seconds
            user_agent: Custom User-Agent header
            session: Optional pre-built requests session
        """
        super().__init__(
            name="opensea",
            rate_limit_delay=rate_limit_delay,
            timeout=timeout,
            user_agent=user_agent,
            session=session,
        )
        self.base_url = base_url or self.BASE_URL
        self.api_key = api_key

    def build_request(self, page: PageRequest) -> ConnectorRequest:
        """Build the HTTP request for one page."""
        params = {
            "only_opensea": self.FIXED_PARAMS["only_opensea"],
            "offset": page.offset,
            "limit": page.limit,
            "occurred_before": page.before_timestamp,
            "event_type": self.FIXED_PARAMS["event_type"],
        }
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["X-API-KEY"] = self.api_key
        return ConnectorRequest(uri=self.base_url, params=params, headers=headers)

    def fetch_page(self, request: PageRequest) -> PageResult:
        """
        Fetch and decode one page of events.

        Args:
            request: Page index, page size and time bound

        Returns:
            PageResult; FAILED on transport, status or decode problems,
            EMPTY when the upstream has no more events
        """
        response = self.fetch(self.build_request(request))

        if response.error_message:
            return PageResult.failed(
                response.error_message,
                status_code=response.status_code,
                duration_ms=response.duration_ms,
            )

        if not response.ok:
            logger.warning(
                f"Page {request.page_index} returned HTTP {response.status_code}"
            )
            return PageResult.failed(
                f"HTTP {response.status_code}",
                status_code=response.status_code,
                duration_ms=response.duration_ms,
            )

        payload = response.payload
        if not isinstance(payload, dict):
            return PageResult.failed(
                f"Expected a JSON object, got {type(payload).__name__}",
                status_code=response.status_code,
                duration_ms=response.duration_ms,
            )

        events = payload.get(self.EVENTS_FIELD)
        if events is None:
            # A missing field decodes to no events
            events = []
        if not isinstance(events, list):
            return PageResult.failed(
                f"Field '{self.EVENTS_FIELD}' is not an array",
                status_code=response.status_code,
                duration_ms=response.duration_ms,
            )

        logger.debug(
            f"Page {request.page_index} (offset {request.offset}): "
            f"{len(events)} events in {response.duration_ms}ms"
        )
        return PageResult.ok(
            events,
            status_code=response.status_code,
            duration_ms=response.duration_ms,
        )

    def get_name(self) -> str:
        """Return the connector name."""
        return "opensea"
