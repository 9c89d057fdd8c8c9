"""Pipedrive deals API client."""

import logging
import math
from collections.abc import Mapping
from typing import Any

import httpx

from .config import API_BASE_URL, DEAL_LIST_OPTIONS, DEALS, DEFAULT_TIMEOUT, ClientConfig
from .exceptions import PipedriveError, RateLimitError, TransportError
from .options import merge_options
from .request import ApiRequest, build_request, resource_path
from .validation import require, validate_deal

logger = logging.getLogger(__name__)

# Arbitrary deal attributes, including custom field keys
DealFields = Mapping[str, str | int | float | bool | None]


def parse_retry_after(value: str | None) -> float | None:
    """Seconds from a Retry-After header.

    None when absent, not numeric (e.g. an HTTP-date), negative or not finite.
    """
    if value is None:
        return None
    value = value.strip()
    try:
        seconds: float = int(value)
    except ValueError:
        try:
            seconds = float(value)
        except ValueError:
            return None
    if not math.isfinite(seconds) or seconds < 0:
        return None
    return seconds


class PipedriveClient:
    """Synchronous client for the Pipedrive deals API.

    Debug mode is fixed when the client is built: a debug client returns a
    diagnostic envelope describing the outgoing request instead of the
    server's response body.
    """

    def __init__(
        self,
        api_token: str,
        base_url: str = API_BASE_URL,
        debug: bool = False,
        debug_include_response: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        self._config = ClientConfig(
            api_token=api_token,
            base_url=base_url,
            debug=debug,
            debug_include_response=debug_include_response,
            timeout=timeout,
        )
        self._transport = transport
        self._client: httpx.Client | None = None

    @classmethod
    def from_config(
        cls, config: ClientConfig, transport: httpx.BaseTransport | None = None
    ) -> "PipedriveClient":
        """Build a client from an existing configuration."""
        return cls(
            config.api_token,
            base_url=config.base_url,
            debug=config.debug,
            debug_include_response=config.debug_include_response,
            timeout=config.timeout,
            transport=transport,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def debug(self) -> bool:
        return self._config.debug

    def __enter__(self) -> "PipedriveClient":
        self._client = httpx.Client(timeout=self._config.timeout, transport=self._transport)
        return self

    def __exit__(self, *args: Any) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def _send(self, request: ApiRequest) -> httpx.Response:
        """Perform one HTTP round trip. No retries."""
        if not self._client:
            raise PipedriveError("Client not initialized. Use context manager.")

        logger.debug("%s %s", request.method, request.redacted_url())
        try:
            return self._client.send(request.to_httpx())
        except httpx.RequestError as e:
            raise TransportError(
                f"Request to {request.redacted_url()} failed: {e}"
            ) from e

    def _handle_response(self, request: ApiRequest, response: httpx.Response) -> Any:
        """Turn a raw response into the caller's result."""
        status = response.status_code

        # Handle rate limiting (429) before anything else, debug included
        if status == 429:
            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            logger.warning(
                "Rate limited on %s %s (retry after %s)",
                request.method,
                request.redacted_url(),
                retry_after,
            )
            raise RateLimitError(retry_after, details={"url": request.redacted_url()})

        if self.debug:
            envelope: dict[str, Any] = {
                "headers": dict(request.headers),
                "body": dict(request.body),
                "transport_info": {
                    "method": request.method,
                    "url": request.url,
                    "status_code": status,
                    "http_version": response.http_version,
                    "elapsed": response.elapsed.total_seconds(),
                    "response_headers": dict(response.headers),
                },
            }
            if self._config.debug_include_response:
                envelope["response"] = self._decode(request, response)
            return envelope

        return self._decode(request, response)

    def _decode(self, request: ApiRequest, response: httpx.Response) -> Any:
        # Handle empty responses
        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            # Non-JSON response (e.g., HTML error page)
            raise TransportError(
                f"Invalid JSON response from {request.redacted_url()}",
                status_code=response.status_code,
                details={"content": response.text[:500]},
            ) from e

    def request(
        self,
        method: str,
        path: str,
        body: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Build, send and unwrap a single API call."""
        api_request = build_request(self._config, method, path, body, headers)
        response = self._send(api_request)
        return self._handle_response(api_request, response)

    def get_deals(self, options: Mapping[str, Any] | None = None) -> Any:
        """Get all deals.

        Possible options:
            filter_id: ID of the filter to use
            start: number of items to skip
            limit: maximum number of items in response
            sort: comma separated fields and directions, e.g. "title ASC"
            owned_by_you: only include deals owned by the user
        """
        body = merge_options({}, options, DEAL_LIST_OPTIONS)
        return self.request("GET", DEALS.endpoint, body)

    def get_deal(self, deal_id: int | str | None = None) -> Any:
        """Get a deal by ID."""
        require(deal_id, "id", "An ID is required")
        return self.request("GET", resource_path(DEALS.endpoint, deal_id))

    def create_deal(self, title: str | None = None, fields: DealFields | None = None) -> Any:
        """Create a new deal.

        Args:
            title: Title of the deal. Required; falls back to fields["title"]
            fields: Other deal attributes (value, currency, user_id, person_id,
                org_id, stage_id, status, lost_reason, add_time, visible_to)
                and custom field keys

        Raises:
            MissingArgumentError: title absent or empty
            InvalidArgumentError: status or visible_to not allowed
        """
        fields = dict(fields or {})
        if title is None:
            title = fields.get("title")

        validate_deal(title, fields)

        body = {key: value for key, value in fields.items() if value is not None}
        body["title"] = title
        return self.request("POST", DEALS.endpoint, body)

    def get_deal_fields(self) -> Any:
        """Get all deal field definitions."""
        return self.request("GET", DEALS.fields_endpoint)

    def get_deal_field(self, field_id: int | str | None = None) -> Any:
        """Get a deal field definition by ID."""
        require(field_id, "id", "An ID is required")
        return self.request("GET", resource_path(DEALS.fields_endpoint, field_id))
