"""Request construction for the Pipedrive v1 API.

Builds a transport-independent request descriptor. Where the token goes
depends on the method: writes carry ``api_token`` in the query string,
reads carry it alongside the other body fields.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx

from .config import DEFAULT_HEADERS, ClientConfig

READ_METHODS = frozenset({"GET"})
WRITE_METHODS = frozenset({"POST"})

TOKEN_PARAM = "api_token"


@dataclass(frozen=True)
class ApiRequest:
    """A fully built request, ready to hand to the transport."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: dict[str, Any] = field(default_factory=dict)

    def to_httpx(self) -> httpx.Request:
        """Encode for the wire.

        POST bodies are sent as JSON. GET has no entity body, so its
        fields travel as query parameters.
        """
        if self.method in WRITE_METHODS:
            return httpx.Request(
                self.method,
                self.url,
                headers=self.headers,
                content=json.dumps(self.body).encode("utf-8"),
            )
        url = httpx.URL(self.url).copy_merge_params(self.body)
        return httpx.Request(self.method, url, headers=self.headers)

    def redacted_url(self) -> str:
        """URL with the token masked, for logs."""
        url = httpx.URL(self.url)
        if TOKEN_PARAM not in url.params:
            return self.url
        return str(url.copy_set_param(TOKEN_PARAM, "***"))


def merge_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    """Default JSON headers, overridden case-insensitively by the caller's."""
    merged = dict(DEFAULT_HEADERS)
    for name, value in (headers or {}).items():
        for existing in [k for k in merged if k.lower() == name.lower()]:
            del merged[existing]
        merged[name] = value
    return merged


def resource_path(endpoint: str, resource_id: Any | None = None) -> str:
    """Relative path for a collection or one of its members, e.g. deals/42."""
    if resource_id is None:
        return endpoint
    return f"{endpoint}/{quote(str(resource_id), safe='')}"


def build_request(
    config: ClientConfig,
    method: str,
    path: str,
    body: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
) -> ApiRequest:
    """Assemble method, URL, headers and body for one API call."""
    method = method.upper()
    url = f"{config.base_url.rstrip('/')}/{path.lstrip('/')}"
    payload = dict(body or {})

    if method in WRITE_METHODS:
        url = str(httpx.URL(url).copy_merge_params({TOKEN_PARAM: config.api_token}))
    elif method in READ_METHODS:
        payload[TOKEN_PARAM] = config.api_token
    else:
        raise ValueError(f"Unsupported method: {method}")

    return ApiRequest(method=method, url=url, headers=merge_headers(headers), body=payload)
