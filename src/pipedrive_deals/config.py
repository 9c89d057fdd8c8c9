"""Data-driven configuration for the Pipedrive deals client.

Endpoint names, allow-lists and enum values are centralized here.
"""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class EntityConfig:
    """Configuration for a Pipedrive entity type."""

    name: str
    endpoint: str
    fields_endpoint: str | None = None


ENTITIES: dict[str, EntityConfig] = {
    "deals": EntityConfig(
        name="deals",
        endpoint="deals",
        fields_endpoint="dealFields",
    ),
}

DEALS = ENTITIES["deals"]

# API configuration
API_BASE_URL = "https://api.pipedrive.com/v1/"
DEFAULT_TIMEOUT = 30.0  # seconds

DEFAULT_HEADERS: dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

# Options accepted by GET /deals
DEAL_LIST_OPTIONS = ("filter_id", "start", "limit", "sort", "owned_by_you")

DEAL_STATUSES = ("open", "won", "lost", "deleted")

# 1 = private, 3 = shared
VISIBLE_TO_VALUES = (1, 3)


@dataclass(frozen=True)
class ClientConfig:
    """Settings shared by every request a client makes.

    Fixed at construction. Use ``with_debug()`` to get a diagnostic copy
    instead of toggling a live client.
    """

    api_token: str
    base_url: str = API_BASE_URL
    debug: bool = False
    # Debug envelopes echo the outgoing request only; set this to also
    # carry the decoded server body under "response".
    debug_include_response: bool = False
    timeout: float = DEFAULT_TIMEOUT

    def with_debug(self, enabled: bool = True) -> "ClientConfig":
        """Return a copy with debug mode switched on or off."""
        return replace(self, debug=enabled)
