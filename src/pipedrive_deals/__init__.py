"""Pipedrive deals API client."""

from .api import PipedriveClient
from .config import ClientConfig
from .exceptions import (
    InvalidArgumentError,
    MissingArgumentError,
    PipedriveError,
    RateLimitError,
    TransportError,
)

__version__ = "0.1.0"

__all__ = [
    "ClientConfig",
    "InvalidArgumentError",
    "MissingArgumentError",
    "PipedriveClient",
    "PipedriveError",
    "RateLimitError",
    "TransportError",
    "__version__",
]
