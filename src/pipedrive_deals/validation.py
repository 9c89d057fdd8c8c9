"""Fail-fast argument checks run before any request is built."""

from collections.abc import Mapping
from typing import Any

from .config import DEAL_STATUSES, VISIBLE_TO_VALUES
from .exceptions import InvalidArgumentError, MissingArgumentError


def is_missing(value: Any) -> bool:
    """None and the empty string both count as not supplied."""
    return value is None or value == ""


def require(value: Any, name: str, message: str | None = None) -> None:
    """Raise MissingArgumentError if a required value is absent."""
    if is_missing(value):
        raise MissingArgumentError(name, message)


def validate_status(status: Any) -> None:
    """Deal status must be one of open, won, lost, deleted."""
    if status is None:
        return
    if not isinstance(status, str) or status not in DEAL_STATUSES:
        raise InvalidArgumentError("status", status, DEAL_STATUSES)


def validate_visible_to(visible_to: Any) -> None:
    """visible_to must be exactly the integer 1 or 3."""
    if visible_to is None:
        return
    # bool is an int subclass; True must not pass as 1
    if type(visible_to) is not int or visible_to not in VISIBLE_TO_VALUES:
        raise InvalidArgumentError("visible_to", visible_to, VISIBLE_TO_VALUES)


def validate_deal(title: Any, fields: Mapping[str, Any] | None = None) -> None:
    """Check a new deal's title, status and visibility, in that order."""
    require(title, "title")
    fields = fields or {}
    validate_status(fields.get("status"))
    validate_visible_to(fields.get("visible_to"))
