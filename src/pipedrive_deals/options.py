"""Allow-list merging of caller options into request bodies."""

from collections.abc import Iterable, Mapping
from typing import Any


def parse_field_list(fields: str | Iterable[str]) -> tuple[str, ...]:
    """Normalize an allow-list given as "a,b,c" or as an iterable of names."""
    if isinstance(fields, str):
        fields = fields.split(",")
    return tuple(name.strip() for name in fields if name and name.strip())


def merge_options(
    target: Mapping[str, Any],
    source: Mapping[str, Any] | None,
    fields: str | Iterable[str],
) -> dict[str, Any]:
    """Copy allow-listed keys from source into a copy of target.

    A key is copied only when source defines it with a non-None value;
    keys outside the allow-list are ignored. Neither input is modified.

    Args:
        target: Base mapping (e.g. the request body built so far)
        source: Caller-supplied options, may be None
        fields: Allow-list as a comma-delimited string or iterable of names

    Returns:
        A new dict
    """
    merged = dict(target)
    if not source:
        return merged

    for name in parse_field_list(fields):
        value = source.get(name)
        if value is not None:
            merged[name] = value

    return merged
