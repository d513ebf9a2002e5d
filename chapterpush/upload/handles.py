"""Remote chapter handle normalization.

The content service reports the created chapter identifier in several shapes.
`extract_chapter_handle` checks the known locations in a fixed order and
accepts only plain strings or `{"$oid": "..."}` wrappers.
"""

from __future__ import annotations

from typing import Any, Mapping


# Checked in order; the first location that is present decides the handle.
_HANDLE_LOCATIONS: tuple[tuple[str, ...], ...] = (
    ("data", "_id"),
    ("data", "id"),
    ("chapter", "_id"),
    ("chapter", "id"),
    ("_id",),
    ("id",),
)


class ChapterHandleError(ValueError):
    """Raised when a create response carries no usable chapter handle."""


def _lookup(payload: Mapping[str, Any], path: tuple[str, ...]) -> tuple[bool, Any]:
    """Return `(present, value)` for a nested key path."""

    current: Any = payload
    for key in path:
        if not isinstance(current, Mapping) or key not in current:
            return False, None
        current = current[key]
    return True, current


def _normalize_handle_value(value: Any) -> str | None:
    """Normalize a plain or `$oid`-wrapped identifier to a string."""

    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, Mapping) and set(value.keys()) == {"$oid"}:
        oid = value["$oid"]
        if isinstance(oid, str):
            return oid.strip() or None
    return None


def extract_chapter_handle(payload: Mapping[str, Any]) -> str:
    """Return the chapter handle carried by a create response payload.

    Raises:
        ChapterHandleError: If no known location is present or the present value
            is not a non-empty string or `{"$oid": string}`.
    """

    for path in _HANDLE_LOCATIONS:
        present, value = _lookup(payload, path)
        if not present:
            continue
        handle = _normalize_handle_value(value)
        if handle is None:
            location = ".".join(path)
            raise ChapterHandleError(
                f"Create response field `{location}` is not a usable chapter id "
                f"({type(value).__name__})."
            )
        return handle

    known = ", ".join(".".join(path) for path in _HANDLE_LOCATIONS)
    raise ChapterHandleError(f"Create response carries no chapter id (checked: {known}).")
