"""Viewpoint identity helpers."""

from __future__ import annotations

from typing import Any, Optional


def viewpoint_id(lat: Any, lng: Any, direction: Any) -> str:
    """Return the composite key for a location and viewing direction.

    Values are used exactly as received so that the same query string always
    maps to the same key: ("10.0", "-20.0", "90") -> "10.0--20.0-90".
    """
    parts = ["" if value is None else str(value).strip() for value in (lat, lng, direction)]
    if not all(parts):
        raise ValueError("lat, lng and dir are required to identify a viewpoint.")
    return "-".join(parts)


def resolve_viewpoint_id(
    explicit: Optional[str] = None,
    lat: Any = None,
    lng: Any = None,
    direction: Any = None,
) -> Optional[str]:
    """Return `explicit` when given, otherwise derive the key from coordinates.

    Returns None when neither form is provided at all.
    """
    if explicit and explicit.strip():
        return explicit.strip()
    if lat is None and lng is None and direction is None:
        return None
    return viewpoint_id(lat, lng, direction)
