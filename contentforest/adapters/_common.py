"""Helpers shared by the backend listers."""

from datetime import datetime, timezone
from typing import Any, Optional

from ..core.items import RawItem


def parse_timestamp(value: Optional[str]) -> Optional[int]:
    """Parse an ISO-8601 timestamp into epoch milliseconds.

    Returns None for missing or unparsable values.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def handle_id(handle: Any) -> Optional[str]:
    """Backend id of a root handle: a RawItem, a mapping or an object with ``id``."""
    if isinstance(handle, str):
        return handle
    if isinstance(handle, dict):
        return handle.get("id")
    return getattr(handle, "id", None)


def native_item(handle: Any) -> Any:
    """The backend payload behind a handle (discovered folders carry it in ``raw``)."""
    if isinstance(handle, RawItem):
        return handle.raw
    return handle
