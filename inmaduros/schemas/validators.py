"""Reusable field checks for request schemas."""

from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse


def to_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC; aware ones are converted to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def ensure_future(value: datetime) -> datetime:
    value = to_utc(value)
    if value <= datetime.now(timezone.utc):
        raise ValueError("Route date must be in the future")
    return value


def ensure_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Must be a valid URL")
    return value


def is_google_maps_url(value: str) -> bool:
    """
    Accepts short links (maps.app.goo.gl, goo.gl/maps) and any google.<tld>
    maps URL (maps.google.com/..., www.google.es/maps/...).
    """
    parsed = urlparse(value)
    host = (parsed.hostname or "").lower()
    path = parsed.path or ""
    if host == "maps.app.goo.gl":
        return True
    if host == "goo.gl":
        return path.startswith("/maps")
    labels = host.split(".")
    if "google" not in labels:
        return False
    return labels[0] == "maps" or path.startswith("/maps")
