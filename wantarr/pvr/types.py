"""Shared data structures for the PVR adapters and the database."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

_FRACTION_RE = re.compile(r"\.(\d+)")
_TIMESTAMP_FIELDS = frozenset({"air_date_utc", "last_search"})


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp as written by the *arr APIs (or None)."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"expected timestamp string, got {type(value).__name__}")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    # fromisoformat before 3.11 only takes 3 or 6 fractional digits
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Aware UTC copy of ``value``; naive values are taken as local time."""
    if value is None:
        return None
    if not isinstance(value, datetime):
        raise ValueError(f"expected datetime, got {type(value).__name__}")
    return value.astimezone(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    value = to_utc(value)
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")


def format_episode_name(title: str, season: int, episode: int) -> str:
    """Human readable episode label, e.g. ``Foo - S02E05``."""
    return f"{title} - S{season:02d}E{episode:02d}"


@dataclass
class MediaItem:
    """One wanted item and its search history."""

    name: str
    air_date_utc: Optional[datetime] = None
    last_search: Optional[datetime] = None

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _TIMESTAMP_FIELDS:
            value = to_utc(value)
        super().__setattr__(name, value)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "Name": self.name,
            "AirDateUtc": format_timestamp(self.air_date_utc),
            "LastSearch": format_timestamp(self.last_search),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MediaItem":
        if not isinstance(data, Mapping):
            raise ValueError(f"media item has unexpected type '{type(data).__name__}'")
        name = data.get("Name")
        if not isinstance(name, str):
            raise ValueError("media item is missing a 'Name' string")
        return cls(
            name=name,
            air_date_utc=parse_timestamp(data.get("AirDateUtc")),
            last_search=parse_timestamp(data.get("LastSearch")),
        )
