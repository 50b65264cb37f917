from __future__ import annotations

import datetime as dt

# strftime's %Y does not zero-pad years below 1000; the year is formatted separately.
STORAGE_FORMAT = "-%m-%dT%H:%M:%S.%fZ"


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def utc_now_iso() -> str:
    return utc_now().replace(microsecond=0).isoformat().replace("+00:00", "Z")


def to_storage(value: dt.datetime) -> str:
    """Render a timestamp as fixed-width UTC text; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    value = value.astimezone(dt.timezone.utc)
    return f"{value.year:04d}{value.strftime(STORAGE_FORMAT)}"
