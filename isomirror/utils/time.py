from __future__ import annotations

from datetime import datetime, timezone


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def utc_stamp(now: datetime) -> str:
    """Format a timestamp the way release notes show it, e.g. 2024-01-02 03:04:05 UTC."""
    return now.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
