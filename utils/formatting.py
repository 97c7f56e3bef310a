"""Display helpers for timestamps and names coming back from Supabase."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo

_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a Postgres/ISO timestamp. Naive values are taken as UTC."""
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        s = str(value).strip()
        if not s:
            return None
        s = s.replace(" ", "T", 1) if "T" not in s else s
        if s.endswith("Z") or s.endswith("z"):
            s = s[:-1] + "+00:00"
        # fromisoformat on 3.10 only takes 3 or 6 fractional digits
        s = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), s, count=1)
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _localize(value: Any, tz_name: str) -> Optional[datetime]:
    dt = parse_timestamp(value)
    if dt is None:
        return None
    try:
        return dt.astimezone(ZoneInfo(tz_name or "UTC"))
    except Exception:
        return dt.astimezone(timezone.utc)


def format_date(value: Any, tz_name: str = "UTC") -> str:
    """e.g. 'Mon, Jan 15, 2024'"""
    dt = _localize(value, tz_name)
    if dt is None:
        return ""
    return f"{dt:%a}, {dt:%b} {dt.day}, {dt.year}"


def format_datetime(value: Any, tz_name: str = "UTC") -> str:
    """e.g. 'Mon, Jan 15, 2024, 03:04 PM'"""
    dt = _localize(value, tz_name)
    if dt is None:
        return ""
    return f"{format_date(dt, tz_name)}, {dt:%I:%M %p}"


def format_short_date(value: Any, tz_name: str = "UTC") -> str:
    """e.g. '1/15/2024'"""
    dt = _localize(value, tz_name)
    if dt is None:
        return ""
    return f"{dt.month}/{dt.day}/{dt.year}"


def initials(full_name: str) -> str:
    parts = [p for p in (full_name or "").split() if p]
    return "".join(p[0].upper() for p in parts)
