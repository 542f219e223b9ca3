from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_clock(moment: datetime, tz_name: str = "Asia/Kolkata") -> str:
    return moment.astimezone(ZoneInfo(tz_name)).strftime("%I:%M:%S %p")
