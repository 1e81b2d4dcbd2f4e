from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Protocol

from ..core.exceptions import ValidationError


class Clock(Protocol):
    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock:
    """Wall clock; services take a Clock so tests can pin "now"."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    def __init__(self, at: datetime):
        self._at = at

    def now(self) -> datetime:
        return self._at


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def parse_optional_date(value: Any) -> Optional[date]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_iso_date(str(value))


def parse_optional_datetime(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    try:
        return datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid datetime: {value!r}")


def as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def format_date(value: Optional[date | datetime], fmt: str = "%B %d, %Y") -> str:
    if value is None:
        return "N/A"
    return value.strftime(fmt)
