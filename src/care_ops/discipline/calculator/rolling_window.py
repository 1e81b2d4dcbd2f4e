from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Sequence

from ...core.constants import ROLLING_WINDOW_DAYS
from ...core.enums import CorrectiveActionStatus
from ...core.exceptions import InvalidRecordError
from ..levels import level_for_points
from ..model import DisciplineStats, PointRecord, effective_points
from .base import DisciplineCalculator, R, RecordBuckets


def _violation_day(record: PointRecord) -> date:
    value = record.violation_date
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            pass
    raise InvalidRecordError(f"Unreadable violation date: {value!r}")


class DisciplineStatsCalculator(DisciplineCalculator):
    """Standard rule: non-voided points dated within the last 90 calendar days count.

    A record dated exactly on the cutoff day is still rolling.
    """

    def __init__(self, window_days: int = ROLLING_WINDOW_DAYS):
        self._window = timedelta(days=window_days)

    def cutoff(self, now: date | datetime) -> date:
        today = now.date() if isinstance(now, datetime) else now
        return today - self._window

    def expires_on(self, record: PointRecord) -> date:
        return _violation_day(record) + self._window

    def partition(self, records: Sequence[R], now: date | datetime) -> RecordBuckets[R]:
        cutoff = self.cutoff(now)
        rolling: list[R] = []
        expired: list[R] = []
        voided: list[R] = []

        for r in records:
            if r.status == CorrectiveActionStatus.VOIDED:
                voided.append(r)
            elif _violation_day(r) >= cutoff:
                rolling.append(r)
            else:
                expired.append(r)

        return RecordBuckets(rolling=rolling, expired=expired, voided=voided)

    def current_points(self, records: Sequence[PointRecord], now: date | datetime) -> int:
        return sum(effective_points(r) for r in self.partition(records, now).rolling)

    def compute(self, records: Sequence[PointRecord], now: date | datetime) -> DisciplineStats:
        buckets = self.partition(records, now)
        points = sum(effective_points(r) for r in buckets.rolling)

        return DisciplineStats(
            current_points=points,
            discipline_level=level_for_points(points),
            rolling_count=len(buckets.rolling),
            expired_count=len(buckets.expired),
            voided_count=len(buckets.voided),
            total_count=len(records),
        )
