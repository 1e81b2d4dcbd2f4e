"""Discipline tiers and the point thresholds that select them."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from ..core.constants import MAX_DISCIPLINE_POINTS


class DisciplineLevel(str, Enum):
    GOOD_STANDING = "Good Standing"
    COACHING = "Coaching"
    VERBAL_WARNING = "Verbal Warning"
    WRITTEN_WARNING = "Written Warning"
    FINAL_WARNING = "Final Warning"
    TERMINATION_REVIEW = "Termination Review"

    @property
    def label(self) -> str:
        return self.value

    @property
    def rank(self) -> int:
        return list(DisciplineLevel).index(self)


# Inclusive lower bounds, highest first.
DISCIPLINE_THRESHOLDS: tuple[tuple[int, DisciplineLevel], ...] = (
    (MAX_DISCIPLINE_POINTS, DisciplineLevel.TERMINATION_REVIEW),
    (14, DisciplineLevel.FINAL_WARNING),
    (10, DisciplineLevel.WRITTEN_WARNING),
    (6, DisciplineLevel.VERBAL_WARNING),
    (1, DisciplineLevel.COACHING),
)

NOTIFY_THRESHOLDS: tuple[int, ...] = (6, 10, 14, 18)


def level_for_points(points: int) -> DisciplineLevel:
    for minimum, level in DISCIPLINE_THRESHOLDS:
        if points >= minimum:
            return level
    return DisciplineLevel.GOOD_STANDING


def next_threshold(points: int) -> Optional[int]:
    """Lowest threshold strictly above `points`, or None once at termination review."""
    for minimum, _ in reversed(DISCIPLINE_THRESHOLDS[:-1]):
        if points < minimum:
            return minimum
    return None


def points_to_next_threshold(points: int) -> int:
    target = next_threshold(points)
    return 0 if target is None else target - points


def thresholds_crossed(before: int, after: int) -> list[int]:
    return [t for t in NOTIFY_THRESHOLDS if before < t <= after]


def threshold_table() -> list[dict]:
    rows = []
    ordered = list(reversed(DISCIPLINE_THRESHOLDS))
    for i, (minimum, level) in enumerate(ordered):
        maximum = ordered[i + 1][0] - 1 if i + 1 < len(ordered) else None
        rows.append({"level": level.label, "min": minimum, "max": maximum})
    return rows
