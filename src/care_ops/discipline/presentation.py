"""Formatting helpers for the points progress bar on dashboards and the discipline tab."""

from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import MAX_DISCIPLINE_POINTS


@dataclass(frozen=True)
class PointsBar:
    percent: float
    color: str


def progress_percent(points: int) -> float:
    return max(min(points / MAX_DISCIPLINE_POINTS * 100, 100.0), 0.0)


def points_color(points: int) -> str:
    if points >= 14:
        return "red"
    if points >= 10:
        return "orange"
    if points >= 6:
        return "yellow"
    return "green"


def points_bar(points: int) -> PointsBar:
    return PointsBar(percent=round(progress_percent(points), 1), color=points_color(points))
