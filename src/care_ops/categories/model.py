from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import SeverityLevel


@dataclass(frozen=True)
class ViolationCategory:
    category_id: int
    category_name: str
    severity_level: SeverityLevel
    default_points: int
    description: Optional[str] = None
    display_order: int = 0
    is_active: bool = True


@dataclass(frozen=True)
class DisciplineThreshold:
    """Policy text shown next to each point band (what the supervisor must do)."""

    threshold_id: int
    point_minimum: int
    point_maximum: int
    action_required: str
    description: Optional[str] = None
    is_active: bool = True


def category_as_dict(c: ViolationCategory) -> dict:
    return {
        "id": c.category_id,
        "category_name": c.category_name,
        "severity_level": c.severity_level.value,
        "default_points": c.default_points,
        "description": c.description,
        "display_order": c.display_order,
        "is_active": c.is_active,
    }


def threshold_as_dict(t: DisciplineThreshold) -> dict:
    return {
        "id": t.threshold_id,
        "point_minimum": t.point_minimum,
        "point_maximum": t.point_maximum,
        "action_required": t.action_required,
        "description": t.description,
        "is_active": t.is_active,
    }
