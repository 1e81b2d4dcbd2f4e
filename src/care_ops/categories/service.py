from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional, Sequence

from ..audit.repository import AuditLogRepository
from ..common.validators import optional_text, require_int, require_non_empty
from ..core.enums import AuditAction, Role, SeverityLevel
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import Actor
from .defaults import DEFAULT_THRESHOLDS, numbered_categories
from .model import DisciplineThreshold, ViolationCategory
from .repository import CategoryRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeedResult:
    categories_created: int
    thresholds_created: int


def parse_severity(value: Any) -> SeverityLevel:
    try:
        return SeverityLevel(str(value or "").strip().upper())
    except ValueError:
        raise ValidationError("Invalid severity level")


class CategoryService:
    """Use cases: manage the violation catalogue and the threshold policy (admin)."""

    def __init__(self, categories: CategoryRepository, audit: AuditLogRepository):
        self._categories = categories
        self._audit = audit

    @staticmethod
    def _require_admin(actor: Actor, what: str) -> None:
        if actor.role != Role.ADMIN:
            raise AuthorizationError(f"Only administrators can {what}")

    def list_categories(self) -> dict:
        categories = list(self._categories.list_active())
        categories.sort(key=lambda c: (c.severity_level.rank, c.display_order, c.category_name))
        grouped: dict[str, list[ViolationCategory]] = {s.value: [] for s in SeverityLevel}
        for c in categories:
            grouped[c.severity_level.value].append(c)
        return {"categories": categories, "grouped": grouped}

    def get_category(self, category_id: int) -> ViolationCategory:
        category = self._categories.get_by_id(int(category_id))
        if not category:
            raise NotFoundError("Category not found")
        return category

    def create_category(
        self,
        *,
        actor: Actor,
        category_name: str,
        severity_level: Any,
        default_points: Any,
        description: Optional[str] = None,
        display_order: Any = 0,
    ) -> int:
        self._require_admin(actor, "create violation categories")

        name = require_non_empty(category_name, "Category name")
        severity = parse_severity(severity_level)
        if default_points in (None, ""):
            raise ValidationError("Default points are required")
        points = require_int(default_points, "Default points", minimum=0)
        order = require_int(display_order or 0, "Display order")

        category_id = self._categories.create(
            category_name=name,
            severity_level=severity,
            default_points=points,
            description=optional_text(description),
            display_order=order,
        )
        self._audit.record(
            user_id=actor.user_id,
            action=AuditAction.CREATE,
            entity_type="VIOLATION_CATEGORY",
            entity_id=str(category_id),
            details={"category_name": name, "severity_level": severity.value, "default_points": points},
        )
        logger.info("Violation category %s created by user %s", category_id, actor.user_id)
        return category_id

    def update_category(self, *, actor: Actor, category_id: int, changes: dict) -> ViolationCategory:
        self._require_admin(actor, "update violation categories")
        existing = self.get_category(category_id)

        updates: dict[str, Any] = {}
        if "category_name" in changes:
            updates["category_name"] = require_non_empty(changes["category_name"], "Category name")
        if "severity_level" in changes:
            updates["severity_level"] = parse_severity(changes["severity_level"])
        if "default_points" in changes:
            updates["default_points"] = require_int(changes["default_points"], "Default points", minimum=0)
        if "description" in changes:
            updates["description"] = optional_text(changes["description"])
        if "display_order" in changes:
            updates["display_order"] = require_int(changes["display_order"] or 0, "Display order")
        if "is_active" in changes:
            updates["is_active"] = bool(changes["is_active"])

        category = replace(existing, **updates)
        if not self._categories.update(category):
            raise ValidationError("Failed to update category")

        self._audit.record(
            user_id=actor.user_id,
            action=AuditAction.UPDATE,
            entity_type="VIOLATION_CATEGORY",
            entity_id=str(category.category_id),
            details={
                "category_name": category.category_name,
                "severity_level": category.severity_level.value,
                "default_points": category.default_points,
                "is_active": category.is_active,
            },
        )
        return category

    def delete_category(self, *, actor: Actor, category_id: int) -> bool:
        """Delete a category; returns True when it was only deactivated (still referenced)."""

        self._require_admin(actor, "delete violation categories")
        existing = self.get_category(category_id)

        soft = self._categories.is_referenced(existing.category_id)
        if soft:
            self._categories.deactivate(existing.category_id)
        else:
            self._categories.delete(existing.category_id)

        self._audit.record(
            user_id=actor.user_id,
            action=AuditAction.DELETE,
            entity_type="VIOLATION_CATEGORY",
            entity_id=str(existing.category_id),
            details={"category_name": existing.category_name, "soft_delete": soft},
        )
        return soft

    def seed_defaults(self, *, actor: Actor) -> SeedResult:
        self._require_admin(actor, "seed violation categories")

        if self._categories.count() > 0:
            raise ValidationError("Categories already exist. Delete existing categories first to reseed.")

        created = self._categories.bulk_create(numbered_categories())
        thresholds = 0
        if self._categories.count_thresholds() == 0:
            thresholds = self._categories.bulk_create_thresholds(DEFAULT_THRESHOLDS)

        self._audit.record(
            user_id=actor.user_id,
            action=AuditAction.CREATE,
            entity_type="VIOLATION_CATEGORY",
            entity_id="SEED",
            details={"categories_created": created, "thresholds_created": thresholds},
        )
        logger.info("Seeded %s categories and %s thresholds", created, thresholds)
        return SeedResult(categories_created=created, thresholds_created=thresholds)

    def seed_status(self) -> dict:
        categories = self._categories.count()
        return {
            "seeded": categories > 0,
            "categories_count": categories,
            "thresholds_count": self._categories.count_thresholds(),
        }

    def list_thresholds(self) -> Sequence[DisciplineThreshold]:
        return self._categories.list_thresholds(active_only=True)

    def update_thresholds(self, *, actor: Actor, thresholds: Any) -> list[DisciplineThreshold]:
        self._require_admin(actor, "update discipline thresholds")
        if not isinstance(thresholds, list):
            raise ValidationError("Thresholds must be an array")

        updated: list[DisciplineThreshold] = []
        for item in thresholds:
            threshold_id = require_int((item or {}).get("id"), "Threshold id")
            existing = self._categories.get_threshold(threshold_id)
            if not existing:
                raise NotFoundError(f"Threshold {threshold_id} not found")

            changes: dict[str, Any] = {}
            if item.get("point_minimum") is not None:
                changes["point_minimum"] = require_int(item["point_minimum"], "Point minimum", minimum=0)
            if item.get("point_maximum") is not None:
                changes["point_maximum"] = require_int(item["point_maximum"], "Point maximum", minimum=0)
            if item.get("action_required") is not None:
                changes["action_required"] = require_non_empty(item["action_required"], "Action required")
            if "description" in item:
                changes["description"] = optional_text(item["description"])
            if item.get("is_active") is not None:
                changes["is_active"] = bool(item["is_active"])

            threshold = replace(existing, **changes)
            if threshold.point_maximum < threshold.point_minimum:
                raise ValidationError("Point maximum must be >= point minimum")
            self._categories.update_threshold(threshold)
            updated.append(threshold)

        self._audit.record(
            user_id=actor.user_id,
            action=AuditAction.UPDATE,
            entity_type="DISCIPLINE_THRESHOLD",
            entity_id="BATCH",
            details={"updated_count": len(updated)},
        )
        return updated
