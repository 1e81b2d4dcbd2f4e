from __future__ import annotations

import pytest

from care_ops.categories.defaults import DEFAULT_CATEGORIES, DEFAULT_THRESHOLDS, numbered_categories
from care_ops.core.enums import AuditAction, SeverityLevel
from care_ops.core.exceptions import AuthorizationError, NotFoundError, ValidationError

ADMIN, HR = 1, 2


def test_list_categories_groups_active_by_severity(category_service):
    data = category_service.list_categories()

    names = [c.category_name for c in data["categories"]]
    assert "Retired rule" not in names
    assert names[0] == "Clock-in 1-15 minutes late"
    assert names[-1] == "Abuse or neglect"
    assert [c.category_name for c in data["grouped"]["SERIOUS"]] == ["No call/no show"]
    assert data["grouped"]["MODERATE"] == []
    assert list(data["grouped"]) == [s.value for s in SeverityLevel]


def test_create_category(category_service, repos, as_actor):
    category_id = category_service.create_category(
        actor=as_actor(ADMIN),
        category_name="  Cell phone use on shift ",
        severity_level="moderate",
        default_points="2",
    )

    created = category_service.get_category(category_id)
    assert created.category_name == "Cell phone use on shift"
    assert created.severity_level == SeverityLevel.MODERATE
    assert created.default_points == 2
    assert repos.audit.entries[-1]["action"] == AuditAction.CREATE


@pytest.mark.parametrize(
    "name, severity, points",
    [("", "MINOR", 1), ("Late", "TRIVIAL", 1), ("Late", "MINOR", -1), ("Late", "MINOR", None), ("Late", "MINOR", "x")],
)
def test_create_category_validation(category_service, as_actor, name, severity, points):
    with pytest.raises(ValidationError):
        category_service.create_category(
            actor=as_actor(ADMIN), category_name=name, severity_level=severity, default_points=points
        )


def test_only_admin_manages_categories(category_service, as_actor):
    with pytest.raises(AuthorizationError):
        category_service.create_category(
            actor=as_actor(HR), category_name="Late", severity_level="MINOR", default_points=1
        )
    with pytest.raises(AuthorizationError):
        category_service.delete_category(actor=as_actor(HR), category_id=1)


def test_update_category(category_service, as_actor):
    updated = category_service.update_category(
        actor=as_actor(ADMIN), category_id=2, changes={"default_points": 8, "description": "Two-hour rule"}
    )

    assert updated.default_points == 8
    assert updated.description == "Two-hour rule"
    assert updated.category_name == "No call/no show"


def test_update_missing_category(category_service, as_actor):
    with pytest.raises(NotFoundError):
        category_service.update_category(actor=as_actor(ADMIN), category_id=99, changes={})


def test_delete_referenced_category_is_soft(category_service, repos, as_actor):
    repos.categories.in_use.add(1)

    soft = category_service.delete_category(actor=as_actor(ADMIN), category_id=1)

    assert soft is True
    assert repos.categories.get_by_id(1).is_active is False
    assert repos.audit.entries[-1]["details"]["soft_delete"] is True


def test_delete_unreferenced_category_is_hard(category_service, repos, as_actor):
    soft = category_service.delete_category(actor=as_actor(ADMIN), category_id=2)

    assert soft is False
    assert repos.categories.get_by_id(2) is None


def test_seed_refuses_when_categories_exist(category_service, as_actor):
    with pytest.raises(ValidationError):
        category_service.seed_defaults(actor=as_actor(ADMIN))


def test_seed_into_empty_catalogue(category_service, repos, as_actor):
    repos.categories.categories.clear()

    result = category_service.seed_defaults(actor=as_actor(ADMIN))

    assert result.categories_created == len(DEFAULT_CATEGORIES)
    assert result.thresholds_created == len(DEFAULT_THRESHOLDS)
    status = category_service.seed_status()
    assert status["seeded"] is True
    assert status["categories_count"] == len(DEFAULT_CATEGORIES)
    assert status["thresholds_count"] == len(DEFAULT_THRESHOLDS)


def test_numbered_categories_restart_per_severity():
    rows = numbered_categories()

    minors = [r["display_order"] for r in rows if r["severity_level"] == SeverityLevel.MINOR]
    criticals = [r["display_order"] for r in rows if r["severity_level"] == SeverityLevel.CRITICAL]
    assert minors[:3] == [1, 2, 3]
    assert criticals[0] == 1


def test_update_thresholds(category_service, repos, as_actor):
    repos.categories.bulk_create_thresholds(DEFAULT_THRESHOLDS)

    updated = category_service.update_thresholds(
        actor=as_actor(ADMIN),
        thresholds=[{"id": 2, "action_required": "Formal verbal warning", "point_maximum": 9}],
    )

    assert updated[0].action_required == "Formal verbal warning"
    assert category_service.list_thresholds()[1].action_required == "Formal verbal warning"


def test_update_thresholds_rejects_inverted_range(category_service, repos, as_actor):
    repos.categories.bulk_create_thresholds(DEFAULT_THRESHOLDS)

    with pytest.raises(ValidationError):
        category_service.update_thresholds(actor=as_actor(ADMIN), thresholds=[{"id": 1, "point_maximum": 0}])


def test_update_thresholds_requires_list(category_service, as_actor):
    with pytest.raises(ValidationError):
        category_service.update_thresholds(actor=as_actor(ADMIN), thresholds={"id": 1})
