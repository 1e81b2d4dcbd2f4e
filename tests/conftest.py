from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from types import SimpleNamespace
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from care_ops.categories.model import DisciplineThreshold, ViolationCategory
from care_ops.common.datetime_utils import FixedClock
from care_ops.container import build_services
from care_ops.core.enums import CorrectiveActionStatus, Role, SeverityLevel
from care_ops.discipline.levels import level_for_points
from care_ops.discipline.model import CorrectiveAction, CorrectiveActionRecord, Signature
from care_ops.employees.model import Employee
from care_ops.users.model import Actor, User

PASSWORD = "secret123"
PASSWORD_HASH = generate_password_hash(PASSWORD)

HOUSES = {10: "Maple House", 20: "Oak House"}


class InMemoryUsers:
    def __init__(self):
        self.users: dict[int, User] = {}
        self.houses: dict[int, list[int]] = {}

    def add(self, user_id: int, username: str, role: Role, *, houses=(), is_active: bool = True) -> User:
        user = User(
            user_id=user_id,
            name=f"{username.title()} User",
            username=username,
            password_hash=PASSWORD_HASH,
            role=role,
            is_active=is_active,
        )
        self.users[user_id] = user
        self.houses[user_id] = list(houses)
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(int(user_id))

    def get_by_username(self, username: str) -> Optional[User]:
        for u in self.users.values():
            if u.username == username:
                return u
        return None

    def list_house_ids(self, user_id: int):
        return list(self.houses.get(int(user_id), []))

    def list_ids_by_roles(self, roles):
        wanted = set(roles)
        return [u.user_id for u in self.users.values() if u.role in wanted and u.is_active]


@dataclass
class InMemoryEmployees:
    employees: dict[int, Employee] = field(default_factory=dict)

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.employees.get(int(employee_id))


class InMemoryCategories:
    def __init__(self):
        self.categories: dict[int, ViolationCategory] = {}
        self.thresholds: dict[int, DisciplineThreshold] = {}
        self.in_use: set[int] = set()
        self._next_id = 1
        self._next_threshold = 1

    def list_active(self):
        return [c for c in self.categories.values() if c.is_active]

    def get_by_id(self, category_id: int):
        return self.categories.get(int(category_id))

    def create(self, *, category_name, severity_level, default_points, description=None, display_order=0):
        cid = self._next_id
        self._next_id += 1
        self.categories[cid] = ViolationCategory(
            category_id=cid,
            category_name=category_name,
            severity_level=SeverityLevel(severity_level),
            default_points=int(default_points),
            description=description,
            display_order=int(display_order),
        )
        return cid

    def update(self, category):
        if category.category_id not in self.categories:
            return False
        self.categories[category.category_id] = category
        return True

    def is_referenced(self, category_id):
        return int(category_id) in self.in_use

    def deactivate(self, category_id):
        c = self.categories[int(category_id)]
        self.categories[c.category_id] = replace(c, is_active=False)
        return True

    def delete(self, category_id):
        return self.categories.pop(int(category_id), None) is not None

    def count(self):
        return len(self.categories)

    def bulk_create(self, categories):
        for c in categories:
            self.create(**c)
        return len(categories)

    def list_thresholds(self, *, active_only=True):
        items = sorted(self.thresholds.values(), key=lambda t: t.point_minimum)
        return [t for t in items if t.is_active or not active_only]

    def get_threshold(self, threshold_id):
        return self.thresholds.get(int(threshold_id))

    def update_threshold(self, threshold):
        self.thresholds[threshold.threshold_id] = threshold
        return True

    def count_thresholds(self):
        return len(self.thresholds)

    def bulk_create_thresholds(self, thresholds):
        for minimum, maximum, action_required, description in thresholds:
            tid = self._next_threshold
            self._next_threshold += 1
            self.thresholds[tid] = DisciplineThreshold(
                threshold_id=tid,
                point_minimum=minimum,
                point_maximum=maximum,
                action_required=action_required,
                description=description,
            )
        return len(thresholds)


class InMemoryActions:
    def __init__(self, *, users: InMemoryUsers, employees: InMemoryEmployees, categories: InMemoryCategories, now):
        self._users = users
        self._employees = employees
        self._categories = categories
        self._now = now
        self.rows: dict[int, CorrectiveAction] = {}
        self._next_id = 1
        self._next_sig = 1

    def _build(self, action_id: int, **kw) -> CorrectiveAction:
        employee = self._employees.get_by_id(kw["employee_id"])
        issuer = self._users.get_by_id(kw["issued_by_id"])
        category = self._categories.get_by_id(kw["category_id"])
        house_id = kw.get("house_id")
        return CorrectiveAction(
            action_id=action_id,
            employee_id=employee.employee_id,
            employee_first_name=employee.first_name,
            employee_last_name=employee.last_name,
            employee_position=employee.position,
            employee_hire_date=employee.hire_date,
            issued_by_id=issuer.user_id,
            issued_by_name=issuer.name,
            house_id=house_id,
            house_name=HOUSES.get(house_id) if house_id is not None else None,
            category_id=category.category_id,
            category_name=category.category_name,
            severity_level=category.severity_level,
            violation_date=kw["violation_date"],
            violation_time=kw.get("violation_time"),
            incident_description=kw.get("incident_description", "Incident"),
            status=kw.get("status", CorrectiveActionStatus.PENDING_SIGNATURE),
            points_assigned=kw["points_assigned"],
            points_adjusted=kw.get("points_adjusted"),
            discipline_level=kw["discipline_level"],
            created_at=kw.get("created_at") or self._now,
            mitigating_circumstances=kw.get("mitigating_circumstances"),
            adjustment_reason=kw.get("adjustment_reason"),
            corrective_expectations=list(kw.get("corrective_expectations") or []),
            consequences_text=kw.get("consequences_text"),
            pip_scheduled=bool(kw.get("pip_scheduled")),
            pip_date=kw.get("pip_date"),
        )

    def add(
        self,
        *,
        employee_id: int = 100,
        days_ago: int = 0,
        points_assigned: int = 1,
        points_adjusted: Optional[int] = None,
        status: CorrectiveActionStatus = CorrectiveActionStatus.PENDING_SIGNATURE,
        issued_by_id: int = 3,
        house_id: Optional[int] = 10,
        category_id: int = 1,
        created_at: Optional[datetime] = None,
    ) -> CorrectiveAction:
        """Insert a stored action dated `days_ago` days before the fixture clock."""
        action_id = self._next_id
        self._next_id += 1
        points = points_adjusted if points_adjusted is not None else points_assigned
        action = self._build(
            action_id,
            employee_id=employee_id,
            issued_by_id=issued_by_id,
            house_id=house_id,
            category_id=category_id,
            violation_date=self._now.date() - timedelta(days=days_ago),
            points_assigned=points_assigned,
            points_adjusted=points_adjusted,
            status=status,
            discipline_level=level_for_points(points),
            created_at=created_at or (self._now - timedelta(days=days_ago)),
        )
        self.rows[action_id] = action
        return action

    # ---- DisciplineRepository ----

    def get_by_id(self, action_id):
        return self.rows.get(int(action_id))

    def list_for_employee(self, employee_id, *, include_voided=True, limit=None):
        items = [a for a in self.rows.values() if a.employee_id == int(employee_id)]
        if not include_voided:
            items = [a for a in items if not a.is_voided]
        items.sort(key=lambda a: (a.violation_date, a.action_id), reverse=True)
        return items[:limit] if limit is not None else items

    def list_actions(self, filters, scope):
        items = []
        for a in self.rows.values():
            if not scope.unrestricted:
                in_house = a.house_id is not None and a.house_id in scope.house_ids
                issued = scope.issued_by_id is not None and a.issued_by_id == scope.issued_by_id
                if not (in_house or issued):
                    continue
            if filters.employee_id is not None and a.employee_id != filters.employee_id:
                continue
            if filters.house_id is not None and a.house_id != filters.house_id:
                continue
            if filters.status is not None and a.status != filters.status:
                continue
            if filters.severity_level is not None and a.severity_level != filters.severity_level:
                continue
            if filters.start_date is not None and a.violation_date < filters.start_date:
                continue
            if filters.end_date is not None and a.violation_date > filters.end_date:
                continue
            items.append(a)
        items.sort(key=lambda a: a.violation_date, reverse=True)
        return items[: filters.limit]

    def list_scoring_records(self, *, since):
        return [
            (
                a.employee_id,
                CorrectiveActionRecord(
                    violation_date=a.violation_date,
                    status=a.status,
                    points_assigned=a.points_assigned,
                    points_adjusted=a.points_adjusted,
                ),
            )
            for a in self.rows.values()
            if a.violation_date >= since
        ]

    def create(self, action):
        action_id = self._next_id
        self._next_id += 1
        self.rows[action_id] = self._build(action_id, **action.__dict__)
        return action_id

    def update(self, action_id, changes):
        self.rows[int(action_id)] = replace(self.rows[int(action_id)], **changes)
        return True

    def set_employee_response(self, action_id, *, status, employee_comments):
        self.rows[int(action_id)] = replace(self.rows[int(action_id)], status=status, employee_comments=employee_comments)
        return True

    def void(self, action_id, *, voided_by_id, void_reason, voided_at):
        row = self.rows[int(action_id)]
        self.rows[row.action_id] = replace(
            row,
            status=CorrectiveActionStatus.VOIDED,
            voided_at=voided_at,
            voided_by_name=self._users.get_by_id(voided_by_id).name,
            void_reason=void_reason,
        )
        return True

    def add_signature(
        self,
        action_id,
        *,
        signer_type,
        signer_id,
        signature_data,
        signed_at,
        ip_address=None,
        device_info=None,
    ):
        sig_id = self._next_sig
        self._next_sig += 1
        row = self.rows[int(action_id)]
        signer = self._users.get_by_id(signer_id)
        sig = Signature(
            signature_id=sig_id,
            action_id=row.action_id,
            signer_type=signer_type,
            signer_id=int(signer_id),
            signer_name=signer.name if signer else "",
            signature_data=signature_data,
            signed_at=signed_at,
            ip_address=ip_address,
            device_info=device_info,
        )
        self.rows[row.action_id] = replace(row, signatures=row.signatures + (sig,))
        return sig_id


class RecordingAudit:
    def __init__(self):
        self.entries: list[dict] = []

    def record(self, *, user_id, action, entity_type, entity_id, details=None):
        self.entries.append(
            {
                "user_id": user_id,
                "action": action,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "details": details,
            }
        )
        return len(self.entries)


class RecordingNotifications:
    def __init__(self):
        self.sent: list[dict] = []

    def create(self, *, user_id, title, message, type, link=None):
        self.sent.append({"user_id": user_id, "title": title, "message": message, "type": type, "link": link})
        return len(self.sent)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 15, 9, 30)


@pytest.fixture
def repos(fixed_now):
    users = InMemoryUsers()
    users.add(1, "admin", Role.ADMIN)
    users.add(2, "hr", Role.HR)
    users.add(3, "manager", Role.DESIGNATED_MANAGER, houses=[10])
    users.add(4, "coordinator", Role.DESIGNATED_COORDINATOR, houses=[20])
    users.add(5, "dsp", Role.DSP, houses=[10])
    users.add(6, "former", Role.HR, is_active=False)

    employees = InMemoryEmployees(
        {
            100: Employee(100, "Jordan", "Reyes", "Direct Support Professional", date(2023, 4, 17)),
            101: Employee(101, "Avery", "Chen", "House Lead", date(2022, 9, 26)),
        }
    )

    categories = InMemoryCategories()
    categories.create(category_name="Clock-in 1-15 minutes late", severity_level="MINOR", default_points=1)
    categories.create(category_name="No call/no show", severity_level="SERIOUS", default_points=6)
    categories.create(category_name="Abuse or neglect", severity_level="IMMEDIATE_TERMINATION", default_points=18)
    retired = categories.create(category_name="Retired rule", severity_level="MODERATE", default_points=3)
    categories.deactivate(retired)

    actions = InMemoryActions(users=users, employees=employees, categories=categories, now=fixed_now)

    return SimpleNamespace(
        users=users,
        employees=employees,
        categories=categories,
        actions=actions,
        audit=RecordingAudit(),
        notifications=RecordingNotifications(),
    )


@pytest.fixture
def container(repos, fixed_now):
    return build_services(
        users_repo=repos.users,
        employees_repo=repos.employees,
        categories_repo=repos.categories,
        actions_repo=repos.actions,
        audit_repo=repos.audit,
        notifications_repo=repos.notifications,
        clock=FixedClock(fixed_now),
    )


@pytest.fixture
def discipline_service(container):
    return container.discipline_service


@pytest.fixture
def category_service(container):
    return container.category_service


def actor(repos, user_id: int) -> Actor:
    u = repos.users.get_by_id(user_id)
    return Actor(user_id=u.user_id, name=u.name, role=u.role)


@pytest.fixture
def as_actor(repos):
    return lambda user_id: actor(repos, user_id)
