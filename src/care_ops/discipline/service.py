from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Optional, Sequence

from ..audit.repository import AuditLogRepository, NotificationRepository
from ..categories.repository import CategoryRepository
from ..common.datetime_utils import Clock, SystemClock, as_date, parse_iso_date, parse_optional_datetime
from ..common.validators import optional_int, optional_text, require_int, require_min_length, require_non_empty
from ..core.constants import (
    AT_RISK_POINTS,
    DEFAULT_CONSEQUENCES_TEXT,
    DEFAULT_HISTORY_LIMIT,
    EXPIRING_SOON_DAYS,
    MAX_DISCIPLINE_POINTS,
    RECENT_ACTIONS_DAYS,
    RECENT_HISTORY_LIMIT,
    SIGNATURE_DATA_PREFIX,
    VOID_REASON_MIN_LENGTH,
)
from ..core.enums import AuditAction, CorrectiveActionStatus, Role, SeverityLevel, SignerType
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..users.model import Actor
from ..users.repository import UserRepository
from .calculator.rolling_window import DisciplineStatsCalculator
from .levels import (
    DisciplineLevel,
    level_for_points,
    next_threshold,
    points_to_next_threshold,
    threshold_table,
    thresholds_crossed,
)
from .model import (
    AccessScope,
    ActionFilter,
    CorrectiveAction,
    CorrectiveActionRecord,
    DisciplineStats,
    NewCorrectiveAction,
    Signature,
    effective_points,
)
from .presentation import PointsBar, points_bar
from .repository import DisciplineRepository

logger = logging.getLogger(__name__)

ISSUER_ROLES = frozenset({Role.ADMIN, Role.HR, Role.DESIGNATED_MANAGER, Role.DESIGNATED_COORDINATOR})
LOCKED_STATUSES = frozenset({CorrectiveActionStatus.ACKNOWLEDGED, CorrectiveActionStatus.VOIDED})
ENTITY_TYPE = "CORRECTIVE_ACTION"


@dataclass(frozen=True)
class EmployeeDiscipline:
    employee: Employee
    stats: DisciplineStats
    rolling: list[CorrectiveAction]
    expired: list[CorrectiveAction]
    voided: list[CorrectiveAction]
    bar: PointsBar


@dataclass(frozen=True)
class ExpiringPoints:
    action_id: int
    violation_date: date
    expiration_date: date
    days_until_expiration: int
    points: int
    category_name: str


@dataclass(frozen=True)
class PointsSummary:
    employee: Employee
    current_points: int
    max_points: int
    discipline_level: DisciplineLevel
    next_threshold: Optional[int]
    points_to_next_threshold: int
    actions_count: int
    expiring_points: list[ExpiringPoints]
    thresholds: list[dict]


@dataclass(frozen=True)
class HistoryStats:
    total_actions: int
    active_actions: int
    voided_actions: int
    pending_signatures: int
    acknowledged: int
    disputed: int
    total_points_ever: int
    by_severity: dict[str, int]


@dataclass(frozen=True)
class DisciplineHistory:
    employee: Employee
    actions: list[CorrectiveAction]
    stats: HistoryStats
    by_year: dict[int, list[CorrectiveAction]]


@dataclass(frozen=True)
class ActionList:
    actions: list[CorrectiveAction]
    total: int
    pending_signatures: int
    this_week: int
    at_risk_employees: int


@dataclass(frozen=True)
class ActionDetail:
    action: CorrectiveAction
    current_points: int
    points_before_action: int
    recent_actions: list[CorrectiveAction]


@dataclass(frozen=True)
class CreateResult:
    action_id: int
    current_points: int
    new_points: int
    total_points: int
    discipline_level: DisciplineLevel
    thresholds_crossed: list[int]


@dataclass(frozen=True)
class SignatureStatus:
    action_id: int
    status: CorrectiveActionStatus
    signatures: dict[str, Optional[Signature]]
    has_supervisor_signature: bool
    has_witness_signature: bool
    has_employee_signature: bool


def parse_signer_type(value: Any) -> SignerType:
    try:
        return SignerType(str(value or "").strip().upper())
    except ValueError:
        raise ValidationError("Invalid signer type")


def require_signature_data(value: Any, field_name: str = "Signature") -> str:
    if not isinstance(value, str) or not value.startswith(SIGNATURE_DATA_PREFIX):
        raise ValidationError(f"{field_name} must be an image data URI")
    return value


def parse_expectations(value: Any) -> list[str]:
    """Accept a list of strings or a single block of text (one expectation per line)."""

    if value in (None, ""):
        return []
    if isinstance(value, str):
        items = value.splitlines()
    elif isinstance(value, (list, tuple)):
        items = [str(v) for v in value if v is not None]
    else:
        raise ValidationError("Corrective expectations must be a list of strings")
    return [item.strip() for item in items if item.strip()]


class DisciplineService:
    """Use cases: corrective-action lifecycle and the rolling-point views built on it."""

    def __init__(
        self,
        actions: DisciplineRepository,
        employees: EmployeeRepository,
        categories: CategoryRepository,
        users: UserRepository,
        audit: AuditLogRepository,
        notifications: NotificationRepository,
        *,
        calculator: Optional[DisciplineStatsCalculator] = None,
        clock: Optional[Clock] = None,
    ):
        self._actions = actions
        self._employees = employees
        self._categories = categories
        self._users = users
        self._audit = audit
        self._notifications = notifications
        self._calculator = calculator or DisciplineStatsCalculator()
        self._clock = clock or SystemClock()

    # ---- helpers ----

    def _now(self, now: Optional[datetime]) -> datetime:
        return now if now is not None else self._clock.now()

    def _employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def _action(self, action_id: int) -> CorrectiveAction:
        action = self._actions.get_by_id(int(action_id))
        if not action:
            raise NotFoundError("Corrective action not found")
        return action

    def _scope_for(self, actor: Actor) -> AccessScope:
        if actor.is_admin_or_hr:
            return AccessScope(unrestricted=True)
        house_ids = tuple(self._users.list_house_ids(actor.user_id))
        if actor.role == Role.DESIGNATED_MANAGER:
            return AccessScope(unrestricted=False, house_ids=house_ids)
        return AccessScope(unrestricted=False, house_ids=house_ids, issued_by_id=actor.user_id)

    def _require_view_access(self, actor: Actor, action: CorrectiveAction) -> None:
        if actor.is_admin_or_hr or action.issued_by_id == actor.user_id:
            return
        if action.house_id is not None and action.house_id in self._users.list_house_ids(actor.user_id):
            return
        raise AuthorizationError("You do not have access to this corrective action")

    def _current_points(self, employee_id: int, now: datetime) -> int:
        return self._calculator.current_points(self._actions.list_for_employee(employee_id), now)

    def _notify_thresholds(self, employee: Employee, crossed: Sequence[int], action_id: int) -> None:
        if not crossed:
            return
        recipients = self._users.list_ids_by_roles([Role.ADMIN, Role.HR])
        for threshold in crossed:
            level = level_for_points(threshold)
            for user_id in recipients:
                self._notifications.create(
                    user_id=user_id,
                    title="Discipline Threshold Reached",
                    message=(
                        f"{employee.full_name} has reached {threshold} points ({level.label}). "
                        "Review the corrective action and follow up as required."
                    ),
                    type="WARNING",
                    link=f"/dashboard/discipline/{action_id}",
                )
            logger.info("Employee %s crossed the %s point threshold", employee.employee_id, threshold)

    # ---- read side ----

    def employee_discipline(self, employee_id: int, *, now: Optional[datetime] = None) -> EmployeeDiscipline:
        now = self._now(now)
        employee = self._employee(employee_id)
        actions = list(self._actions.list_for_employee(employee.employee_id))

        buckets = self._calculator.partition(actions, now)
        stats = self._calculator.compute(actions, now)
        return EmployeeDiscipline(
            employee=employee,
            stats=stats,
            rolling=buckets.rolling,
            expired=buckets.expired,
            voided=buckets.voided,
            bar=points_bar(stats.current_points),
        )

    def points_summary(self, employee_id: int, *, now: Optional[datetime] = None) -> PointsSummary:
        now = self._now(now)
        employee = self._employee(employee_id)
        actions = list(self._actions.list_for_employee(employee.employee_id, include_voided=False))

        rolling = self._calculator.partition(actions, now).rolling
        points = sum(effective_points(a) for a in rolling)

        today = as_date(now)
        expiring: list[ExpiringPoints] = []
        for a in rolling:
            expires = self._calculator.expires_on(a)
            days_left = (expires - today).days
            if 0 < days_left <= EXPIRING_SOON_DAYS:
                expiring.append(
                    ExpiringPoints(
                        action_id=a.action_id,
                        violation_date=as_date(a.violation_date),
                        expiration_date=expires,
                        days_until_expiration=days_left,
                        points=a.points,
                        category_name=a.category_name,
                    )
                )
        expiring.sort(key=lambda e: e.days_until_expiration)

        return PointsSummary(
            employee=employee,
            current_points=points,
            max_points=MAX_DISCIPLINE_POINTS,
            discipline_level=level_for_points(points),
            next_threshold=next_threshold(points),
            points_to_next_threshold=points_to_next_threshold(points),
            actions_count=len(rolling),
            expiring_points=expiring,
            thresholds=threshold_table(),
        )

    def history(
        self,
        employee_id: int,
        *,
        include_voided: bool = False,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> DisciplineHistory:
        employee = self._employee(employee_id)
        actions = list(
            self._actions.list_for_employee(employee.employee_id, include_voided=include_voided, limit=limit)
        )

        by_severity = {s.value: 0 for s in SeverityLevel}
        by_year: dict[int, list[CorrectiveAction]] = defaultdict(list)
        for a in actions:
            by_severity[a.severity_level.value] += 1
            by_year[as_date(a.violation_date).year].append(a)

        active = [a for a in actions if not a.is_voided]
        stats = HistoryStats(
            total_actions=len(actions),
            active_actions=len(active),
            voided_actions=len(actions) - len(active),
            pending_signatures=sum(1 for a in actions if a.status == CorrectiveActionStatus.PENDING_SIGNATURE),
            acknowledged=sum(1 for a in actions if a.status == CorrectiveActionStatus.ACKNOWLEDGED),
            disputed=sum(1 for a in actions if a.status == CorrectiveActionStatus.DISPUTED),
            total_points_ever=sum(effective_points(a) for a in active),
            by_severity=by_severity,
        )
        return DisciplineHistory(
            employee=employee,
            actions=actions,
            stats=stats,
            by_year=dict(sorted(by_year.items(), reverse=True)),
        )

    def list_actions(
        self,
        *,
        actor: Actor,
        filters: Optional[ActionFilter] = None,
        now: Optional[datetime] = None,
    ) -> ActionList:
        now = self._now(now)
        actions = list(self._actions.list_actions(filters or ActionFilter(), self._scope_for(actor)))

        week_ago = now - timedelta(days=RECENT_ACTIONS_DAYS)

        per_employee: dict[int, list[CorrectiveActionRecord]] = defaultdict(list)
        for employee_id, record in self._actions.list_scoring_records(since=self._calculator.cutoff(now)):
            per_employee[employee_id].append(record)
        at_risk = sum(
            1 for records in per_employee.values() if self._calculator.current_points(records, now) >= AT_RISK_POINTS
        )

        return ActionList(
            actions=actions,
            total=len(actions),
            pending_signatures=sum(1 for a in actions if a.status == CorrectiveActionStatus.PENDING_SIGNATURE),
            this_week=sum(1 for a in actions if a.created_at >= week_ago),
            at_risk_employees=at_risk,
        )

    def get_action(self, *, actor: Actor, action_id: int, now: Optional[datetime] = None) -> ActionDetail:
        now = self._now(now)
        action = self._action(action_id)
        self._require_view_access(actor, action)

        others = list(self._actions.list_for_employee(action.employee_id))
        rolling = self._calculator.partition(others, now).rolling
        current = sum(effective_points(a) for a in rolling)
        before = sum(effective_points(a) for a in rolling if a.action_id != action.action_id)

        return ActionDetail(
            action=action,
            current_points=current,
            points_before_action=before,
            recent_actions=rolling[:RECENT_HISTORY_LIMIT],
        )

    def signature_status(self, *, actor: Actor, action_id: int) -> SignatureStatus:
        action = self._action(action_id)
        self._require_view_access(actor, action)

        signatures = {t.value: action.signature_for(t) for t in SignerType}
        return SignatureStatus(
            action_id=action.action_id,
            status=action.status,
            signatures=signatures,
            has_supervisor_signature=signatures[SignerType.SUPERVISOR.value] is not None,
            has_witness_signature=signatures[SignerType.WITNESS.value] is not None,
            has_employee_signature=signatures[SignerType.EMPLOYEE.value] is not None,
        )

    # ---- write side ----

    def create_action(
        self,
        *,
        actor: Actor,
        employee_id: Any,
        category_id: Any,
        violation_date: Any,
        incident_description: Optional[str],
        house_id: Any = None,
        violation_time: Optional[str] = None,
        mitigating_circumstances: Optional[str] = None,
        points_assigned: Any = None,
        points_adjusted: Any = None,
        adjustment_reason: Optional[str] = None,
        corrective_expectations: Any = None,
        consequences_text: Optional[str] = None,
        pip_scheduled: bool = False,
        pip_date: Any = None,
        supervisor_signature: Optional[str] = None,
        witness_signature: Optional[str] = None,
        witness_id: Any = None,
        ip_address: Optional[str] = None,
        device_info: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CreateResult:
        if actor.role not in ISSUER_ROLES:
            raise AuthorizationError("You do not have permission to issue corrective actions")

        if employee_id in (None, "") or category_id in (None, "") or not violation_date:
            raise ValidationError("Employee, violation category and violation date are required")
        description = require_non_empty(incident_description, "Incident description")

        now = self._now(now)
        employee = self._employee(require_int(employee_id, "Employee id"))
        category = self._categories.get_by_id(require_int(category_id, "Category id"))
        if not category:
            raise NotFoundError("Violation category not found")
        if not category.is_active:
            raise ValidationError("Violation category is inactive")

        assigned = optional_int(points_assigned, "Points assigned")
        if assigned is None:
            assigned = category.default_points
        if assigned < 0:
            raise ValidationError("Points assigned must be >= 0")
        adjusted = optional_int(points_adjusted, "Points adjusted")

        if supervisor_signature:
            require_signature_data(supervisor_signature, "Supervisor signature")
        witness = None
        if witness_signature:
            require_signature_data(witness_signature, "Witness signature")
            witness = require_int(witness_id, "Witness id")

        current = self._current_points(employee.employee_id, now)
        new_points = adjusted if adjusted is not None else assigned
        total = current + new_points
        level = level_for_points(total)

        action_id = self._actions.create(
            NewCorrectiveAction(
                employee_id=employee.employee_id,
                issued_by_id=actor.user_id,
                house_id=optional_int(house_id, "House id"),
                category_id=category.category_id,
                violation_date=parse_iso_date(str(violation_date)),
                violation_time=optional_text(violation_time),
                incident_description=description,
                mitigating_circumstances=optional_text(mitigating_circumstances),
                points_assigned=assigned,
                points_adjusted=adjusted,
                adjustment_reason=optional_text(adjustment_reason),
                discipline_level=level,
                corrective_expectations=parse_expectations(corrective_expectations),
                consequences_text=optional_text(consequences_text) or DEFAULT_CONSEQUENCES_TEXT,
                pip_scheduled=bool(pip_scheduled),
                pip_date=parse_optional_datetime(pip_date),
            )
        )

        if supervisor_signature:
            self._actions.add_signature(
                action_id,
                signer_type=SignerType.SUPERVISOR,
                signer_id=actor.user_id,
                signature_data=supervisor_signature,
                signed_at=now,
                ip_address=ip_address,
                device_info=device_info,
            )
        if witness is not None:
            self._actions.add_signature(
                action_id,
                signer_type=SignerType.WITNESS,
                signer_id=witness,
                signature_data=witness_signature,
                signed_at=now,
                ip_address=ip_address,
                device_info=device_info,
            )

        crossed = thresholds_crossed(current, total)
        self._notify_thresholds(employee, crossed, action_id)

        self._audit.record(
            user_id=actor.user_id,
            action=AuditAction.CREATE,
            entity_type=ENTITY_TYPE,
            entity_id=str(action_id),
            details={
                "employee_id": employee.employee_id,
                "category": category.category_name,
                "points": new_points,
                "total_points": total,
                "discipline_level": level.label,
            },
        )
        logger.info(
            "Corrective action %s issued to employee %s by user %s (%s -> %s points)",
            action_id,
            employee.employee_id,
            actor.user_id,
            current,
            total,
        )
        return CreateResult(
            action_id=action_id,
            current_points=current,
            new_points=new_points,
            total_points=total,
            discipline_level=level,
            thresholds_crossed=crossed,
        )

    def update_action(self, *, actor: Actor, action_id: int, changes: dict) -> CorrectiveAction:
        action = self._action(action_id)

        is_issuer = action.issued_by_id == actor.user_id
        if not actor.is_admin_or_hr and not (is_issuer and action.status == CorrectiveActionStatus.PENDING_SIGNATURE):
            raise AuthorizationError("You do not have permission to edit this corrective action")
        if action.status in LOCKED_STATUSES:
            raise ValidationError(f"Cannot edit a corrective action with status {action.status.value}")

        updates: dict[str, Any] = {}
        if "incident_description" in changes:
            updates["incident_description"] = require_non_empty(
                changes["incident_description"], "Incident description"
            )
        if "mitigating_circumstances" in changes:
            updates["mitigating_circumstances"] = optional_text(changes["mitigating_circumstances"])
        if "points_adjusted" in changes:
            updates["points_adjusted"] = optional_int(changes["points_adjusted"], "Points adjusted")
        if "adjustment_reason" in changes:
            updates["adjustment_reason"] = optional_text(changes["adjustment_reason"])
        if "corrective_expectations" in changes:
            updates["corrective_expectations"] = parse_expectations(changes["corrective_expectations"])
        if "consequences_text" in changes:
            updates["consequences_text"] = optional_text(changes["consequences_text"])
        if "pip_scheduled" in changes:
            updates["pip_scheduled"] = bool(changes["pip_scheduled"])
        if "pip_date" in changes:
            updates["pip_date"] = parse_optional_datetime(changes["pip_date"])

        if updates:
            self._actions.update(action.action_id, updates)
            self._audit.record(
                user_id=actor.user_id,
                action=AuditAction.UPDATE,
                entity_type=ENTITY_TYPE,
                entity_id=str(action.action_id),
                details={"fields": sorted(updates)},
            )
        return self._action(action.action_id)

    def sign_action(
        self,
        *,
        actor: Actor,
        action_id: int,
        signer_type: Any,
        signature_data: Any,
        acknowledged: bool = True,
        employee_comments: Optional[str] = None,
        ip_address: Optional[str] = None,
        device_info: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CorrectiveAction:
        kind = parse_signer_type(signer_type)
        data = require_signature_data(signature_data)

        action = self._action(action_id)
        self._require_view_access(actor, action)
        if action.is_voided:
            raise ValidationError("Cannot sign a voided corrective action")

        if any(s.signer_type == kind and s.signer_id == actor.user_id for s in action.signatures):
            raise ValidationError(f"You have already signed this document as {kind.value}")

        now = self._now(now)
        self._actions.add_signature(
            action.action_id,
            signer_type=kind,
            signer_id=actor.user_id,
            signature_data=data,
            signed_at=now,
            ip_address=ip_address,
            device_info=device_info,
        )

        new_status = action.status
        if kind == SignerType.EMPLOYEE:
            new_status = CorrectiveActionStatus.ACKNOWLEDGED if acknowledged else CorrectiveActionStatus.DISPUTED
            self._actions.set_employee_response(
                action.action_id,
                status=new_status,
                employee_comments=optional_text(employee_comments),
            )

        self._audit.record(
            user_id=actor.user_id,
            action=AuditAction.STATUS_CHANGE,
            entity_type=ENTITY_TYPE,
            entity_id=str(action.action_id),
            details={
                "signer_type": kind.value,
                "previous_status": action.status.value,
                "new_status": new_status.value,
            },
        )
        logger.info("Corrective action %s signed as %s by user %s", action.action_id, kind.value, actor.user_id)
        return self._action(action.action_id)

    def void_action(
        self,
        *,
        actor: Actor,
        action_id: int,
        reason: Optional[str],
        now: Optional[datetime] = None,
    ) -> CorrectiveAction:
        if not actor.is_admin_or_hr:
            raise AuthorizationError("Only administrators and HR can void corrective actions")
        void_reason = require_min_length(reason, "Void reason", VOID_REASON_MIN_LENGTH)

        action = self._action(action_id)
        if action.is_voided:
            raise ValidationError("Corrective action is already voided")

        self._actions.void(
            action.action_id,
            voided_by_id=actor.user_id,
            void_reason=void_reason,
            voided_at=self._now(now),
        )
        self._audit.record(
            user_id=actor.user_id,
            action=AuditAction.STATUS_CHANGE,
            entity_type=ENTITY_TYPE,
            entity_id=str(action.action_id),
            details={
                "previous_status": action.status.value,
                "new_status": CorrectiveActionStatus.VOIDED.value,
                "void_reason": void_reason,
            },
        )
        logger.info("Corrective action %s voided by user %s", action.action_id, actor.user_id)
        return self._action(action.action_id)
