from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Protocol

from ..core.enums import CorrectiveActionStatus, SeverityLevel, SignerType
from .levels import DisciplineLevel


class PointRecord(Protocol):
    """Anything the calculator can score: a plain record or a full action row."""

    violation_date: date
    status: CorrectiveActionStatus
    points_assigned: int
    points_adjusted: Optional[int]


def effective_points(record: PointRecord) -> int:
    return record.points_adjusted if record.points_adjusted is not None else record.points_assigned


@dataclass(frozen=True)
class CorrectiveActionRecord:
    """Minimal scoring input for one corrective action."""

    violation_date: date
    status: CorrectiveActionStatus
    points_assigned: int
    points_adjusted: Optional[int] = None


@dataclass(frozen=True)
class DisciplineStats:
    """Derived view over an employee's actions; computed per request, never stored."""

    current_points: int
    discipline_level: DisciplineLevel
    rolling_count: int
    expired_count: int
    voided_count: int
    total_count: int


@dataclass(frozen=True)
class Signature:
    signature_id: int
    action_id: int
    signer_type: SignerType
    signer_id: int
    signer_name: str
    signature_data: str
    signed_at: datetime
    ip_address: Optional[str] = None
    device_info: Optional[str] = None


@dataclass(frozen=True)
class CorrectiveAction:
    """Read-model of a corrective action joined with employee/category/house names."""

    action_id: int
    employee_id: int
    employee_first_name: str
    employee_last_name: str
    employee_position: Optional[str]
    employee_hire_date: Optional[date]
    issued_by_id: int
    issued_by_name: str
    house_id: Optional[int]
    house_name: Optional[str]
    category_id: int
    category_name: str
    severity_level: SeverityLevel
    violation_date: date
    violation_time: Optional[str]
    incident_description: str
    status: CorrectiveActionStatus
    points_assigned: int
    points_adjusted: Optional[int]
    discipline_level: DisciplineLevel
    created_at: datetime
    mitigating_circumstances: Optional[str] = None
    adjustment_reason: Optional[str] = None
    corrective_expectations: list[str] = field(default_factory=list)
    consequences_text: Optional[str] = None
    pip_scheduled: bool = False
    pip_date: Optional[datetime] = None
    employee_comments: Optional[str] = None
    voided_at: Optional[datetime] = None
    voided_by_name: Optional[str] = None
    void_reason: Optional[str] = None
    signatures: tuple[Signature, ...] = ()

    @property
    def points(self) -> int:
        return effective_points(self)

    @property
    def employee_name(self) -> str:
        return f"{self.employee_first_name} {self.employee_last_name}"

    @property
    def is_voided(self) -> bool:
        return self.status == CorrectiveActionStatus.VOIDED

    def signature_for(self, signer_type: SignerType) -> Optional[Signature]:
        for sig in self.signatures:
            if sig.signer_type == signer_type:
                return sig
        return None


@dataclass(frozen=True)
class NewCorrectiveAction:
    """Validated input for inserting a corrective action."""

    employee_id: int
    issued_by_id: int
    house_id: Optional[int]
    category_id: int
    violation_date: date
    violation_time: Optional[str]
    incident_description: str
    mitigating_circumstances: Optional[str]
    points_assigned: int
    points_adjusted: Optional[int]
    adjustment_reason: Optional[str]
    discipline_level: DisciplineLevel
    corrective_expectations: list[str]
    consequences_text: str
    pip_scheduled: bool
    pip_date: Optional[datetime]
    status: CorrectiveActionStatus = CorrectiveActionStatus.PENDING_SIGNATURE


@dataclass(frozen=True)
class ActionFilter:
    employee_id: Optional[int] = None
    house_id: Optional[int] = None
    status: Optional[CorrectiveActionStatus] = None
    severity_level: Optional[SeverityLevel] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    limit: int = 50


@dataclass(frozen=True)
class AccessScope:
    """Row-level visibility for a caller.

    `unrestricted` callers see everything; otherwise rows must match one of the
    house ids or (when `issued_by_id` is set) have been issued by the caller.
    """

    unrestricted: bool
    house_ids: tuple[int, ...] = ()
    issued_by_id: Optional[int] = None
