from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Staff roles used for permission checks."""

    ADMIN = "ADMIN"
    HR = "HR"
    DESIGNATED_MANAGER = "DESIGNATED_MANAGER"
    DESIGNATED_COORDINATOR = "DESIGNATED_COORDINATOR"
    OPERATIONS = "OPERATIONS"
    FINANCE = "FINANCE"
    DSP = "DSP"


class CorrectiveActionStatus(str, Enum):
    PENDING_SIGNATURE = "PENDING_SIGNATURE"
    ACKNOWLEDGED = "ACKNOWLEDGED"
    DISPUTED = "DISPUTED"
    VOIDED = "VOIDED"


class SeverityLevel(str, Enum):
    """Violation severity, ordered from least to most serious."""

    MINOR = "MINOR"
    MODERATE = "MODERATE"
    SERIOUS = "SERIOUS"
    CRITICAL = "CRITICAL"
    IMMEDIATE_TERMINATION = "IMMEDIATE_TERMINATION"

    @property
    def rank(self) -> int:
        return list(SeverityLevel).index(self)


class SignerType(str, Enum):
    EMPLOYEE = "EMPLOYEE"
    SUPERVISOR = "SUPERVISOR"
    WITNESS = "WITNESS"
    HR = "HR"


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    STATUS_CHANGE = "STATUS_CHANGE"
