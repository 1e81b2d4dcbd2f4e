from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Protocol, Sequence

from ..core.enums import CorrectiveActionStatus, SignerType
from .model import AccessScope, ActionFilter, CorrectiveAction, CorrectiveActionRecord, NewCorrectiveAction


class DisciplineRepository(Protocol):
    def get_by_id(self, action_id: int) -> Optional[CorrectiveAction]:
        """Return the action with its signatures, or None."""

        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: int,
        *,
        include_voided: bool = True,
        limit: Optional[int] = None,
    ) -> Sequence[CorrectiveAction]:
        """Newest violation first."""

        raise NotImplementedError

    def list_actions(self, filters: ActionFilter, scope: AccessScope) -> Sequence[CorrectiveAction]:
        raise NotImplementedError

    def list_scoring_records(self, *, since: date) -> Sequence[tuple[int, CorrectiveActionRecord]]:
        """(employee_id, record) pairs for every action dated on or after `since`."""

        raise NotImplementedError

    def create(self, action: NewCorrectiveAction) -> int:
        raise NotImplementedError

    def update(self, action_id: int, changes: dict[str, Any]) -> bool:
        """Apply editable field changes (keys are CorrectiveAction attribute names)."""

        raise NotImplementedError

    def set_employee_response(
        self,
        action_id: int,
        *,
        status: CorrectiveActionStatus,
        employee_comments: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def void(self, action_id: int, *, voided_by_id: int, void_reason: str, voided_at: datetime) -> bool:
        raise NotImplementedError

    def add_signature(
        self,
        action_id: int,
        *,
        signer_type: SignerType,
        signer_id: int,
        signature_data: str,
        signed_at: datetime,
        ip_address: Optional[str] = None,
        device_info: Optional[str] = None,
    ) -> int:
        raise NotImplementedError
