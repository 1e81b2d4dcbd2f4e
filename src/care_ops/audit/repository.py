from __future__ import annotations

from typing import Any, Optional, Protocol

from ..core.enums import AuditAction


class AuditLogRepository(Protocol):
    def record(
        self,
        *,
        user_id: int,
        action: AuditAction,
        entity_type: str,
        entity_id: str,
        details: Optional[dict[str, Any]] = None,
    ) -> int:
        raise NotImplementedError


class NotificationRepository(Protocol):
    def create(self, *, user_id: int, title: str, message: str, type: str, link: Optional[str] = None) -> int:
        raise NotImplementedError
