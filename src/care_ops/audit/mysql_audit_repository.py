from __future__ import annotations

from typing import Any, Optional

from ..core.enums import AuditAction
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json
from .repository import AuditLogRepository, NotificationRepository


class MySQLAuditLogRepository(AuditLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def record(
        self,
        *,
        user_id: int,
        action: AuditAction,
        entity_type: str,
        entity_id: str,
        details: Optional[dict[str, Any]] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_logs(user_id, action, entity_type, entity_id, details)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(user_id), action.value, entity_type, str(entity_id), dump_json(details)),
            )
            return int(cur.lastrowid)


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, user_id: int, title: str, message: str, type: str, link: Optional[str] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(user_id, title, message, type, link)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(user_id), title, message, type, link),
            )
            return int(cur.lastrowid)
