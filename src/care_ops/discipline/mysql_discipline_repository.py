from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..core.enums import CorrectiveActionStatus, SeverityLevel, SignerType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, in_clause, load_json_list
from .levels import DisciplineLevel
from .model import (
    AccessScope,
    ActionFilter,
    CorrectiveAction,
    CorrectiveActionRecord,
    NewCorrectiveAction,
    Signature,
)
from .repository import DisciplineRepository

_SELECT_ACTIONS = """
    SELECT ca.action_id, ca.employee_id, e.first_name, e.last_name, e.position, e.hire_date,
           ca.issued_by_id, ib.name AS issued_by_name,
           ca.house_id, h.name AS house_name,
           ca.category_id, vc.category_name, vc.severity_level,
           ca.violation_date, ca.violation_time, ca.incident_description,
           ca.mitigating_circumstances, ca.points_assigned, ca.points_adjusted,
           ca.adjustment_reason, ca.discipline_level, ca.corrective_expectations,
           ca.consequences_text, ca.pip_scheduled, ca.pip_date, ca.status,
           ca.employee_comments, ca.voided_at, vb.name AS voided_by_name, ca.void_reason,
           ca.created_at
    FROM corrective_actions ca
    JOIN employees e ON e.employee_id = ca.employee_id
    JOIN users ib ON ib.user_id = ca.issued_by_id
    JOIN violation_categories vc ON vc.category_id = ca.category_id
    LEFT JOIN houses h ON h.house_id = ca.house_id
    LEFT JOIN users vb ON vb.user_id = ca.voided_by_id
"""

# Attribute name -> column for fields that may be edited after creation.
_EDITABLE_COLUMNS = {
    "incident_description": "incident_description",
    "mitigating_circumstances": "mitigating_circumstances",
    "points_adjusted": "points_adjusted",
    "adjustment_reason": "adjustment_reason",
    "corrective_expectations": "corrective_expectations",
    "consequences_text": "consequences_text",
    "pip_scheduled": "pip_scheduled",
    "pip_date": "pip_date",
}


def _to_signature(row: dict) -> Signature:
    return Signature(
        signature_id=int(row["signature_id"]),
        action_id=int(row["action_id"]),
        signer_type=SignerType(row["signer_type"]),
        signer_id=int(row["signer_id"]),
        signer_name=row.get("signer_name") or "",
        signature_data=row["signature_data"],
        signed_at=row["signed_at"],
        ip_address=row.get("ip_address"),
        device_info=row.get("device_info"),
    )


def _to_action(row: dict, signatures: Sequence[Signature] = ()) -> CorrectiveAction:
    return CorrectiveAction(
        action_id=int(row["action_id"]),
        employee_id=int(row["employee_id"]),
        employee_first_name=row["first_name"],
        employee_last_name=row["last_name"],
        employee_position=row.get("position"),
        employee_hire_date=row.get("hire_date"),
        issued_by_id=int(row["issued_by_id"]),
        issued_by_name=row["issued_by_name"],
        house_id=row.get("house_id"),
        house_name=row.get("house_name"),
        category_id=int(row["category_id"]),
        category_name=row["category_name"],
        severity_level=SeverityLevel(row["severity_level"]),
        violation_date=row["violation_date"],
        violation_time=row.get("violation_time"),
        incident_description=row["incident_description"],
        status=CorrectiveActionStatus(row["status"]),
        points_assigned=int(row["points_assigned"]),
        points_adjusted=(int(row["points_adjusted"]) if row.get("points_adjusted") is not None else None),
        discipline_level=DisciplineLevel[row["discipline_level"]],
        created_at=row["created_at"],
        mitigating_circumstances=row.get("mitigating_circumstances"),
        adjustment_reason=row.get("adjustment_reason"),
        corrective_expectations=load_json_list(row.get("corrective_expectations")),
        consequences_text=row.get("consequences_text"),
        pip_scheduled=bool(row.get("pip_scheduled")),
        pip_date=row.get("pip_date"),
        employee_comments=row.get("employee_comments"),
        voided_at=row.get("voided_at"),
        voided_by_name=row.get("voided_by_name"),
        void_reason=row.get("void_reason"),
        signatures=tuple(signatures),
    )


def _column_value(attr: str, value: Any) -> Any:
    if attr == "corrective_expectations":
        return dump_json(list(value or []))
    if attr == "pip_scheduled":
        return 1 if value else 0
    return value


class MySQLDisciplineRepository(DisciplineRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _signatures_by_action(self, cur, action_ids: list[int]) -> dict[int, list[Signature]]:
        out: dict[int, list[Signature]] = {i: [] for i in action_ids}
        if not action_ids:
            return out
        cur.execute(
            f"""
            SELECT s.signature_id, s.action_id, s.signer_type, s.signer_id, u.name AS signer_name,
                   s.signature_data, s.signed_at, s.ip_address, s.device_info
            FROM corrective_action_signatures s
            LEFT JOIN users u ON u.user_id = s.signer_id
            WHERE s.action_id IN ({in_clause(action_ids)})
            ORDER BY s.signed_at ASC
            """,
            tuple(action_ids),
        )
        for r in fetchall(cur):
            out[int(r["action_id"])].append(_to_signature(r))
        return out

    def _load(self, cur, sql: str, params: tuple) -> list[CorrectiveAction]:
        cur.execute(sql, params)
        rows = fetchall(cur)
        sigs = self._signatures_by_action(cur, [int(r["action_id"]) for r in rows])
        return [_to_action(r, sigs.get(int(r["action_id"]), [])) for r in rows]

    def get_by_id(self, action_id: int) -> Optional[CorrectiveAction]:
        with db_cursor(self._conn_factory) as (_, cur):
            items = self._load(cur, _SELECT_ACTIONS + " WHERE ca.action_id=%s", (int(action_id),))
            return items[0] if items else None

    def list_for_employee(
        self,
        employee_id: int,
        *,
        include_voided: bool = True,
        limit: Optional[int] = None,
    ) -> Sequence[CorrectiveAction]:
        clauses = ["ca.employee_id=%s"]
        params: list[object] = [int(employee_id)]
        if not include_voided:
            clauses.append("ca.status<>%s")
            params.append(CorrectiveActionStatus.VOIDED.value)

        sql = _SELECT_ACTIONS + f" WHERE {' AND '.join(clauses)} ORDER BY ca.violation_date DESC, ca.action_id DESC"
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            return self._load(cur, sql, tuple(params))

    def list_actions(self, filters: ActionFilter, scope: AccessScope) -> Sequence[CorrectiveAction]:
        clauses = ["1=1"]
        params: list[object] = []

        if not scope.unrestricted:
            visible: list[str] = []
            if scope.house_ids:
                visible.append(f"ca.house_id IN ({in_clause(list(scope.house_ids))})")
                params.extend(int(h) for h in scope.house_ids)
            if scope.issued_by_id is not None:
                visible.append("ca.issued_by_id=%s")
                params.append(int(scope.issued_by_id))
            clauses.append(f"({' OR '.join(visible)})" if visible else "1=0")

        if filters.employee_id is not None:
            clauses.append("ca.employee_id=%s")
            params.append(int(filters.employee_id))
        if filters.house_id is not None:
            clauses.append("ca.house_id=%s")
            params.append(int(filters.house_id))
        if filters.status is not None:
            clauses.append("ca.status=%s")
            params.append(filters.status.value)
        if filters.severity_level is not None:
            clauses.append("vc.severity_level=%s")
            params.append(filters.severity_level.value)
        if filters.start_date is not None:
            clauses.append("ca.violation_date>=%s")
            params.append(filters.start_date)
        if filters.end_date is not None:
            clauses.append("ca.violation_date<=%s")
            params.append(filters.end_date)

        sql = _SELECT_ACTIONS + f" WHERE {' AND '.join(clauses)} ORDER BY ca.violation_date DESC LIMIT %s"
        params.append(int(filters.limit))

        with db_cursor(self._conn_factory) as (_, cur):
            return self._load(cur, sql, tuple(params))

    def list_scoring_records(self, *, since: date) -> Sequence[tuple[int, CorrectiveActionRecord]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, violation_date, status, points_assigned, points_adjusted
                FROM corrective_actions
                WHERE violation_date>=%s
                """,
                (since,),
            )
            return [
                (
                    int(r["employee_id"]),
                    CorrectiveActionRecord(
                        violation_date=r["violation_date"],
                        status=CorrectiveActionStatus(r["status"]),
                        points_assigned=int(r["points_assigned"]),
                        points_adjusted=(int(r["points_adjusted"]) if r.get("points_adjusted") is not None else None),
                    ),
                )
                for r in fetchall(cur)
            ]

    def create(self, action: NewCorrectiveAction) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO corrective_actions(
                    employee_id, issued_by_id, house_id, category_id, violation_date, violation_time,
                    incident_description, mitigating_circumstances, points_assigned, points_adjusted,
                    adjustment_reason, discipline_level, corrective_expectations, consequences_text,
                    pip_scheduled, pip_date, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(action.employee_id),
                    int(action.issued_by_id),
                    action.house_id,
                    int(action.category_id),
                    action.violation_date,
                    action.violation_time,
                    action.incident_description,
                    action.mitigating_circumstances,
                    int(action.points_assigned),
                    action.points_adjusted,
                    action.adjustment_reason,
                    action.discipline_level.name,
                    dump_json(list(action.corrective_expectations)) if action.corrective_expectations else None,
                    action.consequences_text,
                    1 if action.pip_scheduled else 0,
                    action.pip_date,
                    action.status.value,
                ),
            )
            return int(cur.lastrowid)

    def update(self, action_id: int, changes: dict[str, Any]) -> bool:
        sets: list[str] = []
        params: list[object] = []
        for attr, value in changes.items():
            column = _EDITABLE_COLUMNS.get(attr)
            if column is None:
                raise KeyError(f"Field {attr!r} is not editable")
            sets.append(f"{column}=%s")
            params.append(_column_value(attr, value))
        if not sets:
            return True

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE corrective_actions SET {', '.join(sets)} WHERE action_id=%s",
                tuple(params + [int(action_id)]),
            )
            return cur.rowcount > 0

    def set_employee_response(
        self,
        action_id: int,
        *,
        status: CorrectiveActionStatus,
        employee_comments: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE corrective_actions SET status=%s, employee_comments=%s WHERE action_id=%s",
                (status.value, employee_comments, int(action_id)),
            )
            return cur.rowcount > 0

    def void(self, action_id: int, *, voided_by_id: int, void_reason: str, voided_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE corrective_actions
                SET status=%s, voided_at=%s, voided_by_id=%s, void_reason=%s
                WHERE action_id=%s AND status<>%s
                """,
                (
                    CorrectiveActionStatus.VOIDED.value,
                    voided_at,
                    int(voided_by_id),
                    void_reason,
                    int(action_id),
                    CorrectiveActionStatus.VOIDED.value,
                ),
            )
            return cur.rowcount > 0

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO corrective_action_signatures(
                    action_id, signer_type, signer_id, signature_data, signed_at, ip_address, device_info
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(action_id), signer_type.value, int(signer_id), signature_data, signed_at, ip_address, device_info),
            )
            return int(cur.lastrowid)
