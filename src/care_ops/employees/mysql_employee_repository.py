from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Employee
from .repository import EmployeeRepository


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, first_name, last_name, position, hire_date, email
                FROM employees
                WHERE employee_id=%s
                """,
                (int(employee_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Employee(
                employee_id=int(row["employee_id"]),
                first_name=row["first_name"],
                last_name=row["last_name"],
                position=row.get("position"),
                hire_date=row.get("hire_date"),
                email=row.get("email"),
            )
