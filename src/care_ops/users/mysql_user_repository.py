from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import User
from .repository import UserRepository

_USER_COLUMNS = "user_id, name, username, password_hash, role, email, is_active"


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        name=row["name"],
        username=row["username"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        email=row.get("email"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE username=%s", (username,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_house_ids(self, user_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT house_id FROM user_houses WHERE user_id=%s", (int(user_id),))
            return [int(r["house_id"]) for r in fetchall(cur)]

    def list_ids_by_roles(self, roles: Iterable[Role]) -> Sequence[int]:
        values = [r.value for r in roles]
        if not values:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT user_id FROM users WHERE is_active=1 AND role IN ({in_clause(values)})",
                tuple(values),
            )
            return [int(r["user_id"]) for r in fetchall(cur)]
