from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True, with_database: bool = True):
    conn = conn_factory.connect(with_database=with_database)
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(values: list) -> str:
    """Placeholder list for `col IN (...)`; callers must not pass an empty list."""
    return ", ".join(["%s"] * len(values))


def dump_json(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, default=str)


def load_json_list(value: Any) -> list[str]:
    """Decode a JSON text column holding a list of strings.

    Legacy rows may hold a bare sentence instead of a JSON array.
    """

    if value in (None, ""):
        return []
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    try:
        decoded = json.loads(value)
    except (TypeError, ValueError):
        return [str(value)]
    if isinstance(decoded, list):
        return [str(item) for item in decoded]
    return [str(decoded)]
