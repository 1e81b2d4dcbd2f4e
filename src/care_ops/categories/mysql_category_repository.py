from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import SeverityLevel
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import DisciplineThreshold, ViolationCategory
from .repository import CategoryRepository

_CATEGORY_COLUMNS = "category_id, category_name, severity_level, default_points, description, display_order, is_active"
_THRESHOLD_COLUMNS = "threshold_id, point_minimum, point_maximum, action_required, description, is_active"


def _to_category(row: dict) -> ViolationCategory:
    return ViolationCategory(
        category_id=int(row["category_id"]),
        category_name=row["category_name"],
        severity_level=SeverityLevel(row["severity_level"]),
        default_points=int(row["default_points"]),
        description=row.get("description"),
        display_order=int(row.get("display_order") or 0),
        is_active=bool(row.get("is_active", True)),
    )


def _to_threshold(row: dict) -> DisciplineThreshold:
    return DisciplineThreshold(
        threshold_id=int(row["threshold_id"]),
        point_minimum=int(row["point_minimum"]),
        point_maximum=int(row["point_maximum"]),
        action_required=row["action_required"],
        description=row.get("description"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLCategoryRepository(CategoryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active(self) -> Sequence[ViolationCategory]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_CATEGORY_COLUMNS}
                FROM violation_categories
                WHERE is_active=1
                ORDER BY FIELD(severity_level, 'MINOR', 'MODERATE', 'SERIOUS', 'CRITICAL', 'IMMEDIATE_TERMINATION'),
                         display_order, category_name
                """
            )
            return [_to_category(r) for r in fetchall(cur)]

    def get_by_id(self, category_id: int) -> Optional[ViolationCategory]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_CATEGORY_COLUMNS} FROM violation_categories WHERE category_id=%s",
                (int(category_id),),
            )
            row = fetchone(cur)
            return _to_category(row) if row else None

    def create(
        self,
        *,
        category_name: str,
        severity_level: SeverityLevel,
        default_points: int,
        description: Optional[str],
        display_order: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO violation_categories(category_name, severity_level, default_points, description, display_order)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (category_name, severity_level.value, int(default_points), description, int(display_order)),
            )
            return int(cur.lastrowid)

    def update(self, category: ViolationCategory) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE violation_categories
                SET category_name=%s, severity_level=%s, default_points=%s,
                    description=%s, display_order=%s, is_active=%s
                WHERE category_id=%s
                """,
                (
                    category.category_name,
                    category.severity_level.value,
                    int(category.default_points),
                    category.description,
                    int(category.display_order),
                    1 if category.is_active else 0,
                    int(category.category_id),
                ),
            )
            return cur.rowcount > 0

    def is_referenced(self, category_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS used FROM corrective_actions WHERE category_id=%s LIMIT 1",
                (int(category_id),),
            )
            return fetchone(cur) is not None

    def deactivate(self, category_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE violation_categories SET is_active=0 WHERE category_id=%s", (int(category_id),))
            return cur.rowcount > 0

    def delete(self, category_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM violation_categories WHERE category_id=%s", (int(category_id),))
            return cur.rowcount > 0

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM violation_categories")
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def bulk_create(self, categories: Sequence[dict]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO violation_categories(category_name, severity_level, default_points, description, display_order)
                VALUES(%s,%s,%s,%s,%s)
                """,
                [
                    (
                        c["category_name"],
                        SeverityLevel(c["severity_level"]).value,
                        int(c["default_points"]),
                        c.get("description"),
                        int(c.get("display_order") or 0),
                    )
                    for c in categories
                ],
            )
            return len(categories)

    def list_thresholds(self, *, active_only: bool = True) -> Sequence[DisciplineThreshold]:
        where = "WHERE is_active=1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_THRESHOLD_COLUMNS} FROM discipline_thresholds {where} ORDER BY point_minimum")
            return [_to_threshold(r) for r in fetchall(cur)]

    def get_threshold(self, threshold_id: int) -> Optional[DisciplineThreshold]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_THRESHOLD_COLUMNS} FROM discipline_thresholds WHERE threshold_id=%s",
                (int(threshold_id),),
            )
            row = fetchone(cur)
            return _to_threshold(row) if row else None

    def update_threshold(self, threshold: DisciplineThreshold) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE discipline_thresholds
                SET point_minimum=%s, point_maximum=%s, action_required=%s, description=%s, is_active=%s
                WHERE threshold_id=%s
                """,
                (
                    int(threshold.point_minimum),
                    int(threshold.point_maximum),
                    threshold.action_required,
                    threshold.description,
                    1 if threshold.is_active else 0,
                    int(threshold.threshold_id),
                ),
            )
            return cur.rowcount > 0

    def count_thresholds(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM discipline_thresholds")
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def bulk_create_thresholds(self, thresholds: Sequence[tuple[int, int, str, str]]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO discipline_thresholds(point_minimum, point_maximum, action_required, description)
                VALUES(%s,%s,%s,%s)
                """,
                [tuple(t) for t in thresholds],
            )
            return len(thresholds)
