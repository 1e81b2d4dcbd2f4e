from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from ..categories.defaults import DEFAULT_THRESHOLDS, numbered_categories
from ..categories.mysql_category_repository import MySQLCategoryRepository
from .connection import DatabaseConnection, DBConfig
from .mysql_base import db_cursor, fetchone

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"

# (name, username, password, role, house names)
DEMO_USERS = [
    ("Admin Demo", "admin", "admin123", "ADMIN", []),
    ("HR Demo", "hr", "hr123", "HR", []),
    ("Manager Demo", "manager", "manager123", "DESIGNATED_MANAGER", ["Maple House"]),
    ("Coordinator Demo", "coordinator", "coord123", "DESIGNATED_COORDINATOR", ["Maple House", "Oak House"]),
    ("DSP Demo", "dsp", "dsp123", "DSP", ["Oak House"]),
]

DEMO_HOUSES = ["Maple House", "Oak House"]

# (first, last, position, hire date)
DEMO_EMPLOYEES = [
    ("Jordan", "Reyes", "Direct Support Professional", "2023-04-17"),
    ("Avery", "Chen", "Direct Support Professional", "2024-01-08"),
    ("Sam", "Okafor", "House Lead", "2022-09-26"),
]


def _factory(db_config: dict) -> DatabaseConnection:
    return DatabaseConnection(DBConfig.from_dict(db_config))


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a SQL script on ';' outside quoted strings."""
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    factory = _factory(db_config)
    name = DBConfig.from_dict(db_config).database
    with db_cursor(factory, dictionary=False, with_database=False) as (_, cur):
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    ensure_database_exists(db_config)

    sql = _strip_create_db_and_use(_strip_comments(Path(schema_path).read_text(encoding="utf-8")))
    with db_cursor(_factory(db_config), dictionary=False) as (_, cur):
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
    logger.info("Schema applied from %s", schema_path)


def ensure_demo_users(db_config: dict) -> None:
    with db_cursor(_factory(db_config)) as (_, cur):
        house_ids: dict[str, int] = {}
        for house in DEMO_HOUSES:
            cur.execute("SELECT house_id FROM houses WHERE name=%s", (house,))
            row = fetchone(cur)
            if row:
                house_ids[house] = int(row["house_id"])
            else:
                cur.execute("INSERT INTO houses(name) VALUES(%s)", (house,))
                house_ids[house] = int(cur.lastrowid)

        for name, username, password, role, houses in DEMO_USERS:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE username=%s", (username,))
            existing = fetchone(cur)
            if existing:
                user_id = int(existing["user_id"])
                cur.execute(
                    "UPDATE users SET name=%s, password_hash=%s, role=%s, is_active=1 WHERE user_id=%s",
                    (name, password_hash, role, user_id),
                )
            else:
                cur.execute(
                    "INSERT INTO users(name, username, password_hash, role) VALUES(%s,%s,%s,%s)",
                    (name, username, password_hash, role),
                )
                user_id = int(cur.lastrowid)

            for house in houses:
                cur.execute(
                    "INSERT IGNORE INTO user_houses(user_id, house_id) VALUES(%s,%s)",
                    (user_id, house_ids[house]),
                )

        for first, last, position, hired in DEMO_EMPLOYEES:
            cur.execute("SELECT employee_id FROM employees WHERE first_name=%s AND last_name=%s", (first, last))
            if not fetchone(cur):
                cur.execute(
                    "INSERT INTO employees(first_name, last_name, position, hire_date) VALUES(%s,%s,%s,%s)",
                    (first, last, position, hired),
                )
    logger.info("Demo users, houses and employees ready")


def seed_discipline_catalogue(db_config: dict) -> tuple[int, int]:
    """Insert the default violation categories and thresholds when the tables are empty."""
    repo = MySQLCategoryRepository(_factory(db_config))

    categories = 0
    if repo.count() == 0:
        categories = repo.bulk_create(numbered_categories())
    thresholds = 0
    if repo.count_thresholds() == 0:
        thresholds = repo.bulk_create_thresholds(DEFAULT_THRESHOLDS)

    logger.info("Discipline catalogue seeded (categories=%s, thresholds=%s)", categories, thresholds)
    return categories, thresholds


def list_tables(db_config: dict) -> list[str]:
    with db_cursor(_factory(db_config), dictionary=False) as (_, cur):
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
