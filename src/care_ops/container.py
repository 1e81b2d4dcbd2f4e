from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .audit.mysql_audit_repository import MySQLAuditLogRepository, MySQLNotificationRepository
from .audit.repository import AuditLogRepository, NotificationRepository
from .categories.mysql_category_repository import MySQLCategoryRepository
from .categories.repository import CategoryRepository
from .categories.service import CategoryService
from .common.datetime_utils import Clock, SystemClock
from .database.connection import DBConfig, DatabaseConnection
from .discipline.calculator.rolling_window import DisciplineStatsCalculator
from .discipline.mysql_discipline_repository import MySQLDisciplineRepository
from .discipline.repository import DisciplineRepository
from .discipline.service import DisciplineService
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    employees_repo: EmployeeRepository
    categories_repo: CategoryRepository
    actions_repo: DisciplineRepository
    audit_repo: AuditLogRepository
    notifications_repo: NotificationRepository

    auth_service: AuthService
    category_service: CategoryService
    discipline_service: DisciplineService

    conn: Optional[DatabaseConnection] = None


def build_services(
    *,
    users_repo: UserRepository,
    employees_repo: EmployeeRepository,
    categories_repo: CategoryRepository,
    actions_repo: DisciplineRepository,
    audit_repo: AuditLogRepository,
    notifications_repo: NotificationRepository,
    clock: Optional[Clock] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over any set of repositories (MySQL in the app, in-memory fakes in tests)."""

    discipline_service = DisciplineService(
        actions_repo,
        employees_repo,
        categories_repo,
        users_repo,
        audit_repo,
        notifications_repo,
        calculator=DisciplineStatsCalculator(),
        clock=clock or SystemClock(),
    )

    return Container(
        users_repo=users_repo,
        employees_repo=employees_repo,
        categories_repo=categories_repo,
        actions_repo=actions_repo,
        audit_repo=audit_repo,
        notifications_repo=notifications_repo,
        auth_service=AuthService(users_repo),
        category_service=CategoryService(categories_repo, audit_repo),
        discipline_service=discipline_service,
        conn=conn,
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        users_repo=MySQLUserRepository(conn),
        employees_repo=MySQLEmployeeRepository(conn),
        categories_repo=MySQLCategoryRepository(conn),
        actions_repo=MySQLDisciplineRepository(conn),
        audit_repo=MySQLAuditLogRepository(conn),
        notifications_repo=MySQLNotificationRepository(conn),
        conn=conn,
    )
