from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an application account (supervisor, HR, admin, ...).

    Plain data object; no DB access lives here.
    """

    user_id: int
    name: str
    username: str
    password_hash: str
    role: Role
    email: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class Actor:
    """The signed-in user a service call is made on behalf of."""

    user_id: int
    name: str
    role: Role

    @property
    def is_admin_or_hr(self) -> bool:
        return self.role in {Role.ADMIN, Role.HR}
