from __future__ import annotations

import logging
from dataclasses import dataclass

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    name: str
    role: Role


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> SessionUser:
        username = require_non_empty(username, "Username")
        user = self._users.get_by_username(username)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.info("Failed login for %s", username)
            raise AuthenticationError("Invalid username or password")

        return SessionUser(user_id=user.user_id, name=user.name, role=user.role)
