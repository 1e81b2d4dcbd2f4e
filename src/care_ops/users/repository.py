from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def list_house_ids(self, user_id: int) -> Sequence[int]:
        """Houses (sites) the user is assigned to."""

        raise NotImplementedError

    def list_ids_by_roles(self, roles: Iterable[Role]) -> Sequence[int]:
        raise NotImplementedError
