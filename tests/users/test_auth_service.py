from __future__ import annotations

from dataclasses import replace

import pytest

from care_ops.core.enums import Role
from care_ops.core.exceptions import AuthenticationError, ValidationError
from care_ops.users.service import AuthService


def test_authenticate_success(repos):
    s_user = AuthService(repos.users).authenticate("manager", "secret123")

    assert s_user.user_id == 3
    assert s_user.role == Role.DESIGNATED_MANAGER
    assert s_user.name == "Manager User"


@pytest.mark.parametrize("username, password", [("manager", "wrong"), ("nobody", "secret123"), ("former", "secret123")])
def test_authenticate_rejects(repos, username, password):
    with pytest.raises(AuthenticationError):
        AuthService(repos.users).authenticate(username, password)


def test_authenticate_requires_username(repos):
    with pytest.raises(ValidationError):
        AuthService(repos.users).authenticate("  ", "secret123")


def test_placeholder_hash_is_rejected(repos):
    repos.users.users[3] = replace(repos.users.users[3], password_hash="CHANGE_ME")

    with pytest.raises(AuthenticationError):
        AuthService(repos.users).authenticate("manager", "secret123")
