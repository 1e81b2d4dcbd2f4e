from __future__ import annotations

import pytest

from care_ops.settings import env_flag, get_settings_module, mysql_config


@pytest.mark.parametrize(
    "app_env, expected",
    [
        ("production", "care_ops.settings.production"),
        ("PROD", "care_ops.settings.production"),
        ("test", "care_ops.settings.testing"),
        ("staging", "care_ops.settings.development"),
    ],
)
def test_get_settings_module(monkeypatch, app_env, expected):
    monkeypatch.setenv("APP_ENV", app_env)

    assert get_settings_module() == expected


def test_env_flag(monkeypatch):
    monkeypatch.delenv("AUTO_INIT_DB", raising=False)
    assert env_flag("AUTO_INIT_DB", True) is True
    assert env_flag("AUTO_INIT_DB", False) is False

    monkeypatch.setenv("AUTO_INIT_DB", "0")
    assert env_flag("AUTO_INIT_DB", True) is False


def test_mysql_config(monkeypatch):
    for name in ("DB_HOST", "DB_USER", "DB_PASSWORD", "DB_NAME"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DB_PORT", "3307")

    assert mysql_config("care_ops_test") == {
        "host": "localhost",
        "port": 3307,
        "user": "root",
        "password": "",
        "database": "care_ops_test",
    }
