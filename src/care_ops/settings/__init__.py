import os


def get_settings_module() -> str:
    # APP_ENV picks the settings module; anything unknown falls back to development.
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "care_ops.settings.production"

    if env in {"test", "testing"}:
        return "care_ops.settings.testing"

    return "care_ops.settings.development"


def env_flag(name: str, default: bool) -> bool:
    """Read a 0/1 environment switch such as AUTO_INIT_DB."""
    return bool(int(os.getenv(name, "1" if default else "0")))


def mysql_config(default_database: str) -> dict:
    """MySQL connection settings from DB_* variables, falling back to a local server."""
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", ""),
        "database": os.getenv("DB_NAME", default_database),
    }
