import os

from . import env_flag, mysql_config

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
DB_CONFIG = mysql_config("care_ops")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
ORGANIZATION_NAME = os.getenv("ORGANIZATION_NAME", "Care Operations")

# Local databases get the schema on startup; demo logins and the violation catalogue are opt-in.
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", True)
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", False)
