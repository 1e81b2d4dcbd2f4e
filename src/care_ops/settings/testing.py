import os

from . import env_flag, mysql_config

SECRET_KEY = "test-secret"
DB_CONFIG = mysql_config("care_ops_test")

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
ORGANIZATION_NAME = "Test Organization"

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", False)
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", False)
