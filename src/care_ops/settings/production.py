import os

from . import env_flag, mysql_config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
DB_CONFIG = mysql_config("care_ops")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
ORGANIZATION_NAME = os.getenv("ORGANIZATION_NAME", "Care Operations")

# Schema changes and seeding run through scripts/init_db.py and scripts/seed_db.py.
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", False)
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", False)
