"""Local development: verbose logging, and the HRM schema is created on first start."""
import os

from config.defaults import COMPANY_INFO, HRM_TIER_POLICY, HRM_TIMEZONE, SMTP_CONFIG  # noqa: F401
from config.defaults import env_flag, mysql_config

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
DB_CONFIG = mysql_config("hrm_db")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", True)
# Demo people, criteria and assignments (see scripts/seed_db.py)
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", False)
