"""Production: schema and demo data are only applied by the scripts, never on start."""
import os

from config.defaults import COMPANY_INFO, HRM_TIER_POLICY, HRM_TIMEZONE, SMTP_CONFIG  # noqa: F401
from config.defaults import env_flag, mysql_config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
DB_CONFIG = mysql_config("hrm_db")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", False)
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", False)
