"""Test runs: a separate database, and marksheets go to a local debugging SMTP port."""
from config.defaults import COMPANY_INFO, HRM_TIER_POLICY, HRM_TIMEZONE  # noqa: F401
from config.defaults import env_flag, mysql_config

SECRET_KEY = "test-secret"
DB_CONFIG = mysql_config("hrm_test_db")

SMTP_CONFIG = {"host": "localhost", "port": 1025, "secure": False}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", False)
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", False)
