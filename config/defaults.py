"""HRM settings shared by every environment; each value can be overridden from the environment."""
import os

HRM_TIMEZONE = os.getenv("HRM_TIMEZONE", "Asia/Dhaka")


def _optional_amount(name: str):
    raw = os.getenv(name)
    return float(raw) if raw not in (None, "") else None


HRM_TIER_POLICY = {
    "bonus_min": float(os.getenv("HRM_BONUS_MIN", "90")),
    "appreciation_min": float(os.getenv("HRM_APPRECIATION_MIN", "80")),
    "improvement_min": float(os.getenv("HRM_IMPROVEMENT_MIN", "70")),
    "fine_bands": [
        {"min_score": 60, "amount": 300},
        {"min_score": 50, "amount": 600},
        {"min_score": 0, "amount": 1000},
    ],
    "repeated_improvement_fine": float(os.getenv("HRM_REPEATED_IMPROVEMENT_FINE", "300")),
    "bonus_gift": _optional_amount("HRM_BONUS_GIFT"),
    "appreciation_gift": _optional_amount("HRM_APPRECIATION_GIFT"),
    "repeated_incomplete_multiplier": float(os.getenv("HRM_REPEATED_INCOMPLETE_MULTIPLIER", "1")),
}

SMTP_CONFIG = {
    "host": os.getenv("SMTP_HOST", "localhost"),
    "port": int(os.getenv("SMTP_PORT", "587")),
    "secure": os.getenv("SMTP_SECURE", "false").lower() == "true",
    "user": os.getenv("SMTP_USER"),
    "password": os.getenv("SMTP_PASS"),
    "from_address": os.getenv("SMTP_FROM", "no-reply@hrm.local"),
    "from_name": os.getenv("SMTP_FROM_NAME", "HRM"),
}

COMPANY_INFO = {
    "name": os.getenv("COMPANY_NAME", "HRM"),
    "support_contact": os.getenv("COMPANY_SUPPORT_CONTACT", "your HR administrator"),
    "currency_symbol": os.getenv("COMPANY_CURRENCY_SYMBOL", "৳"),
}


def mysql_config(default_database: str) -> dict:
    """mysql-connector keyword arguments; DB_NAME wins over the environment's default database."""
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", ""),
        "database": os.getenv("DB_NAME", default_database),
    }


def env_flag(name: str, default: bool) -> bool:
    return bool(int(os.getenv(name, "1" if default else "0")))
