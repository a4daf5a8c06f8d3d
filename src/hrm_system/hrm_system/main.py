from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.http import register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_TIMEZONE
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .funds.controller import register as register_funds
from .kpi.controller import register as register_kpi
from .notifications.controller import register as register_notifications
from .payroll.controller import register as register_payroll

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app.

    With ``container`` given (tests) no database is touched; otherwise the
    container is wired to MySQL from the active settings module.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            seeded = ensure_demo_users(db_config)
            logger.info("demo seed ready: %s", seeded)

        container = build_container(
            db_config=db_config,
            tz_name=getattr(settings, "HRM_TIMEZONE", DEFAULT_TIMEZONE),
            tier_policy=getattr(settings, "HRM_TIER_POLICY", None),
            smtp_config=getattr(settings, "SMTP_CONFIG", None),
            company_info=getattr(settings, "COMPANY_INFO", None),
        )

    app.extensions["hrm_container"] = container
    register_error_handlers(app)

    register_payroll(app, container)
    register_kpi(app, container)
    register_funds(app, container)
    register_notifications(app, container)

    return app
