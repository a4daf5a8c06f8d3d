"""Load the KPI criteria catalogue and the demo people.

The demo admin is assigned every demo employee, and each employee without an
active criteria set gets the default weighted set. Run scripts/init_db.py first.
"""
from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.hrm_system.hrm_system.database.bootstrap import apply_seed_sql, ensure_demo_users


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    seeded = ensure_demo_users(db_config)

    print(
        f"OK: {seeded['users']} demo users, {seeded['assignments']} marker assignments, "
        f"{seeded['new_criteria_sets']} new criteria sets in {db_config.get('database')}@{db_config.get('host')}"
    )


if __name__ == "__main__":
    main()
