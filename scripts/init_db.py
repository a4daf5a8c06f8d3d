"""Create the HRM database and its hrm_* tables from database/schema.sql.

Safe to re-run: every table is CREATE TABLE IF NOT EXISTS.
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

from src.hrm_system.hrm_system.database.bootstrap import apply_schema, list_tables


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    hrm_tables = sorted(t for t in list_tables(db_config) if t.startswith("hrm_"))
    print(f"OK: HRM schema ready in {db_config.get('database')}@{db_config.get('host')} ({len(hrm_tables)} tables)")
    for table in hrm_tables:
        print(f"  - {table}")


if __name__ == "__main__":
    main()
