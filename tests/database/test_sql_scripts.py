from pathlib import Path

from src.hrm_system.hrm_system.database.bootstrap import _iter_sql_statements, _strip_create_db_and_use

DATABASE_DIR = Path(__file__).resolve().parents[2] / "database"


def test_statements_split_outside_quotes_and_comments():
    sql = "CREATE TABLE a (x INT);\n-- not; a statement\nINSERT INTO a VALUES ('a;b');\nSELECT 1"
    assert list(_iter_sql_statements(sql)) == [
        "CREATE TABLE a (x INT)",
        "INSERT INTO a VALUES ('a;b')",
        "SELECT 1",
    ]


def test_schema_targets_configured_database():
    sql = _strip_create_db_and_use((DATABASE_DIR / "schema.sql").read_text(encoding="utf-8"))
    statements = list(_iter_sql_statements(sql))

    assert not any(s.upper().startswith(("CREATE DATABASE", "USE ")) for s in statements)
    assert len(statements) == 14
    assert all(s.startswith("CREATE TABLE IF NOT EXISTS hrm_") for s in statements)
