from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import mysql.connector

from ..core.enums import HrmRole


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


DEMO_USERS = (
    ("Super Admin Demo", "super@hrm.local", HrmRole.SUPER_ADMIN),
    ("Admin Demo", "admin@hrm.local", HrmRole.ADMIN),
    ("Employee One", "employee1@hrm.local", HrmRole.EMPLOYEE),
    ("Employee Two", "employee2@hrm.local", HrmRole.EMPLOYEE),
)

# criteria name -> (weight percent, scale max)
DEMO_CRITERIA_SET = {
    "Punctuality": (30, 10),
    "Quality of Work": (40, 10),
    "Teamwork": (30, 10),
}


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "hrm_db")),
    )


def _connect(target: DBTarget, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # The target database comes from DB_CONFIG, not from the script.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';' outside quotes. Lines starting with '--' are dropped."""
    sql = "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))
    buf: list[str] = []
    quote = None
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(db_config: dict, path: str | Path) -> None:
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _run_script(db_config, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _run_script(db_config, seed_path)


def ensure_demo_users(db_config: dict) -> dict:
    """Upsert demo people, give the demo admin every employee, and an active criteria set each.

    Needs the criteria rows from seed.sql. Returns counts of what is now in place.
    """
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor(dictionary=True)

        def upsert_user(full_name: str, email: str, role: HrmRole) -> int:
            cur.execute(
                """
                INSERT INTO hrm_users (full_name, email, hrm_role, is_active)
                VALUES (%s, %s, %s, 1)
                ON DUPLICATE KEY UPDATE full_name=VALUES(full_name), hrm_role=VALUES(hrm_role), is_active=1
                """,
                (full_name, email, role.value),
            )
            cur.execute("SELECT user_id FROM hrm_users WHERE email=%s", (email,))
            return int(cur.fetchone()["user_id"])

        ids = {email: upsert_user(name, email, role) for name, email, role in DEMO_USERS}
        admin_id = ids["admin@hrm.local"]
        employee_ids = [ids[email] for _, email, role in DEMO_USERS if role == HrmRole.EMPLOYEE]

        cur.execute("SELECT criteria_id, name FROM hrm_criteria")
        criteria = {row["name"]: int(row["criteria_id"]) for row in cur.fetchall()}
        missing = sorted(set(DEMO_CRITERIA_SET) - set(criteria))
        if missing:
            raise RuntimeError(f"Missing hrm_criteria rows: {', '.join(missing)} (apply seed.sql first)")

        new_sets = 0
        for subject_id in employee_ids:
            cur.execute(
                """
                INSERT INTO hrm_assignments (marker_admin_id, subject_user_id, is_active)
                VALUES (%s, %s, 1)
                ON DUPLICATE KEY UPDATE is_active=1
                """,
                (admin_id, subject_id),
            )

            cur.execute(
                "SELECT set_id FROM hrm_subject_criteria_sets WHERE subject_user_id=%s AND active_to IS NULL",
                (subject_id,),
            )
            if cur.fetchone():
                continue
            cur.execute(
                "INSERT INTO hrm_subject_criteria_sets (subject_user_id, active_from) VALUES (%s, CURDATE())",
                (subject_id,),
            )
            set_id = int(cur.lastrowid)
            new_sets += 1
            cur.executemany(
                "INSERT INTO hrm_subject_criteria_items (set_id, criteria_id, weight, scale_max) VALUES (%s, %s, %s, %s)",
                [(set_id, criteria[name], weight, scale) for name, (weight, scale) in DEMO_CRITERIA_SET.items()],
            )

        conn.commit()
        return {"users": len(ids), "assignments": len(employee_ids), "new_criteria_sets": new_sets}
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
