from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import HrmRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import HrmUser
from .repository import UserRepository

_COLUMNS = "user_id, full_name, email, hrm_role, is_active"


def _to_user(row: dict) -> HrmUser:
    return HrmUser(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        email=row["email"],
        hrm_role=HrmRole(row["hrm_role"]),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[HrmUser]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM hrm_users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_many(self, user_ids: Sequence[int]) -> dict[int, HrmUser]:
        ids = sorted({int(u) for u in user_ids})
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM hrm_users WHERE user_id IN ({in_clause(ids)})", tuple(ids))
            return {u.user_id: u for u in map(_to_user, fetchall(cur))}
