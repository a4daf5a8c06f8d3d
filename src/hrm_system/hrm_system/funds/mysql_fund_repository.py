from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import FundEntryType, FundStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, to_float
from .model import FundEntry
from .repository import FundRepository

_ENTRY_SELECT = """
    SELECT f.entry_id, f.monthly_result_id, m.month_key, f.subject_user_id,
           f.entry_type, f.status, f.expected_amount, f.actual_amount,
           f.note, f.marked_by_id, f.marked_at, f.created_at
    FROM hrm_fund_logs f
    JOIN hrm_months m ON m.month_id = f.month_id
"""


def _to_entry(row: dict) -> FundEntry:
    return FundEntry(
        entry_id=int(row["entry_id"]),
        monthly_result_id=int(row["monthly_result_id"]),
        month_key=row["month_key"],
        subject_user_id=int(row["subject_user_id"]),
        entry_type=FundEntryType(row["entry_type"]),
        status=FundStatus(row["status"]),
        expected_amount=to_float(row["expected_amount"]) or 0.0,
        actual_amount=to_float(row.get("actual_amount")),
        note=row.get("note"),
        marked_by_id=row.get("marked_by_id"),
        marked_at=row.get("marked_at"),
        created_at=row.get("created_at"),
    )


class MySQLFundRepository(FundRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_entry(self, entry_id: int) -> Optional[FundEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_ENTRY_SELECT + " WHERE f.entry_id=%s", (int(entry_id),))
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def upsert_entry(
        self,
        *,
        monthly_result_id: int,
        entry_type: FundEntryType,
        status: FundStatus,
        expected_amount: float,
        actual_amount: Optional[float],
        note: Optional[str],
        marked_by_id: int,
        marked_at: Optional[datetime],
    ) -> FundEntry:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO hrm_fund_logs(
                    monthly_result_id, month_id, subject_user_id, entry_type, status,
                    expected_amount, actual_amount, note, marked_by_id, marked_at
                )
                SELECT r.result_id, r.month_id, r.subject_user_id, %s, %s, %s, %s, %s, %s, %s
                FROM hrm_monthly_results r
                WHERE r.result_id=%s
                ON DUPLICATE KEY UPDATE
                    status=VALUES(status),
                    expected_amount=VALUES(expected_amount),
                    actual_amount=VALUES(actual_amount),
                    note=VALUES(note),
                    marked_by_id=VALUES(marked_by_id),
                    marked_at=VALUES(marked_at),
                    updated_at=NOW()
                """,
                (
                    entry_type.value,
                    status.value,
                    expected_amount,
                    actual_amount,
                    note,
                    int(marked_by_id),
                    marked_at,
                    int(monthly_result_id),
                ),
            )
            cur.execute(
                _ENTRY_SELECT + " WHERE f.monthly_result_id=%s AND f.entry_type=%s",
                (int(monthly_result_id), entry_type.value),
            )
            return _to_entry(fetchone(cur))

    def update_entry(
        self,
        *,
        entry_id: int,
        status: FundStatus,
        actual_amount: Optional[float],
        note: Optional[str],
        marked_by_id: int,
        marked_at: Optional[datetime],
    ) -> Optional[FundEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE hrm_fund_logs
                SET status=%s, actual_amount=%s, note=%s, marked_by_id=%s, marked_at=%s, updated_at=NOW()
                WHERE entry_id=%s
                """,
                (status.value, actual_amount, note, int(marked_by_id), marked_at, int(entry_id)),
            )
            cur.execute(_ENTRY_SELECT + " WHERE f.entry_id=%s", (int(entry_id),))
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def list_entries(
        self,
        *,
        month_key: Optional[str] = None,
        status: Optional[FundStatus] = None,
        entry_type: Optional[FundEntryType] = None,
        subject_user_id: Optional[int] = None,
    ) -> Sequence[FundEntry]:
        clauses = ["1=1"]
        params: list[object] = []

        if month_key is not None:
            clauses.append("m.month_key=%s")
            params.append(month_key)
        if status is not None:
            clauses.append("f.status=%s")
            params.append(status.value)
        if entry_type is not None:
            clauses.append("f.entry_type=%s")
            params.append(entry_type.value)
        if subject_user_id is not None:
            clauses.append("f.subject_user_id=%s")
            params.append(int(subject_user_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _ENTRY_SELECT + f" WHERE {where} ORDER BY f.created_at DESC, f.entry_id DESC",
                tuple(params),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def list_for_results(self, result_ids: Sequence[int]) -> Sequence[FundEntry]:
        ids = [int(i) for i in result_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _ENTRY_SELECT + f" WHERE f.monthly_result_id IN ({in_clause(ids)})",
                tuple(ids),
            )
            return [_to_entry(r) for r in fetchall(cur)]
