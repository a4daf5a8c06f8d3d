from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import ActionType, PeriodStatus, Tier
from ..core.exceptions import MonthLockedError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_float
from .model import Month, MonthlyResult
from .repository import PayrollRepository

_RESULT_SELECT = """
    SELECT r.result_id, r.subject_user_id, m.month_key, m.status AS month_status,
           r.monthly_score, r.tier, r.action_type, r.base_fine, r.month_fine_count,
           r.final_fine, r.gift_amount, r.weeks_count_used, r.expected_weeks_count,
           r.is_complete_month, r.consecutive_improvement_months, r.computed_at
    FROM hrm_monthly_results r
    JOIN hrm_months m ON m.month_id = r.month_id
"""


def _to_month(row: dict) -> Month:
    return Month(
        month_id=int(row["month_id"]),
        month_key=row["month_key"],
        start_date=row["start_date"],
        end_date=row["end_date"],
        status=PeriodStatus(row["status"]),
    )


def _to_result(row: dict) -> MonthlyResult:
    return MonthlyResult(
        result_id=int(row["result_id"]),
        subject_user_id=int(row["subject_user_id"]),
        month_key=row["month_key"],
        monthly_score=to_float(row.get("monthly_score")),
        tier=Tier(row["tier"]),
        action_type=ActionType(row["action_type"]),
        base_fine=to_float(row["base_fine"]) or 0.0,
        month_fine_count=int(row["month_fine_count"]),
        final_fine=to_float(row["final_fine"]) or 0.0,
        gift_amount=to_float(row.get("gift_amount")),
        weeks_count_used=int(row["weeks_count_used"]),
        expected_weeks_count=int(row["expected_weeks_count"]),
        is_complete_month=bool(row["is_complete_month"]),
        consecutive_improvement_months=int(row.get("consecutive_improvement_months") or 0),
        status=PeriodStatus(row["month_status"]),
        computed_at=row.get("computed_at"),
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Months --------
    def get_month(self, month_key: str) -> Optional[Month]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT month_id, month_key, start_date, end_date, status FROM hrm_months WHERE month_key=%s",
                (month_key,),
            )
            r = fetchone(cur)
            return _to_month(r) if r else None

    def ensure_month(self, *, month_key: str, start_date: date, end_date: date) -> Month:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO hrm_months(month_key, start_date, end_date, status)
                VALUES(%s,%s,%s,%s)
                """,
                (month_key, start_date, end_date, PeriodStatus.OPEN.value),
            )
            cur.execute(
                "SELECT month_id, month_key, start_date, end_date, status FROM hrm_months WHERE month_key=%s",
                (month_key,),
            )
            return _to_month(fetchone(cur))

    def set_month_status(self, *, month_key: str, status: PeriodStatus) -> Optional[Month]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE hrm_months SET status=%s, updated_at=NOW() WHERE month_key=%s",
                (status.value, month_key),
            )
            cur.execute(
                "SELECT month_id, month_key, start_date, end_date, status FROM hrm_months WHERE month_key=%s",
                (month_key,),
            )
            r = fetchone(cur)
            return _to_month(r) if r else None

    # -------- Monthly results --------
    def get_result(self, *, subject_user_id: int, month_key: str) -> Optional[MonthlyResult]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _RESULT_SELECT + " WHERE r.subject_user_id=%s AND m.month_key=%s",
                (int(subject_user_id), month_key),
            )
            r = fetchone(cur)
            return _to_result(r) if r else None

    def get_result_by_id(self, result_id: int) -> Optional[MonthlyResult]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_RESULT_SELECT + " WHERE r.result_id=%s", (int(result_id),))
            r = fetchone(cur)
            return _to_result(r) if r else None

    def save_result(self, result: MonthlyResult) -> MonthlyResult:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO hrm_monthly_results(
                    month_id, subject_user_id, monthly_score, tier, action_type,
                    base_fine, month_fine_count, final_fine, gift_amount,
                    weeks_count_used, expected_weeks_count, is_complete_month,
                    consecutive_improvement_months, computed_at
                )
                SELECT m.month_id, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s
                FROM hrm_months m
                WHERE m.month_key=%s AND m.status=%s
                ON DUPLICATE KEY UPDATE
                    monthly_score=VALUES(monthly_score),
                    tier=VALUES(tier),
                    action_type=VALUES(action_type),
                    base_fine=VALUES(base_fine),
                    month_fine_count=VALUES(month_fine_count),
                    final_fine=VALUES(final_fine),
                    gift_amount=VALUES(gift_amount),
                    weeks_count_used=VALUES(weeks_count_used),
                    expected_weeks_count=VALUES(expected_weeks_count),
                    is_complete_month=VALUES(is_complete_month),
                    consecutive_improvement_months=VALUES(consecutive_improvement_months),
                    computed_at=VALUES(computed_at)
                """,
                (
                    int(result.subject_user_id),
                    result.monthly_score,
                    result.tier.value,
                    result.action_type.value,
                    result.base_fine,
                    int(result.month_fine_count),
                    result.final_fine,
                    result.gift_amount,
                    int(result.weeks_count_used),
                    int(result.expected_weeks_count),
                    1 if result.is_complete_month else 0,
                    int(result.consecutive_improvement_months),
                    result.computed_at,
                    result.month_key,
                    PeriodStatus.OPEN.value,
                ),
            )
            if cur.rowcount == 0:
                # Nothing written: the month is locked or missing, or the row is unchanged
                cur.execute("SELECT status FROM hrm_months WHERE month_key=%s", (result.month_key,))
                month = fetchone(cur)
                if not month:
                    raise NotFoundError(f"Month {result.month_key} not found")
                if month["status"] != PeriodStatus.OPEN.value:
                    raise MonthLockedError(result.month_key)
            cur.execute(
                _RESULT_SELECT + " WHERE r.subject_user_id=%s AND m.month_key=%s",
                (int(result.subject_user_id), result.month_key),
            )
            return _to_result(fetchone(cur))

    def list_results(self, month_key: str) -> Sequence[MonthlyResult]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _RESULT_SELECT
                + """
                WHERE m.month_key=%s
                ORDER BY r.monthly_score IS NULL, r.monthly_score DESC, r.subject_user_id ASC
                """,
                (month_key,),
            )
            return [_to_result(r) for r in fetchall(cur)]

    def list_subject_results(self, subject_user_id: int) -> Sequence[MonthlyResult]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _RESULT_SELECT + " WHERE r.subject_user_id=%s ORDER BY m.month_key DESC",
                (int(subject_user_id),),
            )
            return [_to_result(r) for r in fetchall(cur)]
