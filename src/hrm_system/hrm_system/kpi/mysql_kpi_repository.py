from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import PeriodStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, to_float
from .model import (
    AdminCompliance,
    Assignment,
    CriteriaItem,
    KpiSubmission,
    SubmissionItem,
    SubmittedScore,
    Week,
    WeeklyScore,
)
from .repository import KpiRepository


def _to_week(row: dict) -> Week:
    return Week(
        week_id=int(row["week_id"]),
        week_key=row["week_key"],
        friday_date=row["friday_date"],
        status=PeriodStatus(row["status"]),
    )


class MySQLKpiRepository(KpiRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Weeks --------
    def get_week(self, week_key: str) -> Optional[Week]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT week_id, week_key, friday_date, status FROM hrm_weeks WHERE week_key=%s",
                (week_key,),
            )
            r = fetchone(cur)
            return _to_week(r) if r else None

    def ensure_week(self, *, week_key: str, friday_date: date) -> Week:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO hrm_weeks(week_key, friday_date, status)
                VALUES(%s,%s,%s)
                """,
                (week_key, friday_date, PeriodStatus.OPEN.value),
            )
            cur.execute(
                "SELECT week_id, week_key, friday_date, status FROM hrm_weeks WHERE week_key=%s",
                (week_key,),
            )
            return _to_week(fetchone(cur))

    def set_week_status(self, *, week_key: str, status: PeriodStatus) -> Optional[Week]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE hrm_weeks SET status=%s, updated_at=NOW() WHERE week_key=%s",
                (status.value, week_key),
            )
            cur.execute(
                "SELECT week_id, week_key, friday_date, status FROM hrm_weeks WHERE week_key=%s",
                (week_key,),
            )
            r = fetchone(cur)
            return _to_week(r) if r else None

    def list_weeks(self, week_keys: Sequence[str]) -> Sequence[Week]:
        keys = list(week_keys)
        if not keys:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT week_id, week_key, friday_date, status
                FROM hrm_weeks
                WHERE week_key IN ({in_clause(keys)})
                ORDER BY friday_date ASC
                """,
                tuple(keys),
            )
            return [_to_week(r) for r in fetchall(cur)]

    # -------- Assignments / criteria --------
    def get_active_assignment(self, *, marker_admin_id: int, subject_user_id: int) -> Optional[Assignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT marker_admin_id, subject_user_id, is_active
                FROM hrm_assignments
                WHERE marker_admin_id=%s AND subject_user_id=%s AND is_active=1
                """,
                (int(marker_admin_id), int(subject_user_id)),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Assignment(
                marker_admin_id=int(r["marker_admin_id"]),
                subject_user_id=int(r["subject_user_id"]),
                is_active=bool(r["is_active"]),
            )

    def list_active_assignments(self) -> Sequence[Assignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT marker_admin_id, subject_user_id FROM hrm_assignments WHERE is_active=1")
            return [
                Assignment(marker_admin_id=int(r["marker_admin_id"]), subject_user_id=int(r["subject_user_id"]))
                for r in fetchall(cur)
            ]

    def get_active_criteria(self, subject_user_id: int) -> Sequence[CriteriaItem]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT i.criteria_id, c.name, i.scale_max, i.weight
                FROM hrm_subject_criteria_sets s
                JOIN hrm_subject_criteria_items i ON i.set_id = s.set_id
                JOIN hrm_criteria c ON c.criteria_id = i.criteria_id
                WHERE s.subject_user_id=%s AND s.active_to IS NULL
                ORDER BY i.criteria_id ASC
                """,
                (int(subject_user_id),),
            )
            return [
                CriteriaItem(
                    criteria_id=int(r["criteria_id"]),
                    name=r["name"],
                    scale_max=to_float(r["scale_max"]),
                    weight_percent=to_float(r["weight"]),
                )
                for r in fetchall(cur)
            ]

    # -------- Submissions --------
    def save_submission(
        self,
        *,
        week_key: str,
        marker_admin_id: int,
        subject_user_id: int,
        total_score: float,
        comment: Optional[str],
        scores: Sequence[SubmittedScore],
        submitted_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO hrm_kpi_submissions(
                    week_id, marker_admin_id, subject_user_id, total_score, comment, submitted_at
                )
                SELECT w.week_id, %s, %s, %s, %s, %s FROM hrm_weeks w WHERE w.week_key=%s
                ON DUPLICATE KEY UPDATE
                    total_score=VALUES(total_score), comment=VALUES(comment), submitted_at=VALUES(submitted_at)
                """,
                (int(marker_admin_id), int(subject_user_id), total_score, comment, submitted_at, week_key),
            )

            cur.execute(
                """
                SELECT s.submission_id
                FROM hrm_kpi_submissions s
                JOIN hrm_weeks w ON w.week_id = s.week_id
                WHERE w.week_key=%s AND s.marker_admin_id=%s AND s.subject_user_id=%s
                """,
                (week_key, int(marker_admin_id), int(subject_user_id)),
            )
            submission_id = int(fetchone(cur)["submission_id"])

            cur.execute("DELETE FROM hrm_kpi_submission_items WHERE submission_id=%s", (submission_id,))
            if scores:
                cur.executemany(
                    "INSERT INTO hrm_kpi_submission_items(submission_id, criteria_id, score_raw) VALUES(%s,%s,%s)",
                    [(submission_id, int(s.criteria_id), float(s.score_raw)) for s in scores],
                )
            return submission_id

    def list_submissions(
        self,
        *,
        week_keys: Sequence[str],
        subject_user_id: Optional[int] = None,
    ) -> Sequence[KpiSubmission]:
        keys = list(week_keys)
        if not keys:
            return []
        clauses = [f"w.week_key IN ({in_clause(keys)})"]
        params: list[object] = list(keys)
        if subject_user_id is not None:
            clauses.append("s.subject_user_id=%s")
            params.append(int(subject_user_id))
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT s.submission_id, w.week_key, s.marker_admin_id, s.subject_user_id,
                       s.total_score, s.comment, s.submitted_at
                FROM hrm_kpi_submissions s
                JOIN hrm_weeks w ON w.week_id = s.week_id
                WHERE {where}
                ORDER BY w.friday_date ASC, s.submitted_at ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)
            if not rows:
                return []

            ids = [int(r["submission_id"]) for r in rows]
            cur.execute(
                f"""
                SELECT i.submission_id, i.criteria_id, c.name, i.score_raw
                FROM hrm_kpi_submission_items i
                JOIN hrm_criteria c ON c.criteria_id = i.criteria_id
                WHERE i.submission_id IN ({in_clause(ids)})
                ORDER BY i.criteria_id ASC
                """,
                tuple(ids),
            )
            items: dict[int, list[SubmissionItem]] = defaultdict(list)
            for i in fetchall(cur):
                items[int(i["submission_id"])].append(
                    SubmissionItem(
                        criteria_id=int(i["criteria_id"]),
                        criteria_name=i["name"],
                        score_raw=to_float(i["score_raw"]),
                    )
                )

            return [
                KpiSubmission(
                    submission_id=int(r["submission_id"]),
                    week_key=r["week_key"],
                    marker_admin_id=int(r["marker_admin_id"]),
                    subject_user_id=int(r["subject_user_id"]),
                    total_score=to_float(r["total_score"]),
                    comment=r.get("comment"),
                    submitted_at=r.get("submitted_at"),
                    items=tuple(items.get(int(r["submission_id"]), ())),
                )
                for r in rows
            ]

    # -------- Weekly results --------
    def save_weekly_results(self, results: Sequence[WeeklyScore]) -> None:
        if not results:
            return
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO hrm_weekly_results(
                    week_id, subject_user_id, weekly_avg_score,
                    expected_markers_count, submitted_markers_count, is_complete, computed_at
                )
                SELECT w.week_id, %s, %s, %s, %s, %s, %s FROM hrm_weeks w WHERE w.week_key=%s
                ON DUPLICATE KEY UPDATE
                    weekly_avg_score=VALUES(weekly_avg_score),
                    expected_markers_count=VALUES(expected_markers_count),
                    submitted_markers_count=VALUES(submitted_markers_count),
                    is_complete=VALUES(is_complete),
                    computed_at=VALUES(computed_at)
                """,
                [
                    (
                        int(r.subject_user_id),
                        r.average_score,
                        int(r.expected_markers_count),
                        int(r.submitted_markers_count),
                        1 if r.is_complete else 0,
                        r.computed_at,
                        r.week_key,
                    )
                    for r in results
                ],
            )

    def save_compliance(self, records: Sequence[AdminCompliance]) -> None:
        if not records:
            return
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO hrm_admin_compliance(
                    week_id, admin_user_id, expected_count, submitted_count, missed_count, status
                )
                SELECT w.week_id, %s, %s, %s, %s, %s FROM hrm_weeks w WHERE w.week_key=%s
                ON DUPLICATE KEY UPDATE
                    expected_count=VALUES(expected_count),
                    submitted_count=VALUES(submitted_count),
                    missed_count=VALUES(missed_count),
                    status=VALUES(status)
                """,
                [
                    (
                        int(c.admin_user_id),
                        int(c.expected_count),
                        int(c.submitted_count),
                        int(c.missed_count),
                        c.status.value,
                        c.week_key,
                    )
                    for c in records
                ],
            )

    def list_weekly_scores(
        self,
        *,
        week_keys: Sequence[str],
        subject_user_id: Optional[int] = None,
    ) -> Sequence[WeeklyScore]:
        keys = list(week_keys)
        if not keys:
            return []
        clauses = [f"w.week_key IN ({in_clause(keys)})"]
        params: list[object] = list(keys)
        if subject_user_id is not None:
            clauses.append("r.subject_user_id=%s")
            params.append(int(subject_user_id))
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT w.week_key, r.subject_user_id, r.weekly_avg_score,
                       r.expected_markers_count, r.submitted_markers_count,
                       r.is_complete, r.computed_at
                FROM hrm_weekly_results r
                JOIN hrm_weeks w ON w.week_id = r.week_id
                WHERE {where}
                ORDER BY w.friday_date ASC, r.subject_user_id ASC
                """,
                tuple(params),
            )
            return [
                WeeklyScore(
                    subject_user_id=int(r["subject_user_id"]),
                    week_key=r["week_key"],
                    average_score=to_float(r.get("weekly_avg_score")),
                    expected_markers_count=int(r["expected_markers_count"]),
                    submitted_markers_count=int(r["submitted_markers_count"]),
                    is_complete=bool(r["is_complete"]),
                    computed_at=r.get("computed_at"),
                )
                for r in fetchall(cur)
            ]
