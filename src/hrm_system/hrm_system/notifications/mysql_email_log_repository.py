from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import DeliveryStatus, EmailType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import EmailLog
from .repository import EmailLogRepository

_LOG_SELECT = """
    SELECT l.email_log_id, l.subject_user_id, l.recipient_email, m.month_key,
           l.email_type, l.subject_line, l.html_content, l.text_content,
           l.sent_by_admin_id, l.delivery_status, l.error_message, l.sent_at
    FROM hrm_email_logs l
    JOIN hrm_months m ON m.month_id = l.month_id
"""


def _to_log(row: dict) -> EmailLog:
    return EmailLog(
        log_id=int(row["email_log_id"]),
        subject_user_id=int(row["subject_user_id"]),
        recipient_email=row["recipient_email"],
        month_key=row["month_key"],
        email_type=EmailType(row["email_type"]),
        subject_line=row["subject_line"],
        html_content=row.get("html_content") or "",
        text_content=row.get("text_content") or "",
        sent_by_admin_id=int(row["sent_by_admin_id"]),
        delivery_status=DeliveryStatus(row["delivery_status"]),
        error_message=row.get("error_message"),
        sent_at=row.get("sent_at"),
    )


class MySQLEmailLogRepository(EmailLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add_log(
        self,
        *,
        subject_user_id: int,
        recipient_email: str,
        month_key: str,
        email_type: EmailType,
        subject_line: str,
        html_content: str,
        text_content: str,
        sent_by_admin_id: int,
        delivery_status: DeliveryStatus,
        error_message: Optional[str] = None,
    ) -> EmailLog:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO hrm_email_logs(
                    subject_user_id, recipient_email, month_id, email_type, subject_line,
                    html_content, text_content, sent_by_admin_id, delivery_status, error_message
                )
                SELECT %s, %s, m.month_id, %s, %s, %s, %s, %s, %s, %s
                FROM hrm_months m
                WHERE m.month_key=%s
                """,
                (
                    int(subject_user_id),
                    recipient_email,
                    email_type.value,
                    subject_line,
                    html_content,
                    text_content,
                    int(sent_by_admin_id),
                    delivery_status.value,
                    error_message,
                    month_key,
                ),
            )
            log_id = int(cur.lastrowid)
            cur.execute(_LOG_SELECT + " WHERE l.email_log_id=%s", (log_id,))
            return _to_log(fetchone(cur))

    def get_log(self, log_id: int) -> Optional[EmailLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_LOG_SELECT + " WHERE l.email_log_id=%s", (int(log_id),))
            r = fetchone(cur)
            return _to_log(r) if r else None

    def list_logs(
        self,
        *,
        subject_user_id: Optional[int] = None,
        month_key: Optional[str] = None,
    ) -> Sequence[EmailLog]:
        clauses = ["1=1"]
        params: list[object] = []
        if subject_user_id is not None:
            clauses.append("l.subject_user_id=%s")
            params.append(int(subject_user_id))
        if month_key is not None:
            clauses.append("m.month_key=%s")
            params.append(month_key)
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_LOG_SELECT + f" WHERE {where} ORDER BY l.sent_at DESC, l.email_log_id DESC", tuple(params))
            return [_to_log(r) for r in fetchall(cur)]
