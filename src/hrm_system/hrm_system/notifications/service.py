from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from ..common import datetime_utils as dt
from ..common.validators import require_positive_int
from ..core.enums import DeliveryStatus, EmailType
from ..core.exceptions import DeliveryError, NotFoundError
from ..kpi.service import KpiService
from ..payroll.repository import PayrollRepository
from ..users.repository import UserRepository
from .mailer import Mailer
from .marksheet import render_marksheet
from .model import CompanyInfo, EmailLog, Marksheet
from .repository import EmailLogRepository

logger = logging.getLogger(__name__)

RESENT_PREFIX = "[RESENT] "


class MarksheetService:
    """Builds, delivers and logs monthly marksheet emails.

    Every attempt is logged, failed ones included, so a super admin can see
    what went out and resend it.
    """

    def __init__(
        self,
        payroll: PayrollRepository,
        users: UserRepository,
        email_logs: EmailLogRepository,
        mailer: Mailer,
        *,
        kpi_service: KpiService,
        company: CompanyInfo,
        template_dir: Optional[Path] = None,
    ):
        self._payroll = payroll
        self._users = users
        self._email_logs = email_logs
        self._mailer = mailer
        self._kpi_service = kpi_service
        self._company = company
        self._template_dir = template_dir

    def build_marksheet(self, *, subject_user_id: Any, month_key: str) -> Marksheet:
        subject_id = require_positive_int(subject_user_id, "subject_user_id")
        month_key = dt.normalize_month_key(month_key)

        subject = self._users.get_by_id(subject_id)
        if not subject:
            raise NotFoundError("Subject user not found")
        if not self._payroll.get_month(month_key):
            raise NotFoundError("Month not found")
        result = self._payroll.get_result(subject_user_id=subject_id, month_key=month_key)
        if not result:
            raise NotFoundError("Monthly result not found")

        weeks = self._kpi_service.weekly_details(subject_user_id=subject_id, month_key=month_key)
        return Marksheet(
            subject_user_id=subject_id,
            subject_name=subject.full_name,
            subject_email=subject.email,
            month_key=month_key,
            result=result,
            weeks=tuple(weeks),
        )

    def _deliver(
        self,
        *,
        subject_user_id: int,
        recipient: str,
        month_key: str,
        email_type: EmailType,
        subject_line: str,
        text: str,
        html: str,
        sent_by: int,
    ) -> EmailLog:
        log_fields = dict(
            subject_user_id=subject_user_id,
            recipient_email=recipient,
            month_key=month_key,
            email_type=email_type,
            subject_line=subject_line,
            html_content=html,
            text_content=text,
            sent_by_admin_id=int(sent_by),
        )
        try:
            self._mailer.send(to=recipient, subject=subject_line, text=text, html=html)
        except DeliveryError as exc:
            logger.error("Marksheet delivery failed: to=%s month=%s error=%s", recipient, month_key, exc)
            self._email_logs.add_log(**log_fields, delivery_status=DeliveryStatus.FAILED, error_message=str(exc))
            raise

        log = self._email_logs.add_log(**log_fields, delivery_status=DeliveryStatus.SENT)
        logger.info("Marksheet sent: to=%s month=%s log=%s", recipient, month_key, log.log_id)
        return log

    def send(self, *, subject_user_id: Any, month_key: str, sent_by: int) -> EmailLog:
        marksheet = self.build_marksheet(subject_user_id=subject_user_id, month_key=month_key)
        rendered = render_marksheet(marksheet, self._company, template_dir=self._template_dir)
        return self._deliver(
            subject_user_id=marksheet.subject_user_id,
            recipient=marksheet.subject_email,
            month_key=marksheet.month_key,
            email_type=EmailType.MARKSHEET,
            subject_line=rendered.subject_line,
            text=rendered.text_content,
            html=rendered.html_content,
            sent_by=sent_by,
        )

    def resend(self, *, email_log_id: Any, sent_by: int) -> EmailLog:
        log_id = require_positive_int(email_log_id, "email_log_id")
        original = self._email_logs.get_log(log_id)
        if not original:
            raise NotFoundError("Email log not found")

        subject = original.subject_line
        if not subject.startswith(RESENT_PREFIX):
            subject = RESENT_PREFIX + subject
        return self._deliver(
            subject_user_id=original.subject_user_id,
            recipient=original.recipient_email,
            month_key=original.month_key,
            email_type=original.email_type,
            subject_line=subject,
            text=original.text_content,
            html=original.html_content,
            sent_by=sent_by,
        )

    def list_logs(self, *, subject_user_id: Optional[int] = None, month_key: Optional[str] = None) -> list[EmailLog]:
        if month_key:
            month_key = dt.normalize_month_key(month_key)
        return list(self._email_logs.list_logs(subject_user_id=subject_user_id, month_key=month_key or None))
