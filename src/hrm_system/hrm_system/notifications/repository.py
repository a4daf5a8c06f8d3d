from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import DeliveryStatus, EmailType
from .model import EmailLog


class EmailLogRepository(Protocol):
    """Repository interface for sent (or failed) emails."""

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
        raise NotImplementedError

    def get_log(self, log_id: int) -> Optional[EmailLog]:
        raise NotImplementedError

    def list_logs(
        self,
        *,
        subject_user_id: Optional[int] = None,
        month_key: Optional[str] = None,
    ) -> Sequence[EmailLog]:
        raise NotImplementedError
