from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from ..core.enums import DeliveryStatus, EmailType
from ..kpi.model import WeeklyDetail
from ..payroll.model import MonthlyResult


@dataclass(frozen=True)
class CompanyInfo:
    """Branding and contact lines printed on outgoing emails."""

    name: str = "HRM"
    support_contact: str = "your HR administrator"
    currency_symbol: str = "৳"

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "CompanyInfo":
        if not data:
            return cls()
        defaults = cls()
        return cls(
            name=str(data.get("name") or defaults.name),
            support_contact=str(data.get("support_contact") or defaults.support_contact),
            currency_symbol=str(data.get("currency_symbol") or defaults.currency_symbol),
        )


@dataclass(frozen=True)
class Marksheet:
    subject_user_id: int
    subject_name: str
    subject_email: str
    month_key: str
    result: MonthlyResult
    weeks: tuple[WeeklyDetail, ...] = ()


@dataclass(frozen=True)
class RenderedEmail:
    subject_line: str
    text_content: str
    html_content: str


@dataclass(frozen=True)
class EmailLog:
    log_id: int
    subject_user_id: int
    recipient_email: str
    month_key: str
    email_type: EmailType
    subject_line: str
    html_content: str
    text_content: str
    sent_by_admin_id: int
    delivery_status: DeliveryStatus
    error_message: Optional[str] = None
    sent_at: Optional[datetime] = field(default=None, compare=False)

    def to_dict(self, *, include_content: bool = False) -> dict:
        out = {
            "id": self.log_id,
            "subjectUserId": self.subject_user_id,
            "recipientEmail": self.recipient_email,
            "monthKey": self.month_key,
            "emailType": self.email_type.value,
            "subjectLine": self.subject_line,
            "sentByAdminId": self.sent_by_admin_id,
            "deliveryStatus": self.delivery_status.value,
            "errorMessage": self.error_message,
            "sentAt": self.sent_at.isoformat() if self.sent_at else None,
        }
        if include_content:
            out["htmlContent"] = self.html_content
            out["textContent"] = self.text_content
        return out
