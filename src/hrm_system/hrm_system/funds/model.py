from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import FundEntryType, FundStatus


def is_valid_status_for_type(entry_type: FundEntryType, status: FundStatus) -> bool:
    """DUE fits both kinds; a fine is COLLECTED, a bonus is PAID."""
    if status == FundStatus.DUE:
        return True
    if entry_type == FundEntryType.FINE and status == FundStatus.COLLECTED:
        return True
    if entry_type == FundEntryType.BONUS and status == FundStatus.PAID:
        return True
    return False


@dataclass(frozen=True)
class FundEntry:
    entry_id: int
    monthly_result_id: int
    month_key: str
    subject_user_id: int
    entry_type: FundEntryType
    status: FundStatus
    expected_amount: float
    actual_amount: Optional[float] = None
    note: Optional[str] = None
    marked_by_id: Optional[int] = None
    marked_at: Optional[datetime] = None
    created_at: Optional[datetime] = field(default=None, compare=False)

    @property
    def effective_amount(self) -> float:
        if self.actual_amount is not None:
            return float(self.actual_amount)
        return float(self.expected_amount or 0)

    def to_dict(self) -> dict:
        return {
            "id": self.entry_id,
            "monthlyResultId": self.monthly_result_id,
            "monthKey": self.month_key,
            "subjectUserId": self.subject_user_id,
            "entryType": self.entry_type.value,
            "status": self.status.value,
            "expectedAmount": self.expected_amount,
            "actualAmount": self.actual_amount,
            "note": self.note,
            "markedById": self.marked_by_id,
            "markedAt": self.marked_at.isoformat() if self.marked_at else None,
        }


@dataclass(frozen=True)
class FundSummary:
    fine_collected: float = 0.0
    bonus_paid: float = 0.0
    due_fine: float = 0.0
    due_bonus: float = 0.0

    @property
    def current_balance(self) -> float:
        return self.fine_collected - self.bonus_paid

    def to_dict(self) -> dict:
        return {
            "fineCollected": self.fine_collected,
            "bonusPaid": self.bonus_paid,
            "dueFine": self.due_fine,
            "dueBonus": self.due_bonus,
            "currentBalance": self.current_balance,
        }
