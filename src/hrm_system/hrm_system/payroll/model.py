from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import ActionType, PeriodStatus, Tier


@dataclass(frozen=True)
class Month:
    month_id: int
    month_key: str
    start_date: date
    end_date: date
    status: PeriodStatus = PeriodStatus.OPEN

    @property
    def is_locked(self) -> bool:
        return self.status == PeriodStatus.LOCKED


@dataclass(frozen=True)
class MonthlyOutcome:
    """Pure calculator output, before it is tied to a subject and month."""

    monthly_score: Optional[float]
    tier: Tier
    action_type: ActionType
    base_fine: float
    month_fine_count: int
    final_fine: float
    gift_amount: Optional[float]
    weeks_count_used: int
    expected_weeks_count: int
    is_complete_month: bool
    consecutive_improvement_months: int


@dataclass(frozen=True)
class MonthlyResult:
    subject_user_id: int
    month_key: str
    monthly_score: Optional[float]
    tier: Tier
    action_type: ActionType
    base_fine: float
    month_fine_count: int
    final_fine: float
    gift_amount: Optional[float]
    weeks_count_used: int
    expected_weeks_count: int
    is_complete_month: bool
    consecutive_improvement_months: int = 0
    status: PeriodStatus = PeriodStatus.OPEN
    result_id: Optional[int] = field(default=None, compare=False)
    computed_at: Optional[datetime] = field(default=None, compare=False)

    @classmethod
    def from_outcome(
        cls,
        outcome: MonthlyOutcome,
        *,
        subject_user_id: int,
        month_key: str,
        status: PeriodStatus = PeriodStatus.OPEN,
        computed_at: Optional[datetime] = None,
    ) -> "MonthlyResult":
        return cls(
            subject_user_id=int(subject_user_id),
            month_key=month_key,
            monthly_score=outcome.monthly_score,
            tier=outcome.tier,
            action_type=outcome.action_type,
            base_fine=outcome.base_fine,
            month_fine_count=outcome.month_fine_count,
            final_fine=outcome.final_fine,
            gift_amount=outcome.gift_amount,
            weeks_count_used=outcome.weeks_count_used,
            expected_weeks_count=outcome.expected_weeks_count,
            is_complete_month=outcome.is_complete_month,
            consecutive_improvement_months=outcome.consecutive_improvement_months,
            status=status,
            computed_at=computed_at,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.result_id,
            "subjectUserId": self.subject_user_id,
            "monthKey": self.month_key,
            "monthlyScore": self.monthly_score,
            "tier": self.tier.value,
            "actionType": self.action_type.value,
            "baseFine": self.base_fine,
            "monthFineCount": self.month_fine_count,
            "finalFine": self.final_fine,
            "giftAmount": self.gift_amount,
            "weeksCountUsed": self.weeks_count_used,
            "expectedWeeksCount": self.expected_weeks_count,
            "isCompleteMonth": self.is_complete_month,
            "consecutiveImprovementMonths": self.consecutive_improvement_months,
            "status": self.status.value,
            "computedAt": self.computed_at.isoformat() if self.computed_at else None,
        }


@dataclass(frozen=True)
class MonthComputation:
    month_key: str
    expected_weeks_count: int
    weeks_in_month: int
    results: tuple[MonthlyResult, ...]
    failures: dict[int, str] = field(default_factory=dict)


@dataclass(frozen=True)
class MonthlyReport:
    month_key: str
    status: PeriodStatus
    rows: list[dict]
    summary: dict
