from __future__ import annotations

from typing import Optional, Sequence

from ...core.constants import MONEY_DECIMALS
from ...core.enums import ActionType, Tier
from ...core.exceptions import ValidationError
from ..model import MonthlyOutcome, MonthlyResult
from ..policy import TierPolicy
from .base import MonthlyCalculator


class StandardMonthlyCalculator(MonthlyCalculator):
    """Standard rule: mean of the recorded weeks, tier by threshold, fine by score band.

    Absent weeks are left out of the mean. An IMPROVEMENT month that follows
    another IMPROVEMENT month is fined as well.
    """

    def __init__(self, policy: Optional[TierPolicy] = None):
        self._policy = policy or TierPolicy()

    @property
    def policy(self) -> TierPolicy:
        return self._policy

    def classify(self, monthly_score: Optional[float]) -> Tier:
        if monthly_score is None:
            return Tier.NO_DATA
        p = self._policy
        if monthly_score >= p.bonus_min:
            return Tier.BONUS
        if monthly_score >= p.appreciation_min:
            return Tier.APPRECIATION
        if monthly_score >= p.improvement_min:
            return Tier.IMPROVEMENT
        return Tier.FINE

    def _base_fine(self, tier: Tier, monthly_score: Optional[float], previous_tier: Optional[Tier]) -> float:
        if tier == Tier.FINE:
            return self._policy.fine_for(monthly_score)
        if tier == Tier.IMPROVEMENT and previous_tier == Tier.IMPROVEMENT:
            return float(self._policy.repeated_improvement_fine)
        return 0.0

    def _gift_amount(self, tier: Tier) -> Optional[float]:
        if tier == Tier.BONUS:
            return self._policy.bonus_gift
        if tier == Tier.APPRECIATION:
            return self._policy.appreciation_gift
        return None

    @staticmethod
    def _action_type(tier: Tier, base_fine: float) -> ActionType:
        if tier == Tier.BONUS:
            return ActionType.BONUS
        if tier == Tier.APPRECIATION:
            return ActionType.APPRECIATION
        if tier == Tier.IMPROVEMENT:
            # A fine here can only come from the repeated-improvement rule
            return ActionType.FINE if base_fine > 0 else ActionType.SHOW_CAUSE
        if tier == Tier.FINE:
            return ActionType.FINE
        return ActionType.NONE

    def compute(
        self,
        *,
        weekly_scores: Sequence[float],
        expected_weeks_count: int,
        previous: Optional[MonthlyResult] = None,
    ) -> MonthlyOutcome:
        if expected_weeks_count <= 0:
            raise ValidationError("A month must contain at least one week")
        weeks_used = len(weekly_scores)
        if weeks_used > expected_weeks_count:
            raise ValidationError(
                f"{weeks_used} weekly scores given for a month of {expected_weeks_count} weeks"
            )

        monthly_score = sum(float(s) for s in weekly_scores) / weeks_used if weeks_used else None
        is_complete = weeks_used == expected_weeks_count
        tier = self.classify(monthly_score)
        previous_tier = previous.tier if previous else None

        base_fine = self._base_fine(tier, monthly_score, previous_tier)
        month_fine_count = 1 if base_fine > 0 else 0
        final_fine = base_fine * month_fine_count
        if tier == Tier.FINE and not is_complete and previous is not None and not previous.is_complete_month:
            final_fine *= self._policy.repeated_incomplete_multiplier

        if tier == Tier.IMPROVEMENT:
            consecutive = (previous.consecutive_improvement_months if previous else 0) + 1
        else:
            consecutive = 0

        return MonthlyOutcome(
            monthly_score=monthly_score,
            tier=tier,
            action_type=self._action_type(tier, base_fine),
            base_fine=round(base_fine, MONEY_DECIMALS),
            month_fine_count=month_fine_count,
            final_fine=round(final_fine, MONEY_DECIMALS),
            gift_amount=self._gift_amount(tier),
            weeks_count_used=weeks_used,
            expected_weeks_count=expected_weeks_count,
            is_complete_month=is_complete,
            consecutive_improvement_months=consecutive,
        )
