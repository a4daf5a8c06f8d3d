from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ...core.enums import Tier
from ..model import MonthlyOutcome, MonthlyResult


class MonthlyCalculator(ABC):
    """Calculator interface (Strategy Pattern for monthly payroll outcomes)."""

    @abstractmethod
    def classify(self, monthly_score: Optional[float]) -> Tier:
        raise NotImplementedError

    @abstractmethod
    def compute(
        self,
        *,
        weekly_scores: Sequence[float],
        expected_weeks_count: int,
        previous: Optional[MonthlyResult] = None,
    ) -> MonthlyOutcome:
        raise NotImplementedError
