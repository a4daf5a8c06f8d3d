from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import PeriodStatus
from .model import Month, MonthlyResult


class PayrollRepository(Protocol):
    # Months
    def get_month(self, month_key: str) -> Optional[Month]:
        raise NotImplementedError

    def ensure_month(self, *, month_key: str, start_date: date, end_date: date) -> Month:
        """Create the month as OPEN when missing; return the stored month."""

        raise NotImplementedError

    def set_month_status(self, *, month_key: str, status: PeriodStatus) -> Optional[Month]:
        raise NotImplementedError

    # Monthly results
    def get_result(self, *, subject_user_id: int, month_key: str) -> Optional[MonthlyResult]:
        raise NotImplementedError

    def get_result_by_id(self, result_id: int) -> Optional[MonthlyResult]:
        raise NotImplementedError

    def save_result(self, result: MonthlyResult) -> MonthlyResult:
        """Upsert by (subject, month); returns the stored row with its id.

        Raises MonthLockedError when the month is locked, NotFoundError when it does not exist.
        """

        raise NotImplementedError

    def list_results(self, month_key: str) -> Sequence[MonthlyResult]:
        """Results of a month, best score first (months without data last)."""

        raise NotImplementedError

    def list_subject_results(self, subject_user_id: int) -> Sequence[MonthlyResult]:
        """Latest month first."""

        raise NotImplementedError
