from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import PeriodStatus
from .model import AdminCompliance, Assignment, CriteriaItem, KpiSubmission, SubmittedScore, Week, WeeklyScore


class KpiRepository(Protocol):
    # Weeks
    def get_week(self, week_key: str) -> Optional[Week]:
        raise NotImplementedError

    def ensure_week(self, *, week_key: str, friday_date: date) -> Week:
        """Create the week as OPEN when missing; return the stored week."""

        raise NotImplementedError

    def set_week_status(self, *, week_key: str, status: PeriodStatus) -> Optional[Week]:
        raise NotImplementedError

    def list_weeks(self, week_keys: Sequence[str]) -> Sequence[Week]:
        raise NotImplementedError

    # Assignments / criteria
    def get_active_assignment(self, *, marker_admin_id: int, subject_user_id: int) -> Optional[Assignment]:
        raise NotImplementedError

    def list_active_assignments(self) -> Sequence[Assignment]:
        raise NotImplementedError

    def get_active_criteria(self, subject_user_id: int) -> Sequence[CriteriaItem]:
        raise NotImplementedError

    # Submissions
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
        """Insert or replace the submission of (week, marker, subject)."""

        raise NotImplementedError

    def list_submissions(
        self,
        *,
        week_keys: Sequence[str],
        subject_user_id: Optional[int] = None,
    ) -> Sequence[KpiSubmission]:
        raise NotImplementedError

    # Weekly results
    def save_weekly_results(self, results: Sequence[WeeklyScore]) -> None:
        raise NotImplementedError

    def save_compliance(self, records: Sequence[AdminCompliance]) -> None:
        raise NotImplementedError

    def list_weekly_scores(
        self,
        *,
        week_keys: Sequence[str],
        subject_user_id: Optional[int] = None,
    ) -> Sequence[WeeklyScore]:
        raise NotImplementedError
