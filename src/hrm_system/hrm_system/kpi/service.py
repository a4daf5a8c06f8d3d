from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..common import datetime_utils as dt
from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import HrmRole, PeriodStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError, WeekLockedError
from ..common.validators import clean_note, require_positive_int
from .model import SubmissionReceipt, SubmittedScore, Week, WeekAggregate, WeeklyDetail
from .repository import KpiRepository
from .scoring import compute_submission_total, validate_submitted_scores
from .weekly import aggregate_week

logger = logging.getLogger(__name__)

MARKER_ROLES = {HrmRole.ADMIN, HrmRole.SUPER_ADMIN}


class KpiService:
    """Use cases around weekly KPI marking.

    Markers submit criteria scores for the subjects assigned to them; a super
    admin folds the week's submissions into one weekly score per subject.
    """

    def __init__(
        self,
        kpi: KpiRepository,
        *,
        tz_name: str = DEFAULT_TIMEZONE,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._kpi = kpi
        self._tz_name = tz_name
        self._clock = clock or (lambda: dt.now_local(tz_name))

    @staticmethod
    def _parse_scores(items: Sequence[Any]) -> list[SubmittedScore]:
        out: list[SubmittedScore] = []
        for item in items or []:
            if isinstance(item, SubmittedScore):
                out.append(item)
                continue
            try:
                out.append(SubmittedScore(criteria_id=int(item["criteria_id"]), score_raw=float(item["score_raw"])))
            except (KeyError, TypeError, ValueError):
                raise ValidationError("Each item needs a numeric criteria_id and score_raw")
        return out

    def submit_marks(
        self,
        *,
        marker_id: int,
        marker_role: HrmRole,
        week_key: str,
        subject_user_id: Any,
        items: Sequence[Any],
        comment: Optional[str] = None,
    ) -> SubmissionReceipt:
        if marker_role not in MARKER_ROLES:
            raise AuthorizationError("Only admins can submit KPI marks")

        subject_id = require_positive_int(subject_user_id, "subject_user_id")
        week_key = dt.normalize_week_key(week_key)
        scores = self._parse_scores(items)
        if not scores:
            raise ValidationError("items are required")

        if not self._kpi.get_active_assignment(marker_admin_id=int(marker_id), subject_user_id=subject_id):
            raise AuthorizationError("No active assignment for this subject")

        week = self._kpi.get_week(week_key)
        if not week:
            raise NotFoundError(f"Week {week_key} not found")
        if week.is_locked:
            raise WeekLockedError(week_key)

        criteria = self._kpi.get_active_criteria(subject_id)
        if not criteria:
            raise ValidationError("Subject has no active criteria set")

        errors = validate_submitted_scores(criteria, scores)
        if errors:
            raise ValidationError(", ".join(errors))

        total = compute_submission_total(criteria, scores)
        submitted_at = self._clock()
        submission_id = self._kpi.save_submission(
            week_key=week_key,
            marker_admin_id=int(marker_id),
            subject_user_id=subject_id,
            total_score=total,
            comment=clean_note(comment),
            scores=scores,
            submitted_at=submitted_at,
        )
        logger.info(
            "KPI marks saved: week=%s marker=%s subject=%s total=%.2f",
            week_key, marker_id, subject_id, total,
        )
        return SubmissionReceipt(submission_id=submission_id, total_score=total, submitted_at=submitted_at)

    def compute_week(self, week_key: str) -> WeekAggregate:
        week_key = dt.normalize_week_key(week_key)
        if not self._kpi.get_week(week_key):
            raise NotFoundError(f"Week {week_key} not found")

        submissions = self._kpi.list_submissions(week_keys=[week_key])
        assignments = self._kpi.list_active_assignments()
        aggregate = aggregate_week(week_key, submissions, assignments, computed_at=self._clock())

        self._kpi.save_weekly_results(aggregate.results)
        self._kpi.save_compliance(aggregate.compliance)
        logger.info(
            "Weekly results computed: week=%s subjects=%d admins=%d",
            week_key, len(aggregate.results), len(aggregate.compliance),
        )
        return aggregate

    def ensure_week(self, week_key: Optional[str] = None) -> Week:
        key = dt.normalize_week_key(week_key or dt.current_week_key(self._clock(), tz_name=self._tz_name))
        friday = dt.parse_week_key(key)
        return self._kpi.ensure_week(week_key=key, friday_date=friday)

    def _set_week_status(self, week_key: str, status: PeriodStatus) -> Week:
        week_key = dt.normalize_week_key(week_key)
        week = self._kpi.set_week_status(week_key=week_key, status=status)
        if not week:
            raise NotFoundError(f"Week {week_key} not found")
        logger.info("Week %s is now %s", week_key, status.value)
        return week

    def lock_week(self, week_key: str) -> Week:
        return self._set_week_status(week_key, PeriodStatus.LOCKED)

    def unlock_week(self, week_key: str) -> Week:
        return self._set_week_status(week_key, PeriodStatus.OPEN)

    def weekly_details(self, *, subject_user_id: int, month_key: str) -> list[WeeklyDetail]:
        """Per-week breakdown of a subject's month, in calendar order."""
        week_keys = dt.list_friday_week_keys(month_key)
        weeks = self._kpi.list_weeks(week_keys)
        scores = {
            s.week_key: s
            for s in self._kpi.list_weekly_scores(week_keys=week_keys, subject_user_id=int(subject_user_id))
        }
        submissions = self._kpi.list_submissions(week_keys=week_keys, subject_user_id=int(subject_user_id))

        out: list[WeeklyDetail] = []
        for week in sorted(weeks, key=lambda w: w.friday_date):
            score = scores.get(week.week_key)
            out.append(
                WeeklyDetail(
                    week_key=week.week_key,
                    label=dt.week_label(week.week_key),
                    friday_date=week.friday_date,
                    weekly_score=score.average_score if score else None,
                    is_complete=bool(score and score.is_complete),
                    submissions=tuple(s for s in submissions if s.week_key == week.week_key),
                )
            )
        return out
