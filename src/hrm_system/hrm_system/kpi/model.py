from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import ComplianceStatus, PeriodStatus


@dataclass(frozen=True)
class Week:
    week_id: int
    week_key: str
    friday_date: date
    status: PeriodStatus = PeriodStatus.OPEN

    @property
    def is_locked(self) -> bool:
        return self.status == PeriodStatus.LOCKED

    def to_dict(self) -> dict:
        return {
            "weekKey": self.week_key,
            "fridayDate": self.friday_date.isoformat(),
            "status": self.status.value,
        }


@dataclass(frozen=True)
class CriteriaItem:
    """One criterion of a subject's active criteria set."""

    criteria_id: int
    name: str
    scale_max: float
    weight_percent: float


@dataclass(frozen=True)
class SubmittedScore:
    criteria_id: int
    score_raw: float


@dataclass(frozen=True)
class Assignment:
    marker_admin_id: int
    subject_user_id: int
    is_active: bool = True


@dataclass(frozen=True)
class SubmissionItem:
    criteria_id: int
    criteria_name: str
    score_raw: float


@dataclass(frozen=True)
class KpiSubmission:
    submission_id: int
    week_key: str
    marker_admin_id: int
    subject_user_id: int
    total_score: float
    comment: Optional[str] = None
    submitted_at: Optional[datetime] = None
    items: tuple[SubmissionItem, ...] = ()

    def to_dict(self) -> dict:
        return {
            "id": self.submission_id,
            "weekKey": self.week_key,
            "markerAdminId": self.marker_admin_id,
            "subjectUserId": self.subject_user_id,
            "totalScore": self.total_score,
            "comment": self.comment,
            "submittedAt": self.submitted_at.isoformat() if self.submitted_at else None,
            "criteriaScores": [
                {"criteriaId": i.criteria_id, "criteriaName": i.criteria_name, "score": i.score_raw}
                for i in self.items
            ],
        }


@dataclass(frozen=True)
class SubmissionReceipt:
    submission_id: int
    total_score: float
    submitted_at: datetime


@dataclass(frozen=True)
class WeeklyScore:
    """Aggregated score of one subject for one week.

    ``average_score`` is None when no marker submitted for the subject; such a
    week counts as absent in the monthly average.
    """

    subject_user_id: int
    week_key: str
    average_score: Optional[float]
    expected_markers_count: int
    submitted_markers_count: int
    is_complete: bool
    computed_at: Optional[datetime] = field(default=None, compare=False)

    @property
    def is_present(self) -> bool:
        return self.average_score is not None

    def to_dict(self) -> dict:
        return {
            "subjectUserId": self.subject_user_id,
            "weekKey": self.week_key,
            "weeklyAvgScore": self.average_score,
            "expectedMarkersCount": self.expected_markers_count,
            "submittedMarkersCount": self.submitted_markers_count,
            "isComplete": self.is_complete,
        }


@dataclass(frozen=True)
class AdminCompliance:
    week_key: str
    admin_user_id: int
    expected_count: int
    submitted_count: int
    missed_count: int
    status: ComplianceStatus

    def to_dict(self) -> dict:
        return {
            "weekKey": self.week_key,
            "adminUserId": self.admin_user_id,
            "expectedCount": self.expected_count,
            "submittedCount": self.submitted_count,
            "missedCount": self.missed_count,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class WeekAggregate:
    week_key: str
    results: tuple[WeeklyScore, ...]
    compliance: tuple[AdminCompliance, ...]


@dataclass(frozen=True)
class WeeklyDetail:
    """Read-model used by the marksheet and the employee view."""

    week_key: str
    label: str
    friday_date: date
    weekly_score: Optional[float]
    is_complete: bool
    submissions: tuple[KpiSubmission, ...] = ()

    def to_dict(self) -> dict:
        return {
            "weekKey": self.week_key,
            "label": self.label,
            "fridayDate": self.friday_date.isoformat(),
            "weeklyScore": self.weekly_score,
            "isComplete": self.is_complete,
            "submissions": [s.to_dict() for s in self.submissions],
        }
