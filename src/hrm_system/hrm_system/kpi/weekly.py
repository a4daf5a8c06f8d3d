from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Optional, Sequence

from ..core.constants import SCORE_DECIMALS
from ..core.enums import ComplianceStatus
from .model import AdminCompliance, Assignment, KpiSubmission, WeekAggregate, WeeklyScore


def aggregate_week(
    week_key: str,
    submissions: Sequence[KpiSubmission],
    assignments: Sequence[Assignment],
    *,
    computed_at: Optional[datetime] = None,
) -> WeekAggregate:
    """Fold one week's marker submissions into per-subject weekly scores.

    Every subject with an active assignment gets a row, even without marks, so
    the monthly step can tell an absent week from a low one. Admin compliance
    compares the subjects an admin is assigned to with those they marked.
    """
    active = [a for a in assignments if a.is_active]

    totals: dict[int, list[float]] = defaultdict(list)
    marked_by_admin: dict[int, set[int]] = defaultdict(set)
    for sub in submissions:
        if sub.week_key != week_key:
            continue
        totals[sub.subject_user_id].append(float(sub.total_score))
        marked_by_admin[sub.marker_admin_id].add(sub.subject_user_id)

    markers_by_subject: dict[int, set[int]] = defaultdict(set)
    subjects_by_admin: dict[int, set[int]] = defaultdict(set)
    for a in active:
        markers_by_subject[a.subject_user_id].add(a.marker_admin_id)
        subjects_by_admin[a.marker_admin_id].add(a.subject_user_id)

    results: list[WeeklyScore] = []
    for subject_id in sorted(set(totals) | set(markers_by_subject)):
        scores = totals.get(subject_id, [])
        expected = len(markers_by_subject.get(subject_id, ()))
        average = round(sum(scores) / len(scores), SCORE_DECIMALS) if scores else None
        results.append(
            WeeklyScore(
                subject_user_id=subject_id,
                week_key=week_key,
                average_score=average,
                expected_markers_count=expected,
                submitted_markers_count=len(scores),
                is_complete=len(scores) >= expected,
                computed_at=computed_at,
            )
        )

    compliance: list[AdminCompliance] = []
    for admin_id in sorted(subjects_by_admin):
        expected_subjects = subjects_by_admin[admin_id]
        submitted = len(marked_by_admin.get(admin_id, set()) & expected_subjects)
        missed = max(0, len(expected_subjects) - submitted)
        compliance.append(
            AdminCompliance(
                week_key=week_key,
                admin_user_id=admin_id,
                expected_count=len(expected_subjects),
                submitted_count=submitted,
                missed_count=missed,
                status=ComplianceStatus.OK if missed == 0 else ComplianceStatus.MISSED,
            )
        )

    return WeekAggregate(week_key=week_key, results=tuple(results), compliance=tuple(compliance))
