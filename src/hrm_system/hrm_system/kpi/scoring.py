"""KPI submission scoring.

A submission scores every criterion of the subject's active criteria set on the
criterion's own scale. Each raw score is normalised to 0-100 and weighted by
the criterion's weight percentage; the weighted values add up to the total.
"""
from __future__ import annotations

from typing import Sequence

from ..core.constants import SCORE_DECIMALS
from .model import CriteriaItem, SubmittedScore


def compute_submission_total(items: Sequence[CriteriaItem], scores: Sequence[SubmittedScore]) -> float:
    by_id = {s.criteria_id: s.score_raw for s in scores}
    total = 0.0
    for item in items:
        raw = by_id.get(item.criteria_id)
        if raw is None or not item.scale_max:
            # Missing score for this criterion counts as 0
            continue
        normalized = (float(raw) / float(item.scale_max)) * 100
        total += normalized * (float(item.weight_percent) / 100)
    return round(total, SCORE_DECIMALS)


def validate_submitted_scores(items: Sequence[CriteriaItem], scores: Sequence[SubmittedScore]) -> list[str]:
    """Return every problem found; an empty list means the submission is valid."""
    errors: list[str] = []
    items_by_id = {i.criteria_id: i for i in items}
    submitted_ids = {s.criteria_id for s in scores}

    for item in items:
        if item.criteria_id not in submitted_ids:
            errors.append(f"Missing score for criterion {item.name}")

    for score in scores:
        item = items_by_id.get(score.criteria_id)
        if item is None:
            errors.append(f"Unknown criterion {score.criteria_id}")
            continue
        if score.score_raw < 0 or score.score_raw > item.scale_max:
            errors.append(f"Score for {item.name} must be between 0 and {item.scale_max:g}")

    return errors
