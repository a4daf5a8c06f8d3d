from src.hrm_system.hrm_system.kpi.model import CriteriaItem, SubmittedScore
from src.hrm_system.hrm_system.kpi.scoring import compute_submission_total, validate_submitted_scores

CRITERIA = [
    CriteriaItem(criteria_id=1, name="Punctuality", scale_max=10, weight_percent=30),
    CriteriaItem(criteria_id=2, name="Quality of Work", scale_max=10, weight_percent=40),
    CriteriaItem(criteria_id=3, name="Teamwork", scale_max=5, weight_percent=30),
]


def test_total_is_weighted_sum_of_normalised_scores():
    scores = [
        SubmittedScore(criteria_id=1, score_raw=9),  # 90 * 0.3 = 27
        SubmittedScore(criteria_id=2, score_raw=8),  # 80 * 0.4 = 32
        SubmittedScore(criteria_id=3, score_raw=4),  # 80 * 0.3 = 24
    ]
    assert compute_submission_total(CRITERIA, scores) == 83.0


def test_full_marks_give_one_hundred():
    scores = [
        SubmittedScore(criteria_id=1, score_raw=10),
        SubmittedScore(criteria_id=2, score_raw=10),
        SubmittedScore(criteria_id=3, score_raw=5),
    ]
    assert compute_submission_total(CRITERIA, scores) == 100.0


def test_total_is_rounded_to_two_decimals():
    items = [CriteriaItem(criteria_id=1, name="A", scale_max=3, weight_percent=100)]
    assert compute_submission_total(items, [SubmittedScore(criteria_id=1, score_raw=1)]) == 33.33


def test_validation_reports_every_problem():
    scores = [
        SubmittedScore(criteria_id=1, score_raw=11),
        SubmittedScore(criteria_id=9, score_raw=3),
    ]
    errors = validate_submitted_scores(CRITERIA, scores)
    assert "Missing score for criterion Quality of Work" in errors
    assert "Missing score for criterion Teamwork" in errors
    assert "Unknown criterion 9" in errors
    assert "Score for Punctuality must be between 0 and 10" in errors


def test_valid_submission_has_no_errors():
    scores = [
        SubmittedScore(criteria_id=1, score_raw=0),
        SubmittedScore(criteria_id=2, score_raw=10),
        SubmittedScore(criteria_id=3, score_raw=2.5),
    ]
    assert validate_submitted_scores(CRITERIA, scores) == []
