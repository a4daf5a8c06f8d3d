import pytest

from src.hrm_system.hrm_system.core.enums import ActionType, Tier
from src.hrm_system.hrm_system.core.exceptions import ValidationError
from src.hrm_system.hrm_system.payroll.calculator.standard_calculator import StandardMonthlyCalculator
from src.hrm_system.hrm_system.payroll.model import MonthlyResult
from src.hrm_system.hrm_system.payroll.policy import FineBand, TierPolicy


def _previous(tier: Tier, *, complete: bool = True, consecutive: int = 0) -> MonthlyResult:
    return MonthlyResult(
        subject_user_id=10,
        month_key="2026-01",
        monthly_score=75.0,
        tier=tier,
        action_type=ActionType.SHOW_CAUSE,
        base_fine=0,
        month_fine_count=0,
        final_fine=0,
        gift_amount=None,
        weeks_count_used=5 if complete else 2,
        expected_weeks_count=5,
        is_complete_month=complete,
        consecutive_improvement_months=consecutive,
    )


def test_bonus_month():
    out = StandardMonthlyCalculator().compute(weekly_scores=[92, 88, 95, 90], expected_weeks_count=4)

    assert out.monthly_score == 91.25
    assert out.tier == Tier.BONUS
    assert out.action_type == ActionType.BONUS
    assert out.final_fine == 0
    assert out.weeks_count_used == 4
    assert out.is_complete_month


def test_single_low_week_is_an_incomplete_fine_month():
    out = StandardMonthlyCalculator().compute(weekly_scores=[40], expected_weeks_count=4)

    assert out.monthly_score == 40
    assert out.tier == Tier.FINE
    assert out.action_type == ActionType.FINE
    assert out.base_fine == 1000
    assert out.final_fine == 1000
    assert out.month_fine_count == 1
    assert (out.weeks_count_used, out.expected_weeks_count) == (1, 4)
    assert not out.is_complete_month


def test_no_marks_is_no_data():
    out = StandardMonthlyCalculator().compute(weekly_scores=[], expected_weeks_count=5)

    assert out.monthly_score is None
    assert out.tier == Tier.NO_DATA
    assert out.action_type == ActionType.NONE
    assert out.final_fine == 0
    assert out.weeks_count_used == 0


@pytest.mark.parametrize(
    "score,tier",
    [
        (100, Tier.BONUS),
        (90, Tier.BONUS),
        (89.99, Tier.APPRECIATION),
        (80, Tier.APPRECIATION),
        (79.99, Tier.IMPROVEMENT),
        (70, Tier.IMPROVEMENT),
        (69.99, Tier.FINE),
        (0, Tier.FINE),
    ],
)
def test_tier_thresholds_are_inclusive(score, tier):
    assert StandardMonthlyCalculator().classify(score) == tier


@pytest.mark.parametrize("score,fine", [(69, 300), (60, 300), (59.5, 600), (50, 600), (49.99, 1000), (0, 1000)])
def test_fine_bands(score, fine):
    out = StandardMonthlyCalculator().compute(weekly_scores=[score], expected_weeks_count=4)
    assert out.base_fine == fine


def test_higher_score_never_gives_lower_tier():
    calc = StandardMonthlyCalculator()
    ranks = [calc.classify(s / 4).rank for s in range(0, 401)]
    assert ranks == sorted(ranks)


def test_first_improvement_month_is_show_cause():
    out = StandardMonthlyCalculator().compute(weekly_scores=[75, 72], expected_weeks_count=4)

    assert out.tier == Tier.IMPROVEMENT
    assert out.action_type == ActionType.SHOW_CAUSE
    assert out.final_fine == 0
    assert out.consecutive_improvement_months == 1


def test_repeated_improvement_month_is_fined():
    out = StandardMonthlyCalculator().compute(
        weekly_scores=[75, 72, 71, 74],
        expected_weeks_count=4,
        previous=_previous(Tier.IMPROVEMENT, consecutive=1),
    )

    assert out.action_type == ActionType.FINE
    assert out.base_fine == 300
    assert out.final_fine == 300
    assert out.consecutive_improvement_months == 2


def test_improvement_after_other_tier_resets_streak():
    out = StandardMonthlyCalculator().compute(
        weekly_scores=[75], expected_weeks_count=4, previous=_previous(Tier.APPRECIATION)
    )
    assert out.final_fine == 0
    assert out.consecutive_improvement_months == 1


def test_repeated_incomplete_multiplier_applies_to_fine_months():
    calc = StandardMonthlyCalculator(TierPolicy(repeated_incomplete_multiplier=2))

    repeated = calc.compute(weekly_scores=[40], expected_weeks_count=4, previous=_previous(Tier.FINE, complete=False))
    first = calc.compute(weekly_scores=[40], expected_weeks_count=4, previous=_previous(Tier.FINE, complete=True))

    assert repeated.base_fine == 1000
    assert repeated.final_fine == 2000
    assert first.final_fine == 1000


def test_gifts_come_from_policy():
    calc = StandardMonthlyCalculator(TierPolicy(bonus_gift=500, appreciation_gift=200))
    assert calc.compute(weekly_scores=[95], expected_weeks_count=4).gift_amount == 500
    assert calc.compute(weekly_scores=[85], expected_weeks_count=4).gift_amount == 200
    assert calc.compute(weekly_scores=[75], expected_weeks_count=4).gift_amount is None


def test_default_policy_has_no_gifts():
    assert StandardMonthlyCalculator().compute(weekly_scores=[95], expected_weeks_count=4).gift_amount is None


def test_more_scores_than_weeks_is_rejected():
    with pytest.raises(ValidationError):
        StandardMonthlyCalculator().compute(weekly_scores=[80] * 5, expected_weeks_count=4)
    with pytest.raises(ValidationError):
        StandardMonthlyCalculator().compute(weekly_scores=[], expected_weeks_count=0)


def test_policy_rejects_unordered_thresholds():
    with pytest.raises(ValidationError):
        TierPolicy(bonus_min=70, appreciation_min=80)


def test_policy_from_dict_overrides_and_sorts_bands():
    policy = TierPolicy.from_dict(
        {
            "bonus_min": 95,
            "fine_bands": [{"min_score": 0, "amount": 900}, {"min_score": 65, "amount": 100}],
            "bonus_gift": 1000,
        }
    )
    assert policy.bonus_min == 95
    assert policy.appreciation_min == 80
    assert policy.fine_bands == (FineBand(min_score=65, amount=100), FineBand(min_score=0, amount=900))
    assert policy.fine_for(66) == 100
    assert policy.fine_for(10) == 900
    assert policy.bonus_gift == 1000
