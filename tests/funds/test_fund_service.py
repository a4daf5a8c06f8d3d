from __future__ import annotations

import pytest

from src.hrm_system.hrm_system.core.enums import FundEntryType, FundStatus
from src.hrm_system.hrm_system.core.exceptions import NotFoundError, ValidationError

SUPER = 1
ALICE = 10
BOB = 11


@pytest.fixture
def results(container, kpi_repo):
    """Alice earns a bonus month, Bob a fine month (1000)."""
    kpi_repo.set_weekly(ALICE, "2026-02-06", 95)
    kpi_repo.set_weekly(BOB, "2026-02-06", 40)
    monthly = container.monthly_service
    return {
        ALICE: monthly.compute_subject(subject_user_id=ALICE, month_key="2026-02"),
        BOB: monthly.compute_subject(subject_user_id=BOB, month_key="2026-02"),
    }


@pytest.fixture
def funds(container):
    return container.fund_service


def test_due_fine_keeps_expected_amount_only(funds, results):
    entry = funds.record_entry(
        monthly_result_id=results[BOB].result_id, entry_type="FINE", status="DUE", marked_by_id=SUPER
    )

    assert entry.entry_type == FundEntryType.FINE
    assert entry.status == FundStatus.DUE
    assert entry.expected_amount == 1000
    assert entry.actual_amount is None
    assert entry.marked_at is None


def test_collected_fine_takes_the_monthly_fine(funds, results, fixed_now):
    entry = funds.record_entry(
        monthly_result_id=results[BOB].result_id,
        entry_type="fine",
        status="collected",
        marked_by_id=SUPER,
        actual_amount=5,
        note="  cash  ",
    )

    assert entry.actual_amount == 1000
    assert entry.note == "cash"
    assert entry.marked_by_id == SUPER
    assert entry.marked_at == fixed_now


def test_fine_entry_needs_a_fine(funds, results):
    with pytest.raises(ValidationError, match="No fine amount"):
        funds.record_entry(
            monthly_result_id=results[ALICE].result_id, entry_type="FINE", status="DUE", marked_by_id=SUPER
        )


def test_paid_bonus_needs_a_positive_amount(funds, results):
    rid = results[ALICE].result_id
    with pytest.raises(ValidationError, match="Bonus paid amount"):
        funds.record_entry(monthly_result_id=rid, entry_type="BONUS", status="PAID", marked_by_id=SUPER)
    with pytest.raises(ValidationError):
        funds.record_entry(
            monthly_result_id=rid, entry_type="BONUS", status="PAID", marked_by_id=SUPER, actual_amount="0"
        )

    entry = funds.record_entry(
        monthly_result_id=rid, entry_type="BONUS", status="PAID", marked_by_id=SUPER, actual_amount="500"
    )
    assert entry.actual_amount == 500.0


@pytest.mark.parametrize("entry_type,status", [("FINE", "PAID"), ("BONUS", "COLLECTED")])
def test_status_must_fit_the_entry_type(funds, results, entry_type, status):
    with pytest.raises(ValidationError, match="Invalid status"):
        funds.record_entry(
            monthly_result_id=results[BOB].result_id,
            entry_type=entry_type,
            status=status,
            marked_by_id=SUPER,
            actual_amount=100,
        )


def test_unknown_values_are_rejected(funds, results):
    with pytest.raises(ValidationError):
        funds.record_entry(monthly_result_id=results[BOB].result_id, entry_type="TIP", status="DUE", marked_by_id=SUPER)
    with pytest.raises(NotFoundError):
        funds.record_entry(monthly_result_id=999, entry_type="FINE", status="DUE", marked_by_id=SUPER)


def test_one_entry_per_result_and_type(funds, results, fund_repo):
    rid = results[BOB].result_id
    first = funds.record_entry(monthly_result_id=rid, entry_type="FINE", status="DUE", marked_by_id=SUPER)
    second = funds.record_entry(monthly_result_id=rid, entry_type="FINE", status="COLLECTED", marked_by_id=SUPER)

    assert second.entry_id == first.entry_id
    assert len(fund_repo.entries) == 1
    assert fund_repo.entries[first.entry_id].status == FundStatus.COLLECTED


def test_update_entry(funds, results):
    entry = funds.record_entry(
        monthly_result_id=results[BOB].result_id, entry_type="FINE", status="DUE", marked_by_id=SUPER
    )

    updated = funds.update_entry(entry_id=entry.entry_id, status="COLLECTED", marked_by_id=SUPER, note="paid late")
    assert updated.actual_amount == 1000
    assert updated.note == "paid late"

    back = funds.update_entry(entry_id=entry.entry_id, status="DUE", marked_by_id=SUPER)
    assert back.actual_amount is None
    assert back.marked_at is None

    with pytest.raises(NotFoundError):
        funds.update_entry(entry_id=404, status="DUE", marked_by_id=SUPER)


def test_list_entries_filters_and_summary(funds, results):
    funds.record_entry(monthly_result_id=results[BOB].result_id, entry_type="FINE", status="COLLECTED", marked_by_id=SUPER)
    funds.record_entry(
        monthly_result_id=results[ALICE].result_id,
        entry_type="BONUS",
        status="PAID",
        marked_by_id=SUPER,
        actual_amount=300,
    )

    everything = funds.list_entries(month_key="2026-02", status="all", entry_type="all")
    assert len(everything["entries"]) == 2
    assert everything["summary"] == {
        "fineCollected": 1000.0,
        "bonusPaid": 300.0,
        "dueFine": 0.0,
        "dueBonus": 0.0,
        "currentBalance": 700.0,
    }

    fines = funds.list_entries(entry_type="fine")
    assert [e["subjectName"] for e in fines["entries"]] == ["Bob Karim"]

    by_search = funds.list_entries(search="ALICE@")
    assert [e["entryType"] for e in by_search["entries"]] == ["BONUS"]

    with pytest.raises(ValidationError):
        funds.list_entries(status="lost")


def test_subject_stats(funds, results):
    funds.record_entry(monthly_result_id=results[BOB].result_id, entry_type="FINE", status="DUE", marked_by_id=SUPER)

    stats = funds.subject_stats(BOB)

    assert stats["fineDue"] == 1000
    assert stats["fineCollected"] == 0
    assert stats["totalFineAmount"] == 1000
    assert funds.subject_stats(ALICE)["totalBonusAmount"] == 0
