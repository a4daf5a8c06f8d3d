from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..common import datetime_utils as dt
from ..common.validators import require_positive_int
from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import FundEntryType, FundStatus, PeriodStatus, Tier
from ..core.exceptions import MonthLockedError, NotFoundError, ValidationError
from ..funds.repository import FundRepository
from ..kpi.repository import KpiRepository
from ..kpi.service import KpiService
from ..users.repository import UserRepository
from .calculator.base import MonthlyCalculator
from .calculator.standard_calculator import StandardMonthlyCalculator
from .model import Month, MonthComputation, MonthlyReport, MonthlyResult
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

REPORT_CSV_FIELDS = [
    "monthKey",
    "subjectUserId",
    "subjectName",
    "subjectEmail",
    "monthlyScore",
    "tier",
    "actionType",
    "baseFine",
    "finalFine",
    "giftAmount",
    "weeksCountUsed",
    "expectedWeeksCount",
    "isCompleteMonth",
    "fundFineStatus",
    "fundBonusStatus",
    "status",
]

_TIER_SUMMARY_KEYS = {
    Tier.BONUS: "bonusTier",
    Tier.APPRECIATION: "appreciationTier",
    Tier.IMPROVEMENT: "improvementTier",
    Tier.FINE: "fineTier",
    Tier.NO_DATA: "noDataTier",
}


class MonthlyPerformanceService:
    """Turns a month of weekly KPI scores into one MonthlyResult per subject.

    Business rules:
    - Only weeks whose Friday falls inside the month count.
    - Weeks without marks are left out of the average (never zero-filled).
    - A LOCKED month is read-only; it must be unlocked before recomputing.
    - The previous month's stored result drives the repeated-improvement fine,
      so recomputing with unchanged inputs gives the same result.
    """

    def __init__(
        self,
        payroll: PayrollRepository,
        kpi: KpiRepository,
        users: UserRepository,
        funds: FundRepository,
        *,
        kpi_service: KpiService,
        calculator: Optional[MonthlyCalculator] = None,
        tz_name: str = DEFAULT_TIMEZONE,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._payroll = payroll
        self._kpi = kpi
        self._users = users
        self._funds = funds
        self._kpi_service = kpi_service
        self._calculator = calculator or StandardMonthlyCalculator()
        self._clock = clock or (lambda: dt.now_local(tz_name))

    def _open_month(self, month_key: str) -> Month:
        start, end = dt.month_date_range(month_key)
        month = self._payroll.ensure_month(month_key=month_key, start_date=start, end_date=end)
        if month.is_locked:
            raise MonthLockedError(month_key)
        return month

    def _compute_one(self, *, subject_id: int, month_key: str, week_keys: Sequence[str]) -> MonthlyResult:
        weekly = self._kpi.list_weekly_scores(week_keys=week_keys, subject_user_id=subject_id)
        present = [w.average_score for w in weekly if w.is_present]
        previous = self._payroll.get_result(subject_user_id=subject_id, month_key=dt.previous_month_key(month_key))

        outcome = self._calculator.compute(
            weekly_scores=present,
            expected_weeks_count=len(week_keys),
            previous=previous,
        )
        result = MonthlyResult.from_outcome(
            outcome,
            subject_user_id=subject_id,
            month_key=month_key,
            status=PeriodStatus.OPEN,
            computed_at=self._clock(),
        )
        saved = self._payroll.save_result(result)
        logger.info(
            "Monthly result: month=%s subject=%s score=%s tier=%s weeks=%d/%d fine=%.2f",
            month_key,
            subject_id,
            "-" if outcome.monthly_score is None else f"{outcome.monthly_score:.2f}",
            outcome.tier.value,
            outcome.weeks_count_used,
            outcome.expected_weeks_count,
            outcome.final_fine,
        )
        return saved

    def compute_subject(self, *, subject_user_id: Any, month_key: str) -> MonthlyResult:
        subject_id = require_positive_int(subject_user_id, "subject_user_id")
        month_key = dt.normalize_month_key(month_key)
        if not self._users.get_by_id(subject_id):
            raise ValidationError(f"Unknown subject {subject_id}")

        self._open_month(month_key)
        return self._compute_one(
            subject_id=subject_id,
            month_key=month_key,
            week_keys=dt.list_friday_week_keys(month_key),
        )

    def compute_month(self, month_key: str) -> MonthComputation:
        """Recompute the month's weekly results, then every subject's month.

        A failure for one subject is logged and reported; the others still run.
        """
        month_key = dt.normalize_month_key(month_key)
        self._open_month(month_key)

        week_keys = dt.list_friday_week_keys(month_key)
        stored_weeks = self._kpi.list_weeks(week_keys)
        for week in stored_weeks:
            self._kpi_service.compute_week(week.week_key)

        subject_ids = {w.subject_user_id for w in self._kpi.list_weekly_scores(week_keys=week_keys)}
        subject_ids |= {a.subject_user_id for a in self._kpi.list_active_assignments()}
        known = self._users.get_many(sorted(subject_ids))

        results: list[MonthlyResult] = []
        failures: dict[int, str] = {}
        for subject_id in sorted(subject_ids):
            if subject_id not in known:
                failures[subject_id] = f"Unknown subject {subject_id}"
                logger.warning("Skipping unknown subject %s for month %s", subject_id, month_key)
                continue
            try:
                results.append(self._compute_one(subject_id=subject_id, month_key=month_key, week_keys=week_keys))
            except MonthLockedError:
                raise
            except Exception as exc:
                logger.exception("Monthly compute failed: month=%s subject=%s", month_key, subject_id)
                failures[subject_id] = str(exc)

        logger.info(
            "Month %s computed: subjects=%d failed=%d weeks_stored=%d/%d",
            month_key, len(results), len(failures), len(stored_weeks), len(week_keys),
        )
        return MonthComputation(
            month_key=month_key,
            expected_weeks_count=len(week_keys),
            weeks_in_month=len(stored_weeks),
            results=tuple(results),
            failures=failures,
        )

    def _set_month_status(self, month_key: str, status: PeriodStatus) -> Month:
        month_key = dt.normalize_month_key(month_key)
        if not self._payroll.get_month(month_key):
            raise NotFoundError(f"Month {month_key} has not been computed yet")
        month = self._payroll.set_month_status(month_key=month_key, status=status)
        logger.info("Month %s is now %s", month_key, status.value)
        return month

    def lock_month(self, month_key: str) -> Month:
        return self._set_month_status(month_key, PeriodStatus.LOCKED)

    def unlock_month(self, month_key: str) -> Month:
        return self._set_month_status(month_key, PeriodStatus.OPEN)

    def get_result(self, *, subject_user_id: int, month_key: str) -> MonthlyResult:
        month_key = dt.normalize_month_key(month_key)
        result = self._payroll.get_result(subject_user_id=int(subject_user_id), month_key=month_key)
        if not result:
            raise NotFoundError(f"No monthly result for subject {subject_user_id} in {month_key}")
        return result

    def list_subject_results(self, subject_user_id: int) -> list[MonthlyResult]:
        return list(self._payroll.list_subject_results(int(subject_user_id)))

    def monthly_report(self, month_key: str) -> MonthlyReport:
        month_key = dt.normalize_month_key(month_key)
        month = self._payroll.get_month(month_key)
        results = list(self._payroll.list_results(month_key))

        people = self._users.get_many([r.subject_user_id for r in results])
        fund_status: dict[tuple[int, FundEntryType], FundStatus] = {}
        ids = [r.result_id for r in results if r.result_id is not None]
        for entry in self._funds.list_for_results(ids):
            fund_status[(entry.monthly_result_id, entry.entry_type)] = entry.status

        rows: list[dict] = []
        summary = {
            "totalSubjects": len(results),
            "bonusTier": 0,
            "appreciationTier": 0,
            "improvementTier": 0,
            "fineTier": 0,
            "noDataTier": 0,
            "completeMonths": 0,
            "totalFines": 0.0,
        }
        for r in results:
            person = people.get(r.subject_user_id)
            row = r.to_dict()
            row["subjectName"] = person.full_name if person else None
            row["subjectEmail"] = person.email if person else None
            row["fundFineStatus"] = fund_status.get((r.result_id, FundEntryType.FINE), FundStatus.DUE).value
            row["fundBonusStatus"] = fund_status.get((r.result_id, FundEntryType.BONUS), FundStatus.DUE).value
            rows.append(row)

            summary[_TIER_SUMMARY_KEYS[r.tier]] += 1
            if r.is_complete_month:
                summary["completeMonths"] += 1
            summary["totalFines"] += float(r.final_fine or 0)

        return MonthlyReport(
            month_key=month_key,
            status=month.status if month else PeriodStatus.OPEN,
            rows=rows,
            summary=summary,
        )
