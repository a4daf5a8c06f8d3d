from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..common import datetime_utils as dt
from ..common.validators import clean_note, optional_amount, require_positive_int
from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import FundEntryType, FundStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..payroll.repository import PayrollRepository
from ..users.repository import UserRepository
from .model import FundEntry, FundSummary, is_valid_status_for_type
from .repository import FundRepository

logger = logging.getLogger(__name__)


def _parse_enum(enum_cls, value: Any, field_name: str):
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        raise ValidationError(f"Invalid {field_name}")


def summarize(entries: Sequence[FundEntry]) -> FundSummary:
    fine_collected = bonus_paid = due_fine = due_bonus = 0.0
    for e in entries:
        if e.entry_type == FundEntryType.FINE:
            if e.status == FundStatus.COLLECTED:
                fine_collected += e.effective_amount
            elif e.status == FundStatus.DUE:
                due_fine += float(e.expected_amount or 0)
        elif e.entry_type == FundEntryType.BONUS:
            if e.status == FundStatus.PAID:
                bonus_paid += e.effective_amount
            elif e.status == FundStatus.DUE:
                due_bonus += float(e.expected_amount or 0)
    return FundSummary(
        fine_collected=fine_collected,
        bonus_paid=bonus_paid,
        due_fine=due_fine,
        due_bonus=due_bonus,
    )


class FundService:
    """Ledger of fines collected from and bonuses paid to subjects.

    Each monthly result can carry at most one FINE and one BONUS entry. The
    expected amount always comes from the monthly result itself.
    """

    def __init__(
        self,
        funds: FundRepository,
        payroll: PayrollRepository,
        users: UserRepository,
        *,
        tz_name: str = DEFAULT_TIMEZONE,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._funds = funds
        self._payroll = payroll
        self._users = users
        self._clock = clock or (lambda: dt.now_local(tz_name))

    def _resolve_amounts(
        self,
        *,
        entry_type: FundEntryType,
        status: FundStatus,
        expected_amount: float,
        actual_amount_input: Any,
    ) -> Optional[float]:
        if not is_valid_status_for_type(entry_type, status):
            raise ValidationError(f"Invalid status {status.value} for entry type {entry_type.value}")

        if status == FundStatus.COLLECTED:
            return expected_amount
        if status == FundStatus.PAID:
            amount = optional_amount(actual_amount_input, "actual_amount")
            if amount is None or amount <= 0:
                raise ValidationError("Bonus paid amount is required and must be > 0")
            return amount
        return None

    def record_entry(
        self,
        *,
        monthly_result_id: Any,
        entry_type: Any,
        status: Any,
        marked_by_id: int,
        actual_amount: Any = None,
        note: Optional[str] = None,
    ) -> FundEntry:
        result_id = require_positive_int(monthly_result_id, "monthly_result_id")
        entry_type = _parse_enum(FundEntryType, entry_type, "entry_type")
        status = _parse_enum(FundStatus, status, "status")

        result = self._payroll.get_result_by_id(result_id)
        if not result:
            raise NotFoundError("Monthly result not found")

        if entry_type == FundEntryType.FINE:
            expected = float(result.final_fine or 0)
            if expected <= 0:
                raise ValidationError("No fine amount available for this row")
        else:
            expected = float(result.gift_amount or 0)

        actual = self._resolve_amounts(
            entry_type=entry_type,
            status=status,
            expected_amount=expected,
            actual_amount_input=actual_amount,
        )
        entry = self._funds.upsert_entry(
            monthly_result_id=result_id,
            entry_type=entry_type,
            status=status,
            expected_amount=expected,
            actual_amount=actual,
            note=clean_note(note),
            marked_by_id=int(marked_by_id),
            marked_at=None if status == FundStatus.DUE else self._clock(),
        )
        logger.info(
            "Fund entry saved: result=%s type=%s status=%s amount=%s",
            result_id, entry_type.value, status.value, actual if actual is not None else expected,
        )
        return entry

    def update_entry(
        self,
        *,
        entry_id: Any,
        status: Any,
        marked_by_id: int,
        actual_amount: Any = None,
        note: Optional[str] = None,
    ) -> FundEntry:
        entry_id = require_positive_int(entry_id, "entry_id")
        status = _parse_enum(FundStatus, status, "status")

        existing = self._funds.get_entry(entry_id)
        if not existing:
            raise NotFoundError("Fund log not found")

        actual = self._resolve_amounts(
            entry_type=existing.entry_type,
            status=status,
            expected_amount=float(existing.expected_amount or 0),
            actual_amount_input=actual_amount,
        )
        updated = self._funds.update_entry(
            entry_id=entry_id,
            status=status,
            actual_amount=actual,
            note=clean_note(note),
            marked_by_id=int(marked_by_id),
            marked_at=None if status == FundStatus.DUE else self._clock(),
        )
        if not updated:
            raise NotFoundError("Fund log not found")
        return updated

    def list_entries(
        self,
        *,
        month_key: Optional[str] = None,
        status: Optional[str] = None,
        entry_type: Optional[str] = None,
        search: Optional[str] = None,
    ) -> dict:
        """Filtered entries plus the ledger-wide summary."""
        if month_key:
            month_key = dt.normalize_month_key(month_key)
        status_filter = None if not status or status == "all" else _parse_enum(FundStatus, status, "status")
        type_filter = (
            None if not entry_type or entry_type == "all" else _parse_enum(FundEntryType, entry_type, "entry_type")
        )

        entries = list(
            self._funds.list_entries(month_key=month_key or None, status=status_filter, entry_type=type_filter)
        )
        people = self._users.get_many([e.subject_user_id for e in entries])

        q = (search or "").strip().lower()
        if q:
            def _matches(e: FundEntry) -> bool:
                person = people.get(e.subject_user_id)
                if not person:
                    return False
                return q in person.full_name.lower() or q in person.email.lower()

            entries = [e for e in entries if _matches(e)]

        rows = []
        for e in entries:
            row = e.to_dict()
            person = people.get(e.subject_user_id)
            row["subjectName"] = person.full_name if person else None
            row["subjectEmail"] = person.email if person else None
            rows.append(row)

        summary = summarize(self._funds.list_entries())
        return {"entries": rows, "summary": summary.to_dict()}

    def subject_stats(self, subject_user_id: int) -> dict:
        s = summarize(self._funds.list_entries(subject_user_id=int(subject_user_id)))
        return {
            "fineCollected": s.fine_collected,
            "fineDue": s.due_fine,
            "bonusPaid": s.bonus_paid,
            "bonusDue": s.due_bonus,
            "totalFineAmount": s.fine_collected + s.due_fine,
            "totalBonusAmount": s.bonus_paid + s.due_bonus,
        }
