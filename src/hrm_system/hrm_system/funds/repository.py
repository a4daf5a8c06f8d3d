from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import FundEntryType, FundStatus
from .model import FundEntry


class FundRepository(Protocol):
    def get_entry(self, entry_id: int) -> Optional[FundEntry]:
        raise NotImplementedError

    def upsert_entry(
        self,
        *,
        monthly_result_id: int,
        entry_type: FundEntryType,
        status: FundStatus,
        expected_amount: float,
        actual_amount: Optional[float],
        note: Optional[str],
        marked_by_id: int,
        marked_at: Optional[datetime],
    ) -> FundEntry:
        """Insert or replace the entry of (monthly result, entry type)."""

        raise NotImplementedError

    def update_entry(
        self,
        *,
        entry_id: int,
        status: FundStatus,
        actual_amount: Optional[float],
        note: Optional[str],
        marked_by_id: int,
        marked_at: Optional[datetime],
    ) -> Optional[FundEntry]:
        raise NotImplementedError

    def list_entries(
        self,
        *,
        month_key: Optional[str] = None,
        status: Optional[FundStatus] = None,
        entry_type: Optional[FundEntryType] = None,
        subject_user_id: Optional[int] = None,
    ) -> Sequence[FundEntry]:
        """Newest first."""

        raise NotImplementedError

    def list_for_results(self, result_ids: Sequence[int]) -> Sequence[FundEntry]:
        raise NotImplementedError
