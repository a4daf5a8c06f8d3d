from __future__ import annotations

from enum import Enum


class HrmRole(str, Enum):
    """Roles inside the HRM module."""

    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"


class PeriodStatus(str, Enum):
    """Lifecycle shared by weeks and months."""

    OPEN = "OPEN"
    LOCKED = "LOCKED"


class Tier(str, Enum):
    BONUS = "BONUS"
    APPRECIATION = "APPRECIATION"
    IMPROVEMENT = "IMPROVEMENT"
    FINE = "FINE"
    NO_DATA = "NO_DATA"

    @property
    def rank(self) -> int:
        """Higher is better. NO_DATA sits outside the ordering (-1)."""
        return _TIER_RANK[self]


_TIER_RANK = {
    Tier.BONUS: 3,
    Tier.APPRECIATION: 2,
    Tier.IMPROVEMENT: 1,
    Tier.FINE: 0,
    Tier.NO_DATA: -1,
}


class ActionType(str, Enum):
    BONUS = "BONUS"
    APPRECIATION = "APPRECIATION"
    SHOW_CAUSE = "SHOW_CAUSE"
    FINE = "FINE"
    NONE = "NONE"


class ComplianceStatus(str, Enum):
    OK = "OK"
    MISSED = "MISSED"


class FundEntryType(str, Enum):
    FINE = "FINE"
    BONUS = "BONUS"


class FundStatus(str, Enum):
    DUE = "DUE"
    COLLECTED = "COLLECTED"
    PAID = "PAID"


class EmailType(str, Enum):
    MARKSHEET = "MARKSHEET"


class DeliveryStatus(str, Enum):
    SENT = "SENT"
    FAILED = "FAILED"
