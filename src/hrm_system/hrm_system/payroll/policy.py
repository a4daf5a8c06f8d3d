"""Business table behind the monthly tier and fine/gift amounts.

Defaults reproduce the table the company runs today; deployments override any
part of it through ``HRM_TIER_POLICY`` in the settings module.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class FineBand:
    """Scores at or above ``min_score`` (and below the previous band) pay ``amount``."""

    min_score: float
    amount: float


DEFAULT_FINE_BANDS = (
    FineBand(min_score=60, amount=300),
    FineBand(min_score=50, amount=600),
    FineBand(min_score=0, amount=1000),
)


@dataclass(frozen=True)
class TierPolicy:
    bonus_min: float = 90
    appreciation_min: float = 80
    improvement_min: float = 70
    fine_bands: tuple[FineBand, ...] = field(default=DEFAULT_FINE_BANDS)
    repeated_improvement_fine: float = 300
    bonus_gift: Optional[float] = None
    appreciation_gift: Optional[float] = None
    repeated_incomplete_multiplier: float = 1.0

    def __post_init__(self):
        if not (self.bonus_min >= self.appreciation_min >= self.improvement_min):
            raise ValidationError("Tier thresholds must satisfy bonus >= appreciation >= improvement")
        if not self.fine_bands:
            raise ValidationError("At least one fine band is required")
        for band in self.fine_bands:
            if band.amount < 0:
                raise ValidationError("Fine amounts cannot be negative")
        for amount in (self.repeated_improvement_fine, self.bonus_gift, self.appreciation_gift):
            if amount is not None and amount < 0:
                raise ValidationError("Fine and gift amounts cannot be negative")
        if self.repeated_incomplete_multiplier < 0:
            raise ValidationError("repeated_incomplete_multiplier cannot be negative")
        # Highest band first so lookups can stop at the first match.
        object.__setattr__(
            self,
            "fine_bands",
            tuple(sorted(self.fine_bands, key=lambda b: b.min_score, reverse=True)),
        )

    def fine_for(self, score: float) -> float:
        for band in self.fine_bands:
            if score >= band.min_score:
                return float(band.amount)
        return float(self.fine_bands[-1].amount)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "TierPolicy":
        if not data:
            return cls()
        kwargs: dict[str, Any] = {}
        for name in (
            "bonus_min",
            "appreciation_min",
            "improvement_min",
            "repeated_improvement_fine",
            "repeated_incomplete_multiplier",
        ):
            if data.get(name) is not None:
                kwargs[name] = float(data[name])
        for name in ("bonus_gift", "appreciation_gift"):
            if name in data:
                kwargs[name] = None if data[name] is None else float(data[name])
        if data.get("fine_bands"):
            kwargs["fine_bands"] = tuple(
                FineBand(min_score=float(b["min_score"]), amount=float(b["amount"])) for b in data["fine_bands"]
            )
        return cls(**kwargs)
