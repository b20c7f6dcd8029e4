from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class RateBand:
    """One tier of the piecewise interest-rate schedule.

    Bounds are inclusive. A band with no effective dates is always in force.
    """
    min_amount: Decimal
    max_amount: Decimal
    annual_rate: Decimal  # e.g. 0.1165 for 11.65% p.a.
    is_active: bool = True
    effective_from: date | None = None
    effective_to: date | None = None

    def covers(self, amount: Decimal) -> bool:
        return self.min_amount <= amount <= self.max_amount

    def is_effective(self, as_of: date) -> bool:
        if not self.is_active:
            return False
        if self.effective_from is not None and self.effective_from > as_of:
            return False
        if self.effective_to is not None and self.effective_to < as_of:
            return False
        return True
