"""Tiered interest rate lookup.

Pure functions over a supplied band list. Loading bands is the job of a
RateBandSource (src/data/rate_bands.py).
"""

import logging
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from src.engine.exceptions import RateBandNotFoundError
from src.models.rate_band import RateBand

logger = logging.getLogger(__name__)

# Used when no rate band store is configured, or it is unreachable or empty.
DEFAULT_RATE_BANDS: tuple[RateBand, ...] = (
    RateBand(min_amount=Decimal("5000"), max_amount=Decimal("20000"), annual_rate=Decimal("0.1595")),
    RateBand(min_amount=Decimal("20000.01"), max_amount=Decimal("75000"), annual_rate=Decimal("0.1165")),
    RateBand(min_amount=Decimal("75000.01"), max_amount=Decimal("150000"), annual_rate=Decimal("0.1070")),
    RateBand(min_amount=Decimal("150000.01"), max_amount=Decimal("250000"), annual_rate=Decimal("0.1030")),
    RateBand(min_amount=Decimal("250000.01"), max_amount=Decimal("500000"), annual_rate=Decimal("0.0995")),
)


def active_bands(bands: Iterable[RateBand], as_of: date | None = None) -> list[RateBand]:
    """Bands that are active and in force on as_of (default today), by ascending min_amount."""
    as_of = as_of or date.today()
    return sorted(
        (band for band in bands if band.is_effective(as_of)),
        key=lambda band: band.min_amount,
    )


def applicable_band(bands: Iterable[RateBand], principal: Decimal) -> RateBand | None:
    """First band whose inclusive range contains principal, or None."""
    for band in bands:
        if band.covers(principal):
            logger.debug("Amount %s matched band %s-%s @ %s",
                         principal, band.min_amount, band.max_amount, band.annual_rate)
            return band
    return None


def applicable_rate(bands: Iterable[RateBand], principal: Decimal) -> Decimal:
    """Annual rate for principal.

    Raises RateBandNotFoundError if no band covers it. This is a policy signal
    (amount outside the supported range), not a silent default.
    """
    bands = list(bands)
    band = applicable_band(bands, principal)
    if band is None:
        if bands:
            low = min(b.min_amount for b in bands)
            high = max(b.max_amount for b in bands)
            raise RateBandNotFoundError(
                f"Amount ${principal:,.2f} is outside valid range (${low:,.2f} - ${high:,.2f})"
            )
        raise RateBandNotFoundError(f"Amount ${principal:,.2f} is outside valid range (no rate bands)")
    return band.annual_rate
