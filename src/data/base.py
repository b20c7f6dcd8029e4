"""Protocol definitions for data sources.

Each protocol defines the interface that concrete data source implementations must satisfy.
"""

from datetime import date
from typing import Protocol, runtime_checkable

from src.models.rate_band import RateBand


@runtime_checkable
class RateBandSource(Protocol):
    async def list_active_bands(self, as_of: date | None = None) -> list[RateBand]:
        """Active bands in force on as_of (default today), ascending by min_amount."""
        ...
