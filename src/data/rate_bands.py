"""Rate band sources: the built-in default table and the rate_bands table.

The database source never fails a calculation. If the store is unreachable
or has no bands in force, it logs a warning and serves the default table.
"""

import functools
import logging
from collections.abc import Iterable
from datetime import date

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.config import settings
from src.data.base import RateBandSource
from src.engine.rate_bands import DEFAULT_RATE_BANDS, active_bands
from src.models.db import Base, RateBandRecord
from src.models.rate_band import RateBand

logger = logging.getLogger(__name__)


class DefaultRateBandSource:
    """Static band table held in memory. Defaults to the five standard tiers."""

    def __init__(self, bands: Iterable[RateBand] = DEFAULT_RATE_BANDS):
        self.bands = tuple(bands)

    async def list_active_bands(self, as_of: date | None = None) -> list[RateBand]:
        return active_bands(self.bands, as_of)


class DatabaseRateBandSource:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        fallback: RateBandSource | None = None,
    ):
        self.session_factory = session_factory
        self.fallback = fallback or DefaultRateBandSource()

    async def list_active_bands(self, as_of: date | None = None) -> list[RateBand]:
        as_of = as_of or date.today()
        stmt = (
            select(RateBandRecord)
            .where(
                RateBandRecord.is_active.is_(True),
                or_(RateBandRecord.effective_from.is_(None), RateBandRecord.effective_from <= as_of),
                or_(RateBandRecord.effective_to.is_(None), RateBandRecord.effective_to >= as_of),
            )
            .order_by(RateBandRecord.min_amount)
        )

        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                records = result.scalars().all()
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Failed to fetch rate bands from database, using defaults: %s", e)
            return await self.fallback.list_active_bands(as_of)

        if not records:
            logger.warning("No active rate bands in database, using defaults")
            return await self.fallback.list_active_bands(as_of)

        return [record.to_rate_band() for record in records]


@functools.lru_cache(maxsize=1)
def get_engine(database_url: str | None = None) -> AsyncEngine:
    return create_async_engine(database_url or settings.database_url, echo=settings.debug)


def get_session_factory(engine: AsyncEngine | None = None) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine or get_engine(), expire_on_commit=False)


def build_rate_band_source(kind: str | None = None) -> RateBandSource:
    """Source named by settings.rate_band_source ("default" or "database")."""
    kind = kind or settings.rate_band_source
    if kind == "database":
        return DatabaseRateBandSource(get_session_factory())
    if kind != "default":
        logger.warning("Unknown rate band source %r, using defaults", kind)
    return DefaultRateBandSource()


async def seed_default_bands(
    engine: AsyncEngine, created_by: str | None = "seed"
) -> int:
    """Create the rate_bands table and insert the default tiers if it is empty.

    Returns the number of bands inserted.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = get_session_factory(engine)
    async with session_factory() as session:
        existing = await session.scalar(select(func.count()).select_from(RateBandRecord))
        if existing:
            logger.info("rate_bands already holds %d rows, skipping seed", existing)
            return 0

        session.add_all([
            RateBandRecord.from_rate_band(band, created_by=created_by)
            for band in DEFAULT_RATE_BANDS
        ])
        await session.commit()

    logger.info("Seeded %d default rate bands", len(DEFAULT_RATE_BANDS))
    return len(DEFAULT_RATE_BANDS)
