"""Tests for rate band sources: built-in table and the rate_bands table."""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from src.data.base import RateBandSource
from src.data.rate_bands import (
    DatabaseRateBandSource,
    DefaultRateBandSource,
    build_rate_band_source,
    get_session_factory,
    seed_default_bands,
)
from src.engine.calculator import Calculator
from src.engine.rate_bands import DEFAULT_RATE_BANDS
from src.models.db import Base, RateBandRecord


def _tiers(bands):
    return [(b.min_amount, b.max_amount, b.annual_rate) for b in bands]


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'rate_bands.db'}")
    yield engine
    await engine.dispose()


@pytest.fixture
async def empty_table(engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return engine


@pytest.fixture
def db_source(engine):
    return DatabaseRateBandSource(get_session_factory(engine))


# ── Default table ────────────────────────────────────────────────

class TestDefaultRateBandSource:
    async def test_five_standard_tiers(self):
        bands = await DefaultRateBandSource().list_active_bands()
        assert len(bands) == 5
        assert bands[0].annual_rate == Decimal("0.1595")
        assert bands[-1].annual_rate == Decimal("0.0995")

    async def test_custom_bands_filtered(self, mixed_bands):
        bands = await DefaultRateBandSource(mixed_bands).list_active_bands(date(2025, 6, 1))
        assert _tiers(bands) == [
            (Decimal("10000"), Decimal("50000"), Decimal("0.1200")),
            (Decimal("50000.01"), Decimal("500000"), Decimal("0.0900")),
        ]

    def test_satisfies_protocol(self):
        assert isinstance(DefaultRateBandSource(), RateBandSource)


# ── Database table ───────────────────────────────────────────────

class TestSeedDefaultBands:
    async def test_seeds_once(self, engine):
        assert await seed_default_bands(engine) == 5
        assert await seed_default_bands(engine) == 0


class TestDatabaseRateBandSource:
    async def test_reads_seeded_bands(self, engine, db_source):
        await seed_default_bands(engine)
        bands = await db_source.list_active_bands()
        assert _tiers(bands) == _tiers(DEFAULT_RATE_BANDS)

    async def test_filters_inactive_and_out_of_window(self, empty_table, db_source):
        today = date(2025, 6, 1)
        session_factory = get_session_factory(empty_table)
        async with session_factory() as session:
            session.add_all([
                RateBandRecord(min_amount=Decimal("10000"), max_amount=Decimal("500000"),
                               annual_rate=Decimal("0.0800"), is_active=True),
                RateBandRecord(min_amount=Decimal("10000"), max_amount=Decimal("500000"),
                               annual_rate=Decimal("0.0100"), is_active=False),
                RateBandRecord(min_amount=Decimal("10000"), max_amount=Decimal("500000"),
                               annual_rate=Decimal("0.0200"), is_active=True,
                               effective_to=today - timedelta(days=1)),
                RateBandRecord(min_amount=Decimal("10000"), max_amount=Decimal("500000"),
                               annual_rate=Decimal("0.0300"), is_active=True,
                               effective_from=today + timedelta(days=1)),
            ])
            await session.commit()

        bands = await db_source.list_active_bands(today)
        assert [b.annual_rate for b in bands] == [Decimal("0.0800")]

    async def test_empty_table_falls_back_to_defaults(self, empty_table, db_source):
        bands = await db_source.list_active_bands()
        assert _tiers(bands) == _tiers(DEFAULT_RATE_BANDS)

    async def test_missing_table_falls_back_to_defaults(self, db_source, caplog):
        bands = await db_source.list_active_bands()
        assert _tiers(bands) == _tiers(DEFAULT_RATE_BANDS)
        assert "using defaults" in caplog.text

    async def test_custom_fallback(self, empty_table, mixed_bands):
        source = DatabaseRateBandSource(
            get_session_factory(empty_table), fallback=DefaultRateBandSource(mixed_bands)
        )
        bands = await source.list_active_bands(date(2025, 6, 1))
        assert len(bands) == 2

    async def test_calculator_uses_database_rates(self, empty_table, db_source):
        session_factory = get_session_factory(empty_table)
        async with session_factory() as session:
            session.add(RateBandRecord(min_amount=Decimal("10000"), max_amount=Decimal("500000"),
                                       annual_rate=Decimal("0.0800"), is_active=True))
            await session.commit()

        quote = await Calculator(db_source).calculate_payment(Decimal("50000"), 36)
        assert quote.annual_rate == Decimal("0.0800")


class TestBuildRateBandSource:
    def test_default(self):
        assert isinstance(build_rate_band_source("default"), DefaultRateBandSource)

    def test_unknown_kind_uses_defaults(self):
        assert isinstance(build_rate_band_source("redis"), DefaultRateBandSource)
