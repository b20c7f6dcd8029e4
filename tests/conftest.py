"""Canonical test fixtures used across all calculator tests.

Fixture: the five default rate tiers ($5K-$500K, 9.95%-15.95% p.a.) and the
standard lending policy ($10K-$500K, 24/36/48/60 months, $495 fee, advance).
"""

import pytest
from datetime import date
from decimal import Decimal

from src.data.rate_bands import DefaultRateBandSource
from src.engine.calculator import Calculator
from src.models.calculator import CalculatorPolicy
from src.models.rate_band import RateBand


@pytest.fixture
def policy() -> CalculatorPolicy:
    return CalculatorPolicy()


@pytest.fixture
def default_source() -> DefaultRateBandSource:
    return DefaultRateBandSource()


@pytest.fixture
def calculator(default_source, policy) -> Calculator:
    return Calculator(default_source, policy, strict_convergence=False)


@pytest.fixture
def strict_calculator(default_source, policy) -> Calculator:
    return Calculator(default_source, policy, strict_convergence=True)


@pytest.fixture
def mixed_bands() -> list[RateBand]:
    """Two live bands plus one inactive, one expired and one future band."""
    return [
        RateBand(Decimal("50000.01"), Decimal("500000"), Decimal("0.0900")),
        RateBand(Decimal("10000"), Decimal("50000"), Decimal("0.1200")),
        RateBand(Decimal("10000"), Decimal("500000"), Decimal("0.0100"), is_active=False),
        RateBand(
            Decimal("10000"), Decimal("500000"), Decimal("0.0200"),
            effective_to=date(2020, 12, 31),
        ),
        RateBand(
            Decimal("10000"), Decimal("500000"), Decimal("0.0300"),
            effective_from=date(2099, 1, 1),
        ),
    ]
