"""FastAPI dependency injection."""

from fastapi import Depends

from src.data.base import RateBandSource
from src.data.rate_bands import build_rate_band_source
from src.engine.calculator import Calculator


def get_rate_band_source() -> RateBandSource:
    return build_rate_band_source()


def get_calculator(source: RateBandSource = Depends(get_rate_band_source)) -> Calculator:
    return Calculator(source)
