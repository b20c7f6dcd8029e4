"""SQLAlchemy ORM models for PostgreSQL persistence."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String,
    Numeric,
    Date,
    DateTime,
    Boolean,
    Uuid,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.models.rate_band import RateBand


class Base(DeclarativeBase):
    pass


class RateBandRecord(Base):
    """Administrator-maintained rate tier. Read-only from the calculator's side."""
    __tablename__ = "rate_bands"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    min_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    max_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    annual_rate: Mapped[Decimal] = mapped_column(Numeric(6, 4))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    effective_from: Mapped[date | None] = mapped_column(Date, nullable=True)
    effective_to: Mapped[date | None] = mapped_column(Date, nullable=True)

    def to_rate_band(self) -> RateBand:
        return RateBand(
            min_amount=Decimal(self.min_amount),
            max_amount=Decimal(self.max_amount),
            annual_rate=Decimal(self.annual_rate),
            is_active=self.is_active,
            effective_from=self.effective_from,
            effective_to=self.effective_to,
        )

    @classmethod
    def from_rate_band(cls, band: RateBand, created_by: str | None = None) -> "RateBandRecord":
        return cls(
            min_amount=band.min_amount,
            max_amount=band.max_amount,
            annual_rate=band.annual_rate,
            is_active=band.is_active,
            effective_from=band.effective_from,
            effective_to=band.effective_to,
            created_by=created_by,
        )
