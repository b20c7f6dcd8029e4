"""Pydantic schemas for API request/response models.

JSON field names are camelCase; Python attributes stay snake_case.
"""

from datetime import date
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# Serialized as JSON numbers rather than strings
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---- Request schemas ----

class PaymentRequest(CamelModel):
    invoice_amount: Decimal = Field(..., description="Equipment invoice amount (AUD)")
    term_months: int
    application_fee: Decimal | None = None
    balloon_amount: Decimal | None = None


class RateRequest(CamelModel):
    invoice_amount: Decimal
    term_months: int
    desired_payment: Decimal = Field(..., description="Monthly payment the customer wants")
    application_fee: Decimal | None = None
    balloon_amount: Decimal | None = None


class LoanAmountRequest(CamelModel):
    desired_payment: Decimal
    term_months: int
    annual_rate: Decimal | None = Field(None, description="Omit to search the rate bands")
    application_fee: Decimal | None = None
    balloon_amount: Decimal | None = None


# ---- Response schemas ----

class RateBandResponse(CamelModel):
    min_amount: Amount
    max_amount: Amount
    annual_rate: Amount
    is_active: bool = True
    effective_from: date | None = None
    effective_to: date | None = None


class PaymentResponse(CamelModel):
    invoice_amount: Amount
    application_fee: Amount
    amount_financed: Amount
    term_months: int
    annual_rate: Amount
    monthly_rate: Amount
    monthly_payment: Amount
    total_payable: Amount
    total_interest: Amount
    balloon_amount: Amount
    rate_band: RateBandResponse | None = None


class RateResponse(CamelModel):
    invoice_amount: Amount
    application_fee: Amount
    amount_financed: Amount
    term_months: int
    desired_payment: Amount
    effective_annual_rate: Amount
    effective_monthly_rate: Amount
    standard_annual_rate: Amount
    rate_difference: Amount
    balloon_amount: Amount
    converged: bool
    iterations: int


class LoanAmountResponse(CamelModel):
    desired_payment: Amount
    term_months: int
    annual_rate: Amount
    monthly_rate: Amount
    max_invoice_amount: Amount
    application_fee: Amount
    amount_financed: Amount
    balloon_amount: Amount
    rate_band: RateBandResponse | None = None
