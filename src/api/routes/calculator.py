"""Calculator routes: payment, rate and loan amount."""

from fastapi import APIRouter, Depends, HTTPException

from src.api.deps import get_calculator, get_rate_band_source
from src.api.schemas import (
    PaymentRequest,
    RateRequest,
    LoanAmountRequest,
    PaymentResponse,
    RateResponse,
    LoanAmountResponse,
    RateBandResponse,
)
from src.data.base import RateBandSource
from src.engine.calculator import Calculator
from src.engine.exceptions import CalculatorError, ValidationError

router = APIRouter(prefix="/api/v1/calculator", tags=["calculator"])


def _to_http(e: CalculatorError) -> HTTPException:
    # Malformed input is a 400; policy outcomes (no band, no valid amount) are 422
    status_code = 400 if isinstance(e, ValidationError) else 422
    return HTTPException(status_code=status_code, detail=str(e))


@router.post("/payment", response_model=PaymentResponse)
async def calculate_payment(
    req: PaymentRequest,
    calculator: Calculator = Depends(get_calculator),
):
    """Invoice amount + term → monthly payment."""
    try:
        quote = await calculator.calculate_payment(
            invoice_amount=req.invoice_amount,
            term_months=req.term_months,
            application_fee=req.application_fee,
            balloon_amount=req.balloon_amount,
        )
    except CalculatorError as e:
        raise _to_http(e)
    return PaymentResponse.model_validate(quote)


@router.post("/rate", response_model=RateResponse)
async def calculate_rate(
    req: RateRequest,
    calculator: Calculator = Depends(get_calculator),
):
    """Invoice amount + term + desired payment → effective rate."""
    try:
        quote = await calculator.calculate_rate(
            invoice_amount=req.invoice_amount,
            term_months=req.term_months,
            desired_payment=req.desired_payment,
            application_fee=req.application_fee,
            balloon_amount=req.balloon_amount,
        )
    except CalculatorError as e:
        raise _to_http(e)
    return RateResponse.model_validate(quote)


@router.post("/loan-amount", response_model=LoanAmountResponse)
async def calculate_loan_amount(
    req: LoanAmountRequest,
    calculator: Calculator = Depends(get_calculator),
):
    """Desired payment + term → maximum invoice amount."""
    try:
        quote = await calculator.calculate_loan_amount(
            desired_payment=req.desired_payment,
            term_months=req.term_months,
            annual_rate=req.annual_rate,
            application_fee=req.application_fee,
            balloon_amount=req.balloon_amount,
        )
    except CalculatorError as e:
        raise _to_http(e)
    return LoanAmountResponse.model_validate(quote)


@router.get("/rate-bands", response_model=list[RateBandResponse])
async def list_rate_bands(source: RateBandSource = Depends(get_rate_band_source)):
    """Rate bands currently in force."""
    bands = await source.list_active_bands()
    return [RateBandResponse.model_validate(band) for band in bands]
