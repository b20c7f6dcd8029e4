from dataclasses import dataclass
from decimal import Decimal

from src.models.rate_band import RateBand


@dataclass(frozen=True)
class CalculatorPolicy:
    """Lending policy limits. Fixed by product policy, not runtime configuration."""
    min_loan_amount: Decimal = Decimal("10000")
    max_loan_amount: Decimal = Decimal("500000")
    available_terms: tuple[int, ...] = (24, 36, 48, 60)  # months
    default_application_fee: Decimal = Decimal("495.00")
    default_balloon: Decimal = Decimal("0")
    payment_timing: int = 1  # 1 = advance (start of period), 0 = arrears


@dataclass(frozen=True)
class PaymentQuote:
    invoice_amount: Decimal
    application_fee: Decimal
    amount_financed: Decimal
    term_months: int
    annual_rate: Decimal
    monthly_rate: Decimal
    monthly_payment: Decimal
    total_payable: Decimal
    total_interest: Decimal
    balloon_amount: Decimal
    rate_band: RateBand | None = None


@dataclass(frozen=True)
class RateQuote:
    invoice_amount: Decimal
    application_fee: Decimal
    amount_financed: Decimal
    term_months: int
    desired_payment: Decimal
    effective_annual_rate: Decimal
    effective_monthly_rate: Decimal
    standard_annual_rate: Decimal
    rate_difference: Decimal  # Negative = cheaper than the standard band rate
    balloon_amount: Decimal
    converged: bool = True
    iterations: int = 0


@dataclass(frozen=True)
class LoanAmountQuote:
    desired_payment: Decimal
    term_months: int
    annual_rate: Decimal
    monthly_rate: Decimal
    max_invoice_amount: Decimal
    application_fee: Decimal
    amount_financed: Decimal
    balloon_amount: Decimal
    rate_band: RateBand | None = None
