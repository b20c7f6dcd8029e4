"""Equipment finance calculator.

Three use cases over the rate band table and the PMT / RATE / PV primitives:
    payment      invoice amount + term      -> monthly payment
    rate         invoice amount + payment   -> effective rate
    loan amount  desired payment + term     -> maximum invoice amount

All amounts are Decimal at the boundary. The amortization math runs in float
and results are rounded half-up to cents (money) or 4 places (rates).
"""

import logging
from decimal import Decimal

from src.config import settings
from src.data.base import RateBandSource
from src.data.rate_bands import DefaultRateBandSource
from src.engine.exceptions import (
    LoanAmountNotFoundError,
    RateConvergenceError,
    ValidationError,
)
from src.engine.financial import (
    periodic_payment,
    present_value,
    round_currency,
    round_rate,
    solve_rate,
)
from src.engine.rate_bands import applicable_band, applicable_rate
from src.models.calculator import (
    CalculatorPolicy,
    LoanAmountQuote,
    PaymentQuote,
    RateQuote,
)

logger = logging.getLogger(__name__)

DEFAULT_POLICY = CalculatorPolicy()


def _to_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


# ── Validation helpers ───────────────────────────────────────────

def is_valid_invoice_amount(amount: Decimal, policy: CalculatorPolicy = DEFAULT_POLICY) -> bool:
    return policy.min_loan_amount <= _to_decimal(amount) <= policy.max_loan_amount


def is_valid_term(months: int, policy: CalculatorPolicy = DEFAULT_POLICY) -> bool:
    return months in policy.available_terms


def invoice_amount_error(amount: Decimal, policy: CalculatorPolicy = DEFAULT_POLICY) -> str | None:
    """User-facing message for an out-of-range invoice amount, or None if it is valid."""
    amount = _to_decimal(amount)
    if amount < policy.min_loan_amount:
        return f"Minimum loan amount is ${policy.min_loan_amount:,.0f}"
    if amount > policy.max_loan_amount:
        return f"Maximum loan amount is ${policy.max_loan_amount:,.0f}"
    return None


class Calculator:
    def __init__(
        self,
        source: RateBandSource | None = None,
        policy: CalculatorPolicy | None = None,
        strict_convergence: bool | None = None,
    ):
        self.source = source or DefaultRateBandSource()
        self.policy = policy or DEFAULT_POLICY
        self.strict_convergence = (
            settings.strict_rate_convergence if strict_convergence is None else strict_convergence
        )

    # ── Input handling ───────────────────────────────────────────

    def _validate_invoice_amount(self, invoice_amount: Decimal) -> None:
        if not is_valid_invoice_amount(invoice_amount, self.policy):
            raise ValidationError(
                f"Invoice amount must be between ${self.policy.min_loan_amount:,.0f}"
                f" and ${self.policy.max_loan_amount:,.0f}"
            )

    def _validate_term(self, term_months: int) -> None:
        if not is_valid_term(term_months, self.policy):
            terms = ", ".join(str(t) for t in self.policy.available_terms)
            raise ValidationError(f"Term must be one of: {terms} months")

    def _desired_payment(self, desired_payment: Decimal | None) -> Decimal:
        if desired_payment is None:
            raise ValidationError("Desired payment is required")
        desired_payment = _to_decimal(desired_payment)
        if desired_payment <= 0:
            raise ValidationError("Desired payment must be greater than zero")
        if desired_payment > self.policy.max_loan_amount:
            raise ValidationError(f"Desired payment cannot exceed ${self.policy.max_loan_amount:,.0f}")
        return desired_payment

    def _fee_and_balloon(
        self, application_fee: Decimal | None, balloon_amount: Decimal | None
    ) -> tuple[Decimal, Decimal]:
        fee = self.policy.default_application_fee if application_fee is None else _to_decimal(application_fee)
        balloon = self.policy.default_balloon if balloon_amount is None else _to_decimal(balloon_amount)
        if fee < 0:
            raise ValidationError("Application fee cannot be negative")
        if balloon < 0:
            raise ValidationError("Balloon amount cannot be negative")
        if fee > self.policy.max_loan_amount or balloon > self.policy.max_loan_amount:
            raise ValidationError(
                f"Application fee and balloon amount cannot exceed ${self.policy.max_loan_amount:,.0f}"
            )
        return fee, balloon

    def _annual_rate(self, annual_rate: Decimal) -> Decimal:
        annual_rate = _to_decimal(annual_rate)
        if not 0 <= annual_rate <= 1:
            raise ValidationError("Annual rate must be between 0 and 1")
        return annual_rate

    # ── Use cases ────────────────────────────────────────────────

    async def calculate_payment(
        self,
        invoice_amount: Decimal,
        term_months: int,
        application_fee: Decimal | None = None,
        balloon_amount: Decimal | None = None,
    ) -> PaymentQuote:
        """Monthly payment for an invoice amount over a term.

        PMT(rate/12, term, -(invoice + fee), balloon, advance)
        """
        invoice_amount = _to_decimal(invoice_amount)
        self._validate_invoice_amount(invoice_amount)
        self._validate_term(term_months)
        fee, balloon = self._fee_and_balloon(application_fee, balloon_amount)

        bands = await self.source.list_active_bands()
        annual_rate = applicable_rate(bands, invoice_amount)
        monthly_rate = annual_rate / 12

        amount_financed = invoice_amount + fee
        monthly_payment = round_currency(
            periodic_payment(
                float(monthly_rate),
                term_months,
                -float(amount_financed),
                float(balloon),
                self.policy.payment_timing,
            )
        )

        total_payable = monthly_payment * term_months + balloon
        total_interest = total_payable - amount_financed

        return PaymentQuote(
            invoice_amount=round_currency(invoice_amount),
            application_fee=round_currency(fee),
            amount_financed=round_currency(amount_financed),
            term_months=term_months,
            annual_rate=round_rate(annual_rate),
            monthly_rate=round_rate(monthly_rate),
            monthly_payment=monthly_payment,
            total_payable=round_currency(total_payable),
            total_interest=round_currency(total_interest),
            balloon_amount=round_currency(balloon),
            rate_band=applicable_band(bands, invoice_amount),
        )

    async def calculate_rate(
        self,
        invoice_amount: Decimal,
        term_months: int,
        desired_payment: Decimal | None,
        application_fee: Decimal | None = None,
        balloon_amount: Decimal | None = None,
    ) -> RateQuote:
        """Effective rate implied by a desired payment, against the standard band rate.

        RATE(term, -payment, invoice + fee, -balloon, advance) * 12, seeded
        with the standard monthly rate.
        """
        invoice_amount = _to_decimal(invoice_amount)
        self._validate_invoice_amount(invoice_amount)
        self._validate_term(term_months)
        desired_payment = self._desired_payment(desired_payment)
        fee, balloon = self._fee_and_balloon(application_fee, balloon_amount)

        amount_financed = invoice_amount + fee

        bands = await self.source.list_active_bands()
        standard_annual_rate = applicable_rate(bands, invoice_amount)

        solution = solve_rate(
            term_months,
            -float(desired_payment),
            float(amount_financed),
            -float(balloon),
            self.policy.payment_timing,
            initial_guess=float(standard_annual_rate / 12),
        )
        if not solution.converged:
            if self.strict_convergence:
                raise RateConvergenceError(
                    f"Could not solve for an interest rate with a payment of ${desired_payment:,.2f}"
                    f" over {term_months} months"
                )
            logger.warning(
                "RATE did not converge after %d iterations (payment=%s, financed=%s, term=%d); "
                "returning best estimate %.6f",
                solution.iterations, desired_payment, amount_financed, term_months, solution.rate,
            )

        effective_monthly_rate = Decimal(str(solution.rate))
        effective_annual_rate = effective_monthly_rate * 12

        return RateQuote(
            invoice_amount=round_currency(invoice_amount),
            application_fee=round_currency(fee),
            amount_financed=round_currency(amount_financed),
            term_months=term_months,
            desired_payment=round_currency(desired_payment),
            effective_annual_rate=round_rate(effective_annual_rate),
            effective_monthly_rate=round_rate(effective_monthly_rate),
            standard_annual_rate=round_rate(standard_annual_rate),
            rate_difference=round_rate(effective_annual_rate - standard_annual_rate),
            balloon_amount=round_currency(balloon),
            converged=solution.converged,
            iterations=solution.iterations,
        )

    async def calculate_loan_amount(
        self,
        desired_payment: Decimal | None,
        term_months: int,
        annual_rate: Decimal | None = None,
        application_fee: Decimal | None = None,
        balloon_amount: Decimal | None = None,
    ) -> LoanAmountQuote:
        """Largest invoice amount a desired payment supports.

        PV(rate/12, term, -payment, -balloon, advance) - fee. Without an
        explicit rate, every band is tried and only a band whose rate yields an
        amount inside its own range is accepted; the highest such amount wins.
        The result is clamped to the policy loan limits.
        """
        self._validate_term(term_months)
        desired_payment = self._desired_payment(desired_payment)
        fee, balloon = self._fee_and_balloon(application_fee, balloon_amount)

        bands = await self.source.list_active_bands()
        rate_band = None

        if annual_rate is not None:
            annual_rate = self._annual_rate(annual_rate)
            max_invoice_amount = self._invoice_for_payment(annual_rate, term_months, desired_payment, fee, balloon)
        else:
            best = None
            for band in bands:
                candidate = self._invoice_for_payment(
                    band.annual_rate, term_months, desired_payment, fee, balloon
                )
                if band.covers(candidate) and (best is None or candidate > best[0]):
                    best = (candidate, band)

            if best is None:
                raise LoanAmountNotFoundError("Could not find a valid loan amount for the desired payment")

            max_invoice_amount, rate_band = best
            annual_rate = rate_band.annual_rate

        max_invoice_amount = max(
            self.policy.min_loan_amount, min(self.policy.max_loan_amount, max_invoice_amount)
        )
        if rate_band is None:
            rate_band = applicable_band(bands, max_invoice_amount)

        monthly_rate = annual_rate / 12
        amount_financed = max_invoice_amount + fee

        return LoanAmountQuote(
            desired_payment=round_currency(desired_payment),
            term_months=term_months,
            annual_rate=round_rate(annual_rate),
            monthly_rate=round_rate(monthly_rate),
            max_invoice_amount=round_currency(max_invoice_amount),
            application_fee=round_currency(fee),
            amount_financed=round_currency(amount_financed),
            balloon_amount=round_currency(balloon),
            rate_band=rate_band,
        )

    def _invoice_for_payment(
        self,
        annual_rate: Decimal,
        term_months: int,
        desired_payment: Decimal,
        fee: Decimal,
        balloon: Decimal,
    ) -> Decimal:
        amount_financed = present_value(
            float(annual_rate / 12),
            term_months,
            -float(desired_payment),
            -float(balloon),
            self.policy.payment_timing,
        )
        return Decimal(str(amount_financed)) - fee
