"""CLI for the equipment finance calculator.

Usage:
    python -m src.cli payment 50000 36
    python -m src.cli rate 50000 36 --payment 1600
    python -m src.cli loan-amount 1600 48 --rate 0.1165
    python -m src.cli bands --database
    python -m src.cli seed-bands
"""

import argparse
import asyncio
import logging
import sys
from decimal import Decimal

from src.config import settings
from src.data.rate_bands import build_rate_band_source, get_engine, seed_default_bands
from src.engine.calculator import Calculator
from src.engine.exceptions import CalculatorError
from src.engine.financial import format_currency, format_percentage, parse_currency


def _header(title: str) -> None:
    print(f"\n{'=' * 60}")
    print(f"  {title}")
    print(f"{'=' * 60}")


def _band(band) -> str:
    if band is None:
        return "none"
    return (
        f"{format_currency(band.min_amount)} – {format_currency(band.max_amount)}"
        f" @ {format_percentage(band.annual_rate)}"
    )


def print_payment(quote) -> None:
    _header("Payment Calculation")
    print(f"  Invoice Amount:    {format_currency(quote.invoice_amount)}")
    print(f"  Application Fee:   {format_currency(quote.application_fee)}")
    print(f"  Amount Financed:   {format_currency(quote.amount_financed)}")
    print(f"  Term:              {quote.term_months} months")
    print(f"  Annual Rate:       {format_percentage(quote.annual_rate)}")
    print(f"  Monthly Payment:   {format_currency(quote.monthly_payment)}")
    print(f"  Balloon:           {format_currency(quote.balloon_amount)}")
    print(f"  Total Payable:     {format_currency(quote.total_payable)}")
    print(f"  Total Interest:    {format_currency(quote.total_interest)}")
    print(f"  Rate Band:         {_band(quote.rate_band)}")
    print()


def print_rate(quote) -> None:
    _header("Rate Calculation")
    print(f"  Invoice Amount:    {format_currency(quote.invoice_amount)}")
    print(f"  Amount Financed:   {format_currency(quote.amount_financed)}")
    print(f"  Term:              {quote.term_months} months")
    print(f"  Desired Payment:   {format_currency(quote.desired_payment)}")
    print(f"  Effective Rate:    {format_percentage(quote.effective_annual_rate)}")
    print(f"  Standard Rate:     {format_percentage(quote.standard_annual_rate)}")
    print(f"  Difference:        {format_percentage(quote.rate_difference)}")
    if not quote.converged:
        print(f"  Warning:           did not converge after {quote.iterations} iterations")
    print()


def print_loan_amount(quote) -> None:
    _header("Loan Amount Calculation")
    print(f"  Desired Payment:   {format_currency(quote.desired_payment)}")
    print(f"  Term:              {quote.term_months} months")
    print(f"  Annual Rate:       {format_percentage(quote.annual_rate)}")
    print(f"  Max Invoice:       {format_currency(quote.max_invoice_amount)}")
    print(f"  Amount Financed:   {format_currency(quote.amount_financed)}")
    print(f"  Rate Band:         {_band(quote.rate_band)}")
    print()


def annual_rate(value: str) -> Decimal:
    """argparse type for --rate. ValueError makes argparse print a usage error."""
    try:
        rate = Decimal(value.strip())
    except ArithmeticError as e:
        raise ValueError(f"Not an annual rate: {value!r}") from e
    if not rate.is_finite():
        raise ValueError(f"Not an annual rate: {value!r}")
    return rate


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Equipment finance calculator")
    parser.add_argument(
        "--database", action="store_true",
        help="Read rate bands from the database instead of the built-in table",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    def money_options(p: argparse.ArgumentParser) -> None:
        p.add_argument("--fee", type=parse_currency, default=None, help="Application fee (default: 495.00)")
        p.add_argument("--balloon", type=parse_currency, default=None, help="Balloon / residual amount")

    p = sub.add_parser("payment", help="Invoice amount + term -> monthly payment")
    p.add_argument("invoice_amount", type=parse_currency)
    p.add_argument("term_months", type=int)
    money_options(p)

    p = sub.add_parser("rate", help="Invoice amount + term + payment -> effective rate")
    p.add_argument("invoice_amount", type=parse_currency)
    p.add_argument("term_months", type=int)
    p.add_argument("--payment", type=parse_currency, required=True, help="Desired monthly payment")
    money_options(p)

    p = sub.add_parser("loan-amount", help="Desired payment + term -> max invoice amount")
    p.add_argument("desired_payment", type=parse_currency)
    p.add_argument("term_months", type=int)
    p.add_argument("--rate", type=annual_rate, default=None, help="Annual rate, e.g. 0.1165 (default: search bands)")
    money_options(p)

    sub.add_parser("bands", help="List rate bands currently in force")
    sub.add_parser("seed-bands", help="Create the rate_bands table and insert the default tiers")

    return parser


async def run(args: argparse.Namespace) -> int:
    if args.command == "seed-bands":
        inserted = await seed_default_bands(get_engine())
        print(f"Inserted {inserted} rate bands")
        return 0

    source = build_rate_band_source("database" if args.database else None)

    if args.command == "bands":
        _header("Active Rate Bands")
        for band in await source.list_active_bands():
            print(f"  {_band(band)}")
        print()
        return 0

    calculator = Calculator(source)
    try:
        if args.command == "payment":
            print_payment(await calculator.calculate_payment(
                args.invoice_amount, args.term_months, args.fee, args.balloon,
            ))
        elif args.command == "rate":
            print_rate(await calculator.calculate_rate(
                args.invoice_amount, args.term_months, args.payment, args.fee, args.balloon,
            ))
        elif args.command == "loan-amount":
            print_loan_amount(await calculator.calculate_loan_amount(
                args.desired_payment, args.term_months, args.rate, args.fee, args.balloon,
            ))
    except CalculatorError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=settings.log_level)
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
