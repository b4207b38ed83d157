"""CLI for previewing a repayment schedule.

Usage:
    python -m lending.engine.schedule_cli 12000 12 12 --start 2024-01-15
    python -m lending.engine.schedule_cli 250000 10.5 60 --yearly
"""

import argparse
import logging
import sys
from datetime import date
from decimal import Decimal, InvalidOperation

from lending.config import settings
from lending.engine.amortization import generate_schedule, schedule_drift, yearly_summary
from lending.errors import InvalidLoanTermsError


def print_schedule(schedule, principal: Decimal) -> None:
    emi = schedule[0].total
    print(f"\n{'=' * 72}")
    print(f"  Repayment Schedule: {principal:,.2f} over {len(schedule)} months")
    print(f"{'=' * 72}")
    print(f"  {'#':>4}  {'Due':<10}  {'Principal':>12}  {'Interest':>10}  {'EMI':>10}  {'Balance':>12}")
    for inst in schedule:
        print(
            f"  {inst.installment_no:>4}  {inst.due_date.isoformat():<10}  {inst.principal:>12,.2f}"
            f"  {inst.interest:>10,.2f}  {inst.total:>10,.2f}  {inst.balance:>12,.2f}"
        )
    print()
    print(f"  EMI:              {emi:,.2f}")
    print(f"  Total interest:   {sum(i.interest for i in schedule):,.2f}")
    print(f"  Total repayment:  {sum(i.total for i in schedule):,.2f}")
    print(f"  Rounding drift:   {schedule_drift(schedule, principal):,.2f}")
    print()


def print_yearly(schedule) -> None:
    print(f"  {'Year':>4}  {'Principal':>12}  {'Interest':>12}  {'Paid':>12}  {'Ending Bal':>12}")
    for y in yearly_summary(schedule):
        print(
            f"  {y['year']:>4}  {y['principal']:>12,.2f}  {y['interest']:>12,.2f}"
            f"  {y['total']:>12,.2f}  {y['ending_balance']:>12,.2f}"
        )
    print()


def _decimal(text: str) -> Decimal:
    try:
        return Decimal(text)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}") from None


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="EMI repayment schedule preview")
    parser.add_argument("principal", type=_decimal, help="Approved amount")
    parser.add_argument("rate", type=_decimal, help="Annual interest rate in percent (e.g. 12)")
    parser.add_argument("tenure", type=int, help="Tenure in months")
    parser.add_argument(
        "--start", type=date.fromisoformat, default=date.today(),
        help="Disbursement date, YYYY-MM-DD (default: today)",
    )
    parser.add_argument("--yearly", action="store_true", help="Print a per-year summary instead")
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level)

    try:
        schedule = generate_schedule(args.principal, args.rate, args.tenure, args.start)
    except InvalidLoanTermsError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.yearly:
        print_yearly(schedule)
    else:
        print_schedule(schedule, args.principal)
    return 0


if __name__ == "__main__":
    sys.exit(main())
