"""Reducing-balance EMI amortization.

Pure functions: Decimal in, dataclasses out. No I/O.

Every monetary value is rounded to two places (ROUND_HALF_UP) at each step,
not only at the end. The final balance therefore drifts from zero by a few
minor units and the last installment is not corrected for it; see
`schedule_drift`.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from dateutil.relativedelta import relativedelta

from lending.engine.decision_cache import DecisionCache, DecisionKey
from lending.errors import InvalidLoanTermsError
from lending.models.loan import LoanTerms
from lending.models.schedule import AmortizationRow, Installment

TWO_PLACES = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, ROUND_HALF_UP)


def _to_decimal(name: str, value) -> Decimal:
    if isinstance(value, bool):
        raise InvalidLoanTermsError(name, value, "must be a number")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidLoanTermsError(name, value, "must be a number") from None
    if not result.is_finite():
        raise InvalidLoanTermsError(name, value, "must be finite")
    return result


def validate_terms(principal, annual_rate_percent, tenure_months) -> LoanTerms:
    """Check and normalize loan terms.

    Raises:
        InvalidLoanTermsError: principal not positive once rounded to cents,
            rate < 0, or tenure not a positive integer. The error's `field`
            names the offending term.
    """
    principal = _money(_to_decimal("principal", principal))
    if principal <= 0:
        raise InvalidLoanTermsError("principal", principal, "must be greater than zero")

    rate = _to_decimal("annual_rate_percent", annual_rate_percent)
    if rate < 0:
        raise InvalidLoanTermsError("annual_rate_percent", rate, "must not be negative")

    if isinstance(tenure_months, bool) or not isinstance(tenure_months, int):
        raise InvalidLoanTermsError("tenure_months", tenure_months, "must be an integer")
    if tenure_months < 1:
        raise InvalidLoanTermsError("tenure_months", tenure_months, "must be at least 1")

    return LoanTerms(
        principal=principal,
        annual_rate_percent=rate,
        tenure_months=tenure_months,
    )


def monthly_rate(annual_rate_percent: Decimal) -> Decimal:
    """Annual percentage rate to a monthly fraction, e.g. 12 -> 0.01."""
    return annual_rate_percent / 100 / 12


def compute_emi(principal: Decimal, annual_rate_percent: Decimal, tenure_months: int) -> Decimal:
    """Equated monthly installment, rounded to two places."""
    terms = validate_terms(principal, annual_rate_percent, tenure_months)
    return _emi(terms)


def _emi(terms: LoanTerms) -> Decimal:
    r = monthly_rate(terms.annual_rate_percent)
    n = terms.tenure_months
    if r == 0:
        return _money(terms.principal / n)

    # EMI = P * r(1+r)^n / [(1+r)^n - 1]
    factor = (1 + r) ** n
    return _money(terms.principal * r * factor / (factor - 1))


def _amortize(terms: LoanTerms) -> tuple[AmortizationRow, ...]:
    emi = _emi(terms)
    r = monthly_rate(terms.annual_rate_percent)

    rows: list[AmortizationRow] = []
    balance = terms.principal
    for period in range(1, terms.tenure_months + 1):
        interest = _money(balance * r)
        principal_paid = _money(emi - interest)
        balance = _money(balance - principal_paid)
        rows.append(AmortizationRow(
            period=period,
            principal=principal_paid,
            interest=interest,
            total=emi,
            balance=balance,
        ))
    return tuple(rows)


def amortize(terms: LoanTerms, cache: DecisionCache | None = None) -> tuple[AmortizationRow, ...]:
    """Date-free amortization table for validated terms.

    With a cache, identical terms share one (immutable) table.
    """
    if cache is None:
        return _amortize(terms)
    key = DecisionKey(
        amount=terms.principal,
        rate=terms.annual_rate_percent,
        tenure=terms.tenure_months,
    )
    return cache.get_or_compute(key, lambda: _amortize(terms))


def generate_schedule(
    principal: Decimal,
    annual_rate_percent: Decimal,
    tenure_months: int,
    start_date: date,
    cache: DecisionCache | None = None,
) -> list[Installment]:
    """Generate the installment schedule for a loan.

    Args:
        principal: Approved amount
        annual_rate_percent: Annual rate in percent (e.g. 12 for 12%)
        tenure_months: Number of monthly installments
        start_date: Disbursement date; installment i falls due i months later
        cache: Optional shared DecisionCache
    """
    terms = validate_terms(principal, annual_rate_percent, tenure_months)
    if isinstance(start_date, datetime):
        start_date = start_date.date()

    return [
        Installment(
            installment_no=row.period,
            due_date=start_date + relativedelta(months=row.period),
            principal=row.principal,
            interest=row.interest,
            total=row.total,
            balance=row.balance,
        )
        for row in amortize(terms, cache)
    ]


def schedule_drift(schedule: list[Installment], principal: Decimal) -> Decimal:
    """Approved principal minus the scheduled principal components.

    Positive means the schedule under-collects principal, negative means it
    over-collects. Non-zero drift comes from per-step rounding.
    """
    scheduled = sum((inst.principal for inst in schedule), Decimal("0"))
    return _money(Decimal(str(principal))) - scheduled


def yearly_summary(schedule: list[Installment]) -> list[dict]:
    """Aggregate a schedule by loan year (12 installments each).

    Returns list of dicts with keys: year, principal, interest, total, ending_balance
    """
    yearly: list[dict] = []
    year_principal = Decimal("0")
    year_interest = Decimal("0")
    year_total = Decimal("0")

    for inst in schedule:
        year_principal += inst.principal
        year_interest += inst.interest
        year_total += inst.total

        if inst.installment_no % 12 == 0 or inst.installment_no == len(schedule):
            yearly.append({
                "year": (inst.installment_no - 1) // 12 + 1,
                "principal": year_principal,
                "interest": year_interest,
                "total": year_total,
                "ending_balance": inst.balance,
            })
            year_principal = Decimal("0")
            year_interest = Decimal("0")
            year_total = Decimal("0")

    return yearly
