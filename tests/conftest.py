"""Canonical test fixtures used across engine tests.

Fixture: 12,000 at 12% APR over 12 months, disbursed 2024-01-15.
EMI 1066.19; installment i falls due on the 15th, i months later.
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from lending.engine.amortization import generate_schedule
from lending.models.loan import LoanAccount, LoanTerms
from lending.models.schedule import Installment

START_DATE = date(2024, 1, 15)


@pytest.fixture
def canonical_terms() -> LoanTerms:
    return LoanTerms(
        principal=Decimal("12000.00"),
        annual_rate_percent=Decimal("12"),
        tenure_months=12,
    )


@pytest.fixture
def canonical_schedule() -> list[Installment]:
    return generate_schedule(Decimal("12000"), Decimal("12"), 12, START_DATE)


@pytest.fixture
def canonical_loan(canonical_schedule) -> LoanAccount:
    return LoanAccount(loan_id="LN-0001", schedule=canonical_schedule)


@pytest.fixture
def payment_time() -> datetime:
    return datetime(2024, 2, 10, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def thousand_installment() -> list[Installment]:
    """Single-installment schedule with a round 1000.00 due."""
    return [
        Installment(
            installment_no=1,
            due_date=date(2024, 2, 15),
            principal=Decimal("950.00"),
            interest=Decimal("50.00"),
            total=Decimal("1000.00"),
        )
    ]
