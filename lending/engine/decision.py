"""Turn an approval decision into a loan's initial schedule."""

import logging
from collections.abc import Mapping
from datetime import date
from decimal import Decimal

from lending.config import settings
from lending.engine.amortization import generate_schedule, validate_terms
from lending.engine.decision_cache import DecisionCache
from lending.models.loan import LoanDecision, LoanTerms

logger = logging.getLogger(__name__)


def terms_from_decision(raw: Mapping) -> LoanTerms:
    """Read approved terms from a stored decision record.

    Expects the record's keys (amountApproved, rateAPR, tenureMonths). A
    missing rate or tenure falls back to the configured defaults; a missing
    amount is rejected as invalid terms.
    """
    rate = raw.get("rateAPR")
    tenure = raw.get("tenureMonths")
    return validate_terms(
        raw.get("amountApproved"),
        settings.default_rate_apr if rate is None else rate,
        settings.default_tenure_months if tenure is None else tenure,
    )


def create_decision(
    terms: LoanTerms,
    start_date: date,
    cache: DecisionCache | None = None,
) -> LoanDecision:
    schedule = generate_schedule(
        terms.principal,
        terms.annual_rate_percent,
        terms.tenure_months,
        start_date,
        cache=cache,
    )
    emi = schedule[0].total if schedule else Decimal("0")
    logger.debug(
        "Decision %s @ %s%% x %d months: EMI %s",
        terms.principal, terms.annual_rate_percent, terms.tenure_months, emi,
    )
    return LoanDecision(terms=terms, emi=emi, schedule=schedule)
