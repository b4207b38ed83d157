"""Negotiated one-shot settlement of a loan's remaining balance."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from lending.engine.ledger import apply_full_loan_settlement, validate_amount
from lending.errors import LoanClosedError
from lending.models.loan import LoanAccount, Settlement, SettlementReason


def outstanding_amount(loan: LoanAccount) -> Decimal:
    """What is still owed on the schedule, net of part payments."""
    return sum((inst.amount_due for inst in loan.schedule if not inst.paid), Decimal("0"))


def settle_loan(
    loan: LoanAccount,
    settlement_amount: Decimal,
    reason: SettlementReason | str,
    offered_by: str,
    payment_ref: str,
    when: datetime,
    notes: Optional[str] = None,
) -> Settlement:
    """Close the loan for an agreed amount, which may be below what is owed.

    The difference between the outstanding balance and the agreed amount is
    recorded as waived. A settlement above the outstanding balance waives
    nothing; the excess is not tracked.

    Raises:
        InvalidPaymentError: settlement_amount <= 0
        LoanClosedError: nothing left to settle
    """
    amount = validate_amount(settlement_amount)
    if all(inst.paid for inst in loan.schedule):
        raise LoanClosedError(loan.loan_id)
    original = outstanding_amount(loan)

    settlement = Settlement(
        settlement_amount=amount,
        original_outstanding=original,
        waived_amount=max(original - amount, Decimal("0")),
        reason=SettlementReason(reason),
        offered_by=offered_by,
        payment_id=payment_ref,
        settled_at=when,
        notes=notes,
    )
    apply_full_loan_settlement(loan.schedule, when, payment_ref)
    loan.settlements.append(settlement)
    return settlement
