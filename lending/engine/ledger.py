"""Payment-lifecycle mutations and read-side aggregates for a loan schedule.

The ledger mutates the installment list it is given and nothing else.
Persisting the result, and serializing concurrent writers to the same loan,
is the caller's job.

Installment state machine:

    UNPAID --(full or covering manual payment | part payments reaching total | settlement)--> PAID

PAID is terminal. Due date extensions are orthogonal to it.
"""

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from lending.errors import (
    AlreadyPaidError,
    InstallmentNotFoundError,
    InvalidPaymentError,
    PenaltyNotFoundError,
)
from lending.models.loan import LoanAccount, Penalty, PenaltyStatus, PenaltySummary
from lending.models.schedule import (
    DueDateExtension,
    ExtensionLogEntry,
    Installment,
    PartPayment,
    ScheduleAggregates,
)

logger = logging.getLogger(__name__)


def validate_amount(amount) -> Decimal:
    """Coerce a payment or charge amount to Decimal and require it to be positive."""
    if isinstance(amount, bool):
        raise InvalidPaymentError(f"Amount must be a number, got {amount!r}")
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise InvalidPaymentError(f"Amount must be a number, got {amount!r}") from None
    if not value.is_finite() or value <= 0:
        raise InvalidPaymentError(f"Amount must be greater than zero, got {value}")
    return value


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def find_installment(schedule: list[Installment], installment_no: int) -> Installment:
    for inst in schedule:
        if inst.installment_no == installment_no:
            return inst
    raise InstallmentNotFoundError(installment_no)


def _mark_paid(inst: Installment, payment_ref: str, when: datetime) -> None:
    inst.paid = True
    inst.paid_at = when
    inst.payment_id = payment_ref


def apply_full_payment(
    schedule: list[Installment],
    installment_no: int,
    payment_ref: str,
    when: datetime,
) -> Installment:
    """Settle one installment with a single payment.

    Raises:
        InstallmentNotFoundError: no installment with that number
        AlreadyPaidError: the installment is already paid; it is left untouched
    """
    inst = find_installment(schedule, installment_no)
    if inst.paid:
        raise AlreadyPaidError(installment_no)
    _mark_paid(inst, payment_ref, when)
    return inst


def apply_part_payment(
    schedule: list[Installment],
    installment_no: int,
    amount: Decimal,
    payment_ref: str,
    when: datetime,
    reference: Optional[str] = None,
    notes: Optional[str] = None,
) -> Installment:
    """Record a partial payment against one installment.

    Once the part payments add up to the installment total, the installment
    is paid and attributed to the payment that crossed the threshold. Any
    excess over the total is accepted and not carried forward.
    """
    amount = validate_amount(amount)
    inst = find_installment(schedule, installment_no)
    if inst.paid:
        raise AlreadyPaidError(installment_no)

    inst.part_payments.append(PartPayment(
        amount=amount,
        payment_id=payment_ref,
        paid_at=when,
        reference=reference,
        notes=notes,
    ))
    if inst.part_paid_amount >= inst.total:
        _mark_paid(inst, payment_ref, when)
    return inst


def apply_manual_payment(
    schedule: list[Installment],
    installment_no: int,
    amount: Decimal,
    payment_ref: str,
    when: datetime,
) -> Installment:
    """Apply an amount collected outside the payment gateway.

    The installment is paid only if this one amount covers its total. A
    smaller amount leaves it untouched and is not accumulated; use
    `apply_part_payment` for installments settled in pieces. The payment
    record itself belongs to the caller.
    """
    amount = validate_amount(amount)
    inst = find_installment(schedule, installment_no)
    if inst.paid:
        raise AlreadyPaidError(installment_no)
    if amount >= inst.total:
        _mark_paid(inst, payment_ref, when)
    else:
        logger.debug(
            "Manual payment %s of %s below installment %d total %s",
            payment_ref, amount, installment_no, inst.total,
        )
    return inst


def apply_next_payment(
    schedule: list[Installment],
    payment_ref: str,
    when: datetime,
) -> Installment | None:
    """Pay the earliest unpaid installment. Returns None if everything is paid."""
    for inst in schedule:
        if not inst.paid:
            _mark_paid(inst, payment_ref, when)
            return inst
    return None


def apply_full_loan_settlement(
    schedule: list[Installment],
    when: datetime,
    payment_ref: str,
) -> list[Installment]:
    """Close every unpaid installment with one payment event.

    All closed installments share `when` and `payment_ref`. Installments that
    were already paid keep their own payment details. Returns the installments
    closed by this call, in schedule order.
    """
    closed = [inst for inst in schedule if not inst.paid]
    for inst in closed:
        _mark_paid(inst, payment_ref, when)
    logger.debug("Settlement %s closed %d installments", payment_ref, len(closed))
    return closed


def extend_due_date(
    schedule: list[Installment],
    installment_no: int,
    new_due_date: date,
    reason: str,
    approver: str,
    when: datetime,
    notes: Optional[str] = None,
) -> Installment:
    """Move an installment's due date, recording the change first.

    The new date is not required to be later than the current one, and paid
    installments are not rejected.
    """
    inst = find_installment(schedule, installment_no)
    new_due_date = _as_date(new_due_date)
    inst.extension_history.append(DueDateExtension(
        original_due_date=inst.due_date,
        new_due_date=new_due_date,
        reason=reason,
        approved_by=approver,
        approved_at=when,
        notes=notes,
    ))
    inst.due_date = new_due_date
    return inst


def extension_log(schedule: list[Installment]) -> list[ExtensionLogEntry]:
    """Every due date extension across the schedule, by installment then time."""
    return [
        ExtensionLogEntry(installment_no=inst.installment_no, extension=ext)
        for inst in schedule
        for ext in inst.extension_history
    ]


def add_penalty(
    loan: LoanAccount,
    installment_no: int,
    amount: Decimal,
    reason: str,
    due_date: date,
    when: datetime,
    created_by: Optional[str] = None,
) -> Penalty:
    """Attach a PENDING penalty to the loan (not to the installment itself), stamped with `when`."""
    penalty = Penalty(
        installment_no=installment_no,
        amount=validate_amount(amount),
        reason=reason,
        due_date=_as_date(due_date),
        created_at=when,
        created_by=created_by,
    )
    loan.penalties.append(penalty)
    return penalty


def update_penalty_status(
    loan: LoanAccount,
    penalty_id: str,
    status: PenaltyStatus | str,
    when: datetime,
) -> Penalty:
    status = PenaltyStatus(status)
    for penalty in loan.penalties:
        if penalty.penalty_id == penalty_id:
            penalty.status = status
            penalty.updated_at = when
            return penalty
    raise PenaltyNotFoundError(penalty_id)


def penalty_summary(penalties: list[Penalty]) -> PenaltySummary:
    return PenaltySummary(
        total_penalties=len(penalties),
        total_amount=sum((p.amount for p in penalties), Decimal("0")),
        pending=sum(1 for p in penalties if p.status is PenaltyStatus.PENDING),
        paid=sum(1 for p in penalties if p.status is PenaltyStatus.PAID),
        waived=sum(1 for p in penalties if p.status is PenaltyStatus.WAIVED),
    )


def compute_aggregates(schedule: list[Installment], now: date | datetime) -> ScheduleAggregates:
    """Totals partitioned by the paid flag, plus overdue and next-due lookups.

    Overdue: unpaid with a due date before `now`. Next due: the unpaid
    installment with the earliest due date on or after `now`. Part payments
    on unpaid installments do not count as paid.
    """
    today = _as_date(now)
    zero = Decimal("0")
    paid = [inst for inst in schedule if inst.paid]
    unpaid = [inst for inst in schedule if not inst.paid]

    total_principal = sum((i.principal for i in schedule), zero)
    total_interest = sum((i.interest for i in schedule), zero)
    total_amount = sum((i.total for i in schedule), zero)

    paid_principal = sum((i.principal for i in paid), zero)
    paid_interest = sum((i.interest for i in paid), zero)
    paid_amount = sum((i.total for i in paid), zero)

    overdue = [i for i in unpaid if i.due_date < today]
    upcoming = [i for i in unpaid if i.due_date >= today]
    next_due = min(upcoming, key=lambda i: (i.due_date, i.installment_no), default=None)

    if total_amount > 0:
        completion = int((paid_amount / total_amount * 100).quantize(Decimal("1"), ROUND_HALF_UP))
    else:
        completion = 0

    return ScheduleAggregates(
        total_principal=total_principal,
        total_interest=total_interest,
        total_amount=total_amount,
        paid_principal=paid_principal,
        paid_interest=paid_interest,
        paid_amount=paid_amount,
        outstanding_principal=total_principal - paid_principal,
        outstanding_interest=total_interest - paid_interest,
        outstanding_amount=total_amount - paid_amount,
        overdue_count=len(overdue),
        overdue_amount=sum((i.total for i in overdue), zero),
        next_due_installment=next_due,
        installment_count=len(schedule),
        paid_count=len(paid),
        pending_count=len(unpaid),
        completion_percentage=completion,
    )
