"""Repayment schedule data types."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class AmortizationRow:
    """One period of an amortization table, before due dates are assigned."""
    period: int
    principal: Decimal
    interest: Decimal
    total: Decimal
    balance: Decimal  # Closing balance after this period's principal


@dataclass(frozen=True)
class PartPayment:
    amount: Decimal
    payment_id: str
    paid_at: datetime
    reference: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class DueDateExtension:
    original_due_date: date
    new_due_date: date
    reason: str
    approved_by: str
    approved_at: datetime
    notes: Optional[str] = None


@dataclass
class Installment:
    installment_no: int
    due_date: date
    principal: Decimal
    interest: Decimal
    total: Decimal
    balance: Decimal = Decimal("0")

    # Payment state, owned by the ledger
    paid: bool = False
    paid_at: Optional[datetime] = None
    payment_id: Optional[str] = None
    part_payments: list[PartPayment] = field(default_factory=list)

    # Append-only audit trail of due date changes
    extension_history: list[DueDateExtension] = field(default_factory=list)

    @property
    def part_paid_amount(self) -> Decimal:
        return sum((p.amount for p in self.part_payments), Decimal("0"))

    @property
    def amount_due(self) -> Decimal:
        if self.paid:
            return Decimal("0")
        return max(self.total - self.part_paid_amount, Decimal("0"))


@dataclass(frozen=True)
class ExtensionLogEntry:
    installment_no: int
    extension: DueDateExtension


@dataclass(frozen=True)
class ScheduleAggregates:
    total_principal: Decimal
    total_interest: Decimal
    total_amount: Decimal

    paid_principal: Decimal
    paid_interest: Decimal
    paid_amount: Decimal

    outstanding_principal: Decimal
    outstanding_interest: Decimal
    outstanding_amount: Decimal

    overdue_count: int
    overdue_amount: Decimal
    next_due_installment: Optional[Installment]

    # Counts for the admin EMI view
    installment_count: int = 0
    paid_count: int = 0
    pending_count: int = 0
    completion_percentage: int = 0
