import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from lending.models.schedule import Installment


@dataclass(frozen=True)
class LoanTerms:
    """Approved terms. Immutable once the decision is taken."""
    principal: Decimal
    annual_rate_percent: Decimal  # e.g. Decimal("12") for 12% APR
    tenure_months: int


@dataclass(frozen=True)
class LoanDecision:
    terms: LoanTerms
    emi: Decimal
    schedule: list[Installment]


class PenaltyStatus(Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    WAIVED = "WAIVED"


@dataclass
class Penalty:
    installment_no: int
    amount: Decimal
    reason: str
    due_date: date
    status: PenaltyStatus = PenaltyStatus.PENDING
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_at: Optional[datetime] = None
    penalty_id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass(frozen=True)
class PenaltySummary:
    total_penalties: int
    total_amount: Decimal
    pending: int
    paid: int
    waived: int


class SettlementReason(Enum):
    FINANCIAL_HARDSHIP = "financial_hardship"
    NEGOTIATION = "negotiation"
    LEGAL_RISK = "legal_risk"
    GOODWILL = "goodwill"
    OTHER = "other"


@dataclass(frozen=True)
class Settlement:
    settlement_amount: Decimal
    original_outstanding: Decimal
    waived_amount: Decimal
    reason: SettlementReason
    offered_by: str
    payment_id: str
    settled_at: datetime
    notes: Optional[str] = None


@dataclass
class LoanAccount:
    """A disbursed loan's schedule plus the out-of-band records tied to it."""
    loan_id: str
    schedule: list[Installment] = field(default_factory=list)
    penalties: list[Penalty] = field(default_factory=list)
    settlements: list[Settlement] = field(default_factory=list)

    @property
    def is_closed(self) -> bool:
        return bool(self.schedule) and all(inst.paid for inst in self.schedule)
