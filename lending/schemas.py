"""Pydantic schemas for the persisted (document) form of a schedule.

Field aliases follow the stored loan document (camelCase). Decimals dump as
strings in JSON mode, so money round-trips without float conversion.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from lending.models.loan import Penalty, PenaltyStatus
from lending.models.schedule import DueDateExtension, Installment, PartPayment


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PartPaymentDocument(_Document):
    amount: Decimal
    payment_id: str = Field(..., alias="paymentId")
    paid_at: datetime = Field(..., alias="paymentDate")
    reference: str | None = None
    notes: str | None = None


class ExtensionDocument(_Document):
    original_due_date: date = Field(..., alias="originalDueDate")
    new_due_date: date = Field(..., alias="newDueDate")
    reason: str
    approved_by: str = Field(..., alias="approvedBy")
    approved_at: datetime = Field(..., alias="approvedAt")
    notes: str | None = None


class InstallmentDocument(_Document):
    installment_no: int = Field(..., alias="installmentNo", ge=1)
    due_date: date = Field(..., alias="dueDate")
    principal: Decimal
    interest: Decimal
    total: Decimal
    balance: Decimal = Decimal("0")
    paid: bool = False
    paid_at: datetime | None = Field(None, alias="paidAt")
    payment_id: str | None = Field(None, alias="paymentId")
    part_payments: list[PartPaymentDocument] = Field(default_factory=list, alias="partPayments")
    extension_history: list[ExtensionDocument] = Field(default_factory=list, alias="extensionHistory")

    @classmethod
    def from_installment(cls, inst: Installment) -> "InstallmentDocument":
        return cls(
            installment_no=inst.installment_no,
            due_date=inst.due_date,
            principal=inst.principal,
            interest=inst.interest,
            total=inst.total,
            balance=inst.balance,
            paid=inst.paid,
            paid_at=inst.paid_at,
            payment_id=inst.payment_id,
            part_payments=[
                PartPaymentDocument(
                    amount=p.amount,
                    payment_id=p.payment_id,
                    paid_at=p.paid_at,
                    reference=p.reference,
                    notes=p.notes,
                )
                for p in inst.part_payments
            ],
            extension_history=[
                ExtensionDocument(
                    original_due_date=e.original_due_date,
                    new_due_date=e.new_due_date,
                    reason=e.reason,
                    approved_by=e.approved_by,
                    approved_at=e.approved_at,
                    notes=e.notes,
                )
                for e in inst.extension_history
            ],
        )

    def to_installment(self) -> Installment:
        return Installment(
            installment_no=self.installment_no,
            due_date=self.due_date,
            principal=self.principal,
            interest=self.interest,
            total=self.total,
            balance=self.balance,
            paid=self.paid,
            paid_at=self.paid_at,
            payment_id=self.payment_id,
            part_payments=[
                PartPayment(
                    amount=p.amount,
                    payment_id=p.payment_id,
                    paid_at=p.paid_at,
                    reference=p.reference,
                    notes=p.notes,
                )
                for p in self.part_payments
            ],
            extension_history=[
                DueDateExtension(
                    original_due_date=e.original_due_date,
                    new_due_date=e.new_due_date,
                    reason=e.reason,
                    approved_by=e.approved_by,
                    approved_at=e.approved_at,
                    notes=e.notes,
                )
                for e in self.extension_history
            ],
        )


class PenaltyDocument(_Document):
    penalty_id: str = Field(..., alias="penaltyId")
    installment_no: int = Field(..., alias="installmentNo")
    amount: Decimal
    reason: str
    due_date: date = Field(..., alias="dueDate")
    status: PenaltyStatus = PenaltyStatus.PENDING
    created_at: datetime | None = Field(None, alias="createdAt")
    created_by: str | None = Field(None, alias="createdBy")
    updated_at: datetime | None = Field(None, alias="updatedAt")


def schedule_to_document(schedule: list[Installment]) -> list[dict]:
    """Schedule -> JSON-ready list of installment dicts, in schedule order."""
    return [
        InstallmentDocument.from_installment(inst).model_dump(mode="json", by_alias=True)
        for inst in schedule
    ]


def schedule_from_document(rows: list[dict]) -> list[Installment]:
    """Stored installment dicts -> schedule. Order is kept as stored."""
    return [InstallmentDocument.model_validate(row).to_installment() for row in rows]


def penalty_to_document(penalty: Penalty) -> dict:
    return PenaltyDocument(
        penalty_id=penalty.penalty_id,
        installment_no=penalty.installment_no,
        amount=penalty.amount,
        reason=penalty.reason,
        due_date=penalty.due_date,
        status=penalty.status,
        created_at=penalty.created_at,
        created_by=penalty.created_by,
        updated_at=penalty.updated_at,
    ).model_dump(mode="json", by_alias=True)


def penalty_from_document(row: dict) -> Penalty:
    doc = PenaltyDocument.model_validate(row)
    return Penalty(
        penalty_id=doc.penalty_id,
        installment_no=doc.installment_no,
        amount=doc.amount,
        reason=doc.reason,
        due_date=doc.due_date,
        status=doc.status,
        created_at=doc.created_at,
        created_by=doc.created_by,
        updated_at=doc.updated_at,
    )
