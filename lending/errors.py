"""Errors raised by the amortization and ledger engines.

Every error propagates to the caller. Nothing here is retried or logged.
"""


class LendingError(Exception):
    """Base class for loan schedule errors."""


class InvalidLoanTermsError(LendingError, ValueError):
    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        super().__init__(f"Invalid loan terms: {field}={value!r} ({reason})")


class InstallmentNotFoundError(LendingError, LookupError):
    def __init__(self, installment_no: int):
        self.installment_no = installment_no
        super().__init__(f"Installment {installment_no} not found in schedule")


class AlreadyPaidError(LendingError):
    """Duplicate payment for an installment that is already settled."""

    def __init__(self, installment_no: int):
        self.installment_no = installment_no
        super().__init__(f"Installment {installment_no} is already paid")


class InvalidPaymentError(LendingError, ValueError):
    pass


class PenaltyNotFoundError(LendingError, LookupError):
    def __init__(self, penalty_id: str):
        self.penalty_id = penalty_id
        super().__init__(f"Penalty {penalty_id} not found")


class LoanClosedError(LendingError):
    def __init__(self, loan_id: str):
        self.loan_id = loan_id
        super().__init__(f"Loan {loan_id} has no outstanding installments")
