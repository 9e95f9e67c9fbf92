"""
Typed errors raised by the payroll engine.

Every error carries a machine-readable ``code`` so adapters (HTTP, CLI) can
map it without parsing messages:

    PayrollError
    +-- ValidationError          bad run configuration or inputs
    +-- TaxTableError            missing or malformed tax table
    +-- RunNotFoundError         unknown run or line id
    +-- DuplicateRunError        a run already exists for the period
    +-- InvalidStateError        illegal lifecycle transition
    |   +-- NotProcessedError    export requested on a non-PROCESSED run
    +-- LedgerPostingError       ledger rejected the posting
        +-- UnbalancedPostingError
"""

from __future__ import annotations

from decimal import Decimal


class PayrollError(Exception):
    code = "PAYROLL_ERROR"


class ValidationError(PayrollError):
    code = "VALIDATION_ERROR"


class TaxTableError(PayrollError):
    code = "TAX_TABLE_ERROR"


class RunNotFoundError(PayrollError):
    code = "RUN_NOT_FOUND"


class DuplicateRunError(PayrollError):
    code = "DUPLICATE_RUN"

    def __init__(self, month: int, year: int, status: str | None = None):
        self.month = month
        self.year = year
        self.status = status
        suffix = f" and is {status}" if status else ""
        super().__init__(f"Payroll for {month}/{year} already exists{suffix}")


class InvalidStateError(PayrollError):
    code = "INVALID_STATE"

    def __init__(self, message: str, run_id: int | None = None, status: str | None = None):
        self.run_id = run_id
        self.status = status
        super().__init__(message)


class NotProcessedError(InvalidStateError):
    code = "NOT_PROCESSED"


class LedgerPostingError(PayrollError):
    code = "LEDGER_POSTING_FAILED"


class UnbalancedPostingError(LedgerPostingError):
    code = "UNBALANCED_POSTING"

    def __init__(self, reference: str, debits: Decimal, credits: Decimal):
        self.reference = reference
        self.debits = debits
        self.credits = credits
        super().__init__(
            f"Posting {reference} is unbalanced: debits {debits} != credits {credits}"
        )
