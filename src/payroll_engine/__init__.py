from .aggregator import RunAggregator, RunDraft, aggregate
from .calculator import ALLOWANCE_RATE, PayrollCalculator, PayrollPolicy
from .exceptions import (
    DuplicateRunError,
    InvalidStateError,
    LedgerPostingError,
    NotProcessedError,
    PayrollError,
    RunNotFoundError,
    UnbalancedPostingError,
    ValidationError,
)
from .models import (
    CompensationInput,
    PayrollLine,
    PayrollRunRecord,
    RunConfiguration,
    RunStatus,
    RunTotals,
)

__all__ = [
    "ALLOWANCE_RATE",
    "CompensationInput",
    "DuplicateRunError",
    "InvalidStateError",
    "LedgerPostingError",
    "NotProcessedError",
    "PayrollCalculator",
    "PayrollError",
    "PayrollLine",
    "PayrollPolicy",
    "PayrollRunRecord",
    "RunAggregator",
    "RunConfiguration",
    "RunDraft",
    "RunNotFoundError",
    "RunStatus",
    "RunTotals",
    "UnbalancedPostingError",
    "ValidationError",
    "aggregate",
]
