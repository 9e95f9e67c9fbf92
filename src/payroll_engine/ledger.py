"""
Ledger postings for processed payroll runs.

A run produces exactly one posting: salaries expense is debited with the
gross total, and the PAYE, pension and NHF liabilities plus the bank account
(net pay) are credited. Since every line satisfies
``gross = paye + pension + nhf + net`` the posting always nets to zero.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Protocol, Tuple

from .exceptions import UnbalancedPostingError
from .models import PayrollRunRecord, RunTotals


class EntrySide(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"


@dataclass(frozen=True)
class LedgerEntry:
    account: str
    side: EntrySide
    amount: Decimal


@dataclass(frozen=True)
class LedgerAccounts:
    salaries_expense: str = "5001"
    bank: str = "1103"
    paye_payable: str = "2103"
    pension_payable: str = "2105"
    nhf_payable: str = "2106"


@dataclass(frozen=True)
class LedgerPosting:
    reference: str
    description: str
    entries: Tuple[LedgerEntry, ...]

    def total(self, side: EntrySide) -> Decimal:
        return sum((e.amount for e in self.entries if e.side == side), Decimal("0"))

    @property
    def is_balanced(self) -> bool:
        return self.total(EntrySide.DEBIT) == self.total(EntrySide.CREDIT)

    def accounts(self) -> List[str]:
        return sorted({entry.account for entry in self.entries})


class Ledger(Protocol):
    def post(self, posting: LedgerPosting) -> None:
        """Record the posting or raise LedgerPostingError."""


def assert_balanced(posting: LedgerPosting) -> None:
    if not posting.is_balanced:
        raise UnbalancedPostingError(
            posting.reference, posting.total(EntrySide.DEBIT), posting.total(EntrySide.CREDIT)
        )


def build_payroll_posting(
    reference: str,
    period_label: str,
    totals: RunTotals,
    accounts: LedgerAccounts = LedgerAccounts(),
) -> LedgerPosting:
    entries = (
        LedgerEntry(accounts.salaries_expense, EntrySide.DEBIT, totals.total_gross),
        LedgerEntry(accounts.paye_payable, EntrySide.CREDIT, totals.total_paye),
        LedgerEntry(accounts.pension_payable, EntrySide.CREDIT, totals.total_pension),
        LedgerEntry(accounts.nhf_payable, EntrySide.CREDIT, totals.total_nhf),
        LedgerEntry(accounts.bank, EntrySide.CREDIT, totals.total_net),
    )
    posting = LedgerPosting(
        reference=reference,
        description=f"Payroll Disbursement - {period_label}",
        entries=entries,
    )
    assert_balanced(posting)
    return posting


def posting_for_run(run: PayrollRunRecord, accounts: LedgerAccounts = LedgerAccounts()) -> LedgerPosting:
    return build_payroll_posting(run.reference, run.period_label, run.totals, accounts)


@dataclass
class InMemoryLedger:
    postings: List[LedgerPosting] = field(default_factory=list)

    def post(self, posting: LedgerPosting) -> None:
        assert_balanced(posting)
        self.postings.append(posting)
