from decimal import Decimal

import pytest

from payroll_engine.exceptions import UnbalancedPostingError
from payroll_engine.ledger import (
    EntrySide,
    InMemoryLedger,
    LedgerAccounts,
    LedgerEntry,
    LedgerPosting,
    build_payroll_posting,
    posting_for_run,
)
from payroll_engine.models import PayrollRunRecord, RunStatus, RunTotals


def sample_totals() -> RunTotals:
    return RunTotals(
        total_gross=Decimal("230000.00"),
        total_paye=Decimal("13090.00"),
        total_pension=Decimal("18400.00"),
        total_nhf=Decimal("5000.00"),
        total_net=Decimal("193510.00"),
        employee_count=2,
    )


def test_payroll_posting_debits_expense_and_credits_liabilities():
    posting = build_payroll_posting("PAY-1", "March 2025", sample_totals())

    amounts = {(e.account, e.side): e.amount for e in posting.entries}
    assert amounts == {
        ("5001", EntrySide.DEBIT): Decimal("230000.00"),
        ("2103", EntrySide.CREDIT): Decimal("13090.00"),
        ("2105", EntrySide.CREDIT): Decimal("18400.00"),
        ("2106", EntrySide.CREDIT): Decimal("5000.00"),
        ("1103", EntrySide.CREDIT): Decimal("193510.00"),
    }
    assert posting.description == "Payroll Disbursement - March 2025"
    assert posting.is_balanced


def test_custom_account_codes_are_used():
    accounts = LedgerAccounts(salaries_expense="6000", bank="1000")

    posting = build_payroll_posting("PAY-1", "March 2025", sample_totals(), accounts)

    assert posting.accounts() == ["1000", "2103", "2105", "2106", "6000"]


def test_unbalanced_totals_are_rejected():
    totals = sample_totals()
    totals.total_net += Decimal("0.01")

    with pytest.raises(UnbalancedPostingError) as excinfo:
        build_payroll_posting("PAY-9", "March 2025", totals)

    assert excinfo.value.reference == "PAY-9"


def test_posting_for_run_uses_run_reference():
    run = PayrollRunRecord(run_id=12, month=4, year=2025, status=RunStatus.DRAFT, totals=sample_totals())

    posting = posting_for_run(run)

    assert posting.reference == "PAY-12"
    assert posting.description == "Payroll Disbursement - April 2025"


def test_in_memory_ledger_records_balanced_postings_only():
    ledger = InMemoryLedger()
    ledger.post(build_payroll_posting("PAY-1", "March 2025", sample_totals()))

    lopsided = LedgerPosting(
        reference="PAY-2",
        description="broken",
        entries=(LedgerEntry("5001", EntrySide.DEBIT, Decimal("10.00")),),
    )
    with pytest.raises(UnbalancedPostingError):
        ledger.post(lopsided)

    assert [p.reference for p in ledger.postings] == ["PAY-1"]
