from decimal import Decimal

import pytest

from app.domains.payroll.ledger import SqlLedger
from app.models import Account, JournalEntry
from payroll_engine.exceptions import LedgerPostingError, UnbalancedPostingError
from payroll_engine.ledger import EntrySide, LedgerEntry, LedgerPosting, build_payroll_posting
from payroll_engine.models import RunTotals


def payroll_posting(reference: str = "PAY-1") -> LedgerPosting:
    totals = RunTotals(
        total_gross=Decimal("115000.00"),
        total_paye=Decimal("6545.00"),
        total_pension=Decimal("9200.00"),
        total_nhf=Decimal("2500.00"),
        total_net=Decimal("96755.00"),
        employee_count=1,
    )
    return build_payroll_posting(reference, "March 2025", totals)


def balance(db, code: str) -> Decimal:
    return Decimal(db.query(Account.balance).filter(Account.code == code).scalar())


def test_post_writes_entry_and_moves_balances_by_normal_side(seeded):
    SqlLedger(seeded).post(payroll_posting())
    seeded.commit()

    entry = seeded.query(JournalEntry).one()
    assert len(entry.lines) == 5
    assert balance(seeded, "5001") == Decimal("115000.00")
    assert balance(seeded, "1103") == Decimal("-96755.00")
    assert balance(seeded, "2103") == Decimal("6545.00")
    assert balance(seeded, "2105") == Decimal("9200.00")
    assert balance(seeded, "2106") == Decimal("2500.00")


def test_reference_can_only_be_posted_once(seeded):
    ledger = SqlLedger(seeded)
    ledger.post(payroll_posting())
    seeded.commit()

    with pytest.raises(LedgerPostingError):
        ledger.post(payroll_posting())


def test_unknown_account_is_rejected(seeded):
    posting = LedgerPosting(
        reference="PAY-X",
        description="bad account",
        entries=(
            LedgerEntry("9999", EntrySide.DEBIT, Decimal("10.00")),
            LedgerEntry("1103", EntrySide.CREDIT, Decimal("10.00")),
        ),
    )

    with pytest.raises(LedgerPostingError, match="9999"):
        SqlLedger(seeded).post(posting)

    assert seeded.query(JournalEntry).count() == 0


def test_unbalanced_posting_is_rejected(seeded):
    posting = LedgerPosting(
        reference="PAY-U",
        description="lopsided",
        entries=(LedgerEntry("5001", EntrySide.DEBIT, Decimal("10.00")),),
    )

    with pytest.raises(UnbalancedPostingError):
        SqlLedger(seeded).post(posting)
