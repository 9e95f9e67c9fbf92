from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.account import Account
from app.models.journal_entry import JournalEntry, JournalLine
from payroll_engine.exceptions import LedgerPostingError
from payroll_engine.ledger import EntrySide, LedgerPosting, assert_balanced

logger = get_logger(__name__)


class SqlLedger:
    """Writes postings into journal_entries/journal_lines inside the caller's transaction.

    Nothing is committed here; the run service owns the transaction so the
    posting and the run status change land together or not at all.
    """

    def __init__(self, session: Session):
        self.session = session

    def post(self, posting: LedgerPosting) -> JournalEntry:
        assert_balanced(posting)

        codes = posting.accounts()
        accounts = {
            account.code: account
            for account in self.session.query(Account).filter(Account.code.in_(codes)).all()
        }
        missing = [code for code in codes if code not in accounts]
        if missing:
            raise LedgerPostingError(f"Ledger accounts not found: {', '.join(missing)}")

        if self.session.query(JournalEntry.id).filter(JournalEntry.reference == posting.reference).first():
            raise LedgerPostingError(f"Journal entry {posting.reference} already exists")

        entry = JournalEntry(reference=posting.reference, description=posting.description)
        for item in posting.entries:
            account = accounts[item.account]
            debit = item.amount if item.side == EntrySide.DEBIT else Decimal("0")
            credit = item.amount if item.side == EntrySide.CREDIT else Decimal("0")
            entry.lines.append(JournalLine(account=account, debit=debit, credit=credit))

            movement = debit - credit if account.is_debit_normal else credit - debit
            account.balance = Decimal(account.balance or 0) + movement

        self.session.add(entry)
        try:
            self.session.flush()
        except IntegrityError as exc:
            raise LedgerPostingError(f"Journal entry {posting.reference} could not be written") from exc

        logger.info(
            "journal_entry_posted",
            reference=posting.reference,
            accounts=codes,
            amount=str(posting.total(EntrySide.DEBIT)),
        )
        return entry
