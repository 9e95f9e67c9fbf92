from .account import Account
from .employee import Employee
from .journal_entry import JournalEntry, JournalLine
from .payroll_line import PayrollLine
from .payroll_run import PayrollRun

__all__ = ["Account", "Employee", "JournalEntry", "JournalLine", "PayrollLine", "PayrollRun"]
