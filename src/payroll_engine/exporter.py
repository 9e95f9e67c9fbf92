from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Dict, Iterable, List, TextIO

from .exceptions import NotProcessedError
from .models import PayrollRunRecord, RunStatus
from .money import format_amount

DISBURSEMENT_HEADERS = ["Employee Name", "Bank Name", "Account Number", "Net Pay", "Narration"]
MISSING = "N/A"


@dataclass(frozen=True)
class DisbursementRow:
    employee_id: str
    employee_name: str
    bank_name: str
    account_number: str
    net_pay: Decimal
    narration: str

    def as_csv_row(self) -> Dict[str, str]:
        return {
            "Employee Name": self.employee_name,
            "Bank Name": self.bank_name,
            "Account Number": self.account_number,
            "Net Pay": format_amount(self.net_pay),
            "Narration": self.narration,
        }


def disbursement_rows(run: PayrollRunRecord) -> List[DisbursementRow]:
    if run.status != RunStatus.PROCESSED:
        raise NotProcessedError(
            f"Payroll for {run.period_label} is {run.status.value}; only processed runs can be disbursed",
            run_id=run.run_id,
            status=run.status.value,
        )
    narration = f"Salary Payment - {run.period_label}"
    return [
        DisbursementRow(
            employee_id=line.employee_id,
            employee_name=line.employee_name,
            bank_name=(line.bank or "").strip() or MISSING,
            account_number=(line.account_number or "").strip() or MISSING,
            net_pay=line.net_pay,
            narration=narration,
        )
        for line in run.lines
    ]


def _write_rows(rows: Iterable[DisbursementRow], handle: TextIO) -> None:
    writer = csv.DictWriter(handle, fieldnames=DISBURSEMENT_HEADERS)
    writer.writeheader()
    for row in rows:
        writer.writerow(row.as_csv_row())


def render_disbursement_csv(rows: Iterable[DisbursementRow]) -> str:
    buffer = io.StringIO(newline="")
    _write_rows(rows, buffer)
    return buffer.getvalue()


def write_disbursement_csv(rows: Iterable[DisbursementRow], output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", newline="", encoding="utf-8") as handle:
        _write_rows(rows, handle)
    return output_path


def disbursement_filename(run: PayrollRunRecord) -> str:
    return f"Payroll_Schedule_{run.month}_{run.year}.csv"
