import csv
from dataclasses import replace
from decimal import Decimal

import pytest

from payroll_engine.aggregator import RunAggregator
from payroll_engine.calculator import PayrollCalculator
from payroll_engine.exceptions import NotProcessedError
from payroll_engine.exporter import (
    DISBURSEMENT_HEADERS,
    disbursement_filename,
    disbursement_rows,
    render_disbursement_csv,
    write_disbursement_csv,
)
from payroll_engine.models import CompensationInput, PayrollRunRecord, RunConfiguration, RunStatus
from payroll_engine.tax_tables import TaxTableRepository


def build_run(status: RunStatus) -> PayrollRunRecord:
    calculator = PayrollCalculator.from_repository(TaxTableRepository())
    draft = RunAggregator(calculator).assemble(
        RunConfiguration(month=3, year=2025),
        [
            CompensationInput("e1", "Mark Freeman", Decimal("1200000"), bank="GTBank", account_number="0011223344"),
            CompensationInput("e2", "June Smith", Decimal("1200000"), bank="", account_number=None),
        ],
    )
    return PayrollRunRecord(
        run_id=3, month=3, year=2025, status=status, totals=draft.totals, lines=draft.lines
    )


def test_draft_run_cannot_be_exported():
    with pytest.raises(NotProcessedError):
        disbursement_rows(build_run(RunStatus.DRAFT))


def test_rows_use_placeholder_for_missing_bank_details():
    rows = disbursement_rows(build_run(RunStatus.PROCESSED))

    assert [(r.bank_name, r.account_number) for r in rows] == [("GTBank", "0011223344"), ("N/A", "N/A")]
    assert {r.narration for r in rows} == {"Salary Payment - March 2025"}


def test_render_csv_has_header_and_two_decimal_amounts():
    text = render_disbursement_csv(disbursement_rows(build_run(RunStatus.PROCESSED)))

    lines = text.splitlines()
    assert lines[0] == "Employee Name,Bank Name,Account Number,Net Pay,Narration"
    assert lines[1] == "Mark Freeman,GTBank,0011223344,96755.00,Salary Payment - March 2025"
    assert len(lines) == 3


def test_net_pay_column_sums_to_run_total(tmp_path):
    run = build_run(RunStatus.PROCESSED)

    path = write_disbursement_csv(disbursement_rows(run), tmp_path / "out" / disbursement_filename(run))

    with path.open(newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        assert reader.fieldnames == DISBURSEMENT_HEADERS
        total = sum(Decimal(row["Net Pay"]) for row in reader)
    assert total == run.totals.total_net
    assert path.name == "Payroll_Schedule_3_2025.csv"


def test_names_with_commas_are_quoted():
    run = build_run(RunStatus.PROCESSED)
    run.lines[0] = replace(run.lines[0], employee_name="Freeman, Mark")

    text = render_disbursement_csv(disbursement_rows(run))

    assert '"Freeman, Mark"' in text
