from datetime import date
from decimal import Decimal

from payroll_engine.aggregator import RunAggregator
from payroll_engine.calculator import PayrollCalculator
from payroll_engine.models import CompensationInput, PayrollRunRecord, RunConfiguration, RunStatus, RunTotals
from payroll_engine.payslip import EmployerDetails, export_payslips_pdf
from payroll_engine.tax_tables import TaxTableRepository


def processed_run() -> PayrollRunRecord:
    calculator = PayrollCalculator.from_repository(TaxTableRepository())
    draft = RunAggregator(calculator).assemble(
        RunConfiguration(month=3, year=2025),
        [
            CompensationInput("e1", "Smith & Sons <Ltd>", Decimal("1200000"), bank="GTBank", account_number="01"),
            CompensationInput("e2", "June Smith", Decimal("3600000")),
        ],
    )
    return PayrollRunRecord(
        run_id=1, month=3, year=2025, status=RunStatus.PROCESSED, totals=draft.totals, lines=draft.lines
    )


def test_export_writes_pdf(tmp_path):
    path = export_payslips_pdf(
        processed_run(),
        tmp_path / "slips" / "march.pdf",
        employer=EmployerDetails(name="Acme & Co", address="1 Marina, Lagos", tax_id="TIN-1"),
        issued_on=date(2025, 3, 28),
    )

    assert path.exists()
    assert path.read_bytes().startswith(b"%PDF")


def test_export_can_filter_employees(tmp_path):
    path = export_payslips_pdf(processed_run(), tmp_path / "one.pdf", employee_ids=["e2"])

    assert path.read_bytes().startswith(b"%PDF")


def test_empty_run_still_produces_document(tmp_path):
    run = PayrollRunRecord(run_id=2, month=4, year=2025, status=RunStatus.PROCESSED, totals=RunTotals())

    path = export_payslips_pdf(run, tmp_path / "empty.pdf")

    assert path.stat().st_size > 0
