import tempfile
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.db.session import get_session
from app.domains.payroll.service import PayrollRunService
from payroll_engine.exporter import disbursement_filename, render_disbursement_csv
from payroll_engine.models import PayrollLine, PayrollRunRecord, RunConfiguration

router = APIRouter(prefix="/payroll", tags=["payroll"])


class PayrollRunCreate(BaseModel):
    month: int
    year: int
    include_13th_month: bool = False
    airtime_data_percentage: Decimal = Decimal("0")


class WarningOut(BaseModel):
    code: str
    employee_id: str
    message: str


class PayrollLineOut(BaseModel):
    employee_id: str
    employee_name: str
    bank: str | None = None
    account_number: str | None = None
    basic_salary: Decimal
    allowances: Decimal
    bonus: Decimal
    cash_benefits: Decimal
    gross_pay: Decimal
    cra: Decimal
    taxable_income: Decimal
    paye: Decimal
    pension: Decimal
    nhf: Decimal
    net_pay: Decimal
    warnings: list[WarningOut] = []


class PayrollRunOut(BaseModel):
    id: int
    month: int
    year: int
    period: str
    status: str
    total_gross: Decimal
    total_paye: Decimal
    total_pension: Decimal
    total_nhf: Decimal
    total_net: Decimal
    employee_count: int
    processed_at: datetime | None = None
    lines: list[PayrollLineOut] = []


class ExplanationOut(BaseModel):
    code: str
    label: str
    amount: Decimal
    details: dict[str, Decimal] = {}


class PayslipOut(BaseModel):
    run_id: int
    period: str
    status: str
    line: PayrollLineOut
    explanations: list[ExplanationOut]


def get_service(db: Session = Depends(get_session)) -> PayrollRunService:
    return PayrollRunService(db)


def line_out(line: PayrollLine) -> PayrollLineOut:
    return PayrollLineOut(
        employee_id=line.employee_id,
        employee_name=line.employee_name,
        bank=line.bank,
        account_number=line.account_number,
        basic_salary=line.basic_salary,
        allowances=line.allowances,
        bonus=line.bonus,
        cash_benefits=line.cash_benefits,
        gross_pay=line.gross_pay,
        cra=line.cra,
        taxable_income=line.taxable_income,
        paye=line.paye,
        pension=line.pension,
        nhf=line.nhf,
        net_pay=line.net_pay,
        warnings=[WarningOut(**warning.as_dict()) for warning in line.warnings],
    )


def run_out(run: PayrollRunRecord) -> PayrollRunOut:
    return PayrollRunOut(
        id=run.run_id,
        month=run.month,
        year=run.year,
        period=run.period_label,
        status=run.status.value,
        total_gross=run.totals.total_gross,
        total_paye=run.totals.total_paye,
        total_pension=run.totals.total_pension,
        total_nhf=run.totals.total_nhf,
        total_net=run.totals.total_net,
        employee_count=run.totals.employee_count,
        processed_at=run.processed_at,
        lines=[line_out(line) for line in run.lines],
    )


@router.get("", response_model=list[PayrollRunOut])
def list_runs(service: PayrollRunService = Depends(get_service)) -> list[PayrollRunOut]:
    return [run_out(run) for run in service.list_runs()]


@router.post("", response_model=PayrollRunOut, status_code=201)
def create_run(payload: PayrollRunCreate, service: PayrollRunService = Depends(get_service)):
    config = RunConfiguration(
        month=payload.month,
        year=payload.year,
        include_13th_month=payload.include_13th_month,
        airtime_data_percentage=payload.airtime_data_percentage,
    )
    return run_out(service.create_run(config))


@router.get("/lines/{line_id}", response_model=PayslipOut)
def get_payslip(line_id: int, service: PayrollRunService = Depends(get_service)):
    run, line = service.get_line(line_id)
    return PayslipOut(
        run_id=run.run_id,
        period=run.period_label,
        status=run.status.value,
        line=line_out(line),
        explanations=[
            ExplanationOut(code=item.code, label=item.label, amount=item.amount, details=item.details)
            for item in line.explanations
        ],
    )


@router.get("/{run_id}", response_model=PayrollRunOut)
def get_run(run_id: int, service: PayrollRunService = Depends(get_service)):
    return run_out(service.get_run(run_id))


@router.post("/{run_id}/recompute", response_model=PayrollRunOut)
def recompute_run(run_id: int, service: PayrollRunService = Depends(get_service)):
    return run_out(service.recompute_run(run_id))


@router.post("/{run_id}/process", response_model=PayrollRunOut)
def process_run(run_id: int, service: PayrollRunService = Depends(get_service)):
    return run_out(service.process_run(run_id))


@router.get("/{run_id}/disbursement")
def export_disbursement(run_id: int, service: PayrollRunService = Depends(get_service)) -> Response:
    rows = service.export_disbursement(run_id)
    filename = disbursement_filename(service.get_run(run_id))
    return Response(
        content=render_disbursement_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{run_id}/payslips.pdf")
def export_payslips(
    run_id: int,
    employee_id: list[str] | None = Query(default=None),
    service: PayrollRunService = Depends(get_service),
) -> Response:
    with tempfile.TemporaryDirectory() as tmp:
        path = service.export_payslips(run_id, Path(tmp) / f"payslips_{run_id}.pdf", employee_ids=employee_id)
        content = path.read_bytes()
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="Payslips_{run_id}.pdf"'},
    )
