from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Iterable, List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import (
    HRFlowable,
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from .models import PayrollLine, PayrollRunRecord
from .money import format_currency


@dataclass(frozen=True)
class EmployerDetails:
    name: str = "Payroll Employer Ltd"
    address: str = ""
    tax_id: str = ""


TABLE_STYLE = TableStyle(
    [
        ("BACKGROUND", (0, 0), (-1, 0), colors.whitesmoke),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.lightgrey),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ("LINEABOVE", (0, -1), (-1, -1), 0.75, colors.black),
        ("LEFTPADDING", (0, 0), (-1, -1), 6),
        ("RIGHTPADDING", (0, 0), (-1, -1), 6),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]
)


def _money(value) -> str:
    return format_currency(value, symbol="NGN ")


def _amount_table(rows: List[List[str]]) -> Table:
    table = Table(rows, colWidths=[4.3 * inch, 2.2 * inch])
    table.setStyle(TABLE_STYLE)
    return table


def _build_payslip_story(
    run: PayrollRunRecord, line: PayrollLine, employer: EmployerDetails, issued_on: date
) -> List[Any]:
    styles = getSampleStyleSheet()
    header_style = ParagraphStyle("payslip_header", parent=styles["Heading3"], fontSize=11)
    body_style = ParagraphStyle("payslip_body", parent=styles["Normal"], fontSize=9.5)

    employer_lines = [f"<b>{escape(employer.name)}</b>"]
    if employer.address:
        employer_lines.append(escape(employer.address))
    if employer.tax_id:
        employer_lines.append(f"TIN: {employer.tax_id}")

    story: List[Any] = [Paragraph("PAYSLIP", styles["Title"])]
    story.append(
        Table(
            [
                [
                    Paragraph("<br/>".join(employer_lines), body_style),
                    Paragraph(
                        (
                            f"<b>{escape(line.employee_name)}</b><br/>"
                            f"Employee ID: {line.employee_id}<br/>"
                            f"Bank: {escape(line.bank or 'N/A')}<br/>"
                            f"Account: {line.account_number or 'N/A'}"
                        ),
                        body_style,
                    ),
                ]
            ],
            colWidths=[3.25 * inch, 3.25 * inch],
        )
    )
    story.append(HRFlowable(width="100%"))
    story.append(Spacer(1, 8))
    story.append(
        Table(
            [["Pay period", run.period_label, "Issued", issued_on.strftime("%d %B %Y")]],
            colWidths=[1.0 * inch, 2.3 * inch, 1.0 * inch, 2.2 * inch],
        )
    )

    story.append(Spacer(1, 10))
    story.append(Paragraph("Earnings", header_style))
    story.append(
        _amount_table(
            [
                ["Description", "Amount"],
                ["Basic salary", _money(line.basic_salary)],
                ["Housing & transport allowance", _money(line.allowances)],
                ["13th month bonus", _money(line.bonus)],
                ["Airtime & data benefit", _money(line.cash_benefits)],
                ["Gross pay", _money(line.gross_pay)],
            ]
        )
    )

    story.append(Spacer(1, 10))
    story.append(Paragraph("Deductions", header_style))
    story.append(
        _amount_table(
            [
                ["Description", "Amount"],
                ["PAYE tax", _money(line.paye)],
                ["Pension (employee)", _money(line.pension)],
                ["National Housing Fund", _money(line.nhf)],
                ["Total deductions", _money(line.total_deductions())],
            ]
        )
    )

    story.append(Spacer(1, 10))
    story.append(Paragraph("Tax workings (annual)", header_style))
    story.append(
        _amount_table(
            [
                ["Description", "Amount"],
                ["Consolidated relief allowance", _money(line.cra)],
                ["Taxable income", _money(line.taxable_income)],
            ]
        )
    )

    story.append(Spacer(1, 12))
    story.append(HRFlowable(width="100%"))
    story.append(Spacer(1, 6))
    story.append(Paragraph(f"<b>Net pay: {_money(line.net_pay)}</b>", styles["Heading2"]))
    return story


def export_payslips_pdf(
    run: PayrollRunRecord,
    output_path: Path,
    employer: EmployerDetails = EmployerDetails(),
    employee_ids: Optional[Iterable[str]] = None,
    issued_on: Optional[date] = None,
) -> Path:
    wanted = set(employee_ids) if employee_ids is not None else None
    lines = [line for line in run.lines if wanted is None or line.employee_id in wanted]
    issued_on = issued_on or date.today()

    doc = SimpleDocTemplate(
        str(output_path),
        pagesize=A4,
        leftMargin=0.6 * inch,
        rightMargin=0.6 * inch,
        topMargin=0.6 * inch,
        bottomMargin=0.6 * inch,
        title=f"Payslips - {run.period_label}",
    )

    story: List[Any] = []
    for index, line in enumerate(lines):
        if index:
            story.append(PageBreak())
        story.extend(_build_payslip_story(run, line, employer, issued_on))
    if not story:
        story.append(Paragraph(f"No payslips for {run.period_label}", getSampleStyleSheet()["Title"]))

    output_path.parent.mkdir(parents=True, exist_ok=True)
    doc.build(story)
    return output_path
