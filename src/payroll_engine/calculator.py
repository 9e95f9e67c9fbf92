from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Sequence, Tuple

from .models import (
    CompensationInput,
    ExplanationLine,
    LineWarning,
    PayrollLine,
    RunConfiguration,
    WarningCode,
)
from .money import ZERO, quantize_money, to_decimal
from .tax_tables import DEFAULT_TABLE_VERSION, TaxBand, TaxTable, TaxTableRepository

# Housing + transport allowance as a fraction of monthly basic salary.
ALLOWANCE_RATE = Decimal("0.15")
MONTHS_PER_YEAR = Decimal("12")


@dataclass(frozen=True)
class PayrollPolicy:
    allowance_rate: Decimal = ALLOWANCE_RATE


@dataclass(frozen=True)
class BandCharge:
    lower: Decimal
    taxed: Decimal
    rate: Decimal
    tax: Decimal


class PayrollCalculator:
    def __init__(self, tax_table: TaxTable, policy: PayrollPolicy | None = None):
        self.tax_table = tax_table
        self.policy = policy or PayrollPolicy()

    @classmethod
    def from_repository(
        cls,
        tax_table_repo: TaxTableRepository,
        table_version: str = DEFAULT_TABLE_VERSION,
        policy: PayrollPolicy | None = None,
    ) -> "PayrollCalculator":
        return cls(tax_table_repo.load(table_version), policy)

    @staticmethod
    def _apply_bands(amount: Decimal, bands: Sequence[TaxBand]) -> List[BandCharge]:
        charges: List[BandCharge] = []
        remaining = max(amount, Decimal("0"))
        lower = Decimal("0")
        for band in bands:
            if remaining <= 0:
                break
            taxed = remaining if band.width is None else min(remaining, band.width)
            charges.append(BandCharge(lower=lower, taxed=taxed, rate=band.rate, tax=taxed * band.rate))
            remaining -= taxed
            if band.width is not None:
                lower += band.width
        return charges

    def annual_tax(self, taxable_income: Decimal) -> Tuple[Decimal, List[BandCharge]]:
        charges = self._apply_bands(taxable_income, self.tax_table.bands)
        total = sum((charge.tax for charge in charges), Decimal("0"))
        return quantize_money(total), charges

    def consolidated_relief(self, annual_gross: Decimal) -> Decimal:
        relief = self.tax_table.relief
        floor = max(relief.fixed_floor, relief.floor_rate * annual_gross)
        return quantize_money(floor + relief.gross_rate * annual_gross)

    def calculate_line(self, compensation: CompensationInput, config: RunConfiguration) -> PayrollLine:
        statutory = self.tax_table.statutory
        annual_basic = to_decimal(compensation.annual_basic_salary)
        monthly_basic = quantize_money(annual_basic / MONTHS_PER_YEAR)

        basic_salary = monthly_basic
        allowances = quantize_money(basic_salary * self.policy.allowance_rate)
        bonus = monthly_basic if config.include_13th_month else ZERO
        cash_benefits = quantize_money(
            basic_salary * to_decimal(config.airtime_data_percentage) / Decimal("100")
        )
        gross_pay = basic_salary + allowances + bonus + cash_benefits

        # bonus and cash benefits are not pensionable
        pension = quantize_money(statutory.pension_rate * (basic_salary + allowances))
        nhf = quantize_money(statutory.nhf_rate * basic_salary)

        annual_gross = gross_pay * MONTHS_PER_YEAR
        cra = self.consolidated_relief(annual_gross)
        annual_pension = pension * MONTHS_PER_YEAR
        annual_nhf = nhf * MONTHS_PER_YEAR
        taxable_income = max(ZERO, annual_gross - cra - annual_pension - annual_nhf)

        annual_paye, charges = self.annual_tax(taxable_income)
        paye = quantize_money(annual_paye / MONTHS_PER_YEAR)
        net_pay = gross_pay - paye - pension - nhf

        explanations = [
            ExplanationLine(
                code="cra",
                label="Consolidated relief allowance (annual)",
                amount=cra,
                details={"annual_gross": annual_gross},
            ),
            ExplanationLine(
                code="pension",
                label="Pension",
                amount=pension,
                details={"rate": statutory.pension_rate, "basis": basic_salary + allowances},
            ),
            ExplanationLine(
                code="nhf",
                label="National Housing Fund",
                amount=nhf,
                details={"rate": statutory.nhf_rate, "basis": basic_salary},
            ),
        ]
        for charge in charges:
            explanations.append(
                ExplanationLine(
                    code="paye_band",
                    label=f"PAYE at {(charge.rate * 100).normalize():f}%",
                    amount=charge.tax,
                    details={"lower": charge.lower, "taxed": charge.taxed, "rate": charge.rate},
                )
            )

        warnings = []
        if net_pay < 0:
            warnings.append(
                LineWarning(
                    code=WarningCode.NEGATIVE_NET_PAY,
                    employee_id=compensation.employee_id,
                    message=f"Net pay for {compensation.employee_name} is negative ({net_pay})",
                )
            )

        return PayrollLine(
            employee_id=compensation.employee_id,
            employee_name=compensation.employee_name,
            basic_salary=basic_salary,
            allowances=allowances,
            bonus=bonus,
            cash_benefits=cash_benefits,
            gross_pay=gross_pay,
            cra=cra,
            taxable_income=taxable_income,
            paye=paye,
            pension=pension,
            nhf=nhf,
            net_pay=net_pay,
            bank=compensation.bank,
            account_number=compensation.account_number,
            warnings=tuple(warnings),
            explanations=tuple(explanations),
        )
