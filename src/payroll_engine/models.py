from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from .exceptions import ValidationError
from .money import ZERO, to_decimal

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

MIN_YEAR = 2000
MAX_YEAR = 2100


class RunStatus(str, Enum):
    DRAFT = "DRAFT"
    PROCESSED = "PROCESSED"


class WarningCode(str, Enum):
    MISSING_BANK_DETAILS = "missing_bank_details"
    NEGATIVE_NET_PAY = "negative_net_pay"


@dataclass(frozen=True)
class CompensationInput:
    employee_id: str
    employee_name: str
    annual_basic_salary: Decimal
    bank: Optional[str] = None
    account_number: Optional[str] = None

    @property
    def has_bank_details(self) -> bool:
        return bool((self.bank or "").strip() and (self.account_number or "").strip())


@dataclass(frozen=True)
class RunConfiguration:
    month: int
    year: int
    include_13th_month: bool = False
    airtime_data_percentage: Decimal = Decimal("0")

    def validate(self) -> "RunConfiguration":
        if not isinstance(self.month, int) or not 1 <= self.month <= 12:
            raise ValidationError(f"Month must be between 1 and 12, got {self.month!r}")
        if not isinstance(self.year, int) or not MIN_YEAR <= self.year <= MAX_YEAR:
            raise ValidationError(f"Year must be between {MIN_YEAR} and {MAX_YEAR}, got {self.year!r}")
        percentage = to_decimal(self.airtime_data_percentage)
        if not percentage.is_finite():
            raise ValidationError(f"Airtime/data percentage must be a finite number, got {percentage}")
        if not Decimal("0") <= percentage <= Decimal("100"):
            raise ValidationError(
                f"Airtime/data percentage must be between 0 and 100, got {percentage}"
            )
        return self

    @property
    def period_label(self) -> str:
        return period_label(self.month, self.year)


def period_label(month: int, year: int) -> str:
    return f"{MONTHS[month - 1]} {year}"


@dataclass(frozen=True)
class LineWarning:
    code: WarningCode
    employee_id: str
    message: str

    def as_dict(self) -> Dict[str, str]:
        return {"code": self.code.value, "employee_id": self.employee_id, "message": self.message}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "LineWarning":
        return cls(code=WarningCode(data["code"]), employee_id=data["employee_id"], message=data["message"])


@dataclass(frozen=True)
class ExplanationLine:
    code: str
    label: str
    amount: Decimal
    details: Dict[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class PayrollLine:
    employee_id: str
    employee_name: str
    basic_salary: Decimal
    allowances: Decimal
    bonus: Decimal
    cash_benefits: Decimal
    gross_pay: Decimal
    cra: Decimal  # annual
    taxable_income: Decimal  # annual
    paye: Decimal
    pension: Decimal
    nhf: Decimal
    net_pay: Decimal
    bank: Optional[str] = None
    account_number: Optional[str] = None
    warnings: Tuple[LineWarning, ...] = ()
    explanations: Tuple[ExplanationLine, ...] = ()

    def total_deductions(self) -> Decimal:
        return self.paye + self.pension + self.nhf

    def with_warnings(self, *extra: LineWarning) -> "PayrollLine":
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values["warnings"] = self.warnings + tuple(extra)
        return PayrollLine(**values)


# line attribute -> totals attribute
TOTAL_FIELDS = {
    "gross_pay": "total_gross",
    "paye": "total_paye",
    "pension": "total_pension",
    "nhf": "total_nhf",
    "net_pay": "total_net",
}


@dataclass
class RunTotals:
    total_gross: Decimal = ZERO
    total_paye: Decimal = ZERO
    total_pension: Decimal = ZERO
    total_nhf: Decimal = ZERO
    total_net: Decimal = ZERO
    employee_count: int = 0

    def add(self, line: PayrollLine) -> None:
        for line_field, total_field in TOTAL_FIELDS.items():
            setattr(self, total_field, getattr(self, total_field) + getattr(line, line_field))
        self.employee_count += 1

    def subtract(self, line: PayrollLine) -> None:
        for line_field, total_field in TOTAL_FIELDS.items():
            setattr(self, total_field, getattr(self, total_field) - getattr(line, line_field))
        self.employee_count -= 1

    @classmethod
    def from_lines(cls, lines: Iterable[PayrollLine]) -> "RunTotals":
        totals = cls()
        for line in lines:
            totals.add(line)
        return totals


@dataclass
class PayrollRunRecord:
    run_id: Optional[int]
    month: int
    year: int
    status: RunStatus
    totals: RunTotals
    lines: List[PayrollLine] = field(default_factory=list)
    processed_at: Optional[datetime] = None

    @property
    def period_label(self) -> str:
        return period_label(self.month, self.year)

    @property
    def reference(self) -> str:
        if self.run_id is None:
            return f"PAY-{self.year}-{self.month:02d}"
        return f"PAY-{self.run_id}"
