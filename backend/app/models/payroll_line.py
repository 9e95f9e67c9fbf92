from decimal import Decimal

from sqlalchemy import JSON, Column, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from app.db.session import Base
from payroll_engine.models import ExplanationLine, LineWarning
from payroll_engine.models import PayrollLine as EngineLine

MONEY_COLUMNS = (
    "basic_salary",
    "allowances",
    "bonus",
    "cash_benefits",
    "gross_pay",
    "cra",
    "taxable_income",
    "paye",
    "pension",
    "nhf",
    "net_pay",
)


class PayrollLine(Base):
    __tablename__ = "payroll_lines"

    id = Column(Integer, primary_key=True, index=True)
    run_id = Column(Integer, ForeignKey("payroll_runs.id", ondelete="CASCADE"), nullable=False, index=True)

    # Snapshot of the employee at computation time
    employee_id = Column(String(50), nullable=False)
    employee_name = Column(String(200), nullable=False)
    bank = Column(String(100), nullable=True)
    account_number = Column(String(20), nullable=True)

    basic_salary = Column(Numeric(18, 2), nullable=False)
    allowances = Column(Numeric(18, 2), nullable=False)
    bonus = Column(Numeric(18, 2), nullable=False)
    cash_benefits = Column(Numeric(18, 2), nullable=False)
    gross_pay = Column(Numeric(18, 2), nullable=False)
    cra = Column(Numeric(18, 2), nullable=False)
    taxable_income = Column(Numeric(18, 2), nullable=False)
    paye = Column(Numeric(18, 2), nullable=False)
    pension = Column(Numeric(18, 2), nullable=False)
    nhf = Column(Numeric(18, 2), nullable=False)
    net_pay = Column(Numeric(18, 2), nullable=False)

    warnings = Column(JSON, nullable=False, default=list)
    explanations = Column(JSON, nullable=False, default=list)

    run = relationship("PayrollRun", back_populates="lines")

    @classmethod
    def from_engine(cls, line: EngineLine) -> "PayrollLine":
        return cls(
            employee_id=line.employee_id,
            employee_name=line.employee_name,
            bank=line.bank,
            account_number=line.account_number,
            warnings=[warning.as_dict() for warning in line.warnings],
            explanations=[
                {
                    "code": item.code,
                    "label": item.label,
                    "amount": str(item.amount),
                    "details": {key: str(value) for key, value in item.details.items()},
                }
                for item in line.explanations
            ],
            **{name: getattr(line, name) for name in MONEY_COLUMNS},
        )

    def to_engine(self) -> EngineLine:
        return EngineLine(
            employee_id=self.employee_id,
            employee_name=self.employee_name,
            bank=self.bank,
            account_number=self.account_number,
            warnings=tuple(LineWarning.from_dict(item) for item in self.warnings or []),
            explanations=tuple(
                ExplanationLine(
                    code=item["code"],
                    label=item["label"],
                    amount=Decimal(item["amount"]),
                    details={key: Decimal(value) for key, value in item.get("details", {}).items()},
                )
                for item in self.explanations or []
            ),
            **{name: Decimal(getattr(self, name)) for name in MONEY_COLUMNS},
        )
