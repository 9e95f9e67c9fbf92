from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db.session import Base
from payroll_engine.models import PayrollRunRecord, RunConfiguration, RunStatus, RunTotals

TOTAL_COLUMNS = ("total_gross", "total_paye", "total_pension", "total_nhf", "total_net")


class PayrollRun(Base):
    __tablename__ = "payroll_runs"
    __table_args__ = (UniqueConstraint("month", "year", name="uq_payroll_runs_period"),)

    id = Column(Integer, primary_key=True, index=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=RunStatus.DRAFT.value)

    include_13th_month = Column(Boolean, nullable=False, default=False)
    airtime_data_percentage = Column(Numeric(5, 2), nullable=False, default=0)
    tax_table_version = Column(String(50), nullable=False)

    total_gross = Column(Numeric(18, 2), nullable=False, default=0)
    total_paye = Column(Numeric(18, 2), nullable=False, default=0)
    total_pension = Column(Numeric(18, 2), nullable=False, default=0)
    total_nhf = Column(Numeric(18, 2), nullable=False, default=0)
    total_net = Column(Numeric(18, 2), nullable=False, default=0)
    employee_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    processed_at = Column(DateTime, nullable=True)

    lines = relationship(
        "PayrollLine",
        back_populates="run",
        cascade="all, delete-orphan",
        order_by="PayrollLine.id",
    )

    @property
    def configuration(self) -> RunConfiguration:
        return RunConfiguration(
            month=self.month,
            year=self.year,
            include_13th_month=bool(self.include_13th_month),
            airtime_data_percentage=Decimal(self.airtime_data_percentage or 0),
        )

    @property
    def totals(self) -> RunTotals:
        values = {name: Decimal(getattr(self, name) or 0) for name in TOTAL_COLUMNS}
        return RunTotals(employee_count=self.employee_count or 0, **values)

    def apply_totals(self, totals: RunTotals) -> None:
        for name in TOTAL_COLUMNS:
            setattr(self, name, getattr(totals, name))
        self.employee_count = totals.employee_count

    def to_record(self, include_lines: bool = True) -> PayrollRunRecord:
        return PayrollRunRecord(
            run_id=self.id,
            month=self.month,
            year=self.year,
            status=RunStatus(self.status),
            totals=self.totals,
            lines=[line.to_engine() for line in self.lines] if include_lines else [],
            processed_at=self.processed_at,
        )
