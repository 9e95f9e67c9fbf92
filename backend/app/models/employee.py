from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Column, Date, DateTime, Integer, Numeric, String

from app.db.session import Base
from payroll_engine.models import CompensationInput


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    role = Column(String(200), nullable=True)
    status = Column(String(20), nullable=False, default="active")  # active|on_leave|terminated
    annual_salary = Column(Numeric(18, 2), nullable=False, default=0)

    # Disbursement details; optional until the run is exported
    bank = Column(String(100), nullable=True)
    account_number = Column(String(20), nullable=True)

    hire_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    def to_compensation(self) -> CompensationInput:
        return CompensationInput(
            employee_id=str(self.id),
            employee_name=self.name,
            annual_basic_salary=Decimal(self.annual_salary or 0),
            bank=self.bank,
            account_number=self.account_number,
        )
