from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.db.session import get_session
from app.domains.payroll.directory import SqlCompensationDirectory

router = APIRouter(prefix="/employees", tags=["employees"])


class CompensationOut(BaseModel):
    employee_id: str
    employee_name: str
    annual_basic_salary: Decimal
    bank: str | None = None
    account_number: str | None = None
    has_bank_details: bool


@router.get("", response_model=list[CompensationOut], summary="Active compensation snapshot")
def list_active_compensation(db: Session = Depends(get_session)):
    return [
        CompensationOut(
            employee_id=record.employee_id,
            employee_name=record.employee_name,
            annual_basic_salary=record.annual_basic_salary,
            bank=record.bank,
            account_number=record.account_number,
            has_bank_details=record.has_bank_details,
        )
        for record in SqlCompensationDirectory(db).list_active_compensation()
    ]
