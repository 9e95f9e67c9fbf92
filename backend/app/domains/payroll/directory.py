from typing import List

from sqlalchemy.orm import Session

from app.models.employee import Employee
from payroll_engine.models import CompensationInput


class SqlCompensationDirectory:
    """Read-only snapshot of active employees from the employees table."""

    def __init__(self, session: Session):
        self.session = session

    def list_active_compensation(self) -> List[CompensationInput]:
        rows = (
            self.session.query(Employee)
            .filter(Employee.status == "active")
            .order_by(Employee.id.asc())
            .all()
        )
        return [row.to_compensation() for row in rows]
