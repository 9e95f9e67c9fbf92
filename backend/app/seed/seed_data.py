from datetime import date

from sqlalchemy.orm import Session

from app.models import Account, Employee

CHART_OF_ACCOUNTS = [
    ("1103", "Bank - Salary Account", "asset"),
    ("2103", "PAYE Payable", "liability"),
    ("2105", "Pension Payable", "liability"),
    ("2106", "NHF Payable", "liability"),
    ("5001", "Salaries & Wages", "expense"),
]

SAMPLE_EMPLOYEES = [
    {"name": "Adaeze Okafor", "role": "Finance Manager", "annual_salary": 7_800_000, "bank": "GTBank", "account_number": "0123456789"},
    {"name": "Tunde Bakare", "role": "Software Engineer", "annual_salary": 14_400_000, "bank": "Access Bank", "account_number": "0987654321"},
    {"name": "Ngozi Eze", "role": "HR Officer", "annual_salary": 4_200_000, "bank": "Zenith Bank", "account_number": "1122334455"},
    {"name": "Ibrahim Musa", "role": "Driver", "annual_salary": 1_200_000, "bank": None, "account_number": None},
]


def seed(session: Session) -> None:
    existing = {code for (code,) in session.query(Account.code).all()}
    session.add_all(
        Account(code=code, name=name, kind=kind, balance=0)
        for code, name, kind in CHART_OF_ACCOUNTS
        if code not in existing
    )

    if session.query(Employee.id).first() is None:
        session.add_all(
            Employee(hire_date=date(2023, 1, 9), status="active", **employee) for employee in SAMPLE_EMPLOYEES
        )
    session.commit()
