from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.db.session import Base, get_session
from app.domains.payroll.ledger import SqlLedger
from app.domains.payroll.service import PayrollRunService
from app.main import app
from app.models import Employee
from app.seed.seed_data import seed
from payroll_engine.exceptions import LedgerPostingError

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_session] = override_get_session


class ExplodingLedger(SqlLedger):
    """Writes the journal rows and then fails, like a bank-side rejection after insert."""

    def post(self, posting):
        super().post(posting)
        raise LedgerPostingError(f"Ledger rejected {posting.reference}")


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded(db):
    seed(db)
    return db


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def service(seeded, settings):
    return PayrollRunService(seeded, settings=settings)


@pytest.fixture
def add_employee(db):
    def _add(name: str, salary: str, bank: str | None = "GTBank", account: str | None = "0000000001", status: str = "active") -> Employee:
        row = Employee(name=name, annual_salary=Decimal(salary), bank=bank, account_number=account, status=status)
        db.add(row)
        db.commit()
        return row

    return _add


@pytest.fixture
def exploding_ledger(db):
    return ExplodingLedger(db)
