from sqlalchemy import Column, Integer, Numeric, String

from app.db.session import Base

# asset and expense accounts grow with debits; the rest grow with credits
DEBIT_NORMAL_KINDS = {"asset", "expense"}


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(20), nullable=False, unique=True, index=True)
    name = Column(String(200), nullable=False)
    kind = Column(String(20), nullable=False)  # asset|liability|equity|income|expense
    balance = Column(Numeric(18, 2), nullable=False, default=0)

    @property
    def is_debit_normal(self) -> bool:
        return self.kind in DEBIT_NORMAL_KINDS
