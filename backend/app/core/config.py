import os
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from payroll_engine.calculator import ALLOWANCE_RATE
from payroll_engine.ledger import LedgerAccounts
from payroll_engine.tax_tables import DEFAULT_TABLE_VERSION

BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    env: str = Field(default="dev", description="Deployment environment")
    app_name: str = "Payroll Engine API"
    database_url: str = Field(
        default="sqlite:///./payroll.db",
        description="Database connection string",
    )
    cors_origins: Annotated[list[str], NoDecode] = []
    log_level: str = "INFO"
    sentry_dsn: str | None = Field(default=None, description="Sentry DSN for error monitoring")
    otlp_endpoint: str | None = Field(default=None, description="OTLP endpoint for traces/metrics")

    tax_table_version: str = DEFAULT_TABLE_VERSION
    tax_table_dir: Path | None = Field(default=None, description="Override directory for tax table JSON files")
    allowance_rate: Decimal = ALLOWANCE_RATE
    strict_bank_details: bool = Field(
        default=False, description="Refuse to process runs with lines missing bank details"
    )
    employer_name: str = "Payroll Employer Ltd"

    salaries_expense_account: str = "5001"
    bank_account: str = "1103"
    paye_payable_account: str = "2103"
    pension_payable_account: str = "2105"
    nhf_payable_account: str = "2106"

    model_config = SettingsConfigDict(env_prefix="PAYROLL_", extra="ignore")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("allowance_rate")
    @classmethod
    def check_allowance_rate(cls, value: Decimal) -> Decimal:
        if not Decimal("0") <= value <= Decimal("1"):
            raise ValueError("allowance_rate must be between 0 and 1")
        return value

    @property
    def ledger_accounts(self) -> LedgerAccounts:
        return LedgerAccounts(
            salaries_expense=self.salaries_expense_account,
            bank=self.bank_account,
            paye_payable=self.paye_payable_account,
            pension_payable=self.pension_payable_account,
            nhf_payable=self.nhf_payable_account,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings(_env_file=get_settings_env_file())


def get_settings_env_file() -> str | None:
    """Resolve environment-specific env file if it exists."""
    env = os.getenv("PAYROLL_ENV", "dev")
    env_file = BASE_DIR / f".env.{env}"
    default_file = BASE_DIR / ".env"
    if env_file.exists():
        return str(env_file)
    if default_file.exists():
        return str(default_file)
    return None


settings = get_settings()
