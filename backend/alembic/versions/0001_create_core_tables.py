"""create payroll engine tables

Revision ID: 0001
Revises: None
Create Date: 2025-03-01
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("role", sa.String(length=200), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("annual_salary", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("bank", sa.String(length=100), nullable=True),
        sa.Column("account_number", sa.String(length=20), nullable=True),
        sa.Column("hire_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_employees_id"), "employees", ["id"], unique=False)

    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("balance", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_accounts_id"), "accounts", ["id"], unique=False)
    op.create_index(op.f("ix_accounts_code"), "accounts", ["code"], unique=True)

    op.create_table(
        "payroll_runs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="DRAFT"),
        sa.Column("include_13th_month", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("airtime_data_percentage", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("tax_table_version", sa.String(length=50), nullable=False),
        sa.Column("total_gross", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("total_paye", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("total_pension", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("total_nhf", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("total_net", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("employee_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("processed_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("month", "year", name="uq_payroll_runs_period"),
    )
    op.create_index(op.f("ix_payroll_runs_id"), "payroll_runs", ["id"], unique=False)

    money = [
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
    ]
    op.create_table(
        "payroll_lines",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("run_id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.String(length=50), nullable=False),
        sa.Column("employee_name", sa.String(length=200), nullable=False),
        sa.Column("bank", sa.String(length=100), nullable=True),
        sa.Column("account_number", sa.String(length=20), nullable=True),
        *[sa.Column(name, sa.Numeric(18, 2), nullable=False) for name in money],
        sa.Column("warnings", sa.JSON(), nullable=False),
        sa.Column("explanations", sa.JSON(), nullable=False),
        sa.ForeignKeyConstraint(["run_id"], ["payroll_runs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_payroll_lines_id"), "payroll_lines", ["id"], unique=False)
    op.create_index(op.f("ix_payroll_lines_run_id"), "payroll_lines", ["run_id"], unique=False)

    op.create_table(
        "journal_entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("reference", sa.String(length=50), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("posted_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("reference"),
    )
    op.create_index(op.f("ix_journal_entries_id"), "journal_entries", ["id"], unique=False)

    op.create_table(
        "journal_lines",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("entry_id", sa.Integer(), nullable=False),
        sa.Column("account_id", sa.Integer(), nullable=False),
        sa.Column("debit", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("credit", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"]),
        sa.ForeignKeyConstraint(["entry_id"], ["journal_entries.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_journal_lines_id"), "journal_lines", ["id"], unique=False)
    op.create_index(op.f("ix_journal_lines_entry_id"), "journal_lines", ["entry_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_journal_lines_entry_id"), table_name="journal_lines")
    op.drop_index(op.f("ix_journal_lines_id"), table_name="journal_lines")
    op.drop_table("journal_lines")
    op.drop_index(op.f("ix_journal_entries_id"), table_name="journal_entries")
    op.drop_table("journal_entries")
    op.drop_index(op.f("ix_payroll_lines_run_id"), table_name="payroll_lines")
    op.drop_index(op.f("ix_payroll_lines_id"), table_name="payroll_lines")
    op.drop_table("payroll_lines")
    op.drop_index(op.f("ix_payroll_runs_id"), table_name="payroll_runs")
    op.drop_table("payroll_runs")
    op.drop_index(op.f("ix_accounts_code"), table_name="accounts")
    op.drop_index(op.f("ix_accounts_id"), table_name="accounts")
    op.drop_table("accounts")
    op.drop_index(op.f("ix_employees_id"), table_name="employees")
    op.drop_table("employees")
