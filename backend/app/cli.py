from __future__ import annotations

import argparse
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings
from app.core.logging import configure_logging
from app.db.session import Base, build_engine
from app.domains.payroll.service import PayrollRunService
from app.seed.seed_data import seed
from payroll_engine.exceptions import PayrollError
from payroll_engine.exporter import disbursement_filename, write_disbursement_csv
from payroll_engine.models import PayrollRunRecord, RunConfiguration
from payroll_engine.money import format_currency, to_decimal


@contextmanager
def open_session(args: argparse.Namespace) -> Iterator[Session]:
    engine = build_engine(args.database_url)
    db = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        engine.dispose()


def describe(run: PayrollRunRecord) -> str:
    totals = run.totals
    return (
        f"#{run.run_id} {run.period_label} {run.status.value} "
        f"employees={totals.employee_count} gross={format_currency(totals.total_gross)} "
        f"net={format_currency(totals.total_net)}"
    )


def cmd_init_db(args: argparse.Namespace) -> None:
    engine = build_engine(args.database_url)
    Base.metadata.create_all(bind=engine)
    engine.dispose()
    print(f"Initialised schema at {args.database_url}")


def cmd_seed(args: argparse.Namespace) -> None:
    with open_session(args) as db:
        seed(db)
    print("Seeded chart of accounts and sample employees")


def cmd_create_run(args: argparse.Namespace) -> None:
    config = RunConfiguration(
        month=args.month,
        year=args.year,
        include_13th_month=args.include_13th_month,
        airtime_data_percentage=to_decimal(args.airtime),
    )
    with open_session(args) as db:
        run = PayrollRunService(db).create_run(config)
    print(f"Created payroll run {describe(run)}")
    for line in run.lines:
        for warning in line.warnings:
            print(f"  warning: {warning.message}")


def cmd_recompute_run(args: argparse.Namespace) -> None:
    with open_session(args) as db:
        run = PayrollRunService(db).recompute_run(args.run_id)
    print(f"Recomputed payroll run {describe(run)}")


def cmd_process_run(args: argparse.Namespace) -> None:
    with open_session(args) as db:
        run = PayrollRunService(db).process_run(args.run_id)
    print(f"Processed payroll run {describe(run)}")


def cmd_list_runs(args: argparse.Namespace) -> None:
    with open_session(args) as db:
        runs = PayrollRunService(db).list_runs()
    if not runs:
        print("No payroll runs")
    for run in runs:
        print(describe(run))


def cmd_export_run(args: argparse.Namespace) -> None:
    output_dir = Path(args.output)
    with open_session(args) as db:
        service = PayrollRunService(db)
        rows = service.export_disbursement(args.run_id)
        run = service.get_run(args.run_id)
        path = write_disbursement_csv(rows, output_dir / disbursement_filename(run))
        print(f"Disbursement schedule exported to {path}")
        if args.payslips:
            pdf = service.export_payslips(args.run_id, output_dir / f"Payslips_{run.month}_{run.year}.pdf")
            print(f"Payslips exported to {pdf}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Payroll run lifecycle CLI")
    parser.add_argument("--database-url", default=settings.database_url, help="SQLAlchemy database URL")
    sub = parser.add_subparsers(dest="command", required=True)

    init_db = sub.add_parser("init-db", help="Create database tables")
    init_db.set_defaults(func=cmd_init_db)

    seed_cmd = sub.add_parser("seed", help="Load the chart of accounts and sample employees")
    seed_cmd.set_defaults(func=cmd_seed)

    create = sub.add_parser("create-run", help="Compute a DRAFT payroll run for a month")
    create.add_argument("month", type=int)
    create.add_argument("year", type=int)
    create.add_argument("--13th-month", dest="include_13th_month", action="store_true", help="Pay the 13th month bonus")
    create.add_argument("--airtime", default="0", help="Airtime/data benefit as a percentage of basic salary")
    create.set_defaults(func=cmd_create_run)

    recompute = sub.add_parser("recompute-run", help="Recompute a DRAFT run from current employee data")
    recompute.add_argument("run_id", type=int)
    recompute.set_defaults(func=cmd_recompute_run)

    process = sub.add_parser("process-run", help="Post a DRAFT run to the ledger and lock it")
    process.add_argument("run_id", type=int)
    process.set_defaults(func=cmd_process_run)

    list_cmd = sub.add_parser("list-runs", help="List payroll runs")
    list_cmd.set_defaults(func=cmd_list_runs)

    export = sub.add_parser("export-run", help="Write the bank disbursement CSV for a processed run")
    export.add_argument("run_id", type=int)
    export.add_argument("--output", default=".", help="Directory for exported files")
    export.add_argument("--payslips", action="store_true", help="Also render payslip PDFs")
    export.set_defaults(func=cmd_export_run)

    return parser


def main(argv: list[str] | None = None) -> None:
    configure_logging(settings.log_level)
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except PayrollError as exc:
        parser.exit(1, f"error: {exc}\n")


if __name__ == "__main__":
    main()
