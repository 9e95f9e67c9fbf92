"""
Payroll run lifecycle: create, recompute, process and export.

A run is unique per (month, year) and moves one way from DRAFT to PROCESSED.
Processing posts exactly one balanced journal entry and flips the status in
the same transaction; if the ledger refuses the posting, nothing is kept.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.logging import bind_run_context, clear_run_context, get_logger
from app.core.observability import get_meter, get_tracer
from app.domains.payroll.directory import SqlCompensationDirectory
from app.domains.payroll.ledger import SqlLedger
from app.models.payroll_line import PayrollLine
from app.models.payroll_run import TOTAL_COLUMNS, PayrollRun
from payroll_engine.aggregator import RunAggregator, aggregate
from payroll_engine.calculator import PayrollCalculator, PayrollPolicy
from payroll_engine.directory import CompensationDirectory
from payroll_engine.exceptions import (
    DuplicateRunError,
    InvalidStateError,
    LedgerPostingError,
    NotProcessedError,
    RunNotFoundError,
    ValidationError,
)
from payroll_engine.exporter import DisbursementRow, disbursement_rows
from payroll_engine.ledger import Ledger, posting_for_run
from payroll_engine.models import PayrollLine as EngineLine
from payroll_engine.models import PayrollRunRecord, RunConfiguration, RunStatus
from payroll_engine.payslip import EmployerDetails, export_payslips_pdf
from payroll_engine.tax_tables import TaxTableRepository

logger = get_logger(__name__)
tracer = get_tracer(__name__)
meter = get_meter(__name__)
runs_processed = meter.create_counter(
    "payroll_runs_processed", unit="1", description="Payroll runs moved to PROCESSED"
)


def build_calculator(settings: Settings) -> PayrollCalculator:
    repository = TaxTableRepository(settings.tax_table_dir) if settings.tax_table_dir else TaxTableRepository()
    return PayrollCalculator.from_repository(
        repository,
        settings.tax_table_version,
        PayrollPolicy(allowance_rate=settings.allowance_rate),
    )


class PayrollRunService:
    def __init__(
        self,
        session: Session,
        directory: Optional[CompensationDirectory] = None,
        ledger: Optional[Ledger] = None,
        calculator: Optional[PayrollCalculator] = None,
        settings: Optional[Settings] = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.directory = directory or SqlCompensationDirectory(session)
        self.ledger = ledger or SqlLedger(session)
        self.calculator = calculator or build_calculator(self.settings)
        self.aggregator = RunAggregator(self.calculator)

    # queries

    def _find_period(self, month: int, year: int) -> Optional[PayrollRun]:
        return (
            self.session.query(PayrollRun)
            .filter(PayrollRun.month == month, PayrollRun.year == year)
            .one_or_none()
        )

    def _load(self, run_id: int, lock: bool = False) -> PayrollRun:
        query = self.session.query(PayrollRun).filter(PayrollRun.id == run_id)
        if lock:
            query = query.with_for_update()
        run = query.one_or_none()
        if run is None:
            raise RunNotFoundError(f"Payroll run {run_id} not found")
        return run

    def get_run(self, run_id: int) -> PayrollRunRecord:
        return self._load(run_id).to_record()

    def list_runs(self) -> List[PayrollRunRecord]:
        rows = (
            self.session.query(PayrollRun)
            .order_by(PayrollRun.year.desc(), PayrollRun.month.desc(), PayrollRun.id.desc())
            .all()
        )
        return [row.to_record(include_lines=False) for row in rows]

    def get_line(self, line_id: int) -> Tuple[PayrollRunRecord, EngineLine]:
        line = self.session.get(PayrollLine, line_id)
        if line is None:
            raise RunNotFoundError(f"Payroll line {line_id} not found")
        return line.run.to_record(include_lines=False), line.to_engine()

    # lifecycle

    def create_run(self, config: RunConfiguration) -> PayrollRunRecord:
        with tracer.start_as_current_span("payroll.create_run") as span:
            span.set_attribute("payroll.period", f"{config.year}-{config.month:02d}")
            config.validate()

            existing = self._find_period(config.month, config.year)
            if existing is not None:
                raise DuplicateRunError(config.month, config.year, existing.status)

            compensation = self.directory.list_active_compensation()
            if not compensation:
                raise ValidationError("No active employees found for payroll")

            draft = self.aggregator.assemble(config, compensation)
            run = PayrollRun(
                month=config.month,
                year=config.year,
                status=RunStatus.DRAFT.value,
                include_13th_month=config.include_13th_month,
                airtime_data_percentage=config.airtime_data_percentage,
                tax_table_version=self.calculator.tax_table.version,
            )
            run.apply_totals(draft.totals)
            run.lines = [PayrollLine.from_engine(line) for line in draft.lines]
            self.session.add(run)
            try:
                self.session.commit()
            except IntegrityError:
                self.session.rollback()
                logger.warning("payroll_run_duplicate", month=config.month, year=config.year)
                raise DuplicateRunError(config.month, config.year) from None

            self.session.refresh(run)
            span.set_attribute("payroll.run_id", run.id)
            self._log_warnings(run.id, draft.warnings)
            logger.info(
                "payroll_run_created",
                run_id=run.id,
                period=config.period_label,
                employees=draft.totals.employee_count,
                total_gross=str(draft.totals.total_gross),
                total_net=str(draft.totals.total_net),
            )
            return run.to_record()

    def recompute_run(self, run_id: int) -> PayrollRunRecord:
        with tracer.start_as_current_span("payroll.recompute_run") as span:
            span.set_attribute("payroll.run_id", run_id)
            try:
                run = self._load(run_id, lock=True)
                if run.status != RunStatus.DRAFT.value:
                    raise InvalidStateError(
                        f"Payroll run {run_id} is {run.status}; only DRAFT runs can be recomputed",
                        run_id=run_id,
                        status=run.status,
                    )
                compensation = self.directory.list_active_compensation()
                if not compensation:
                    raise ValidationError("No active employees found for payroll")

                draft = self.aggregator.assemble(run.configuration, compensation)
                run.lines = [PayrollLine.from_engine(line) for line in draft.lines]
                run.apply_totals(draft.totals)
                run.tax_table_version = self.calculator.tax_table.version
                self.session.commit()
            except Exception:
                self.session.rollback()
                raise

            self.session.refresh(run)
            self._log_warnings(run.id, draft.warnings)
            logger.info("payroll_run_recomputed", run_id=run.id, employees=draft.totals.employee_count)
            return run.to_record()

    def process_run(self, run_id: int) -> PayrollRunRecord:
        with tracer.start_as_current_span("payroll.process_run") as span:
            span.set_attribute("payroll.run_id", run_id)
            bind_run_context(run_id=run_id)
            try:
                run = self._load(run_id, lock=True)
                if run.status != RunStatus.DRAFT.value:
                    raise InvalidStateError(
                        f"Payroll run {run_id} is already {run.status}",
                        run_id=run_id,
                        status=run.status,
                    )

                record = run.to_record()
                frozen = aggregate(record.lines)
                if frozen != record.totals:
                    logger.warning("payroll_run_totals_resynced", stored=str(record.totals.total_gross))
                record.totals = frozen

                self._check_bank_details(record)

                # claim the run first; a concurrent processor that lost the race matches no row
                processed_at = datetime.now(timezone.utc)
                result = self.session.execute(
                    update(PayrollRun)
                    .where(PayrollRun.id == run_id, PayrollRun.status == RunStatus.DRAFT.value)
                    .values(
                        status=RunStatus.PROCESSED.value,
                        processed_at=processed_at,
                        employee_count=frozen.employee_count,
                        **{name: getattr(frozen, name) for name in TOTAL_COLUMNS},
                    )
                )
                if result.rowcount != 1:
                    raise InvalidStateError(
                        f"Payroll run {run_id} was processed concurrently",
                        run_id=run_id,
                        status=RunStatus.PROCESSED.value,
                    )

                posting = posting_for_run(record, self.settings.ledger_accounts)
                self.ledger.post(posting)
                self.session.commit()
            except LedgerPostingError as exc:
                self.session.rollback()
                current = self.session.query(PayrollRun.status).filter(PayrollRun.id == run_id).scalar()
                if current == RunStatus.PROCESSED.value:
                    logger.warning("payroll_run_processed_concurrently", reference=f"PAY-{run_id}")
                    raise InvalidStateError(
                        f"Payroll run {run_id} is already {current}", run_id=run_id, status=current
                    ) from exc
                logger.error("ledger_posting_failed", error=str(exc), code=exc.code)
                raise
            except Exception:
                self.session.rollback()
                raise
            finally:
                clear_run_context()

            self.session.refresh(run)
            runs_processed.add(1, {"tax_table": run.tax_table_version})
            logger.info(
                "payroll_run_processed",
                run_id=run.id,
                reference=posting.reference,
                total_gross=str(frozen.total_gross),
                total_net=str(frozen.total_net),
            )
            return run.to_record()

    def _check_bank_details(self, record: PayrollRunRecord) -> None:
        missing = [
            line for line in record.lines
            if not ((line.bank or "").strip() and (line.account_number or "").strip())
        ]
        if not missing:
            return
        names = ", ".join(line.employee_name for line in missing)
        if self.settings.strict_bank_details:
            raise ValidationError(f"Missing bank details for: {names}")
        logger.warning("missing_bank_details", employees=[line.employee_id for line in missing])

    def _log_warnings(self, run_id: int, warnings: Iterable) -> None:
        for warning in warnings:
            logger.warning(warning.code.value, run_id=run_id, employee_id=warning.employee_id, detail=warning.message)

    # exports

    def export_disbursement(self, run_id: int) -> List[DisbursementRow]:
        with tracer.start_as_current_span("payroll.export_disbursement") as span:
            span.set_attribute("payroll.run_id", run_id)
            record = self.get_run(run_id)
            rows = disbursement_rows(record)
            logger.info("disbursement_exported", run_id=run_id, rows=len(rows))
            return rows

    def export_payslips(
        self, run_id: int, output_path: Path, employee_ids: Optional[Iterable[str]] = None
    ) -> Path:
        record = self.get_run(run_id)
        if record.status != RunStatus.PROCESSED:
            raise NotProcessedError(
                f"Payslips for {record.period_label} are only issued once the run is processed",
                run_id=run_id,
                status=record.status.value,
            )
        path = export_payslips_pdf(
            record,
            output_path,
            employer=EmployerDetails(name=self.settings.employer_name),
            employee_ids=employee_ids,
        )
        logger.info("payslips_exported", run_id=run_id, path=str(path))
        return path
