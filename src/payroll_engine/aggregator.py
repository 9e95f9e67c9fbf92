from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from .calculator import PayrollCalculator
from .models import (
    CompensationInput,
    LineWarning,
    PayrollLine,
    RunConfiguration,
    RunTotals,
    WarningCode,
)


def aggregate(lines: Iterable[PayrollLine]) -> RunTotals:
    return RunTotals.from_lines(lines)


@dataclass
class RunDraft:
    config: RunConfiguration
    lines: List[PayrollLine]
    totals: RunTotals
    warnings: List[LineWarning] = field(default_factory=list)


class RunAggregator:
    def __init__(self, calculator: PayrollCalculator):
        self.calculator = calculator

    def assemble(self, config: RunConfiguration, compensation: Iterable[CompensationInput]) -> RunDraft:
        config.validate()
        lines: List[PayrollLine] = []
        totals = RunTotals()
        warnings: List[LineWarning] = []

        for record in compensation:
            line = self.calculator.calculate_line(record, config)
            if not record.has_bank_details:
                line = line.with_warnings(
                    LineWarning(
                        code=WarningCode.MISSING_BANK_DETAILS,
                        employee_id=record.employee_id,
                        message=f"{record.employee_name} has no bank or account number on file",
                    )
                )
            lines.append(line)
            totals.add(line)
            warnings.extend(line.warnings)

        return RunDraft(config=config, lines=lines, totals=totals, warnings=warnings)
