from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from payroll_engine.aggregator import RunAggregator, aggregate
from payroll_engine.calculator import PayrollCalculator
from payroll_engine.exceptions import ValidationError
from payroll_engine.models import CompensationInput, RunConfiguration, RunTotals, WarningCode
from payroll_engine.tax_tables import TaxTableRepository

CALCULATOR = PayrollCalculator.from_repository(TaxTableRepository())
CONFIG = RunConfiguration(month=3, year=2025)

staff = [
    CompensationInput("e1", "Mark Freeman", Decimal("7800000"), bank="GTBank", account_number="0011223344"),
    CompensationInput("e2", "Arya Shah", Decimal("14400000"), bank="Access Bank", account_number="0099887766"),
    CompensationInput("e3", "June Smith", Decimal("4200000")),
]


def test_assemble_builds_one_line_per_employee_with_totals():
    draft = RunAggregator(CALCULATOR).assemble(CONFIG, staff)

    assert [line.employee_id for line in draft.lines] == ["e1", "e2", "e3"]
    assert draft.totals.employee_count == 3
    assert draft.totals.total_gross == sum(line.gross_pay for line in draft.lines)
    assert draft.totals.total_net == sum(line.net_pay for line in draft.lines)


def test_assemble_flags_missing_bank_details():
    draft = RunAggregator(CALCULATOR).assemble(CONFIG, staff)

    assert [(w.code, w.employee_id) for w in draft.warnings] == [(WarningCode.MISSING_BANK_DETAILS, "e3")]
    assert draft.lines[2].warnings == tuple(draft.warnings)
    assert draft.lines[2].net_pay > 0


def test_assemble_validates_configuration_first():
    with pytest.raises(ValidationError):
        RunAggregator(CALCULATOR).assemble(RunConfiguration(month=3, year=2025, airtime_data_percentage=Decimal("150")), staff)


def test_totals_balance_gross_against_deductions_and_net():
    totals = aggregate(RunAggregator(CALCULATOR).assemble(CONFIG, staff).lines)

    assert totals.total_gross == totals.total_paye + totals.total_pension + totals.total_nhf + totals.total_net


def test_empty_line_set_aggregates_to_zero():
    assert aggregate([]) == RunTotals()


salary_lists = st.lists(
    st.decimals(min_value=0, max_value=Decimal("100000000"), places=2, allow_nan=False, allow_infinity=False),
    min_size=1,
    max_size=25,
)


@given(salaries=salary_lists, replacements=salary_lists, data=st.data())
def test_incremental_totals_match_recomputed_totals(salaries, replacements, data):
    def lines_for(amounts, prefix):
        return [
            CALCULATOR.calculate_line(CompensationInput(f"{prefix}{i}", f"Employee {i}", amount), CONFIG)
            for i, amount in enumerate(amounts)
        ]

    original = lines_for(salaries, "a")
    incoming = lines_for(replacements, "b")
    removed_count = data.draw(st.integers(min_value=0, max_value=len(original)))

    totals = aggregate(original)
    for line in original[:removed_count]:
        totals.subtract(line)
    for line in incoming:
        totals.add(line)

    assert totals == aggregate(original[removed_count:] + incoming)
