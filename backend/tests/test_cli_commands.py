from __future__ import annotations

import pytest

from app.cli import main


@pytest.fixture
def cli(tmp_path):
    database_url = f"sqlite:///{tmp_path / 'cli.db'}"

    def run(*argv: str) -> None:
        main(["--database-url", database_url, *argv])

    run("init-db")
    run("seed")
    return run


def test_create_and_list_runs(cli, capsys):
    capsys.readouterr()

    cli("create-run", "3", "2025", "--airtime", "10")
    cli("list-runs")

    out = capsys.readouterr().out
    assert "Created payroll run #1 March 2025 DRAFT employees=4" in out
    assert "warning: Ibrahim Musa has no bank or account number on file" in out
    assert out.strip().splitlines()[-1].startswith("#1 March 2025 DRAFT")


def test_process_and_export(cli, capsys, tmp_path):
    cli("create-run", "12", "2025", "--13th-month")
    cli("recompute-run", "1")
    cli("process-run", "1")
    cli("export-run", "1", "--output", str(tmp_path / "out"), "--payslips")

    out = capsys.readouterr().out
    assert "Processed payroll run #1 December 2025 PROCESSED" in out
    schedule = tmp_path / "out" / "Payroll_Schedule_12_2025.csv"
    assert schedule.exists()
    assert schedule.read_text(encoding="utf-8").startswith("Employee Name,Bank Name,Account Number,Net Pay,Narration")
    assert (tmp_path / "out" / "Payslips_12_2025.pdf").read_bytes().startswith(b"%PDF")


def test_payroll_errors_exit_with_message(cli, capsys):
    cli("create-run", "3", "2025")

    with pytest.raises(SystemExit) as excinfo:
        cli("create-run", "3", "2025")

    assert excinfo.value.code == 1
    assert "error: Payroll for 3/2025 already exists" in capsys.readouterr().err


def test_export_of_draft_run_fails(cli, capsys):
    cli("create-run", "3", "2025")

    with pytest.raises(SystemExit):
        cli("export-run", "1")

    assert "only processed runs can be disbursed" in capsys.readouterr().err


def test_empty_list(tmp_path, capsys):
    database_url = f"sqlite:///{tmp_path / 'empty.db'}"
    main(["--database-url", database_url, "init-db"])

    main(["--database-url", database_url, "list-runs"])

    assert "No payroll runs" in capsys.readouterr().out


def test_non_finite_airtime_is_rejected(cli, capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli("create-run", "3", "2025", "--airtime", "nan")

    assert excinfo.value.code == 1
    assert "must be a finite number" in capsys.readouterr().err
    cli("list-runs")
    assert "No payroll runs" in capsys.readouterr().out
