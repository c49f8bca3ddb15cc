from __future__ import annotations

import json
from pathlib import Path

import pytest

from norrsken import cli
from norrsken.sie import parse_sie, read_sie_file


@pytest.fixture
def sie_file(tmp_path: Path, sample_sie_text: str) -> Path:
    path = tmp_path / "bokslut.se"
    path.write_bytes(sample_sie_text.encode("cp437"))
    return path


def _run(capsys, *argv: str):
    exit_code = cli.main(list(argv))
    captured = capsys.readouterr()
    return exit_code, captured


def test_nyckeltal_prints_kpis_as_json(capsys, sie_file: Path) -> None:
    exit_code, captured = _run(capsys, "nyckeltal", str(sie_file))

    assert exit_code == 0
    payload = json.loads(captured.out)
    assert payload["net_sales"] == pytest.approx(500000.0)
    assert payload["current_ratio"] is None


def test_nyckeltal_visning_uses_swedish_labels(capsys, sie_file: Path) -> None:
    exit_code, captured = _run(capsys, "nyckeltal", str(sie_file), "--visning")

    assert exit_code == 0
    assert json.loads(captured.out)["Nettoomsättning"] == "500 000"


def test_manad_prints_series(capsys, sie_file: Path) -> None:
    exit_code, captured = _run(capsys, "manad", str(sie_file))

    payload = json.loads(captured.out)
    assert exit_code == 0
    assert payload["month_count"] == 12
    assert payload["obalanserade_verifikationer"] == []


def test_saldobalans_prints_rows(capsys, sie_file: Path) -> None:
    exit_code, captured = _run(capsys, "saldobalans", str(sie_file))

    rows = json.loads(captured.out)
    assert exit_code == 0
    assert [row["Konto"] for row in rows] == ["1930", "3010", "5010"]
    assert rows[0]["Förändring"] == pytest.approx(50000.0)


def test_skriv_writes_readable_file(capsys, sie_file: Path, tmp_path: Path) -> None:
    output = tmp_path / "ut.se"

    exit_code, captured = _run(capsys, "skriv", str(sie_file), str(output), "--format", "PC8")

    assert exit_code == 0
    assert json.loads(captured.out)["transaktioner"] == 4
    assert parse_sie(read_sie_file(output)).postings == parse_sie(read_sie_file(sie_file)).postings


def test_bokforing_reads_json_export(capsys, tmp_path: Path) -> None:
    export = tmp_path / "export.json"
    export.write_text(
        json.dumps(
            {
                "accounts": [],
                "journals": [
                    {
                        "series": "A",
                        "journalNumber": 1,
                        "registrationDate": "2024-03-01",
                        "entries": [
                            {"accountNumber": "1930", "debit": 1000.0, "credit": 0},
                            {"accountNumber": "3010", "debit": 0, "credit": 999.5},
                        ],
                    }
                ],
            }
        ),
        encoding="utf-8",
    )

    exit_code, captured = _run(
        capsys, "bokforing", str(export), "--fran", "2024-01-01", "--till", "2024-12-31"
    )

    payload = json.loads(captured.out)
    assert exit_code == 0
    assert payload["source"] == "journals"
    assert payload["reconciled"] is False
    assert payload["reconciliation_drift"] == pytest.approx(0.5)


def test_parse_error_returns_exit_code(capsys, tmp_path: Path) -> None:
    broken = tmp_path / "trasig.se"
    broken.write_text('#FNAMN "Oavslutad\n', encoding="utf-8")

    exit_code, captured = _run(capsys, "nyckeltal", str(broken))

    assert exit_code == 1
    assert "Rad 1" in captured.err


def test_missing_file_returns_exit_code(capsys, tmp_path: Path) -> None:
    exit_code, captured = _run(capsys, "manad", str(tmp_path / "saknas.se"))

    assert exit_code == 1
    assert captured.err.startswith("Filfel")
