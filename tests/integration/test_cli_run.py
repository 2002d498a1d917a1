from __future__ import annotations

from pathlib import Path

import pandas as pd
import yaml

from rowguard.config import Config
from rowguard.main import main, run_validation


def write_csv(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def only_run_dir(out: Path) -> Path:
    dirs = [p for p in out.iterdir() if p.is_dir()]
    assert len(dirs) == 1
    return dirs[0]


def test_valid_file_exits_zero(tmp_path: Path) -> None:
    src = write_csv(tmp_path / "users.csv", "userId,email\n1,a@b.co\n2,c@d.io\n")

    code = run_validation(src, tmp_path / "runs")

    assert code == 0
    run_dir = only_run_dir(tmp_path / "runs")
    assert run_dir.name.startswith("users_")
    report = yaml.safe_load((run_dir / "validation_report.yaml").read_text(encoding="utf-8"))
    assert report["job_id"] == "users"
    assert report["status"] == "completed"
    assert report["is_valid"] is True
    assert (run_dir / "validation_issues.xlsx").exists()
    assert (run_dir / "latest_run.log").exists()
    assert (run_dir / "logs.jsonl").exists()


def test_invalid_file_exits_one(tmp_path: Path) -> None:
    src = write_csv(tmp_path / "users.csv", "userId,email\n1,a@b.co\n2,not-an-email\n")

    code = main(["--input", str(src), "--out", str(tmp_path / "runs"), "--job-id", "upload 7"])

    assert code == 1
    run_dir = only_run_dir(tmp_path / "runs")
    assert run_dir.name.startswith("upload_7_")
    errors = pd.read_excel(run_dir / "validation_issues.xlsx", sheet_name="Errors")
    assert list(errors["Row"]) == [2]
    assert list(errors["Field"]) == ["email"]
    assert list(errors["Rule"]) == ["Email Format"]


def test_error_threshold_stops_early(tmp_path: Path) -> None:
    src = write_csv(tmp_path / "bad.csv", "userId\nx\ny\nz\n")

    code = run_validation(src, tmp_path / "runs", Config(batch_size=1))

    assert code == 2
    run_dir = only_run_dir(tmp_path / "runs")
    report = yaml.safe_load((run_dir / "validation_report.yaml").read_text(encoding="utf-8"))
    assert report["status"] == "early_stopped"
    assert report["processed_rows"] == 1
    assert report["total_rows"] == 3


def test_custom_rules_file(tmp_path: Path) -> None:
    src = write_csv(tmp_path / "people.csv", "name,country\nAda,GB\nLinus,finland\n")
    rules = tmp_path / "rules.yaml"
    rules.write_text(
        yaml.safe_dump(
            {
                "rules": [
                    {
                        "id": "country-code",
                        "name": "Country Code",
                        "type": "pattern",
                        "field": "country",
                        "severity": "warning",
                        "config": {"pattern": "^[A-Z]{2}$"},
                        "message": "country '{value}' is not a two-letter code",
                    }
                ]
            }
        ),
        encoding="utf-8",
    )

    code = main(
        ["--input", str(src), "--rules", str(rules), "--out", str(tmp_path / "runs")]
    )

    # warnings alone keep the dataset valid
    assert code == 0
    run_dir = only_run_dir(tmp_path / "runs")
    warnings = pd.read_excel(run_dir / "validation_issues.xlsx", sheet_name="Warnings")
    assert list(warnings["Message"]) == ["country 'finland' is not a two-letter code"]


def test_missing_input_exits_three(tmp_path: Path) -> None:
    code = run_validation(tmp_path / "nope.csv", tmp_path / "runs")
    assert code == 3
