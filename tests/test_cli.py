"""Smoke tests for the command-line interface."""

import json
from pathlib import Path

import pytest

from hr_review import cli

FIXTURES = Path(__file__).resolve().parent / "fixtures" / "sessions"
BASIC = str(FIXTURES / "session_basic.json")


@pytest.fixture(autouse=True)
def _isolate(monkeypatch, tmp_path):
    # Keep a developer's config/review.yml and env out of the tests
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("HR_REVIEW_API_URL", raising=False)
    monkeypatch.delenv("HR_REVIEW_API_TOKEN", raising=False)


def test_parser_defaults() -> None:
    parser = cli.build_parser()
    args = parser.parse_args(["--session", "s.json"])

    assert args.session == Path("s.json")
    assert args.session_id is None
    assert args.config is None
    assert args.window is None
    assert args.split is None
    assert args.summary is False
    assert args.export_dir is None
    assert args.format == "text"
    assert args.verbose is False


def test_parser_requires_exactly_one_source() -> None:
    parser = cli.build_parser()

    with pytest.raises(SystemExit):
        parser.parse_args([])
    with pytest.raises(SystemExit):
        parser.parse_args(["--session", "a.json", "--session-id", "3"])


def test_split_requires_value() -> None:
    with pytest.raises(SystemExit):
        cli.main(["--session", BASIC, "--split", "count"])


def test_json_report_with_split_and_summary(capsys) -> None:
    code = cli.main(["--session", BASIC, "--split", "count", "--split-value", "2", "--summary", "--format", "json"])

    assert code == 0
    report = json.loads(capsys.readouterr().out)
    assert report["session_id"] == 42
    assert report["samples"] == 10
    assert report["segments"] == [
        {"start_index": 0, "end_index": 4},
        {"start_index": 5, "end_index": 9},
    ]
    assert report["window"] == {"start_index": 0, "end_index": 4}
    assert report["summary"]["anomaly_count"] == 3


def test_window_option_restricts_view(capsys) -> None:
    code = cli.main(["--session", BASIC, "--window", "00:10", "00:30", "--format", "json"])

    assert code == 0
    report = json.loads(capsys.readouterr().out)
    assert report["window"] == {"start_index": 2, "end_index": 6}
    assert report["axis_range"] == pytest.approx([9.0, 31.0])


def test_invalid_window_is_an_error(capsys) -> None:
    code = cli.main(["--session", BASIC, "--window", "00:30", "00:10"])

    assert code == 2
    assert "Start time must be before end time" in capsys.readouterr().err


def test_points_split_message_when_no_heart_rate(tmp_path, capsys) -> None:
    path = tmp_path / "speed_only.json"
    path.write_text(json.dumps({"id": 1, "timeseries_data": [{"speed": 2.0}]}), encoding="utf-8")

    code = cli.main(["--session", str(path), "--split", "points", "--split-value", "5"])

    assert code == 0
    assert "No heart rate data found to create splits." in capsys.readouterr().out


def test_export_to_directory(tmp_path, capsys) -> None:
    out_dir = tmp_path / "out"

    code = cli.main(["--session", BASIC, "--export-dir", str(out_dir)])

    assert code == 0
    written = out_dir / "Ana_Souza_session-42_20250312-073000.csv"
    assert written.exists()
    assert written.read_text(encoding="utf-8").startswith("timestamp,anomaly,heart_rate")
    assert f"exported: {written}" in capsys.readouterr().out


def test_export_to_stdout(capsys) -> None:
    code = cli.main(["--session", BASIC, "--export-dir", "-"])

    assert code == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "# Ana_Souza_session-42_20250312-073000.csv"
    assert lines[1].startswith("timestamp,anomaly")
    assert len(lines) == 12


def test_missing_session_file(capsys) -> None:
    code = cli.main(["--session", "does-not-exist.json"])

    assert code == 2
    assert "error" in capsys.readouterr().err


def test_explicit_missing_config_is_an_error(capsys) -> None:
    code = cli.main(["--session", BASIC, "--config", "nope.yml"])

    assert code == 2


@pytest.mark.parametrize("value", ["nan", "inf"])
def test_non_finite_split_value_is_reported(value, capsys) -> None:
    code = cli.main(["--session", BASIC, "--split", "count", "--split-value", value, "--format", "json"])

    assert code == 0
    report = json.loads(capsys.readouterr().out)
    assert report["split_message"] == "Segment count must be a whole number of at least 1."
    assert "segments" not in report
