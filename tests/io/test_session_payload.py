from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import pytest

from hr_review.io import (
    clone_samples,
    coerce_flag,
    elapsed_seconds,
    load_session_file,
    normalize_samples,
    normalize_session,
    parse_timestamp,
)

FIXTURES = Path(__file__).resolve().parents[1] / "fixtures" / "sessions"


def test_normalize_samples_case_folds_and_indexes():
    samples = normalize_samples([
        {"Timestamp": "2025-01-01T00:00:00Z", "Heart_Rate": 80, "ANOMALY": 1},
        {"timestamp": "2025-01-01T00:00:05Z", "heart_rate": 82},
    ])

    assert [s.sequence_index for s in samples] == [0, 1]
    assert samples[0].value("heart_rate") == 80
    assert samples[0].anomaly == 1
    assert samples[1].anomaly == 0
    assert samples[0].time == datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (1, 1),
        (1.0, 1),
        ("1", 1),
        (True, 1),
        (0, 0),
        (2, 0),
        ("yes", 0),
        (None, 0),
        ([1], 0),
        (float("nan"), 0),
    ],
)
def test_coerce_flag_only_accepts_one(raw, expected):
    assert coerce_flag(raw) == expected


def test_normalize_samples_never_raises_on_junk():
    assert normalize_samples(None) == []
    assert normalize_samples("not a list") == []

    samples = normalize_samples([None, 5, {"heart_rate": 70}])
    assert len(samples) == 3
    assert samples[0].timestamp is None
    assert samples[0].channels == {}
    assert samples[2].value("heart_rate") == 70


def test_predictions_are_split_from_channels():
    sample = normalize_samples([{"heart_rate": 90, "pred_ischemic": "1", "pred_arrhythmic": 0}])[0]

    assert sample.predictions == {"ischemic": 1, "arrhythmic": 0}
    assert "pred_ischemic" not in sample.channels
    assert sample.to_record() == {
        "heart_rate": 90,
        "anomaly": 0,
        "pred_ischemic": 1,
        "pred_arrhythmic": 0,
    }


def test_normalized_samples_do_not_share_input_objects():
    raw = [{"heart_rate": 90, "extra": {"nested": [1, 2]}}]
    sample = normalize_samples(raw)[0]

    raw[0]["extra"]["nested"].append(3)
    assert sample.value("extra") == {"nested": [1, 2]}


def test_clone_samples_is_deep():
    original = normalize_samples([{"heart_rate": 90, "anomaly": 0}])
    copy = clone_samples(original)

    copy[0].anomaly = 1
    copy[0].channels["heart_rate"] = 10
    assert original[0].anomaly == 0
    assert original[0].value("heart_rate") == 90


@pytest.mark.parametrize(
    "raw",
    [
        "2025-03-12T07:30:00Z",
        "2025-03-12T07:30:00+00:00",
        "2025-03-12 07:30:00 +0000",
        "2025-03-12T08:30:00+01:00",
        datetime(2025, 3, 12, 7, 30),
    ],
)
def test_parse_timestamp_formats(raw):
    assert parse_timestamp(raw) == datetime(2025, 3, 12, 7, 30, tzinfo=timezone.utc)


def test_parse_timestamp_rejects_garbage():
    assert parse_timestamp("yesterday") is None
    assert parse_timestamp("") is None
    assert parse_timestamp(None) is None
    assert parse_timestamp(True) is None


def test_elapsed_seconds_carries_forward_unparseable_times():
    samples = normalize_samples([
        {"timestamp": "2025-01-01T00:00:00Z"},
        {"timestamp": "2025-01-01T00:00:10Z"},
        {"timestamp": "broken"},
        {"timestamp": "2025-01-01T00:00:30Z"},
    ])

    np.testing.assert_allclose(elapsed_seconds(samples), [0.0, 10.0, 10.0, 30.0])
    assert elapsed_seconds([]).size == 0


def test_normalize_session_splits_metadata():
    session = normalize_session({
        "id": 9,
        "volunteer_first_name": "Ana",
        "volunteer_last_name": "Souza",
        "timeseries_data": [{"heart_rate": 70}],
    })

    assert session.session_id == 9
    assert len(session.samples) == 1
    assert "timeseries_data" not in session.metadata
    assert session.subject_name == "Ana Souza"
    assert normalize_session("garbage").is_empty


def test_load_session_file_fixture():
    session = load_session_file(FIXTURES / "session_basic.json")

    assert session.session_id == 42
    assert len(session.samples) == 10
    assert [s.anomaly for s in session.samples] == [0, 0, 0, 1, 1, 0, 0, 0, 1, 0]
    assert session.samples[0].value("heart_rate") == 100
    assert session.samples[2].value("heart_rate") is None
    assert session.metadata["avg_heart_rate"] == 121


def test_load_session_file_rejects_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValueError):
        load_session_file(path)
