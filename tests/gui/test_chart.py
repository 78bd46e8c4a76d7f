from pathlib import Path

import pytest

from hr_review.annotations import EditState
from hr_review.gui import build_session_figure, build_timeline_figure, clicked_run, clicked_sequence_index
from hr_review.io import elapsed_seconds, load_session_file, normalize_samples
from hr_review.view import ViewWindow

FIXTURES = Path(__file__).resolve().parents[1] / "fixtures" / "sessions"


@pytest.fixture
def session():
    return load_session_file(FIXTURES / "session_basic.json")


def test_heart_rate_trace_skips_missing_readings(session):
    fig = build_session_figure(session.samples, elapsed_seconds(session.samples))

    heart_rate = fig.data[0]
    assert list(heart_rate.customdata) == [0, 1, 3, 4, 5, 6, 7, 8, 9]
    assert list(heart_rate.x)[:3] == [0.0, 5.0, 15.0]
    assert fig.layout.xaxis.autorange is True
    assert tuple(fig.layout.yaxis.range) == (95, 150)


def test_anomaly_markers_follow_working_copy(session):
    state = EditState.from_samples(session.samples)
    state.toggle(0)

    fig = build_session_figure(state.working, elapsed_seconds(state.working))

    anomalies = fig.data[1]
    assert list(anomalies.customdata) == [0, 3, 4, 8]
    assert anomalies.name == "Anomalies (4)"


def test_window_sets_padded_axis_range(session):
    elapsed = elapsed_seconds(session.samples)

    fig = build_session_figure(session.samples, elapsed, window=ViewWindow(2, 6))

    assert tuple(fig.layout.xaxis.range) == pytest.approx((9.0, 31.0))


def test_reference_lines_from_metadata(session):
    fig = build_session_figure(
        session.samples, elapsed_seconds(session.samples), metadata=session.metadata
    )

    levels = sorted(shape.y0 for shape in fig.layout.shapes)
    assert levels == [121, 140]


def test_missing_heart_rate_shows_placeholder():
    samples = normalize_samples([{"timestamp": "2025-01-01T00:00:00Z", "speed": 1.0}])

    fig = build_session_figure(samples, elapsed_seconds(samples))

    assert len(fig.data[0].x) == 0
    assert tuple(fig.layout.yaxis.range) == (60, 180)
    assert fig.layout.annotations[0].text == "Heart Rate data not available."


def test_click_maps_back_to_sequence_index(session):
    fig = build_session_figure(session.samples, elapsed_seconds(session.samples))

    # Third point on the heart-rate trace is sample 3 (sample 2 has no reading)
    assert clicked_sequence_index(fig, {"curveNumber": 0, "pointIndex": 2}) == 3
    assert clicked_sequence_index(fig, {"curveNumber": 1, "pointNumber": 0}) == 3
    assert clicked_sequence_index(fig, {"curveNumber": 0, "pointIndex": 50}) is None
    assert clicked_sequence_index(fig, {"curveNumber": 7, "pointIndex": 0}) is None
    assert clicked_sequence_index(fig, {}) is None


def test_timeline_blocks_map_to_runs(session):
    fig = build_timeline_figure(session.samples, elapsed_seconds(session.samples))

    assert len(fig.data) == 2
    assert clicked_run(fig, {"curveNumber": 0}) == ViewWindow(3, 4)
    assert clicked_run(fig, {"curveNumber": 1}) == ViewWindow(8, 8)
    assert clicked_run(fig, {"curveNumber": 5}) is None
