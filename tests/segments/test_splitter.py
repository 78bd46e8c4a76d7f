import pytest

from hr_review.io import normalize_samples
from hr_review.segments import (
    InvalidSplit,
    NoEligibleSamples,
    Segmentation,
    SplitPolicy,
    split,
    split_by_count,
    split_by_duration,
    split_by_points,
)
from hr_review.view import ViewWindow


def _covered(segments):
    indices = []
    for segment in segments:
        indices.extend(range(segment.start_index, segment.end_index + 1))
    return indices


@pytest.mark.parametrize("length, k", [(10, 1), (10, 3), (100, 7), (7, 7), (1000, 13), (5, 2)])
def test_count_split_covers_sequence_exactly_once(length, k):
    result = split_by_count(length, k)

    assert isinstance(result, Segmentation)
    assert len(result) == k
    assert _covered(result.segments) == list(range(length))


def test_count_split_last_segment_absorbs_remainder():
    result = split_by_count(10, 3)

    assert result.segments == [ViewWindow(0, 2), ViewWindow(3, 5), ViewWindow(6, 9)]


def test_count_split_never_produces_empty_segments():
    result = split_by_count(3, 5)

    assert len(result) == 3
    assert all(segment.size == 1 for segment in result.segments)


@pytest.mark.parametrize("k", [0, -2, 2.5, "two", None, True, float("inf")])
def test_count_split_rejects_bad_counts(k):
    assert isinstance(split_by_count(10, k), InvalidSplit)


def test_count_split_of_empty_sequence_is_invalid():
    assert isinstance(split_by_count(0, 3), InvalidSplit)


def test_duration_split_uses_half_open_windows():
    elapsed = [0.0, 5.0, 10.0, 15.0, 20.0, 25.0]

    result = split_by_duration(elapsed, 10)

    assert result.segments == [ViewWindow(0, 1), ViewWindow(2, 3), ViewWindow(4, 5)]
    assert result.policy == SplitPolicy.TIME


def test_duration_split_keeps_degenerate_segments():
    # A 30 s jump leaves the 10-20 s window without its own samples
    elapsed = [0.0, 2.0, 40.0]

    result = split_by_duration(elapsed, 10)

    assert result.segments[0] == ViewWindow(0, 1)
    assert all(segment.end_index >= segment.start_index for segment in result.segments)
    assert result.segments[-1].end_index == 2


def test_duration_split_rejects_bad_input():
    assert isinstance(split_by_duration([0.0, 1.0], 0), InvalidSplit)
    assert isinstance(split_by_duration([0.0, 1.0], "soon"), InvalidSplit)
    assert isinstance(split_by_duration([], 5), InvalidSplit)
    assert isinstance(split_by_duration([0.0, 0.0, 0.0], 5), InvalidSplit)


def test_points_split_skips_samples_without_heart_rate():
    samples = normalize_samples([
        {"heart_rate": None if 40 <= i <= 59 else 100 + (i % 5)} for i in range(100)
    ])

    result = split_by_points(samples, 20)

    assert isinstance(result, Segmentation)
    assert len(result) == 4
    assert result.segments == [
        ViewWindow(0, 19),
        ViewWindow(20, 39),
        ViewWindow(60, 79),
        ViewWindow(80, 99),
    ]
    eligible = [i for i, s in enumerate(samples) if s.value("heart_rate") is not None]
    for segment in result.segments:
        inside = [i for i in eligible if segment.contains(i)]
        assert len(inside) == 20
    assert not any(segment.contains(50) for segment in result.segments)


def test_points_split_without_heart_rate_is_informational():
    samples = normalize_samples([{"speed": 2.0}, {"heart_rate": None}])

    result = split_by_points(samples, 5)

    assert isinstance(result, NoEligibleSamples)
    assert result.message == "No heart rate data found to create splits."


def test_points_split_rejects_fractional_points():
    samples = normalize_samples([{"heart_rate": 80}])

    assert isinstance(split_by_points(samples, 1.5), InvalidSplit)


def test_dispatcher_routes_by_policy():
    samples = normalize_samples([
        {"timestamp": f"2025-01-01T00:00:{i * 5:02d}Z", "heart_rate": 90} for i in range(12)
    ])

    by_count = split(SplitPolicy.COUNT, 3, samples)
    by_time = split(SplitPolicy.TIME, 20, samples)
    by_points = split(SplitPolicy.POINTS, 5, samples)

    assert [s.size for s in by_count.segments] == [4, 4, 4]
    assert by_time.segments[0] == ViewWindow(0, 3)
    assert [s.size for s in by_points.segments] == [5, 5, 2]
    assert isinstance(split("halves", 2, samples), InvalidSplit)


def test_segmentation_navigation_clamps_at_ends():
    result = split_by_count(9, 3)

    assert result.current == ViewWindow(0, 2)
    assert result.previous() == ViewWindow(0, 2)
    assert result.next() == ViewWindow(3, 5)
    assert result.next() == ViewWindow(6, 8)
    assert result.is_last
    assert result.next() == ViewWindow(6, 8)
    assert result.label == "Segment 3 of 3"


def test_duration_split_with_repeated_timestamps():
    samples = normalize_samples([
        {"timestamp": f"2025-01-01T00:00:{second:02d}Z", "heart_rate": 90}
        for second in (0, 0, 5, 5, 10)
    ])

    result = split(SplitPolicy.TIME, 4, samples)

    assert result.segments == [ViewWindow(0, 1), ViewWindow(2, 3), ViewWindow(4, 4)]


def test_duration_split_rejects_durations_too_short_for_recording():
    result = split_by_duration([0.0, 1800.0, 3600.0], 1e-9)

    assert isinstance(result, InvalidSplit)
    assert result.message == "Segment duration is too short for this recording."
