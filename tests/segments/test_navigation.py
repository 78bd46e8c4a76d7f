from hr_review.io import normalize_samples
from hr_review.segments import InvalidSplit, Segmentation, SplitPolicy, SplitView
from hr_review.view import InvalidRange, ViewWindow, ViewWindowManager


def _samples(count):
    return normalize_samples([
        {"timestamp": f"2025-01-01T00:{i // 60:02d}:{i % 60:02d}Z", "heart_rate": 90}
        for i in range(count)
    ])


def test_apply_shows_first_segment_and_navigates():
    samples = _samples(30)
    view = SplitView(ViewWindowManager(len(samples)))

    outcome = view.apply(SplitPolicy.COUNT, 3, samples)

    assert isinstance(outcome, Segmentation)
    assert view.is_active
    assert view.manager.window == ViewWindow(0, 9)
    assert view.next() == ViewWindow(10, 19)
    assert view.next() == ViewWindow(20, 29)
    assert view.next() == ViewWindow(20, 29)
    assert view.previous() == ViewWindow(10, 19)


def test_rejected_split_leaves_state_untouched():
    samples = _samples(30)
    view = SplitView(ViewWindowManager(len(samples)))
    view.apply(SplitPolicy.COUNT, 3, samples)
    view.next()

    outcome = view.apply(SplitPolicy.COUNT, 0, samples)

    assert isinstance(outcome, InvalidSplit)
    assert view.manager.window == ViewWindow(10, 19)
    assert view.segmentation.current_index == 1


def test_clear_restores_full_range():
    samples = _samples(30)
    view = SplitView(ViewWindowManager(len(samples)))
    view.apply(SplitPolicy.POINTS, 7, samples)

    assert view.clear() == ViewWindow(0, 29)
    assert not view.is_active
    # Navigation without a split keeps the current window
    assert view.next() == ViewWindow(0, 29)


def test_manual_window_changes_drop_the_split():
    samples = _samples(30)
    view = SplitView(ViewWindowManager(len(samples)))
    view.apply(SplitPolicy.COUNT, 3, samples)

    view.set_window(5, 6)

    assert not view.is_active
    assert view.manager.window == ViewWindow(5, 6)


def test_invalid_time_range_keeps_the_split():
    samples = _samples(30)
    view = SplitView(ViewWindowManager(len(samples)))
    view.apply(SplitPolicy.COUNT, 3, samples)
    elapsed = [float(i) for i in range(30)]

    result = view.by_time_string("00:20", "00:10", elapsed)

    assert isinstance(result, InvalidRange)
    assert view.is_active

    assert view.by_time_string("00:05", "00:10", elapsed) == ViewWindow(5, 10)
    assert not view.is_active
