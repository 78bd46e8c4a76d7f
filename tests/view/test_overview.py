from hr_review.io import normalize_samples
from hr_review.view import DEFAULT_HR_DOMAIN, ViewWindow, anomaly_runs, heart_rate_domain, zoom_to_run


def _samples(flags, heart_rate=None):
    return normalize_samples([
        {"heart_rate": 100 if heart_rate is None else heart_rate[i], "anomaly": flag}
        for i, flag in enumerate(flags)
    ])


def test_anomaly_runs_are_maximal():
    samples = _samples([0, 1, 1, 0, 1, 0, 0, 1])

    assert anomaly_runs(samples) == [ViewWindow(1, 2), ViewWindow(4, 4), ViewWindow(7, 7)]
    assert anomaly_runs(_samples([0, 0])) == []


def test_zoom_to_run_centres_on_midpoint():
    samples = _samples([0] * 40)

    window = zoom_to_run(ViewWindow(18, 22), samples, window_points=10)

    assert window == ViewWindow(15, 24)


def test_zoom_to_run_shifts_inside_bounds():
    samples = _samples([0] * 40)

    assert zoom_to_run(ViewWindow(0, 1), samples, window_points=10) == ViewWindow(0, 9)
    assert zoom_to_run(ViewWindow(38, 39), samples, window_points=10) == ViewWindow(30, 39)


def test_zoom_to_run_counts_only_samples_with_heart_rate():
    heart_rate = [100 if i % 2 == 0 else None for i in range(40)]
    samples = _samples([0] * 40, heart_rate)

    window = zoom_to_run(ViewWindow(20, 20), samples, window_points=4)

    assert window == ViewWindow(16, 22)


def test_zoom_to_run_without_heart_rate():
    samples = _samples([1, 1], [None, None])

    assert zoom_to_run(ViewWindow(0, 1), samples) is None


def test_heart_rate_domain_pads_and_rounds():
    samples = _samples([0, 0, 0], [100.5, 120, 139.2])

    assert heart_rate_domain(samples) == ((95, 150), True)


def test_heart_rate_domain_default_when_missing():
    samples = _samples([0, 0], [None, None])

    assert heart_rate_domain(samples) == (DEFAULT_HR_DOMAIN, False)
