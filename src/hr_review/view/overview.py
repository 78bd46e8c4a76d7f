"""Anomaly timeline helpers: labelled runs and the zoom window around them."""

from __future__ import annotations

import math
from typing import Sequence

from hr_review.io.session_payload import Sample
from hr_review.view.window import ViewWindow

DEFAULT_HR_DOMAIN = (60, 180)


def anomaly_runs(samples: Sequence[Sample]) -> list[ViewWindow]:
    """Maximal contiguous runs of samples labelled anomalous."""

    runs: list[ViewWindow] = []
    run_start: int | None = None
    for index, sample in enumerate(samples):
        if sample.anomaly == 1:
            if run_start is None:
                run_start = index
        elif run_start is not None:
            runs.append(ViewWindow(run_start, index - 1))
            run_start = None
    if run_start is not None:
        runs.append(ViewWindow(run_start, len(samples) - 1))
    return runs


def zoom_to_run(
    run: ViewWindow,
    samples: Sequence[Sample],
    *,
    window_points: int = 10,
    channel: str = "heart_rate",
) -> ViewWindow | None:
    """Window of ``window_points`` channel readings centred on a run.

    The window is counted in samples that carry the channel and is shifted
    back inside the recording when it would run past either end.
    """

    eligible = [index for index, sample in enumerate(samples) if sample.value(channel) is not None]
    if not eligible or window_points < 1:
        return None

    middle = (run.start_index + run.end_index) // 2
    middle_pos = next((pos for pos, index in enumerate(eligible) if index >= middle), len(eligible) - 1)

    start_pos = middle_pos - window_points // 2
    end_pos = start_pos + window_points - 1
    if end_pos >= len(eligible):
        end_pos = len(eligible) - 1
        start_pos = max(0, end_pos - window_points + 1)
    if start_pos < 0:
        start_pos = 0
        end_pos = min(window_points - 1, len(eligible) - 1)

    return ViewWindow(eligible[start_pos], eligible[end_pos])


def heart_rate_domain(
    samples: Sequence[Sample], channel: str = "heart_rate"
) -> tuple[tuple[int, int], bool]:
    """Y-axis bounds for the primary channel and whether any reading exists."""

    readings = []
    for sample in samples:
        value = sample.value(channel)
        if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
            readings.append(float(value))
    if not readings:
        return DEFAULT_HR_DOMAIN, False
    return (math.floor(min(readings) - 5), math.ceil(max(readings) + 10)), True


__all__ = ["DEFAULT_HR_DOMAIN", "anomaly_runs", "heart_rate_domain", "zoom_to_run"]
