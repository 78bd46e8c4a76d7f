"""Partition a session into review segments.

Three policies are supported:

- ``count``: a fixed number of equally sized segments, the last one absorbing
  the remainder;
- ``time``: consecutive elapsed-time windows of a fixed duration;
- ``points``: a fixed number of samples that carry the primary channel
  (heart rate by default), so gaps in the sensor do not shrink a segment.

All splitters are pure. Parameter problems come back as ``InvalidSplit`` or
``NoEligibleSamples`` values instead of exceptions so the caller can show them
as messages.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Sequence

import numpy as np

from hr_review.io.session_payload import Sample, elapsed_seconds
from hr_review.view.window import ViewWindow, first_at_or_after

log = logging.getLogger(__name__)

# Time splits may produce at most this many windows per sample
MAX_WINDOWS_PER_SAMPLE = 10


class SplitPolicy:
    """Names of the supported segmentation policies."""
    COUNT = "count"  # Number of segments
    TIME = "time"  # Segment duration in seconds
    POINTS = "points"  # Primary-channel readings per segment

    ALL = (COUNT, TIME, POINTS)


@dataclass(frozen=True, slots=True)
class InvalidSplit:
    """Split request rejected because of its parameters."""

    reason: str

    @property
    def message(self) -> str:
        return self.reason


@dataclass(frozen=True, slots=True)
class NoEligibleSamples:
    """Point-based split found no sample carrying the channel."""

    channel: str

    @property
    def message(self) -> str:
        label = self.channel.replace("_", " ")
        return f"No {label} data found to create splits."


@dataclass(slots=True)
class Segmentation:
    """Ordered, navigable list of segments."""

    policy: str
    value: float
    segments: list[ViewWindow] = field(default_factory=list)
    current_index: int = 0

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def current(self) -> ViewWindow:
        return self.segments[self.current_index]

    @property
    def is_first(self) -> bool:
        return self.current_index == 0

    @property
    def is_last(self) -> bool:
        return self.current_index >= len(self.segments) - 1

    def next(self) -> ViewWindow:
        """Advance one segment; stays put on the last one."""
        if not self.is_last:
            self.current_index += 1
        return self.current

    def previous(self) -> ViewWindow:
        """Go back one segment; stays put on the first one."""
        if not self.is_first:
            self.current_index -= 1
        return self.current

    @property
    def label(self) -> str:
        return f"Segment {self.current_index + 1} of {len(self.segments)}"


SplitOutcome = Segmentation | InvalidSplit | NoEligibleSamples


def _positive_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number < 1 or number != int(number):
        return None
    return int(number)


def _positive_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def split_by_count(length: int, count: Any) -> Segmentation | InvalidSplit:
    """Split ``length`` samples into ``count`` contiguous segments."""

    k = _positive_int(count)
    if k is None:
        return InvalidSplit("Segment count must be a whole number of at least 1.")
    if length <= 0:
        return InvalidSplit("Session has no samples to split.")

    # More segments than samples would leave some of them empty
    k = min(k, length)
    segment_size = length // k
    segments = []
    for i in range(k):
        start_index = i * segment_size
        end_index = length - 1 if i == k - 1 else (i + 1) * segment_size - 1
        segments.append(ViewWindow(start_index, end_index))
    return Segmentation(policy=SplitPolicy.COUNT, value=k, segments=segments)


def split_by_duration(elapsed: Sequence[float], seconds: Any) -> Segmentation | InvalidSplit:
    """Carve consecutive ``[t, t + seconds)`` windows from elapsed time 0."""

    duration = _positive_float(seconds)
    if duration is None:
        return InvalidSplit("Segment duration must be a positive number of seconds.")
    values = np.asarray(elapsed, dtype=float)
    if values.size == 0:
        return InvalidSplit("Session has no samples to split.")

    total_duration = float(values[-1])
    if total_duration / duration > MAX_WINDOWS_PER_SAMPLE * values.size:
        return InvalidSplit("Segment duration is too short for this recording.")
    last = values.size - 1
    segments: list[ViewWindow] = []
    step = 0
    current_start = 0.0
    while current_start < total_duration:
        start_index = first_at_or_after(values, current_start)
        if start_index is None:
            break
        next_index = first_at_or_after(values, current_start + duration)
        end_index = last if next_index is None else next_index - 1
        if end_index < start_index:
            end_index = start_index
        segments.append(ViewWindow(start_index, end_index))
        step += 1
        # Multiply rather than accumulate to avoid float drift
        current_start = step * duration

    if not segments:
        return InvalidSplit("Recording has no duration to split by time.")
    return Segmentation(policy=SplitPolicy.TIME, value=duration, segments=segments)


def split_by_points(
    samples: Sequence[Sample], points: Any, channel: str = "heart_rate"
) -> Segmentation | InvalidSplit | NoEligibleSamples:
    """Group every ``points`` samples that carry ``channel`` into a segment."""

    per_segment = _positive_int(points)
    if per_segment is None:
        return InvalidSplit("Points per segment must be a whole number of at least 1.")

    eligible = [index for index, sample in enumerate(samples) if sample.value(channel) is not None]
    if not eligible:
        return NoEligibleSamples(channel)

    segments = []
    for offset in range(0, len(eligible), per_segment):
        chunk = eligible[offset:offset + per_segment]
        segments.append(ViewWindow(chunk[0], chunk[-1]))
    return Segmentation(policy=SplitPolicy.POINTS, value=per_segment, segments=segments)


def split(
    policy: str,
    value: Any,
    samples: Sequence[Sample],
    *,
    channel: str = "heart_rate",
    elapsed: Sequence[float] | None = None,
) -> SplitOutcome:
    """Dispatch to the splitter named by ``policy``."""

    if policy == SplitPolicy.COUNT:
        outcome = split_by_count(len(samples), value)
    elif policy == SplitPolicy.TIME:
        outcome = split_by_duration(
            elapsed if elapsed is not None else elapsed_seconds(samples), value
        )
    elif policy == SplitPolicy.POINTS:
        outcome = split_by_points(samples, value, channel=channel)
    else:
        return InvalidSplit(f"Unknown split method {policy!r}; expected one of {SplitPolicy.ALL}.")

    if isinstance(outcome, Segmentation):
        log.debug("Split by %s=%s produced %d segments", policy, value, len(outcome))
    return outcome


__all__ = [
    "InvalidSplit",
    "NoEligibleSamples",
    "Segmentation",
    "SplitOutcome",
    "SplitPolicy",
    "split",
    "split_by_count",
    "split_by_duration",
    "split_by_points",
]
