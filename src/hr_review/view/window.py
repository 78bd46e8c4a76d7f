"""Zoom/pan window over a session's samples and the padded x-axis range."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, NamedTuple, Sequence

import numpy as np

log = logging.getLogger(__name__)

DEFAULT_AXIS_PADDING = 0.05

_TIME_PART = re.compile(r"^\d+(?:\.\d+)?$")


@dataclass(frozen=True, slots=True)
class ViewWindow:
    """Inclusive index range into a sample sequence."""

    start_index: int
    end_index: int

    @property
    def size(self) -> int:
        return self.end_index - self.start_index + 1

    def contains(self, index: int) -> bool:
        return self.start_index <= index <= self.end_index

    def as_slice(self) -> slice:
        return slice(self.start_index, self.end_index + 1)


class AxisRange(NamedTuple):
    """Display range in elapsed seconds; ``None`` bounds mean autorange."""

    low: float | None
    high: float | None

    @property
    def is_full_extent(self) -> bool:
        return self.low is None or self.high is None


FULL_EXTENT = AxisRange(None, None)


@dataclass(frozen=True, slots=True)
class InvalidRange:
    """Rejected time-range request, reported to the operator."""

    reason: str


def _as_index(value: Any, fallback: int) -> int:
    """Best-effort integer conversion for caller supplied indices."""

    if isinstance(value, bool):
        return fallback
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if math.isnan(number):
        return fallback
    if math.isinf(number):
        return -1 if number < 0 else 2**62
    return int(number)


class ViewWindowManager:
    """Owns the visible slice of one session's samples."""

    def __init__(self, length: int = 0) -> None:
        self.length = 0
        self.window: ViewWindow | None = None
        self.reset(length)

    @property
    def is_absent(self) -> bool:
        return self.window is None

    def reset(self, sequence_length: int | None = None) -> ViewWindow | None:
        """Show the full sequence, or nothing when it is empty."""

        if sequence_length is not None:
            self.length = max(int(sequence_length), 0)
        if self.length == 0:
            self.window = None
        else:
            self.window = ViewWindow(0, self.length - 1)
        return self.window

    def set_window(self, start: Any, end: Any) -> ViewWindow | None:
        """Store a window after clamping both bounds into the sequence."""

        if self.length == 0:
            self.window = None
            return None
        last = self.length - 1
        start_index = min(max(_as_index(start, 0), 0), last)
        end_index = min(max(_as_index(end, last), start_index), last)
        self.window = ViewWindow(start_index, end_index)
        log.debug("View window set to %s..%s", start_index, end_index)
        return self.window

    def by_time_string(
        self, start_text: str, end_text: str, elapsed: Sequence[float]
    ) -> ViewWindow | InvalidRange:
        """Resolve textual elapsed times to sample indices and apply them."""

        start_s = parse_time_string(start_text)
        end_s = parse_time_string(end_text)
        if start_s is None or end_s is None:
            return InvalidRange("Times must look like HH:MM:SS, MM:SS or SS.")
        if start_s >= end_s:
            return InvalidRange("Start time must be before end time.")

        values = np.asarray(elapsed, dtype=float)
        if values.size == 0:
            return InvalidRange("Session has no samples.")
        start_index = first_at_or_after(values, start_s)
        if start_index is None:
            return InvalidRange("Start time is beyond the end of the recording.")
        end_index = first_at_or_after(values, end_s)
        if end_index is None:
            end_index = values.size - 1

        if self.length != values.size:
            self.length = int(values.size)
        window = self.set_window(start_index, end_index)
        return window if window is not None else InvalidRange("Session has no samples.")


def first_at_or_after(elapsed: np.ndarray, seconds: float) -> int | None:
    """Index of the first sample whose elapsed time is >= ``seconds``."""

    mask = elapsed >= seconds
    if not mask.any():
        return None
    return int(np.argmax(mask))


def axis_range(
    window: ViewWindow | None,
    elapsed: Sequence[float],
    padding: float = DEFAULT_AXIS_PADDING,
) -> AxisRange:
    """Padded x-axis range for a window, or FULL_EXTENT when it would be degenerate."""

    if window is None or window.start_index == window.end_index:
        return FULL_EXTENT
    values = np.asarray(elapsed, dtype=float)
    if window.start_index < 0 or window.end_index >= values.size:
        return FULL_EXTENT
    start_s = float(values[window.start_index])
    end_s = float(values[window.end_index])
    if end_s <= start_s:
        return FULL_EXTENT
    pad = padding * (end_s - start_s)
    return AxisRange(start_s - pad, end_s + pad)


def parse_time_string(text: Any) -> float | None:
    """Parse "HH:MM:SS", "MM:SS" or "SS" into seconds; None when malformed."""

    if not isinstance(text, str):
        return None
    parts = [part.strip() for part in text.strip().split(":")]
    if not parts or len(parts) > 3:
        return None
    if not all(_TIME_PART.match(part) for part in parts):
        return None
    # Only the seconds field may carry a fraction
    if any("." in part for part in parts[:-1]):
        return None

    numbers = [float(part) for part in parts]
    if len(numbers) > 1 and numbers[-1] >= 60:
        return None
    if len(numbers) == 3 and numbers[1] >= 60:
        return None

    total = 0.0
    for number in numbers:
        total = total * 60 + number
    return total


def format_duration(total_seconds: float | None) -> str:
    """Render seconds as HH:MM:SS, dropping the hour when it is zero."""

    if total_seconds is None or (isinstance(total_seconds, float) and math.isnan(total_seconds)):
        return "N/A"
    total = int(round(total_seconds))
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


__all__ = [
    "DEFAULT_AXIS_PADDING",
    "FULL_EXTENT",
    "AxisRange",
    "InvalidRange",
    "ViewWindow",
    "ViewWindowManager",
    "axis_range",
    "first_at_or_after",
    "format_duration",
    "parse_time_string",
]
