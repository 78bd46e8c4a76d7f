"""Summaries for session previews surfaced in the GUI and CLI."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Sequence

import numpy as np

from hr_review.io.session_payload import Sample, Session, elapsed_seconds
from hr_review.view.window import format_duration

# Speeds at or below this (m/s) count as standing still
MIN_MOVING_SPEED = 0.1


@dataclass(slots=True)
class SessionSummary:
    """Aggregate metrics for one session's samples."""

    session_id: Any
    subject: str | None
    first_timestamp: datetime | None
    last_timestamp: datetime | None
    sample_count: int
    duration_s: float
    hr_min: float | None
    hr_mean: float | None
    hr_max: float | None
    avg_pace: str
    fastest_pace: str
    slowest_pace: str
    total_ascent_m: int
    total_descent_m: int
    anomaly_count: int
    anomaly_ratio: float
    prediction_counts: dict[str, int] = field(default_factory=dict)

    def as_row(self) -> tuple[str, ...]:
        """Return human readable values for tables."""

        if self.hr_min is None:
            hr_range = "N/A"
        else:
            hr_range = f"{int(self.hr_min)}–{int(self.hr_max)} bpm"
        return (
            str(self.session_id),
            self.subject or "",
            str(self.sample_count),
            format_duration(self.duration_s),
            hr_range,
            "N/A" if self.hr_mean is None else f"{self.hr_mean:.0f} bpm",
            self.avg_pace,
            f"{self.total_ascent_m} m",
            f"{self.anomaly_count} ({self.anomaly_ratio * 100:.1f}%)",
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly mapping."""

        return {
            "session_id": self.session_id,
            "subject": self.subject,
            "first_timestamp": self.first_timestamp.isoformat() if self.first_timestamp else None,
            "last_timestamp": self.last_timestamp.isoformat() if self.last_timestamp else None,
            "sample_count": self.sample_count,
            "duration_s": self.duration_s,
            "hr_min": self.hr_min,
            "hr_mean": self.hr_mean,
            "hr_max": self.hr_max,
            "avg_pace": self.avg_pace,
            "fastest_pace": self.fastest_pace,
            "slowest_pace": self.slowest_pace,
            "total_ascent_m": self.total_ascent_m,
            "total_descent_m": self.total_descent_m,
            "anomaly_count": self.anomaly_count,
            "anomaly_ratio": self.anomaly_ratio,
            "prediction_counts": dict(self.prediction_counts),
        }


SUMMARY_COLUMNS = (
    "Session",
    "Subject",
    "Samples",
    "Duration",
    "Heart rate",
    "Mean HR",
    "Avg pace",
    "Ascent",
    "Anomalies",
)


def _numeric(samples: Sequence[Sample], channel: str) -> np.ndarray:
    """Finite values of one channel; missing or non-numeric readings are skipped."""

    values = []
    for sample in samples:
        value = sample.value(channel)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if math.isfinite(value):
            values.append(float(value))
    return np.asarray(values, dtype=float)


def format_pace(speed_mps: float | None) -> str:
    """Convert a speed in m/s into a running pace like ``5:03 /km``."""

    if speed_mps is None or speed_mps <= 0:
        return "N/A"
    seconds_per_km = int(round(1000.0 / speed_mps))
    minutes, seconds = divmod(seconds_per_km, 60)
    return f"{minutes}:{seconds:02d} /km"


def _elevation_change(samples: Sequence[Sample], channel: str = "altitude") -> tuple[int, int]:
    """Total ascent and descent over consecutive samples that both carry altitude."""

    ascent = 0.0
    descent = 0.0
    previous: float | None = None
    for sample in samples:
        value = sample.value(channel)
        current = None
        if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
            current = float(value)
        if previous is not None and current is not None:
            diff = current - previous
            if diff > 0:
                ascent += diff
            else:
                descent += -diff
        previous = current
    return int(round(ascent)), int(round(descent))


def summarize_session(
    session: Session,
    samples: Sequence[Sample] | None = None,
    *,
    channel: str = "heart_rate",
) -> SessionSummary:
    """Collect descriptive stats for one session.

    ``samples`` overrides the session's own list, e.g. with an operator's
    working copy so the anomaly count reflects unsaved edits.
    """

    rows = list(session.samples if samples is None else samples)

    heart_rate = _numeric(rows, channel)
    speeds = _numeric(rows, "speed")
    moving = speeds[speeds > MIN_MOVING_SPEED]

    elapsed = elapsed_seconds(rows)
    times = [sample.time for sample in rows if sample.time is not None]

    anomaly_count = sum(1 for sample in rows if sample.anomaly == 1)
    prediction_counts: dict[str, int] = {}
    for sample in rows:
        for name, flag in sample.predictions.items():
            prediction_counts[name] = prediction_counts.get(name, 0) + flag

    ascent, descent = _elevation_change(rows)

    return SessionSummary(
        session_id=session.session_id,
        subject=session.subject_name,
        first_timestamp=min(times) if times else None,
        last_timestamp=max(times) if times else None,
        sample_count=len(rows),
        duration_s=float(elapsed[-1]) if elapsed.size else 0.0,
        hr_min=float(heart_rate.min()) if heart_rate.size else None,
        hr_mean=float(heart_rate.mean()) if heart_rate.size else None,
        hr_max=float(heart_rate.max()) if heart_rate.size else None,
        avg_pace=format_pace(float(moving.mean())) if moving.size else "N/A",
        fastest_pace=format_pace(float(moving.max())) if moving.size else "N/A",
        slowest_pace=format_pace(float(moving.min())) if moving.size else "N/A",
        total_ascent_m=ascent,
        total_descent_m=descent,
        anomaly_count=anomaly_count,
        anomaly_ratio=anomaly_count / len(rows) if rows else 0.0,
        prediction_counts=prediction_counts,
    )


__all__ = [
    "MIN_MOVING_SPEED",
    "SUMMARY_COLUMNS",
    "SessionSummary",
    "format_pace",
    "summarize_session",
]
