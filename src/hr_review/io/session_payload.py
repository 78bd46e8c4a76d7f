"""Session payload ingestion: canonical samples from raw backend records."""

from __future__ import annotations

import copy
import json
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

import numpy as np

PREDICTION_PREFIX = "pred_"
# Payload keys that carry the samples rather than metadata
_TIMESERIES_KEY = "timeseries_data"


@dataclass(slots=True)
class Sample:
    """One timestamped row of a session's time-series."""

    sequence_index: int
    timestamp: Any  # Raw value as received, exported verbatim
    time: datetime | None
    channels: dict[str, Any] = field(default_factory=dict)
    anomaly: int = 0
    predictions: dict[str, int] = field(default_factory=dict)

    def value(self, channel: str) -> Any:
        """Return a channel value, or None when the sensor reading is missing."""
        return self.channels.get(channel)

    def to_record(self) -> dict[str, Any]:
        """Flatten back to a field -> value mapping."""

        record: dict[str, Any] = {}
        if self.timestamp is not None:
            record["timestamp"] = self.timestamp
        record.update(self.channels)
        record["anomaly"] = self.anomaly
        for name, flag in self.predictions.items():
            record[f"{PREDICTION_PREFIX}{name}"] = flag
        return record


@dataclass(slots=True)
class Session:
    """Ordered samples plus scalar metadata for one recording."""

    session_id: Any
    samples: list[Sample] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.samples

    @property
    def subject_name(self) -> str | None:
        """Volunteer display name, if the payload carries one."""

        parts = [
            str(self.metadata.get(key)).strip()
            for key in ("volunteer_first_name", "volunteer_last_name")
            if self.metadata.get(key)
        ]
        return " ".join(part for part in parts if part) or None


def coerce_flag(value: Any) -> int:
    """Return 1 only for values that mean exactly one; everything else is 0."""

    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, (int, float)):
        return 1 if value == 1 else 0
    if isinstance(value, str):
        try:
            return 1 if float(value.strip()) == 1 else 0
        except ValueError:
            return 0
    return 0


def parse_timestamp(value: Any) -> datetime | None:
    """Parse ISO strings, datetimes or epoch seconds into an aware UTC datetime."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            try:
                parsed = datetime.strptime(text, "%Y-%m-%d %H:%M:%S %z")
            except ValueError:
                return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _normalise_record(record: Any) -> dict[str, Any]:
    """Case-fold keys and deep copy values for tolerant parsing."""

    if not isinstance(record, Mapping):
        return {}
    normalised: dict[str, Any] = {}
    for key, value in record.items():
        name = str(key).strip().lower()
        if not name:
            continue
        normalised[name] = copy.deepcopy(value)
    return normalised


def normalize_samples(raw: Any) -> list[Sample]:
    """Turn raw per-sample records into canonical samples.

    Never raises: non-list input gives an empty list and non-mapping records
    become samples with no timestamp and no channels.
    """

    if not isinstance(raw, (list, tuple)):
        return []

    samples: list[Sample] = []
    for index, record in enumerate(raw):
        cleaned = _normalise_record(record)
        timestamp = cleaned.pop("timestamp", None)
        anomaly = coerce_flag(cleaned.pop("anomaly", None))
        predictions = {
            name[len(PREDICTION_PREFIX):]: coerce_flag(cleaned.pop(name))
            for name in [key for key in cleaned if key.startswith(PREDICTION_PREFIX)]
        }
        samples.append(
            Sample(
                sequence_index=index,
                timestamp=timestamp,
                time=parse_timestamp(timestamp),
                channels=cleaned,
                anomaly=anomaly,
                predictions=predictions,
            )
        )
    return samples


def normalize_session(payload: Any) -> Session:
    """Build a Session from the backend payload (metadata + raw sample list)."""

    if not isinstance(payload, Mapping):
        return Session(session_id=None)
    metadata = {
        str(key): copy.deepcopy(value)
        for key, value in payload.items()
        if key not in ("id", _TIMESERIES_KEY)
    }
    return Session(
        session_id=payload.get("id"),
        samples=normalize_samples(payload.get(_TIMESERIES_KEY)),
        metadata=metadata,
    )


def clone_samples(samples: Iterable[Sample]) -> list[Sample]:
    """Independent deep copy of a sample list."""
    return [copy.deepcopy(sample) for sample in samples]


def elapsed_seconds(samples: Sequence[Sample]) -> np.ndarray:
    """Seconds since the first sample, one value per sample.

    Samples whose timestamp could not be parsed repeat their predecessor's
    value so the axis never contains NaN.
    """

    elapsed = np.zeros(len(samples), dtype=float)
    if not samples:
        return elapsed
    origin = samples[0].time
    previous = 0.0
    for index, sample in enumerate(samples):
        if origin is not None and sample.time is not None:
            previous = (sample.time - origin).total_seconds()
        elapsed[index] = previous
    elapsed[0] = 0.0
    return elapsed


def load_session_file(path: Path) -> Session:
    """Read a session payload saved as JSON."""

    text = Path(path).read_text(encoding="utf-8")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Session file is not valid JSON: {path}") from exc
    return normalize_session(payload)


__all__ = [
    "PREDICTION_PREFIX",
    "Sample",
    "Session",
    "clone_samples",
    "coerce_flag",
    "elapsed_seconds",
    "load_session_file",
    "normalize_samples",
    "normalize_session",
    "parse_timestamp",
]
