"""Delimited-text export of a session's samples.

The header is the union of every field seen across the samples, with
``timestamp`` and ``anomaly`` pinned to the front. Cells are written by the
standard ``csv`` writer so values containing the delimiter, quotes or line
breaks are quoted and stay parseable.
"""

from __future__ import annotations

import csv
import io
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

import pandas as pd

from hr_review.io.session_payload import Sample, Session, parse_timestamp

PINNED_HEADERS = ("timestamp", "anomaly")
MEDIA_TYPES = {
    ",": "text/csv",
    "\t": "text/tab-separated-values",
}
_UNSAFE = re.compile(r"[^A-Za-z0-9]+")


@dataclass(frozen=True, slots=True)
class ExportFile:
    """One serialized session, ready to hand to a sink."""

    filename: str
    content: bytes
    media_type: str = "text/csv"

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")


def collect_headers(records: Iterable[Mapping[str, Any]]) -> list[str]:
    """Union of field names, pinned fields first, the rest in first-seen order."""

    seen: dict[str, None] = {}
    for record in records:
        for key in record:
            seen.setdefault(key, None)
    pinned = [name for name in PINNED_HEADERS if name in seen]
    return pinned + [name for name in seen if name not in PINNED_HEADERS]


def format_cell(value: Any) -> str:
    """Render one value; missing readings become empty cells."""
    if value is None:
        return ""
    return str(value)


def serialize_samples(samples: Sequence[Sample], delimiter: str = ",") -> str:
    """Header line plus one line per sample, in sequence order."""

    records = [sample.to_record() for sample in samples]
    headers = collect_headers(records)

    buffer = io.StringIO()
    writer = csv.writer(
        buffer,
        delimiter=delimiter,
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\n",
    )
    writer.writerow(headers)
    for record in records:
        writer.writerow([format_cell(record.get(name)) for name in headers])
    return buffer.getvalue()


def _sanitize(text: str) -> str:
    return _UNSAFE.sub("_", text).strip("_")


def _subject_identity(session: Session) -> str:
    if session.subject_name:
        identity = _sanitize(session.subject_name)
        if identity:
            return identity
    volunteer = session.metadata.get("volunteer")
    if volunteer not in (None, ""):
        identity = _sanitize(str(volunteer))
        if identity:
            return f"volunteer_{identity}"
    return "subject"


def _recording_stamp(session: Session, samples: Sequence[Sample]) -> str:
    candidates = []
    if samples:
        candidates.append(samples[0].time)
    candidates.append(parse_timestamp(session.metadata.get("session_date")))
    candidates.append(parse_timestamp(session.metadata.get("uploaded_at")))
    for moment in candidates:
        if moment is not None:
            return moment.strftime("%Y%m%d-%H%M%S")
    return "undated"


def build_export_filename(
    session: Session,
    samples: Sequence[Sample] | None = None,
    extension: str = "csv",
) -> str:
    """Deterministic, filesystem-safe name for a session export."""

    rows = session.samples if samples is None else samples
    session_part = _sanitize(str(session.session_id)) if session.session_id is not None else ""
    return (
        f"{_subject_identity(session)}_session-{session_part or 'unknown'}_"
        f"{_recording_stamp(session, rows)}.{extension.lstrip('.')}"
    )


def export_session(
    session: Session,
    samples: Sequence[Sample] | None = None,
    delimiter: str = ",",
) -> ExportFile | None:
    """Serialize one session; None when there is nothing to export.

    Pass the operator's working copy as ``samples`` to export unsaved labels.
    """

    rows = session.samples if samples is None else samples
    if not rows:
        return None
    extension = "tsv" if delimiter == "\t" else "csv"
    return ExportFile(
        filename=build_export_filename(session, rows, extension=extension),
        content=serialize_samples(rows, delimiter=delimiter).encode("utf-8"),
        media_type=MEDIA_TYPES.get(delimiter, "text/plain"),
    )


def export_sessions(
    items: Iterable[Session | tuple[Session, Sequence[Sample] | None]],
    delimiter: str = ",",
) -> list[ExportFile]:
    """One file per non-empty session."""

    files = []
    for item in items:
        if isinstance(item, Session):
            session, samples = item, None
        else:
            session, samples = item
        exported = export_session(session, samples, delimiter=delimiter)
        if exported is not None:
            files.append(exported)
    return files


def samples_to_frame(samples: Sequence[Sample]) -> pd.DataFrame:
    """Raw data table with the same column order as the export."""

    records = [sample.to_record() for sample in samples]
    return pd.DataFrame(records, columns=collect_headers(records))


__all__ = [
    "ExportFile",
    "MEDIA_TYPES",
    "PINNED_HEADERS",
    "build_export_filename",
    "collect_headers",
    "export_session",
    "export_sessions",
    "format_cell",
    "samples_to_frame",
    "serialize_samples",
]
