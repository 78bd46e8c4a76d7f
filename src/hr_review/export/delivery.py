"""Hand exported files to a destination and batch-export many sessions."""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Protocol, Sequence, TextIO

from hr_review.annotations.tracker import EditState
from hr_review.export.tabular import ExportFile, export_session
from hr_review.io.remote import SessionServiceError
from hr_review.io.session_payload import Session

log = logging.getLogger(__name__)


class ExportSink(Protocol):
    def deliver(self, export_file: ExportFile) -> str:
        """Offer the file to the user; return where it went."""
        ...


class DirectorySink:
    """Write each export into a folder, replacing files of the same name."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def deliver(self, export_file: ExportFile) -> str:
        self.root.mkdir(parents=True, exist_ok=True)
        target = self.root / export_file.filename
        target.write_bytes(export_file.content)
        log.info("Wrote %s (%d bytes)", target, len(export_file.content))
        return str(target)


class StreamSink:
    """Write exports to a text stream, each preceded by a ``# <filename>`` line."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream

    def deliver(self, export_file: ExportFile) -> str:
        stream = self.stream or sys.stdout
        stream.write(f"# {export_file.filename}\n")
        stream.write(export_file.text)
        stream.flush()
        return export_file.filename


class SessionSource(Protocol):
    async def load(self, session_id: Any) -> Session:
        ...


@dataclass(slots=True)
class BatchExportReport:
    """What happened to each requested session."""

    delivered: dict[Any, str] = field(default_factory=dict)  # session id -> location
    skipped: list[Any] = field(default_factory=list)  # Sessions without samples
    failed: dict[Any, str] = field(default_factory=dict)  # session id -> error message

    @property
    def ok(self) -> bool:
        return not self.failed


async def batch_export(
    loader: SessionSource,
    session_ids: Sequence[Any],
    sink: ExportSink,
    *,
    edits: Mapping[Any, EditState] | None = None,
    delimiter: str = ",",
) -> BatchExportReport:
    """Fetch sessions concurrently and deliver one file per non-empty session.

    When ``edits`` holds an EditState for a session, its working copy is
    exported instead of the stored labels. Fetch failures are recorded in the
    report rather than raised.
    """

    edits = edits or {}
    report = BatchExportReport()
    results = await asyncio.gather(
        *(loader.load(session_id) for session_id in session_ids),
        return_exceptions=True,
    )

    for session_id, result in zip(session_ids, results):
        if isinstance(result, SessionServiceError):
            log.warning("Could not fetch session %s for export: %s", session_id, result)
            report.failed[session_id] = str(result)
            continue
        if isinstance(result, BaseException):
            raise result

        state = edits.get(session_id)
        samples = state.working if state is not None else None
        export_file = export_session(result, samples, delimiter=delimiter)
        if export_file is None:
            report.skipped.append(session_id)
            continue
        report.delivered[session_id] = sink.deliver(export_file)

    log.info(
        "Batch export: %d delivered, %d skipped, %d failed",
        len(report.delivered),
        len(report.skipped),
        len(report.failed),
    )
    return report


__all__ = [
    "BatchExportReport",
    "DirectorySink",
    "ExportSink",
    "SessionSource",
    "StreamSink",
    "batch_export",
]
