"""Tabular export and delivery of session samples."""

from hr_review.export.delivery import (
    BatchExportReport,
    DirectorySink,
    ExportSink,
    SessionSource,
    StreamSink,
    batch_export,
)
from hr_review.export.tabular import (
    MEDIA_TYPES,
    PINNED_HEADERS,
    ExportFile,
    build_export_filename,
    collect_headers,
    export_session,
    export_sessions,
    format_cell,
    samples_to_frame,
    serialize_samples,
)

__all__ = [
    "BatchExportReport",
    "DirectorySink",
    "ExportFile",
    "ExportSink",
    "MEDIA_TYPES",
    "PINNED_HEADERS",
    "SessionSource",
    "StreamSink",
    "batch_export",
    "build_export_filename",
    "collect_headers",
    "export_session",
    "export_sessions",
    "format_cell",
    "samples_to_frame",
    "serialize_samples",
]
