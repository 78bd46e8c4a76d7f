"""Command-line surface for reviewing and exporting sessions."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import math
import sys
from pathlib import Path
from typing import Any, Iterable

from hr_review.config import load_settings
from hr_review.export import DirectorySink, StreamSink, export_session
from hr_review.io import SessionClient, SessionServiceError, elapsed_seconds, load_session_file
from hr_review.io.session_payload import Session
from hr_review.prep import SUMMARY_COLUMNS, SessionSummary, summarize_session
from hr_review.segments import Segmentation, SplitPolicy, SplitView
from hr_review.view import InvalidRange, ViewWindowManager, axis_range, format_duration

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create a reusable argument parser for scripts and tests."""
    parser = argparse.ArgumentParser(
        prog="hr-review",
        description="Inspect a heart-rate session, split it for review and export its samples.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--session",
        type=Path,
        help="Session payload saved as JSON.",
    )
    source.add_argument(
        "--session-id",
        help="Fetch the session from the backend configured in the settings file.",
    )
    parser.add_argument(
        "--config",
        default=None,
        type=Path,
        help="Path to the YAML settings file (default: config/review.yml if present).",
    )
    parser.add_argument(
        "--window",
        nargs=2,
        metavar=("START", "END"),
        help="Restrict the view to elapsed times given as HH:MM:SS, MM:SS or SS.",
    )
    parser.add_argument(
        "--split",
        choices=SplitPolicy.ALL,
        help="Partition the session into review segments.",
    )
    parser.add_argument(
        "--split-value",
        type=float,
        default=None,
        help="Segment count, duration in seconds or points per segment.",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print heart-rate, pace, elevation and anomaly statistics.",
    )
    parser.add_argument(
        "--export-dir",
        default=None,
        help="Write the samples as CSV into this folder ('-' for stdout).",
    )
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format for the report.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


def _load(args: argparse.Namespace, settings) -> Session:
    if args.session is not None:
        return load_session_file(args.session)
    client = SessionClient.from_settings(settings)
    return asyncio.run(client.load(args.session_id))


def _split_value(value: float | None) -> Any:
    # Whole numbers go through as ints so count/points validation accepts them
    if value is not None and math.isfinite(value) and value == int(value):
        return int(value)
    return value


def main(argv: Iterable[str] | None = None) -> int:
    """Entry point invoked by `python -m hr_review.cli` or the console script."""
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.split and args.split_value is None:
        parser.error("--split requires --split-value")

    try:
        settings = load_settings(args.config, strict=args.config is not None)
    except (FileNotFoundError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        session = _load(args, settings)
    except (FileNotFoundError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except SessionServiceError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    samples = session.samples
    elapsed = elapsed_seconds(samples)
    manager = ViewWindowManager(len(samples))
    navigator = SplitView(manager)
    report: dict[str, Any] = {
        "session_id": session.session_id,
        "samples": len(samples),
        "duration": format_duration(float(elapsed[-1]) if elapsed.size else None),
    }

    if args.window:
        result = navigator.by_time_string(args.window[0], args.window[1], elapsed)
        if isinstance(result, InvalidRange):
            print(f"error: {result.reason}", file=sys.stderr)
            return 2

    if args.split:
        outcome = navigator.apply(
            args.split,
            _split_value(args.split_value),
            samples,
            channel=settings.primary_channel,
            elapsed=elapsed,
        )
        if isinstance(outcome, Segmentation):
            report["segments"] = [
                {"start_index": segment.start_index, "end_index": segment.end_index}
                for segment in outcome.segments
            ]
        else:
            report["split_message"] = outcome.message

    window = manager.window
    if window is not None:
        report["window"] = {"start_index": window.start_index, "end_index": window.end_index}
        low, high = axis_range(window, elapsed, padding=settings.axis_padding)
        report["axis_range"] = None if low is None else [low, high]

    summary = None
    if args.summary:
        summary = summarize_session(session, channel=settings.primary_channel)
        report["summary"] = summary.to_dict()

    if args.export_dir:
        export_file = export_session(session, delimiter=settings.export_delimiter)
        if export_file is None:
            report["export"] = None
            log.warning("Session %s has no samples; nothing exported", session.session_id)
        else:
            sink = StreamSink() if args.export_dir == "-" else DirectorySink(args.export_dir)
            report["export"] = sink.deliver(export_file)
        if args.export_dir == "-":
            # Stdout carries the export itself
            return 0

    if args.format == "json":
        print(json.dumps(report, indent=2, default=str))
        return 0
    _print_text(report, summary)
    return 0


def _print_text(report: dict[str, Any], summary: SessionSummary | None) -> None:
    print(f"Session {report['session_id']}: {report['samples']} samples, {report['duration']}")
    window = report.get("window")
    if window:
        print(f"  window: {window['start_index']}..{window['end_index']}")
    if "split_message" in report:
        print(f"  split: {report['split_message']}")
    for number, segment in enumerate(report.get("segments", []), start=1):
        print(f"  - segment {number}: {segment['start_index']}..{segment['end_index']}")
    if summary is not None:
        for column, value in zip(SUMMARY_COLUMNS, summary.as_row()):
            print(f"  {column}: {value}")
    if report.get("export"):
        print(f"  exported: {report['export']}")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
