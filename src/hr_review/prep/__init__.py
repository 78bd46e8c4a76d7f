"""Session preview summaries."""

from hr_review.prep.summaries import (
    MIN_MOVING_SPEED,
    SUMMARY_COLUMNS,
    SessionSummary,
    format_pace,
    summarize_session,
)

__all__ = [
    "MIN_MOVING_SPEED",
    "SUMMARY_COLUMNS",
    "SessionSummary",
    "format_pace",
    "summarize_session",
]
