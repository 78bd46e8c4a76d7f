"""View window, axis range and anomaly timeline helpers."""

from hr_review.view.overview import DEFAULT_HR_DOMAIN, anomaly_runs, heart_rate_domain, zoom_to_run
from hr_review.view.window import (
    DEFAULT_AXIS_PADDING,
    FULL_EXTENT,
    AxisRange,
    InvalidRange,
    ViewWindow,
    ViewWindowManager,
    axis_range,
    first_at_or_after,
    format_duration,
    parse_time_string,
)

__all__ = [
    "DEFAULT_AXIS_PADDING",
    "DEFAULT_HR_DOMAIN",
    "FULL_EXTENT",
    "AxisRange",
    "InvalidRange",
    "ViewWindow",
    "ViewWindowManager",
    "anomaly_runs",
    "axis_range",
    "first_at_or_after",
    "format_duration",
    "heart_rate_domain",
    "parse_time_string",
    "zoom_to_run",
]
