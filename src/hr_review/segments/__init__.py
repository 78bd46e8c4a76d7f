"""Segmentation of sessions into review windows."""

from hr_review.segments.navigation import SplitView
from hr_review.segments.splitter import (
    InvalidSplit,
    NoEligibleSamples,
    Segmentation,
    SplitPolicy,
    split,
    split_by_count,
    split_by_duration,
    split_by_points,
)

__all__: list[str] = [
    "InvalidSplit",
    "NoEligibleSamples",
    "Segmentation",
    "SplitPolicy",
    "SplitView",
    "split",
    "split_by_count",
    "split_by_duration",
    "split_by_points",
]
