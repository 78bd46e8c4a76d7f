"""Couple a segmentation to the view window for sequential review."""

from __future__ import annotations

from typing import Any, Sequence

from hr_review.io.session_payload import Sample
from hr_review.segments.splitter import Segmentation, SplitOutcome, split
from hr_review.view.window import InvalidRange, ViewWindow, ViewWindowManager


class SplitView:
    """Segment-by-segment navigation that drives a ViewWindowManager.

    Manual window changes made through this object drop the active split,
    while segment navigation keeps it.
    """

    def __init__(self, manager: ViewWindowManager) -> None:
        self.manager = manager
        self.segmentation: Segmentation | None = None

    @property
    def is_active(self) -> bool:
        return self.segmentation is not None

    def apply(
        self,
        policy: str,
        value: Any,
        samples: Sequence[Sample],
        *,
        channel: str = "heart_rate",
        elapsed: Sequence[float] | None = None,
    ) -> SplitOutcome:
        """Split the samples and show the first segment.

        Rejected requests leave the current split and window untouched.
        """

        outcome = split(policy, value, samples, channel=channel, elapsed=elapsed)
        if isinstance(outcome, Segmentation):
            self.segmentation = outcome
            self.manager.reset(len(samples))
            self._show(outcome.current)
        return outcome

    def next(self) -> ViewWindow | None:
        if self.segmentation is None:
            return self.manager.window
        return self._show(self.segmentation.next())

    def previous(self) -> ViewWindow | None:
        if self.segmentation is None:
            return self.manager.window
        return self._show(self.segmentation.previous())

    def clear(self) -> ViewWindow | None:
        """Drop the split and show the whole sequence again."""
        self.segmentation = None
        return self.manager.reset()

    def set_window(self, start: Any, end: Any) -> ViewWindow | None:
        self.segmentation = None
        return self.manager.set_window(start, end)

    def by_time_string(
        self, start_text: str, end_text: str, elapsed: Sequence[float]
    ) -> ViewWindow | InvalidRange:
        result = self.manager.by_time_string(start_text, end_text, elapsed)
        if isinstance(result, ViewWindow):
            self.segmentation = None
        return result

    def _show(self, segment: ViewWindow) -> ViewWindow | None:
        return self.manager.set_window(segment.start_index, segment.end_index)


__all__ = ["SplitView"]
