"""Working copy of anomaly labels tracked against the last saved baseline."""

from __future__ import annotations

import itertools
import numbers
from dataclasses import dataclass
from typing import Any, Sequence

from hr_review.io.session_payload import Sample, clone_samples

_state_ids = itertools.count(1)


@dataclass(frozen=True, slots=True)
class AnomalyChange:
    """One sample whose label differs from the baseline."""

    sequence_index: int
    timestamp: Any
    before: int  # Baseline value ("from")
    after: int  # Working value ("to")

    def to_update(self) -> dict[str, Any]:
        """Wire form expected by the backend."""
        return {"timestamp": self.timestamp, "anomaly": self.after}


@dataclass(frozen=True, slots=True)
class ResetConfirmation:
    """Single-use permission to clear every label of one EditState."""

    state_id: int
    token: int
    labels_to_clear: int


class EditState:
    """Operator edits for one loaded session.

    ``working`` and ``baseline`` hold the same samples in the same order;
    only ``anomaly`` ever changes. The diff is always recomputed from both
    lists, never accumulated, so toggling a sample twice cancels out.
    """

    def __init__(self, working: list[Sample], baseline: list[Sample]) -> None:
        if len(working) != len(baseline):
            raise ValueError("Working copy and baseline must have the same length")
        self.working = working
        self.baseline = baseline
        self.dirty = False
        self._id = next(_state_ids)
        self._pending_reset: int | None = None
        self._reset_tokens = itertools.count(1)

    @classmethod
    def from_samples(cls, samples: Sequence[Sample]) -> "EditState":
        return cls(clone_samples(samples), clone_samples(samples))

    def __len__(self) -> int:
        return len(self.working)

    def _valid_index(self, index: Any) -> bool:
        return (
            isinstance(index, numbers.Integral)
            and not isinstance(index, bool)
            and 0 <= index < len(self.working)
        )

    def toggle(self, sequence_index: Any) -> bool:
        """Flip one label; out-of-range indices are ignored."""

        if not self._valid_index(sequence_index):
            return False
        sample = self.working[sequence_index]
        sample.anomaly = 0 if sample.anomaly == 1 else 1
        self.dirty = True
        return True

    def request_reset_all(self) -> ResetConfirmation:
        """First step of clearing every label; pass the result to ``reset_all``."""

        token = next(self._reset_tokens)
        self._pending_reset = token
        labelled = sum(1 for sample in self.working if sample.anomaly == 1)
        return ResetConfirmation(state_id=self._id, token=token, labels_to_clear=labelled)

    def cancel_reset_all(self) -> None:
        self._pending_reset = None

    def reset_all(self, confirmation: ResetConfirmation) -> int:
        """Clear every working label; returns how many samples changed."""

        if (
            not isinstance(confirmation, ResetConfirmation)
            or confirmation.state_id != self._id
            or confirmation.token != self._pending_reset
        ):
            raise ValueError("reset_all needs a fresh confirmation from request_reset_all()")
        self._pending_reset = None

        cleared = 0
        for sample in self.working:
            if sample.anomaly != 0:
                sample.anomaly = 0
                cleared += 1
        self.dirty = True
        return cleared

    def compute_diff(self) -> list[AnomalyChange]:
        """Every sample whose working label differs from the baseline."""

        return [
            AnomalyChange(
                sequence_index=index,
                timestamp=current.timestamp,
                before=saved.anomaly,
                after=current.anomaly,
            )
            for index, (current, saved) in enumerate(zip(self.working, self.baseline))
            if current.anomaly != saved.anomaly
        ]

    @property
    def has_changes(self) -> bool:
        return any(
            current.anomaly != saved.anomaly
            for current, saved in zip(self.working, self.baseline)
        )

    @property
    def pending_count(self) -> int:
        return len(self.compute_diff())

    def commit(self, changes: Sequence[AnomalyChange] | None = None) -> None:
        """Adopt saved labels as the new baseline.

        Call only after the backend confirmed the save. Without arguments the
        whole working copy becomes the baseline; with a snapshot only those
        samples are written, so edits made while the save was in flight stay
        pending.
        """

        if changes is None:
            self.baseline = clone_samples(self.working)
        else:
            for change in changes:
                if not self._valid_index(change.sequence_index):
                    raise ValueError(f"Change refers to unknown sample {change.sequence_index}")
                self.baseline[change.sequence_index].anomaly = change.after
        self.dirty = self.has_changes


__all__ = ["AnomalyChange", "EditState", "ResetConfirmation"]
