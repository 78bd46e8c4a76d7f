"""Anomaly label editing and persistence."""

from hr_review.annotations.saving import SaveResult, SaveStatus, SaveTarget, save_changes
from hr_review.annotations.tracker import AnomalyChange, EditState, ResetConfirmation

__all__ = [
    "AnomalyChange",
    "EditState",
    "ResetConfirmation",
    "SaveResult",
    "SaveStatus",
    "SaveTarget",
    "save_changes",
]
