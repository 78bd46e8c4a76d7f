"""Persist a snapshot of label edits and commit it only on success."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

from hr_review.annotations.tracker import AnomalyChange, EditState
from hr_review.io.remote import SessionServiceError

log = logging.getLogger(__name__)


class SaveTarget(Protocol):
    async def save_anomalies(self, session_id: Any, updates: Sequence[dict[str, Any]]) -> None:
        ...


class SaveStatus:
    SAVED = "saved"
    NO_CHANGES = "no_changes"
    FAILED = "failed"


@dataclass(slots=True)
class SaveResult:
    """Outcome of one save attempt."""

    status: str
    changes: list[AnomalyChange] = field(default_factory=list)
    message: str = ""
    retryable: bool = False
    error: SessionServiceError | None = None

    @property
    def ok(self) -> bool:
        return self.status == SaveStatus.SAVED

    @property
    def is_error(self) -> bool:
        return self.status == SaveStatus.FAILED


async def save_changes(state: EditState, session_id: Any, target: SaveTarget) -> SaveResult:
    """Send the current diff and commit exactly that snapshot if it was stored.

    The snapshot is taken before awaiting, so toggles made while the request
    is in flight stay pending. On failure nothing is committed and the
    working copy keeps the operator's edits for a retry.
    """

    snapshot = state.compute_diff()
    if not snapshot:
        return SaveResult(status=SaveStatus.NO_CHANGES, message="No changes detected to save.")

    updates = [change.to_update() for change in snapshot]
    try:
        await target.save_anomalies(session_id, updates)
    except SessionServiceError as exc:
        log.warning("Saving %d label changes for session %s failed: %s", len(snapshot), session_id, exc)
        return SaveResult(
            status=SaveStatus.FAILED,
            changes=snapshot,
            message=str(exc) or "Failed to save changes.",
            retryable=exc.retryable,
            error=exc,
        )

    state.commit(snapshot)
    log.info("Committed %d label changes for session %s", len(snapshot), session_id)
    return SaveResult(
        status=SaveStatus.SAVED,
        changes=snapshot,
        message="Changes saved successfully!",
    )


__all__ = ["SaveResult", "SaveStatus", "SaveTarget", "save_changes"]
