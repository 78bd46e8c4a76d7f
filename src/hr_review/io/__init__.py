"""Session ingestion and the backend collaborator."""

from hr_review.io.session_payload import (
    PREDICTION_PREFIX,
    Sample,
    Session,
    clone_samples,
    coerce_flag,
    elapsed_seconds,
    load_session_file,
    normalize_samples,
    normalize_session,
    parse_timestamp,
)
from hr_review.io.remote import (
    ADMIN_LABELS,
    SessionClient,
    SessionLoader,
    SessionNotFound,
    SessionServiceError,
    SessionValidationError,
    TransportError,
)

__all__ = [
    # Normalizer
    "PREDICTION_PREFIX",
    "Sample",
    "Session",
    "clone_samples",
    "coerce_flag",
    "elapsed_seconds",
    "load_session_file",
    "normalize_samples",
    "normalize_session",
    "parse_timestamp",
    # Backend
    "ADMIN_LABELS",
    "SessionClient",
    "SessionLoader",
    "SessionNotFound",
    "SessionServiceError",
    "SessionValidationError",
    "TransportError",
]
