"""HTTP collaborator for loading sessions and persisting label edits."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence

import requests

from hr_review.io.session_payload import Session, normalize_session

log = logging.getLogger(__name__)

ADMIN_LABELS = ("Normal", "Ischemic Anomaly", "Arrhythmic Anomaly")


class SessionServiceError(Exception):
    """Base class for failures reported by the session backend."""

    retryable = False

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SessionNotFound(SessionServiceError):
    """The backend has no session with the requested id."""


class SessionValidationError(SessionServiceError):
    """The backend rejected the request body."""


class TransportError(SessionServiceError):
    """Network failure or unexpected server response; safe to retry."""

    retryable = True


def _error_detail(response: requests.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return fallback


class SessionClient:
    """Thin wrapper over the sessions REST API.

    The blocking methods use a shared ``requests.Session``; the ``async``
    variants run them in a worker thread so several loads can be in flight.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout: float = 10.0,
        http: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = http or requests.Session()
        if token:
            self.http.headers["Authorization"] = f"Token {token}"

    @classmethod
    def from_settings(cls, settings, http: requests.Session | None = None) -> "SessionClient":
        return cls(
            settings.api_base_url,
            token=settings.api_token,
            timeout=settings.request_timeout_s,
            http=http,
        )

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = self._url(path)
        try:
            response = self.http.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        if response.status_code == 404:
            raise SessionNotFound(f"Not found: {url}", status_code=404)
        if response.status_code in (400, 422):
            raise SessionValidationError(
                _error_detail(response, "Request rejected by the server."),
                status_code=response.status_code,
            )
        if not response.ok:
            raise TransportError(
                _error_detail(response, f"Server returned {response.status_code}."),
                status_code=response.status_code,
            )
        return response

    # --- Blocking API ---

    def fetch_session(self, session_id: Any) -> Session:
        response = self._request("GET", f"sessions/{session_id}/")
        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError(f"Session {session_id} returned a non-JSON body") from exc
        session = normalize_session(payload)
        if session.session_id is None:
            session.session_id = session_id
        log.debug("Loaded session %s with %d samples", session_id, len(session.samples))
        return session

    def list_sessions(self, volunteer: Any = None) -> list[dict[str, Any]]:
        params = {"volunteer": volunteer} if volunteer is not None else None
        response = self._request("GET", "sessions/", params=params)
        try:
            body = response.json()
        except ValueError as exc:
            raise TransportError("Session listing returned a non-JSON body") from exc
        return list(body) if isinstance(body, list) else []

    def update_anomalies(self, session_id: Any, updates: Sequence[dict[str, Any]]) -> None:
        self._request(
            "PATCH",
            f"sessions/{session_id}/update-anomalies/",
            json={"updates": list(updates)},
        )
        log.info("Saved %d anomaly updates for session %s", len(updates), session_id)

    def update_admin_label(self, session_id: Any, label: str) -> str:
        if label not in ADMIN_LABELS:
            raise ValueError(f"Unknown admin label {label!r}; expected one of {ADMIN_LABELS}")
        response = self._request(
            "PATCH",
            f"sessions/{session_id}/update-label/",
            json={"admin_label": label},
        )
        try:
            body = response.json()
        except ValueError:
            return label
        return body.get("admin_label", label) if isinstance(body, dict) else label

    def delete_session(self, session_id: Any) -> None:
        self._request("DELETE", f"sessions/{session_id}/")
        log.info("Deleted session %s", session_id)

    # --- Async API ---

    async def load(self, session_id: Any) -> Session:
        return await asyncio.to_thread(self.fetch_session, session_id)

    async def save_anomalies(self, session_id: Any, updates: Sequence[dict[str, Any]]) -> None:
        await asyncio.to_thread(self.update_anomalies, session_id, updates)

    async def set_admin_label(self, session_id: Any, label: str) -> str:
        return await asyncio.to_thread(self.update_admin_label, session_id, label)

    async def delete(self, session_id: Any) -> None:
        await asyncio.to_thread(self.delete_session, session_id)


class SessionLoader:
    """Load sessions for navigation, discarding results the operator left behind."""

    def __init__(self, client) -> None:
        self.client = client
        self._generation = 0
        self.current_id: Any = None

    def abandon(self) -> None:
        """Invalidate any load still in flight."""
        self._generation += 1
        self.current_id = None

    async def navigate(self, session_id: Any) -> Session | None:
        """Load ``session_id``; return None if another navigation superseded it."""

        self._generation += 1
        ticket = self._generation
        self.current_id = session_id
        try:
            session = await self.client.load(session_id)
        except SessionServiceError:
            if ticket != self._generation:
                log.debug("Ignoring failed load of abandoned session %s", session_id)
                return None
            raise
        if ticket != self._generation:
            log.debug("Discarding stale load of session %s", session_id)
            return None
        return session


__all__ = [
    "ADMIN_LABELS",
    "SessionClient",
    "SessionLoader",
    "SessionNotFound",
    "SessionServiceError",
    "SessionValidationError",
    "TransportError",
]
