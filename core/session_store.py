"""
Session storage - the single mutation point for the token pair.

The tokens, the current-user snapshot and the lifecycle markers live in one
mapping under fixed keys. Every write goes through SessionStore methods,
which hold a lock so a 401-triggered clear can never interleave with a
read-then-write of the token pair.

Two backings:
    FlaskSessionStore    - the signed Flask session cookie (lives in the browser)
    InMemorySessionStore - a plain dict, for scripts and tests

Usage:
    store = FlaskSessionStore()
    store.save_tokens("abc", "def")
    store.resolve_user(user)
    snapshot = store.snapshot()
    store.clear()
"""

from __future__ import annotations

import threading
from typing import Any, MutableMapping, Optional

from models.session import LoadingState, Session, SessionStatus
from models.user import User
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"
CURRENT_USER_KEY = "current_user"
LOADING_STATE_KEY = "session_loading_state"
STATUS_KEY = "session_status"


class SessionStore:
    """
    Base store over a mutable mapping.

    Subclasses provide ``_backing()`` and may override ``_mark_modified()``.
    """

    def __init__(self):
        self._lock = threading.RLock()

    def _backing(self) -> MutableMapping[str, Any]:
        raise NotImplementedError

    def _mark_modified(self) -> None:
        """Hook for backings that need to be told they changed."""

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def access_token(self) -> Optional[str]:
        with self._lock:
            return self._backing().get(ACCESS_TOKEN_KEY) or None

    def snapshot(self) -> Session:
        """Return an immutable view of the stored session."""
        with self._lock:
            data = self._backing()
            user_data = data.get(CURRENT_USER_KEY)
            user = None
            if user_data:
                try:
                    user = User.from_dict(user_data)
                except ValueError:
                    logger.warning("Discarding malformed user snapshot from session")

            return Session(
                access_token=data.get(ACCESS_TOKEN_KEY) or None,
                refresh_token=data.get(REFRESH_TOKEN_KEY) or None,
                current_user=user,
                loading_state=LoadingState(data.get(LOADING_STATE_KEY, LoadingState.PENDING.value)),
                status=SessionStatus(data.get(STATUS_KEY, SessionStatus.UNAUTHENTICATED.value)),
            )

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def begin_authentication(self) -> None:
        """Mark a login as in flight."""
        with self._lock:
            self._backing()[STATUS_KEY] = SessionStatus.AUTHENTICATING.value
            self._mark_modified()

    def save_tokens(self, access_token: str, refresh_token: Optional[str] = None) -> None:
        """
        Replace the token pair.

        A missing refresh token removes any previously stored one so the pair
        always belongs to the same grant.
        """
        with self._lock:
            data = self._backing()
            data[ACCESS_TOKEN_KEY] = access_token
            if refresh_token:
                data[REFRESH_TOKEN_KEY] = refresh_token
            else:
                data.pop(REFRESH_TOKEN_KEY, None)
            self._mark_modified()

    def resolve_user(self, user: User) -> bool:
        """
        Store the current user and mark the session authenticated.

        Refuses (returns False) when no access token is stored, which happens
        if a 401 cleared the session while the identity fetch was in flight.
        """
        with self._lock:
            data = self._backing()
            if not data.get(ACCESS_TOKEN_KEY):
                return False
            data[CURRENT_USER_KEY] = user.to_dict()
            data[STATUS_KEY] = SessionStatus.AUTHENTICATED.value
            data[LOADING_STATE_KEY] = LoadingState.RESOLVED.value
            self._mark_modified()
            return True

    def mark_resolved(self) -> None:
        """Record that the stored token (if any) has been checked."""
        with self._lock:
            self._backing()[LOADING_STATE_KEY] = LoadingState.RESOLVED.value
            self._mark_modified()

    def clear(self) -> bool:
        """
        Drop both tokens and the current user in one step.

        Idempotent. The loading state stays resolved: after a clear there is
        nothing left to check.

        Returns:
            True if anything was actually removed
        """
        with self._lock:
            data = self._backing()
            had_state = any(data.get(k) for k in (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, CURRENT_USER_KEY))
            for key in (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, CURRENT_USER_KEY):
                data.pop(key, None)
            data[STATUS_KEY] = SessionStatus.UNAUTHENTICATED.value
            data[LOADING_STATE_KEY] = LoadingState.RESOLVED.value
            self._mark_modified()
            return had_state


class InMemorySessionStore(SessionStore):
    """Store backed by a private dict."""

    def __init__(self, initial: Optional[MutableMapping[str, Any]] = None):
        super().__init__()
        self._data: MutableMapping[str, Any] = dict(initial or {})

    def _backing(self) -> MutableMapping[str, Any]:
        return self._data


class FlaskSessionStore(SessionStore):
    """
    Store backed by ``flask.session``.

    Must be used inside a request context. Worker threads that touch it need
    the request context copied in (``flask.copy_current_request_context``).
    """

    def _backing(self) -> MutableMapping[str, Any]:
        from flask import session
        return session

    def _mark_modified(self) -> None:
        from flask import session
        session.modified = True
