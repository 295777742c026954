"""
Session manager - owns the authentication token lifecycle.

Responsibilities:
    - login: credential exchange, token persistence, mandatory identity fetch
    - signup: account registration (does not log in)
    - logout: best-effort server invalidation, unconditional local clear
    - restore_session: one identity check per browser session
    - attach_credential: bearer header for every outgoing request
    - handle_unauthorized: the global 401 policy (clear everything)

INVARIANT:
    A stored token without a resolved user is only ever transient (during
    login or restore). Every failure path ends in SessionStore.clear(), so
    "token present, user absent" is never left behind.

Usage:
    manager = SessionManager(api_client, FlaskSessionStore())
    session = manager.login("5551234", "secret")
    session.current_user.full_name
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from core.api_client import StorefrontAPIClient
from core.exceptions import (
    IntegrityError,
    RemoteRejection,
    StorefrontError,
    ValidationFailure,
)
from core.session_store import SessionStore
from models.session import LoadingState, Session
from models.user import User
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

SIGNUP_REQUIRED_FIELDS = ("full_name", "phone", "password")
SIGNUP_OPTIONAL_FIELDS = ("avatar", "about", "birth_date")


class SessionManager:
    """
    The single owner of session state.

    Routes and services read through ``snapshot()`` / ``current_user``;
    only the methods here write to the store.
    """

    def __init__(self, api_client: StorefrontAPIClient, store: SessionStore):
        """
        Initialize the session manager and hook it into the API client.

        Args:
            api_client: Client whose requests should carry our credential
            store: Backing store for tokens and the user snapshot
        """
        self._api = api_client
        self._store = store
        self._api.install_session_hooks(
            attach_credential=self.attach_credential,
            on_unauthorized=self.handle_unauthorized,
        )

    # =========================================================================
    # READ-ONLY VIEWS
    # =========================================================================

    def snapshot(self) -> Session:
        """Current session state."""
        return self._store.snapshot()

    @property
    def current_user(self) -> Optional[User]:
        return self._store.snapshot().current_user

    @property
    def is_authenticated(self) -> bool:
        return self._store.snapshot().is_authenticated

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def login(self, identifier: str, secret: str) -> Session:
        """
        Log in and resolve the current user.

        Args:
            identifier: Phone number
            secret: Password

        Returns:
            Authenticated Session snapshot

        Raises:
            ValidationFailure: Blank identifier or secret (no request sent)
            AuthenticationFailure: Credentials rejected
            RemoteRejection: Backend error, or no access token in the reply
            NetworkFailure: Backend unreachable
            IntegrityError: Token issued but the identity fetch failed
        """
        identifier = (identifier or "").strip()
        if not identifier:
            raise ValidationFailure("Phone number is required.", field="phone")
        if not secret:
            raise ValidationFailure("Password is required.", field="password")

        self._store.begin_authentication()
        logger.info("Login attempt started")

        try:
            grant = self._api.login(identifier, secret)
        except StorefrontError:
            self._store.clear()
            logger.info("Login failed at credential exchange")
            raise

        access_token = grant.get("access_token")
        if not access_token:
            self._store.clear()
            logger.error("Login response carried no access_token")
            raise RemoteRejection("Invalid response from server - no access token")

        self._store.save_tokens(access_token, grant.get("refresh_token"))

        try:
            user = User.from_dict(self._api.get_me())
        except (StorefrontError, ValueError, TypeError) as e:
            self._store.clear()
            logger.error(f"Token issued but identity fetch failed: {e}")
            raise IntegrityError(cause=str(e))

        if not self._store.resolve_user(user):
            # a concurrent 401 cleared the tokens mid-login
            self._store.clear()
            raise IntegrityError(cause="session cleared during login")

        logger.info(f"Login complete for user {user.id}")
        return self._store.snapshot()

    def signup(self, profile: Mapping[str, Any]) -> User:
        """
        Register a new account. Does not log in.

        Args:
            profile: full_name, phone, password, and optionally avatar,
                about, birth_date

        Raises:
            ValidationFailure: A required field is blank
            RemoteRejection: Backend refused (e.g. phone already registered)
        """
        payload: Dict[str, Any] = {}
        for name in SIGNUP_REQUIRED_FIELDS:
            value = profile.get(name) or ""
            if name != "password":
                value = value.strip()
            if not value:
                raise ValidationFailure(f"{name.replace('_', ' ').capitalize()} is required.", field=name)
            payload[name] = value
        for name in SIGNUP_OPTIONAL_FIELDS:
            value = (profile.get(name) or "").strip()
            if value:
                payload[name] = value

        user = User.from_dict(self._api.signup(payload))
        logger.info(f"Signed up user {user.id}")
        return user

    def logout(self) -> None:
        """
        Log out. Server-side failure is logged, never raised.

        Local state is cleared no matter what the backend says.
        """
        try:
            if self._store.access_token:
                self._api.logout()
        except StorefrontError as e:
            logger.warning(f"Server-side logout failed (ignored): {e}")
        finally:
            self._store.clear()
            logger.info("Logged out")

    def restore_session(self) -> Session:
        """
        Validate a stored token once per browser session.

        No-op after the first call has resolved. Never raises: any failure
        clears the tokens and leaves the user absent.
        """
        snapshot = self._store.snapshot()
        if snapshot.loading_state is LoadingState.RESOLVED:
            return snapshot

        if not snapshot.access_token:
            self._store.mark_resolved()
            return self._store.snapshot()

        return self._load_user()

    def reload_user(self) -> Session:
        """Re-fetch the current user on demand (e.g. after a profile change)."""
        return self._load_user()

    def _load_user(self) -> Session:
        if not self._store.access_token:
            self._store.mark_resolved()
            return self._store.snapshot()

        try:
            user = User.from_dict(self._api.get_me())
        except (StorefrontError, ValueError, TypeError) as e:
            logger.info(f"Stored token could not be validated, clearing session: {e}")
            self._store.clear()
            return self._store.snapshot()

        if not self._store.resolve_user(user):
            self._store.clear()
        return self._store.snapshot()

    # =========================================================================
    # REQUEST HOOKS
    # =========================================================================

    def attach_credential(self, headers: Dict[str, str]) -> Dict[str, str]:
        """
        Add the bearer credential to outgoing headers.

        Returns a new dict; the input is not modified. No-op without a token.
        """
        token = self._store.access_token
        if not token:
            return dict(headers)
        decorated = dict(headers)
        decorated["Authorization"] = f"Bearer {token}"
        return decorated

    def handle_unauthorized(self, path: str = "") -> None:
        """
        Global 401 policy: clear both tokens and the current user.

        Navigation to the login page is done by the app's error handler
        for AuthorizationFailure.
        """
        if self._store.clear():
            logger.warning(f"Session cleared after 401 from {path or 'unknown endpoint'}")
