"""
Session state models.

Session is an immutable snapshot of what the session store holds at one
moment. Callers read it; only the SessionManager changes the store.

Lifecycle:
    UNAUTHENTICATED -> AUTHENTICATING -> AUTHENTICATED -> UNAUTHENTICATED
    AUTHENTICATING -> UNAUTHENTICATED (login failed)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .user import User


class SessionStatus(Enum):
    """Where the session is in its lifecycle."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class LoadingState(Enum):
    """Whether the stored token has been checked against the identity endpoint."""

    PENDING = "pending"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class Session:
    """
    Point-in-time view of the session.

    current_user is only ever set after a successful identity fetch,
    so ``is_authenticated`` implies a token was present and accepted.
    """

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    current_user: Optional[User] = None
    loading_state: LoadingState = LoadingState.PENDING
    status: SessionStatus = SessionStatus.UNAUTHENTICATED

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED and self.current_user is not None

    @property
    def has_token(self) -> bool:
        return bool(self.access_token)

    def to_public_dict(self) -> dict:
        """Token-free view for JSON endpoints and templates."""
        return {
            "status": self.status.value,
            "loading_state": self.loading_state.value,
            "authenticated": self.is_authenticated,
            "user": self.current_user.to_dict() if self.current_user else None,
        }
