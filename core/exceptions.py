"""
Custom exceptions for the storefront client.

Exception Hierarchy:
    StorefrontError (base)
    ├── AuthenticationFailure - Credentials rejected by the auth endpoint
    ├── IntegrityError        - Token issued but identity could not be resolved
    ├── AuthorizationFailure  - 401 from any endpoint (handled app-wide)
    ├── ValidationFailure     - Local field parsing failed (never hits the network)
    ├── RemoteRejection       - Structured error returned by the backend
    └── NetworkFailure        - Transport-level failure or timeout

Usage:
    AuthorizationFailure is handled globally: the session is cleared and the
    user is sent to the login page. Every other error is recoverable and is
    shown next to the action that triggered it.
"""

from typing import Any, Dict, Optional


class StorefrontError(Exception):
    """
    Base exception for all storefront client errors.

    All custom exceptions inherit from this class, allowing callers to catch
    every application-specific error with a single except clause.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# SESSION ERRORS
# =============================================================================

class AuthenticationFailure(StorefrontError):
    """
    The auth endpoint rejected the supplied credentials.

    Raised by login only. Tokens are cleared before this propagates.
    """

    def __init__(self, message: str = "Invalid phone number or password", status_code: Optional[int] = None):
        details = {"status_code": status_code} if status_code else None
        super().__init__(message, details)
        self.status_code = status_code


class IntegrityError(StorefrontError):
    """
    A token was issued but the identity endpoint could not resolve the user.

    Login is not complete until the current user is known, so the issued
    tokens are discarded and the whole login fails.
    """

    def __init__(self, message: str = "Token issued but identity unresolvable", cause: Optional[str] = None):
        details = {"cause": cause} if cause else None
        super().__init__(message, details)
        self.cause = cause


class AuthorizationFailure(StorefrontError):
    """
    The backend answered 401 (or an authenticated action was attempted
    without a session).

    Handled app-wide: both tokens and the current user are cleared and the
    browser is redirected to the login page.
    """

    def __init__(self, message: str = "Your session has expired. Please log in again.", path: Optional[str] = None):
        details = {"path": path} if path else None
        super().__init__(message, details)
        self.path = path


# =============================================================================
# REQUEST ERRORS - shown inline, user may retry
# =============================================================================

class ValidationFailure(StorefrontError):
    """
    A field failed local parsing or a required field was empty.

    Raised before any request is built.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else None
        super().__init__(message, details)
        self.field = field


class RemoteRejection(StorefrontError):
    """
    The backend returned a structured error (insufficient stock, duplicate
    resource, forbidden transition, ...).

    The message is the backend's own detail when one was sent.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        details = {"status_code": status_code} if status_code else None
        super().__init__(message, details)
        self.status_code = status_code
        self.payload = payload


class NetworkFailure(StorefrontError):
    """
    The request never produced an HTTP response (connection refused, DNS,
    timeout after the retry budget was spent).
    """

    def __init__(self, message: str = "Could not reach the storefront service", cause: Optional[str] = None):
        details = {"cause": cause} if cause else None
        super().__init__(message, details)
        self.cause = cause


def extract_error_message(payload: Any, fallback: str) -> str:
    """
    Pull a human-readable message out of a backend error payload.

    Understands ``{"detail": "..."}``, validation lists of the form
    ``{"detail": [{"msg": "..."}, ...]}`` and ``{"message": "..."}``.

    Args:
        payload: Decoded JSON body (or None)
        fallback: Message used when nothing readable is found

    Returns:
        Message suitable for showing to the user
    """
    if not isinstance(payload, dict):
        return fallback

    detail = payload.get("detail")
    if isinstance(detail, str) and detail.strip():
        return detail.strip()
    if isinstance(detail, list):
        messages = [
            str(item.get("msg")) for item in detail
            if isinstance(item, dict) and item.get("msg")
        ]
        if messages:
            return "; ".join(messages)

    message = payload.get("message")
    if isinstance(message, str) and message.strip():
        return message.strip()

    return fallback
