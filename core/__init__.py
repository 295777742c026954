"""
Core module for the storefront client.

Contains fundamental infrastructure components:
- exceptions: Custom exception hierarchy
- session_store: Single mutation point for tokens and the current user
- api_client: HTTP client for the storefront REST API
"""

from .exceptions import (
    StorefrontError,
    AuthenticationFailure,
    IntegrityError,
    AuthorizationFailure,
    ValidationFailure,
    RemoteRejection,
    NetworkFailure,
    extract_error_message,
)
from .session_store import SessionStore, FlaskSessionStore, InMemorySessionStore
from .api_client import StorefrontAPIClient, build_http_session

__all__ = [
    "StorefrontError",
    "AuthenticationFailure",
    "IntegrityError",
    "AuthorizationFailure",
    "ValidationFailure",
    "RemoteRejection",
    "NetworkFailure",
    "extract_error_message",
    "SessionStore",
    "FlaskSessionStore",
    "InMemorySessionStore",
    "StorefrontAPIClient",
    "build_http_session",
]
