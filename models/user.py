"""
User data model.

A read-only snapshot of the account returned by the identity endpoint.
The client never edits it; a fresh copy replaces it on reload.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class User:
    """
    The authenticated account.

    Stored in the browser session next to the tokens so the current user
    survives between requests without re-fetching.
    """

    id: int
    """Backend identifier."""

    full_name: str
    """Display name."""

    phone: str
    """Login identifier."""

    avatar: Optional[str] = None
    """Avatar image URL."""

    about: Optional[str] = None
    """Free-text profile description."""

    birth_date: Optional[str] = None
    """ISO date string as sent by the backend."""

    rating: float = 0.0
    """Seller rating."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for session storage."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        """Create from an API payload or a session dictionary."""
        if not isinstance(data, dict) or data.get("id") is None:
            raise ValueError("User payload has no id")

        return cls(
            id=data["id"],
            full_name=data.get("full_name") or "",
            phone=data.get("phone") or "",
            avatar=data.get("avatar") or None,
            about=data.get("about") or None,
            birth_date=data.get("birth_date") or None,
            rating=float(data.get("rating") or 0.0),
        )
