"""Serializable claims extracted from a validated session token."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SessionClaims:
    """
    What a valid token says about the caller.

    Roles are not carried; they are read from the user record on every request.
    """

    user_id: str
    """Canonical user id (``sub``)."""

    company_id: str | None = None
    """Company selected at sign-in; a request header may override it."""

    email: str | None = None
    """For display only; never used for authorization."""

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serializable dict."""
        return {
            "user_id": self.user_id,
            "company_id": self.company_id,
            "email": self.email,
        }
