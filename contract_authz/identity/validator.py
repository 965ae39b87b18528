"""
Validate signed session tokens and extract claims.

Before trusting anything in a bearer token we check:

1. the **signature** (HS256 with the shared secret),
2. the **issuer** (``iss``) and **audience** (``aud``),
3. the lifetime (``exp``, and ``nbf`` when present).

Only then are the claims read and turned into ``SessionClaims``.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import jwt

from .claims import SessionClaims
from .config import SessionTokenConfig

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Raised when token validation fails. Do not log the token."""

    pass


def _extract_claims(payload: dict[str, Any]) -> SessionClaims:
    user_id = payload.get("sub")
    if user_id is None or str(user_id).strip() == "":
        raise ValidationError("Invalid token: missing subject")

    company_id = payload.get("company_id")
    email = payload.get("email")

    return SessionClaims(
        user_id=str(user_id).strip(),
        company_id=str(company_id) if company_id else None,
        email=str(email) if email is not None else None,
    )


class SessionTokenValidator:
    """
    Validates session tokens and extracts claims.

    Stateless apart from its config, so one instance can serve every request.
    """

    def __init__(self, config: SessionTokenConfig) -> None:
        self._config = config

    @property
    def config(self) -> SessionTokenConfig:
        return self._config

    def validate_and_extract(self, token: str) -> SessionClaims:
        """
        Validate the token and return its claims.

        Raises ValidationError if signature, issuer, audience, lifetime or
        subject checks fail.
        """
        try:
            payload = jwt.decode(
                token,
                self._config.secret,
                algorithms=[self._config.algorithm],
                audience=self._config.audience,
                issuer=self._config.issuer,
                leeway=self._config.leeway_seconds,
                options={
                    "require": ["exp", "sub"],
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_nbf": True,
                    "verify_iss": True,
                    "verify_aud": True,
                },
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("Token expired")
            raise ValidationError("Token expired") from e
        except jwt.InvalidIssuerError as e:
            logger.info("Token invalid issuer")
            raise ValidationError("Invalid token: issuer") from e
        except jwt.InvalidAudienceError as e:
            logger.info("Token invalid audience")
            raise ValidationError("Invalid token: audience") from e
        except jwt.InvalidTokenError as e:
            logger.info("Token invalid: %s", type(e).__name__)
            raise ValidationError("Invalid token") from e

        return _extract_claims(payload)

    def issue(self, user_id: str, *, expires_in: int = 3600, **extra: Any) -> str:
        """Mint a token with this validator's settings (sign-in service and tests)."""

        now = int(time.time())
        payload = {
            "sub": user_id,
            "iss": self._config.issuer,
            "aud": self._config.audience,
            "iat": now,
            "exp": now + expires_in,
            **{k: v for k, v in extra.items() if v is not None},
        }
        return jwt.encode(payload, self._config.secret, algorithm=self._config.algorithm)


def validate_and_extract(token: str, config: SessionTokenConfig) -> SessionClaims:
    """
    Convenience function: validate a bearer token and return its claims.

    Prefer a long-lived ``SessionTokenValidator`` when validating many tokens.
    """
    return SessionTokenValidator(config).validate_and_extract(token)
