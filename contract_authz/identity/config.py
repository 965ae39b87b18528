"""Session-token configuration. No hardcoded secrets."""

from __future__ import annotations

from dataclasses import dataclass

from contract_authz.settings import Settings


@dataclass(frozen=True)
class SessionTokenConfig:
    """
    Settings for validating session tokens issued by the sign-in service.

    Required:
        APP_TOKEN_SECRET: shared HMAC secret (HS256).

    Optional:
        APP_TOKEN_ISSUER: expected ``iss`` (default "contract-authz").
        APP_TOKEN_AUDIENCE: expected ``aud`` (default "contract-authz-api").
        APP_TOKEN_LEEWAY_SECONDS: tolerance for exp/nbf (default 30).
    """

    secret: str
    issuer: str
    audience: str
    leeway_seconds: int = 30
    algorithm: str = "HS256"

    @classmethod
    def from_settings(cls, settings: Settings) -> SessionTokenConfig:
        secret = (settings.token_secret or "").strip()
        if not secret:
            raise ValueError("APP_TOKEN_SECRET must be set")
        return cls(
            secret=secret,
            issuer=settings.token_issuer,
            audience=settings.token_audience,
            leeway_seconds=settings.token_leeway_seconds,
        )
