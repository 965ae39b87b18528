"""
Session-token validation for the identity collaborator.

This package depends only on PyJWT and the app settings; it knows nothing
about tenants or permissions.
"""

from .claims import SessionClaims
from .config import SessionTokenConfig
from .validator import SessionTokenValidator, ValidationError, validate_and_extract

__all__ = [
    "SessionClaims",
    "SessionTokenConfig",
    "SessionTokenValidator",
    "ValidationError",
    "validate_and_extract",
]
