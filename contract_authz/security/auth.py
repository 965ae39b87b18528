from __future__ import annotations

import logging

from fastapi import HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from contract_authz.models.tenancy import User

from .tenant import Identity

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer"


def extract_bearer_token(request: Request, header_name: str = "Authorization") -> str | None:
    """
    Return the raw token from `Authorization: Bearer <token>`, or None if absent.

    A present but malformed header is a client error (400), not an anonymous request.
    """

    raw = request.headers.get(header_name)
    if not raw:
        return None

    prefix = f"{BEARER_PREFIX} "
    if not raw.startswith(prefix):
        logger.warning("Invalid Authorization header format path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header_name}. Expected '{BEARER_PREFIX} <token>'.",
        )

    token = raw[len(prefix) :].strip()
    if not token:
        logger.warning("Empty bearer token path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header_name}. Missing token after '{BEARER_PREFIX}'.",
        )

    return token


def load_identity(db: Session, user_id: str, company_id_hint: str | None = None) -> Identity | None:
    """
    Current roles for ``user_id`` as stored on the user record.

    Missing or deactivated users have no identity.
    """

    user = db.execute(select(User).where(User.id == user_id)).scalar_one_or_none()
    if user is None or not user.is_active:
        logger.info("Unknown or inactive user=%s", user_id)
        return None

    return Identity(
        user_id=user.id,
        global_role=user.global_role,
        department=user.department,
        department_role=user.department_role,
        company_id_hint=company_id_hint,
    )
