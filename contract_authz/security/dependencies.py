from __future__ import annotations

from collections.abc import Callable
import logging

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from contract_authz.db.directory import directory_for
from contract_authz.db.session import get_db
from contract_authz.identity import SessionTokenValidator, ValidationError
from contract_authz.policy import Permission
from contract_authz.settings import get_settings

from .auth import extract_bearer_token, load_identity
from .authorize import Authorizer
from .context import TenantContext
from .errors import Unauthenticated
from .tenant import establish_tenant_context

logger = logging.getLogger(__name__)


def get_token_validator(request: Request) -> SessionTokenValidator | None:
    """None when no token secret is configured: every request is then anonymous."""

    return getattr(request.app.state, "token_validator", None)


def establish_request_context(
    request: Request,
    validator: SessionTokenValidator | None = Depends(get_token_validator),
    db: Session = Depends(get_db, use_cache=False),
) -> None:
    """
    Global dependency: resolve the caller's tenant context once per request.

    Never rejects by itself. An absent or invalid token yields a null
    context; handlers and the data-layer hooks then fail closed.
    """

    context: TenantContext | None = None

    token = extract_bearer_token(request)
    if token is not None and validator is not None:
        try:
            claims = validator.validate_and_extract(token)
        except ValidationError:
            claims = None

        if claims is not None:
            identity = load_identity(db, claims.user_id, company_id_hint=claims.company_id)
            requested = request.headers.get(get_settings().company_header) or request.query_params.get("companyId")
            context = establish_tenant_context(identity, directory_for(db), company_id=requested)
    elif token is not None:
        logger.warning("Bearer token presented but no token secret configured")

    request.state.tenant_context = context
    # FastAPI caches get_db under one key even with use_cache=False, so a
    # handler depending on get_db gets this same session.
    db.info["tenant_context"] = context


def get_tenant_context(request: Request) -> TenantContext | None:
    return getattr(request.state, "tenant_context", None)


def require_tenant_context(context: TenantContext | None = Depends(get_tenant_context)) -> TenantContext:
    if context is None:
        raise Unauthenticated()
    return context


def get_authorizer(
    context: TenantContext | None = Depends(get_tenant_context),
    db: Session = Depends(get_db),
) -> Authorizer:
    return Authorizer(context, directory_for(db))


def require_permission(permission: Permission) -> Callable[..., Authorizer]:
    """
    Route dependency: the caller must hold ``permission`` in its current company.

        @router.post("/contracts", dependencies=[Depends(require_permission(Permission.CONTRACT_CREATE))])
    """

    def dependency(authorizer: Authorizer = Depends(get_authorizer)) -> Authorizer:
        authorizer.authorize_or_fail(permission)
        return authorizer

    return dependency
