from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from contract_authz.db.directory import directory_for
from contract_authz.db.session import get_db
from contract_authz.policy import company_role_priority, role_priority
from contract_authz.schemas.me import MyCompanyOut, MyPermissionsOut
from contract_authz.security.authorize import Authorizer
from contract_authz.security.context import TenantContext
from contract_authz.security.dependencies import get_authorizer, require_tenant_context

router = APIRouter(prefix="/me", tags=["me"])


@router.get("/permissions", response_model=MyPermissionsOut)
def my_permissions(
    context: TenantContext = Depends(require_tenant_context),
    authorizer: Authorizer = Depends(get_authorizer),
) -> dict:
    return {
        "context": context.to_dict(),
        "permissions": sorted(p.value for p in authorizer.effective_permissions()),
        "role_priority": role_priority(context.global_role),
        "company_role_priority": company_role_priority(context.company_role),
        "accessible_subtypes": list(authorizer.accessible_subtypes()),
        "creatable_subtypes": list(authorizer.creatable_subtypes()),
    }


@router.get("/companies", response_model=list[MyCompanyOut])
def my_companies(
    context: TenantContext = Depends(require_tenant_context),
    db: Session = Depends(get_db),
) -> list[dict[str, str]]:
    return directory_for(db).user_companies(context.user_id)
