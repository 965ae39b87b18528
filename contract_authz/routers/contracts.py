from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from contract_authz.db.session import get_db
from contract_authz.models.contracts import Contract
from contract_authz.policy import Department, Permission, parse_role
from contract_authz.schemas.contracts import ContractCreate, ContractOut
from contract_authz.security.authorize import Authorizer
from contract_authz.security.dependencies import get_authorizer, require_permission
from contract_authz.security.errors import InsufficientPermission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contracts", tags=["contracts"])


@router.get("", response_model=list[ContractOut], dependencies=[Depends(require_permission(Permission.CONTRACT_VIEW))])
def list_contracts(
    status_filter: str | None = Query(None, alias="status"),
    db: Session = Depends(get_db),
) -> list[Contract]:
    # Tenant scoping is applied by the session hooks in db/filters.py.
    stmt = select(Contract).order_by(Contract.created_at, Contract.id)
    if status_filter is not None:
        stmt = stmt.where(Contract.status == status_filter.upper())
    return list(db.scalars(stmt).all())


@router.get("/{id}", response_model=ContractOut, dependencies=[Depends(require_permission(Permission.CONTRACT_VIEW))])
def get_contract(id: str, db: Session = Depends(get_db)) -> Contract:
    contract = db.scalars(select(Contract).where(Contract.id == id)).first()
    if contract is None:
        # Contracts of other tenants are indistinguishable from missing ones.
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contract not found")
    return contract


@router.post("", response_model=ContractOut, status_code=status.HTTP_201_CREATED)
def create_contract(
    payload: ContractCreate,
    authorizer: Authorizer = Depends(require_permission(Permission.CONTRACT_CREATE)),
    db: Session = Depends(get_db),
) -> Contract:
    context = authorizer.context
    company_id = payload.company_id or context.company_id

    if company_id is not None:
        # Creating inside a company needs a role there, not just a global grant.
        if not context.is_admin and authorizer.company_role(company_id) is None:
            logger.info("Create rejected user=%s not in company=%s", context.user_id, company_id)
            raise InsufficientPermission(Permission.CONTRACT_CREATE, company_id)
        authorizer.authorize_or_fail(Permission.CONTRACT_CREATE, company_id=company_id)

    # Non-admins file contracts under their own department only.
    authorizer.require_subtype_create(payload.contract_type, payload.department)
    filed_under = payload.department if context.is_admin and payload.department else context.department
    department = parse_role(Department, filed_under)

    contract = Contract(
        title=payload.title,
        contract_type=payload.contract_type.strip().upper(),
        department=department.value if department is not None else None,
        value=payload.value,
        company_id=company_id,
        created_by_id=context.user_id,
    )
    db.add(contract)
    db.commit()
    db.refresh(contract)
    logger.info("Contract created id=%s user=%s company=%s", contract.id, context.user_id, company_id)
    return contract
