from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from contract_authz.db.session import get_db
from contract_authz.models.contracts import ContractTemplate
from contract_authz.schemas.contracts import ContractTemplateOut

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("", response_model=list[ContractTemplateOut])
def list_templates(db: Session = Depends(get_db)) -> list[ContractTemplate]:
    # Anonymous callers get public templates only; signed-in callers also
    # see their own and, as members, their current company's.
    return list(db.scalars(select(ContractTemplate).order_by(ContractTemplate.name)).all())
