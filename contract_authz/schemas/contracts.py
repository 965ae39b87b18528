from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class ContractOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    contract_type: str
    department: str | None
    status: str
    value: Decimal | None
    company_id: str | None
    created_by_id: str
    created_at: datetime


class ContractCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    contract_type: str
    # Only admins may file under a department other than their own.
    department: str | None = None
    company_id: str | None = None
    value: Decimal | None = None


class ContractTemplateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    contract_type: str
    is_public: bool
    company_id: str | None
    created_by_id: str
