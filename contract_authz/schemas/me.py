from __future__ import annotations

from pydantic import BaseModel


class TenantContextOut(BaseModel):
    user_id: str
    global_role: str | None
    company_id: str | None
    company_role: str | None
    department: str | None
    department_role: str | None
    is_admin: bool


class MyPermissionsOut(BaseModel):
    context: TenantContextOut
    permissions: list[str]
    role_priority: int
    company_role_priority: int
    accessible_subtypes: list[str]
    creatable_subtypes: list[str]


class MyCompanyOut(BaseModel):
    id: str
    name: str
    role: str
