from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Protocol

from contract_authz.policy import CompanyRole, Department, DepartmentRole, GlobalRole, parse_role

from .context import TenantContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """
    What the session/identity collaborator knows about the caller.

    Role fields are raw values as stored (strings); they are parsed, and
    malformed ones dropped, when the tenant context is built.
    """

    user_id: str
    global_role: str | None
    department: str | None = None
    department_role: str | None = None
    company_id_hint: str | None = None


class CompanyDirectory(Protocol):
    """Ownership/membership lookups needed to resolve company roles and predicates."""

    def company_owner_id(self, company_id: str) -> str | None: ...

    def member_role(self, company_id: str, user_id: str) -> str | None: ...

    def accessible_company_ids(self, user_id: str) -> frozenset[str]: ...


def resolve_company_role(directory: CompanyDirectory, company_id: str, user_id: str) -> CompanyRole | None:
    """
    The company's creator is its OWNER; otherwise the membership row decides.
    """

    if directory.company_owner_id(company_id) == user_id:
        return CompanyRole.OWNER
    return parse_role(CompanyRole, directory.member_role(company_id, user_id))


def establish_tenant_context(
    identity: Identity | None,
    directory: CompanyDirectory,
    company_id: str | None = None,
) -> TenantContext | None:
    """
    Build the per-request context, or None when there is no authenticated identity.

    ``company_id`` (from the request) wins over the identity's hint. A
    company the user does not belong to stays in the context with no company
    role, so company-scoped predicates admit nothing from it.
    """

    if identity is None or not identity.user_id:
        return None

    global_role = parse_role(GlobalRole, identity.global_role)
    company = company_id or identity.company_id_hint

    company_role = None
    if company:
        company_role = resolve_company_role(directory, company, identity.user_id)
        if company_role is None and global_role is not GlobalRole.ADMIN:
            logger.info("User %s has no role in requested company %s", identity.user_id, company)

    return TenantContext(
        user_id=identity.user_id,
        global_role=global_role,
        company_id=company,
        company_role=company_role,
        department=parse_role(Department, identity.department),
        department_role=parse_role(DepartmentRole, identity.department_role),
    )
