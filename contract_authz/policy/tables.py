"""
Static role -> permission tables.

Loaded once at import and read-only afterwards (``MappingProxyType`` over
frozensets), so they can be shared by any number of concurrent callers.
Completeness is validated at import time: every role enum member must have
an entry and every department must have a view and a create permission.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from types import MappingProxyType

from .roles import CompanyRole, Department, DepartmentRole, GlobalRole, Permission

P = Permission


class PolicyTableError(ValueError):
    """Raised at import time when a policy table is incomplete."""


def _perms(*items: Permission) -> frozenset[Permission]:
    return frozenset(items)


GLOBAL_ROLE_PERMISSIONS: Mapping[GlobalRole, frozenset[Permission]] = MappingProxyType(
    {
        # Every permission that is not department-scoped; admins bypass department gates anyway.
        GlobalRole.ADMIN: frozenset(
            p for p in Permission if not p.value.startswith(("contract:view:", "contract:create:"))
        )
        | {P.CONTRACT_VIEW_ALL},
        GlobalRole.EDITOR: _perms(
            P.USER_VIEW,
            P.COMPANY_VIEW,
            P.CONTRACT_VIEW,
            P.CONTRACT_CREATE,
            P.CONTRACT_UPDATE,
            P.CONTRACT_ARCHIVE,
            P.TEMPLATE_VIEW,
            P.TEMPLATE_CREATE,
            P.TEMPLATE_UPDATE,
            P.TEMPLATE_DELETE,
            P.ATTACHMENT_VIEW,
            P.ATTACHMENT_UPLOAD,
            P.ATTACHMENT_DELETE,
            P.NOTIFICATION_VIEW,
            P.REPORT_VIEW,
            P.ANALYTICS_VIEW,
        ),
        GlobalRole.APPROVER: _perms(
            P.CONTRACT_VIEW,
            P.CONTRACT_APPROVE,
            P.CONTRACT_SIGN,
            P.TEMPLATE_VIEW,
            P.ATTACHMENT_VIEW,
            P.NOTIFICATION_VIEW,
            P.REPORT_VIEW,
        ),
        GlobalRole.VIEWER: _perms(
            P.CONTRACT_VIEW,
            P.TEMPLATE_VIEW,
            P.ATTACHMENT_VIEW,
            P.NOTIFICATION_VIEW,
        ),
        GlobalRole.USER: _perms(
            P.CONTRACT_VIEW,
            P.CONTRACT_CREATE,
            P.TEMPLATE_VIEW,
            P.ATTACHMENT_VIEW,
            P.ATTACHMENT_UPLOAD,
            P.NOTIFICATION_VIEW,
        ),
    }
)


COMPANY_ROLE_PERMISSIONS: Mapping[CompanyRole, frozenset[Permission]] = MappingProxyType(
    {
        CompanyRole.OWNER: _perms(
            P.COMPANY_VIEW,
            P.COMPANY_UPDATE,
            P.COMPANY_DELETE,
            P.COMPANY_SETTINGS_MANAGE,
            P.COMPANY_MEMBERS_MANAGE,
            P.COMPANY_INVITES_MANAGE,
            P.CONTRACT_VIEW,
            P.CONTRACT_CREATE,
            P.CONTRACT_UPDATE,
            P.CONTRACT_DELETE,
            P.CONTRACT_APPROVE,
            P.CONTRACT_SIGN,
            P.CONTRACT_ARCHIVE,
            P.TEMPLATE_VIEW,
            P.TEMPLATE_CREATE,
            P.TEMPLATE_UPDATE,
            P.TEMPLATE_DELETE,
            P.TEMPLATE_PUBLISH,
            P.REPORT_VIEW,
            P.REPORT_GENERATE,
            P.ANALYTICS_VIEW,
        ),
        CompanyRole.MANAGER: _perms(
            P.COMPANY_VIEW,
            P.COMPANY_MEMBERS_MANAGE,
            P.CONTRACT_VIEW,
            P.CONTRACT_CREATE,
            P.CONTRACT_UPDATE,
            P.CONTRACT_APPROVE,
            P.CONTRACT_SIGN,
            P.TEMPLATE_VIEW,
            P.TEMPLATE_CREATE,
            P.TEMPLATE_UPDATE,
            P.REPORT_VIEW,
            P.ANALYTICS_VIEW,
        ),
        CompanyRole.MEMBER: _perms(
            P.CONTRACT_VIEW,
            P.CONTRACT_CREATE,
            P.TEMPLATE_VIEW,
            P.ATTACHMENT_VIEW,
            P.ATTACHMENT_UPLOAD,
        ),
    }
)


DEPARTMENT_VIEW_PERMISSION: Mapping[Department, Permission] = MappingProxyType(
    {
        Department.HR: P.CONTRACT_VIEW_HR,
        Department.FINANCE: P.CONTRACT_VIEW_FINANCE,
        Department.LEGAL: P.CONTRACT_VIEW_LEGAL,
        Department.SALES: P.CONTRACT_VIEW_SALES,
        Department.IT: P.CONTRACT_VIEW_IT,
        Department.PROCUREMENT: P.CONTRACT_VIEW_PROCUREMENT,
        Department.GENERAL: P.CONTRACT_VIEW_GENERAL,
    }
)

DEPARTMENT_CREATE_PERMISSION: Mapping[Department, Permission] = MappingProxyType(
    {
        Department.HR: P.CONTRACT_CREATE_HR,
        Department.FINANCE: P.CONTRACT_CREATE_FINANCE,
        Department.LEGAL: P.CONTRACT_CREATE_LEGAL,
        Department.SALES: P.CONTRACT_CREATE_SALES,
        Department.IT: P.CONTRACT_CREATE_IT,
        Department.PROCUREMENT: P.CONTRACT_CREATE_PROCUREMENT,
        Department.GENERAL: P.CONTRACT_CREATE_GENERAL,
    }
)


def _tiers(department: Department, *, approve: bool = False) -> tuple[frozenset[Permission], ...]:
    """Standard manager/specialist/assistant grants for one department."""

    view = DEPARTMENT_VIEW_PERMISSION[department]
    create = DEPARTMENT_CREATE_PERMISSION[department]
    manager = {view, create, P.CONTRACT_VIEW, P.CONTRACT_UPDATE, P.REPORT_VIEW}
    if approve:
        manager.add(P.CONTRACT_APPROVE)
    specialist = {view, create, P.CONTRACT_VIEW}
    assistant = {view, P.CONTRACT_VIEW}
    return frozenset(manager), frozenset(specialist), frozenset(assistant)


_hr = _tiers(Department.HR, approve=True)
_finance = _tiers(Department.FINANCE, approve=True)
_legal = _tiers(Department.LEGAL, approve=True)
_sales = _tiers(Department.SALES, approve=True)
_it = _tiers(Department.IT)
_procurement = _tiers(Department.PROCUREMENT, approve=True)

DEPARTMENT_ROLE_PERMISSIONS: Mapping[DepartmentRole, frozenset[Permission]] = MappingProxyType(
    {
        DepartmentRole.HR_MANAGER: _hr[0],
        DepartmentRole.HR_SPECIALIST: _hr[1],
        DepartmentRole.HR_ASSISTANT: _hr[2],
        DepartmentRole.FINANCE_MANAGER: _finance[0] | {P.REPORT_GENERATE, P.ANALYTICS_VIEW},
        DepartmentRole.FINANCE_SPECIALIST: _finance[1],
        DepartmentRole.FINANCE_ASSISTANT: _finance[2],
        # Legal oversees every department's contracts.
        DepartmentRole.LEGAL_MANAGER: _legal[0] | {P.CONTRACT_VIEW_ALL, P.CONTRACT_CREATE, P.CONTRACT_SIGN},
        # Counsel reviews HR and Finance paper in addition to Legal's own.
        DepartmentRole.LEGAL_COUNSEL: _legal[1] | {P.CONTRACT_VIEW_HR, P.CONTRACT_VIEW_FINANCE, P.CONTRACT_APPROVE},
        DepartmentRole.LEGAL_ASSISTANT: _legal[2],
        DepartmentRole.SALES_MANAGER: _sales[0],
        DepartmentRole.SALES_SPECIALIST: _sales[1],
        DepartmentRole.SALES_ASSISTANT: _sales[2],
        DepartmentRole.IT_MANAGER: _it[0],
        DepartmentRole.IT_SPECIALIST: _it[1],
        DepartmentRole.IT_ASSISTANT: _it[2],
        DepartmentRole.PROCUREMENT_MANAGER: _procurement[0] | {P.CONTRACT_VIEW_FINANCE},
        DepartmentRole.PROCUREMENT_SPECIALIST: _procurement[1],
        DepartmentRole.PROCUREMENT_ASSISTANT: _procurement[2],
    }
)


GLOBAL_ROLE_PRIORITY: Mapping[GlobalRole, int] = MappingProxyType(
    {
        GlobalRole.ADMIN: 100,
        GlobalRole.EDITOR: 80,
        GlobalRole.APPROVER: 60,
        GlobalRole.USER: 40,
        GlobalRole.VIEWER: 20,
    }
)

COMPANY_ROLE_PRIORITY: Mapping[CompanyRole, int] = MappingProxyType(
    {
        CompanyRole.OWNER: 100,
        CompanyRole.MANAGER: 80,
        CompanyRole.MEMBER: 40,
    }
)


def _require_complete(name: str, table: Mapping[Enum, object], members: Iterable[Enum]) -> None:
    missing = [m.value for m in members if m not in table]
    if missing:
        raise PolicyTableError(f"{name} has no entry for: {sorted(missing)}")


_require_complete("GLOBAL_ROLE_PERMISSIONS", GLOBAL_ROLE_PERMISSIONS, GlobalRole)
_require_complete("COMPANY_ROLE_PERMISSIONS", COMPANY_ROLE_PERMISSIONS, CompanyRole)
_require_complete("DEPARTMENT_ROLE_PERMISSIONS", DEPARTMENT_ROLE_PERMISSIONS, DepartmentRole)
_require_complete("DEPARTMENT_VIEW_PERMISSION", DEPARTMENT_VIEW_PERMISSION, Department)
_require_complete("DEPARTMENT_CREATE_PERMISSION", DEPARTMENT_CREATE_PERMISSION, Department)
_require_complete("GLOBAL_ROLE_PRIORITY", GLOBAL_ROLE_PRIORITY, GlobalRole)
_require_complete("COMPANY_ROLE_PRIORITY", COMPANY_ROLE_PRIORITY, CompanyRole)


# Named permission groups per operation, for handlers that gate on "all of".
PERMISSION_CONTEXTS: Mapping[str, Mapping[str, tuple[Permission, ...]]] = MappingProxyType(
    {
        "CONTRACT": MappingProxyType(
            {
                "CREATE": (P.CONTRACT_CREATE,),
                "VIEW": (P.CONTRACT_VIEW,),
                "UPDATE": (P.CONTRACT_UPDATE,),
                "DELETE": (P.CONTRACT_DELETE,),
                "APPROVE": (P.CONTRACT_APPROVE,),
                "SIGN": (P.CONTRACT_SIGN,),
            }
        ),
        "COMPANY": MappingProxyType(
            {
                "MANAGE": (P.COMPANY_SETTINGS_MANAGE,),
                "INVITE_USERS": (P.COMPANY_INVITES_MANAGE,),
                "MANAGE_MEMBERS": (P.COMPANY_MEMBERS_MANAGE,),
            }
        ),
        "TEMPLATE": MappingProxyType(
            {
                "CREATE": (P.TEMPLATE_CREATE,),
                "EDIT": (P.TEMPLATE_UPDATE,),
                "PUBLISH": (P.TEMPLATE_PUBLISH,),
            }
        ),
        "ADMIN": MappingProxyType(
            {
                "USER_MANAGEMENT": (P.USER_ROLES_MANAGE,),
                "SYSTEM_SETTINGS": (P.SYSTEM_SETTINGS,),
            }
        ),
    }
)
