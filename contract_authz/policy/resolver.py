"""
Permission resolver over the three role systems.

A user's effective permissions are the union of what their global role,
company role (if any) and department role (if any) grant. All functions are
pure: identical inputs always produce identical outputs, and unknown role
values contribute nothing.
"""

from __future__ import annotations

from collections.abc import Iterable

from .roles import CompanyRole, DepartmentRole, GlobalRole, Permission, parse_role
from .tables import (
    COMPANY_ROLE_PERMISSIONS,
    COMPANY_ROLE_PRIORITY,
    DEPARTMENT_ROLE_PERMISSIONS,
    GLOBAL_ROLE_PERMISSIONS,
    GLOBAL_ROLE_PRIORITY,
)


_EMPTY: frozenset[Permission] = frozenset()


def global_role_permissions(role: GlobalRole | str | None) -> frozenset[Permission]:
    parsed = parse_role(GlobalRole, role)
    return GLOBAL_ROLE_PERMISSIONS[parsed] if parsed is not None else _EMPTY


def company_role_permissions(role: CompanyRole | str | None) -> frozenset[Permission]:
    parsed = parse_role(CompanyRole, role)
    return COMPANY_ROLE_PERMISSIONS[parsed] if parsed is not None else _EMPTY


def department_role_permissions(role: DepartmentRole | str | None) -> frozenset[Permission]:
    parsed = parse_role(DepartmentRole, role)
    return DEPARTMENT_ROLE_PERMISSIONS[parsed] if parsed is not None else _EMPTY


def has_permission(
    global_role: GlobalRole | str | None,
    company_role: CompanyRole | str | None,
    department_role: DepartmentRole | str | None,
    permission: Permission,
) -> bool:
    """
    Short-circuiting OR over the three role tables.

    Global role first, then company role, then department role.
    """

    if permission in global_role_permissions(global_role):
        return True
    if company_role is not None and permission in company_role_permissions(company_role):
        return True
    if department_role is not None and permission in department_role_permissions(department_role):
        return True
    return False


def effective_permissions(
    global_role: GlobalRole | str | None,
    company_role: CompanyRole | str | None = None,
    department_role: DepartmentRole | str | None = None,
) -> frozenset[Permission]:
    """Deduplicated union of all three tables' entries."""

    return (
        global_role_permissions(global_role)
        | company_role_permissions(company_role)
        | department_role_permissions(department_role)
    )


def has_all_permissions(
    global_role: GlobalRole | str | None,
    company_role: CompanyRole | str | None,
    department_role: DepartmentRole | str | None,
    permissions: Iterable[Permission],
) -> bool:
    granted = effective_permissions(global_role, company_role, department_role)
    return all(p in granted for p in permissions)


def has_any_permission(
    global_role: GlobalRole | str | None,
    company_role: CompanyRole | str | None,
    department_role: DepartmentRole | str | None,
    permissions: Iterable[Permission],
) -> bool:
    granted = effective_permissions(global_role, company_role, department_role)
    return any(p in granted for p in permissions)


def role_priority(role: GlobalRole | str | None) -> int:
    parsed = parse_role(GlobalRole, role)
    return GLOBAL_ROLE_PRIORITY[parsed] if parsed is not None else 0


def company_role_priority(role: CompanyRole | str | None) -> int:
    parsed = parse_role(CompanyRole, role)
    return COMPANY_ROLE_PRIORITY[parsed] if parsed is not None else 0


def can_manage_role(manager_role: GlobalRole | str | None, target_role: GlobalRole | str | None) -> bool:
    """A role manages only roles with strictly lower priority."""
    return role_priority(manager_role) > role_priority(target_role)


def can_manage_company_role(
    manager_role: CompanyRole | str | None,
    target_role: CompanyRole | str | None,
) -> bool:
    return company_role_priority(manager_role) > company_role_priority(target_role)
