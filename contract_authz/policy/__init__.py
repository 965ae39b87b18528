"""
Static authorization policy: role vocabularies, role -> permission tables,
the permission resolver and the contract-type department evaluator.

This package has no I/O and no dependency on other contract_authz packages.
"""

from .departments import (
    CONTRACT_TYPE_DEPARTMENTS,
    ContractType,
    accessible_subtypes,
    allowed_departments,
    can_access_subtype,
    can_create_subtype,
    can_oversee_subtype,
    creatable_subtypes,
)
from .resolver import (
    can_manage_company_role,
    can_manage_role,
    company_role_priority,
    effective_permissions,
    has_all_permissions,
    has_any_permission,
    has_permission,
    role_priority,
)
from .roles import CompanyRole, Department, DepartmentRole, GlobalRole, Permission, parse_role
from .tables import PERMISSION_CONTEXTS, PolicyTableError

__all__ = [
    "CONTRACT_TYPE_DEPARTMENTS",
    "PERMISSION_CONTEXTS",
    "CompanyRole",
    "ContractType",
    "Department",
    "DepartmentRole",
    "GlobalRole",
    "Permission",
    "PolicyTableError",
    "accessible_subtypes",
    "allowed_departments",
    "can_access_subtype",
    "can_create_subtype",
    "can_manage_company_role",
    "can_manage_role",
    "can_oversee_subtype",
    "company_role_priority",
    "creatable_subtypes",
    "effective_permissions",
    "has_all_permissions",
    "has_any_permission",
    "has_permission",
    "parse_role",
    "role_priority",
]
