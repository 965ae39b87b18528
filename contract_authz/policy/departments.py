"""
Contract-type to department policy.

Department eligibility is a hard gate: a department that is not listed for a
contract type never gets access to it, whatever role it holds. Within an
eligible department the department role's own permission list decides,
either through the department-specific grant or the cross-department one.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType

from .resolver import department_role_permissions
from .roles import Department, DepartmentRole, Permission, parse_role
from .tables import DEPARTMENT_CREATE_PERMISSION, DEPARTMENT_VIEW_PERMISSION


class ContractType(str, Enum):
    NDA = "NDA"
    SERVICE = "SERVICE"
    EMPLOYMENT = "EMPLOYMENT"
    PARTNERSHIP = "PARTNERSHIP"
    CONSULTING = "CONSULTING"
    RFP = "RFP"
    SALES_AGREEMENT = "SALES_AGREEMENT"
    VENDOR_AGREEMENT = "VENDOR_AGREEMENT"
    PURCHASE_AGREEMENT = "PURCHASE_AGREEMENT"
    SOFTWARE_LICENSE = "SOFTWARE_LICENSE"
    LEASE = "LEASE"
    OTHER = "OTHER"


D = Department

DEFAULT_DEPARTMENTS: tuple[Department, ...] = (D.GENERAL,)

CONTRACT_TYPE_DEPARTMENTS: Mapping[str, tuple[Department, ...]] = MappingProxyType(
    {
        ContractType.NDA.value: (D.HR, D.LEGAL, D.SALES),
        ContractType.SERVICE.value: (D.PROCUREMENT, D.LEGAL, D.FINANCE),
        ContractType.EMPLOYMENT.value: (D.HR, D.LEGAL),
        ContractType.PARTNERSHIP.value: (D.LEGAL, D.SALES, D.FINANCE),
        ContractType.CONSULTING.value: (D.PROCUREMENT, D.FINANCE),
        ContractType.RFP.value: (D.PROCUREMENT,),
        ContractType.SALES_AGREEMENT.value: (D.SALES,),
        ContractType.VENDOR_AGREEMENT.value: (D.PROCUREMENT, D.FINANCE),
        ContractType.PURCHASE_AGREEMENT.value: (D.PROCUREMENT, D.FINANCE),
        ContractType.SOFTWARE_LICENSE.value: (D.IT, D.PROCUREMENT, D.LEGAL),
        ContractType.LEASE.value: (D.FINANCE, D.LEGAL),
        ContractType.OTHER.value: DEFAULT_DEPARTMENTS,
    }
)


def _subtype_key(subtype: ContractType | str) -> str:
    raw = subtype.value if isinstance(subtype, Enum) else str(subtype)
    return raw.strip().upper()


def allowed_departments(subtype: ContractType | str) -> tuple[Department, ...]:
    """Ordered departments for ``subtype``; unmapped subtypes fall back to GENERAL."""
    return CONTRACT_TYPE_DEPARTMENTS.get(_subtype_key(subtype), DEFAULT_DEPARTMENTS)


def _eligible(
    subtype: ContractType | str,
    department: Department | str | None,
    department_role: DepartmentRole | str | None,
    specific: Mapping[Department, Permission],
    generic: Permission,
) -> bool:
    dept = parse_role(Department, department)
    if dept is None or dept not in allowed_departments(subtype):
        return False

    if parse_role(DepartmentRole, department_role) is None:
        return False

    granted = department_role_permissions(department_role)
    return specific[dept] in granted or generic in granted


def can_access_subtype(
    subtype: ContractType | str,
    department: Department | str | None,
    department_role: DepartmentRole | str | None = None,
) -> bool:
    """
    Decide whether a department role may view contracts of ``subtype``
    under ``department``.

    Cross-department oversight comes only from the role's permission list:
    LEGAL_COUNSEL carries ``contract:view:hr`` so it passes for
    ``(EMPLOYMENT, HR)``, while an HR assistant never passes for
    ``(SALES_AGREEMENT, SALES)``.
    """

    return _eligible(subtype, department, department_role, DEPARTMENT_VIEW_PERMISSION, Permission.CONTRACT_VIEW_ALL)


def can_create_subtype(
    subtype: ContractType | str,
    department: Department | str | None,
    department_role: DepartmentRole | str | None = None,
) -> bool:
    return _eligible(subtype, department, department_role, DEPARTMENT_CREATE_PERMISSION, Permission.CONTRACT_CREATE)


def can_oversee_subtype(
    subtype: ContractType | str,
    department: Department | str | None,
    department_role: DepartmentRole | str | None = None,
) -> bool:
    """
    Decide whether a department role may view ``subtype`` records filed under
    a department other than its own.

    Only the department-specific ``contract:view:<department>`` grant counts
    here; the generic ``contract:view:all`` covers the role's home department
    and nothing else.
    """

    dept = parse_role(Department, department)
    if dept is None or dept not in allowed_departments(subtype):
        return False
    return DEPARTMENT_VIEW_PERMISSION[dept] in department_role_permissions(department_role)


def accessible_subtypes(
    department: Department | str | None,
    department_role: DepartmentRole | str | None,
) -> tuple[str, ...]:
    return tuple(t for t in CONTRACT_TYPE_DEPARTMENTS if can_access_subtype(t, department, department_role))


def creatable_subtypes(
    department: Department | str | None,
    department_role: DepartmentRole | str | None,
) -> tuple[str, ...]:
    return tuple(t for t in CONTRACT_TYPE_DEPARTMENTS if can_create_subtype(t, department, department_role))
