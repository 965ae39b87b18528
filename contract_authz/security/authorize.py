from __future__ import annotations

from collections.abc import Iterable
import logging

from contract_authz.policy import (
    CompanyRole,
    ContractType,
    Department,
    Permission,
    accessible_subtypes,
    allowed_departments,
    can_access_subtype,
    can_create_subtype,
    can_oversee_subtype,
    creatable_subtypes,
    effective_permissions,
    has_permission,
    parse_role,
)

from .context import TenantContext
from .errors import DepartmentIneligible, InsufficientPermission, Unauthenticated
from .tenant import CompanyDirectory, resolve_company_role

logger = logging.getLogger(__name__)


class Authorizer:
    """
    Explicit authorization decisions for one request.

    Boolean checks (``authorize``, ``can_*``) never raise. The ``*_or_fail``
    variants raise a typed ``AuthorizationError`` for the boundary to render.
    Admin contexts pass every check, department gates included.
    """

    def __init__(self, context: TenantContext | None, directory: CompanyDirectory | None = None) -> None:
        self.context = context
        self._directory = directory
        self._company_roles: dict[str, CompanyRole | None] = {}

    def company_role(self, company_id: str | None = None) -> CompanyRole | None:
        ctx = self.context
        if ctx is None:
            return None
        if company_id is None or company_id == ctx.company_id:
            return ctx.company_role
        if self._directory is None:
            return None
        if company_id not in self._company_roles:
            self._company_roles[company_id] = resolve_company_role(self._directory, company_id, ctx.user_id)
        return self._company_roles[company_id]

    # ---- Permissions ----------------------------------------------------------------

    def authorize(self, permission: Permission, company_id: str | None = None) -> bool:
        ctx = self.context
        if ctx is None:
            return False
        if ctx.is_admin:
            return True
        return has_permission(ctx.global_role, self.company_role(company_id), ctx.department_role, permission)

    def authorize_or_fail(self, permission: Permission, company_id: str | None = None) -> None:
        if self.context is None:
            raise Unauthenticated()
        if not self.authorize(permission, company_id):
            logger.info(
                "Permission denied user=%s permission=%s company=%s",
                self.context.user_id,
                permission.value,
                company_id,
            )
            raise InsufficientPermission(permission.value, company_id)

    def authorize_all_or_fail(self, permissions: Iterable[Permission], company_id: str | None = None) -> None:
        for permission in permissions:
            self.authorize_or_fail(permission, company_id)

    def effective_permissions(self, company_id: str | None = None) -> frozenset[Permission]:
        ctx = self.context
        if ctx is None:
            return frozenset()
        return effective_permissions(ctx.global_role, self.company_role(company_id), ctx.department_role)

    # ---- Department-governed contract types -----------------------------------------

    def _is_home(self, department: Department | str | None) -> bool:
        if department is None:
            return True
        return parse_role(Department, department) == parse_role(Department, self.context.department)

    def can_access_subtype(self, subtype: ContractType | str, department: Department | str | None = None) -> bool:
        """
        ``department`` is the department a record is filed under; it defaults
        to the caller's own. Records of another department are visible only
        through that department's specific view grant.
        """

        ctx = self.context
        if ctx is None:
            return False
        if ctx.is_admin:
            return True
        if self._is_home(department):
            return can_access_subtype(subtype, ctx.department, ctx.department_role)
        return can_oversee_subtype(subtype, department, ctx.department_role)

    def can_create_subtype(self, subtype: ContractType | str, department: Department | str | None = None) -> bool:
        """Non-admins create only under their own department."""

        ctx = self.context
        if ctx is None:
            return False
        if ctx.is_admin:
            return True
        if not self._is_home(department):
            return False
        return can_create_subtype(subtype, ctx.department, ctx.department_role)

    def require_subtype_access(self, subtype: ContractType | str, department: Department | str | None = None) -> None:
        self._require(subtype, department, self.can_access_subtype)

    def require_subtype_create(self, subtype: ContractType | str, department: Department | str | None = None) -> None:
        self._require(subtype, department, self.can_create_subtype)

    def _require(self, subtype, department, check) -> None:
        if self.context is None:
            raise Unauthenticated()
        if check(subtype, department):
            return
        dept = department if department is not None else self.context.department
        dept_name = getattr(dept, "value", dept)
        subtype_name = str(getattr(subtype, "value", subtype))
        logger.info(
            "Department ineligible user=%s subtype=%s department=%s",
            self.context.user_id,
            subtype_name,
            dept_name,
        )
        raise DepartmentIneligible(subtype_name, dept_name, allowed_departments(subtype))

    def accessible_subtypes(self) -> tuple[str, ...]:
        ctx = self.context
        if ctx is None:
            return ()
        if ctx.is_admin:
            return tuple(t.value for t in ContractType)
        return accessible_subtypes(ctx.department, ctx.department_role)

    def creatable_subtypes(self) -> tuple[str, ...]:
        ctx = self.context
        if ctx is None:
            return ()
        if ctx.is_admin:
            return tuple(t.value for t in ContractType)
        return creatable_subtypes(ctx.department, ctx.department_role)
