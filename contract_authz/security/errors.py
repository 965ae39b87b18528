from __future__ import annotations

from collections.abc import Iterable


class AuthorizationError(Exception):
    """Base authorization error; the boundary turns it into a rejection."""

    code = "forbidden"
    status_code = 403


class Unauthenticated(AuthorizationError):
    """No resolvable tenant context for an operation that needs one."""

    code = "unauthenticated"
    status_code = 401

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class InsufficientPermission(AuthorizationError):
    code = "insufficient_permission"

    def __init__(self, permission: str, company_id: str | None = None) -> None:
        self.permission = str(getattr(permission, "value", permission))
        self.company_id = company_id
        scope = f" in company '{company_id}'" if company_id else ""
        super().__init__(f"Permission required: {self.permission}{scope}")


class DepartmentIneligible(AuthorizationError):
    code = "department_ineligible"

    def __init__(self, subtype: str, department: str | None, allowed_departments: Iterable[str]) -> None:
        self.subtype = subtype
        self.department = department
        self.allowed_departments = tuple(str(getattr(d, "value", d)) for d in allowed_departments)
        super().__init__(
            f"Contract type '{subtype}' requires one of: {', '.join(self.allowed_departments)}"
        )


class RecordAccessDenied(AuthorizationError):
    """
    Write or read rejected by tenant isolation.

    The message is the same whether the record exists elsewhere or not at all.
    """

    code = "record_access_denied"

    def __init__(self, message: str = "Record not found or access denied") -> None:
        super().__init__(message)
